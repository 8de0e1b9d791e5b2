"""Command line interface for dicom-volume."""
