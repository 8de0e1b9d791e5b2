"""dicom-volume - Command Line Interface

Inspect DICOM series, ingest them into raw voxel volumes and compute
transfer-function visibility masks.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from dicom_volume.core.config import get_settings
from dicom_volume.core.exceptions import VolumeLoadError
from dicom_volume.core.loader import DicomVolumeLoader
from dicom_volume.core.transfer_function import ColorCurve
from dicom_volume.core.windowing import (
    WindowingTransform,
    compute_window_bitmask,
    pack_bitmask,
)
from dicom_volume.utils.logger import configure_logging


def format_file_size(size: int) -> str:
    """Format a byte count for CLI output (e.g. "1.0 MB")."""
    kb = 1024
    mb = kb * 1024
    gb = mb * 1024

    if size < kb:
        return f"{size} B"
    elif size < mb:
        return f"{size / kb:.1f} KB"
    elif size < gb:
        return f"{size / mb:.1f} MB"
    else:
        return f"{size / gb:.1f} GB"


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dicom-volume",
        description="Load DICOM series into voxel volumes",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Show the parsed header of a series
  dicom-volume info ./series/slice001.dcm

  # Assemble and normalize a series into volume.raw / volume.json
  dicom-volume load ./series -o ./out/volume

  # Visibility mask for a window over the default grey ramp
  dicom-volume bitmask --center 0.4 --width 0.2 --edge-bits 1

  # Same window over a curve that is transparent below 0.3
  dicom-volume bitmask --center 0.4 --width 0.2 \\
      --key 0 0 0 0 0 --key 0.3 0 0 0 0 --key 1 1 1 1 1
        """,
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    info = subparsers.add_parser("info", help="Print the parsed series header")
    info.add_argument("path", help="Slice file or series folder")

    load = subparsers.add_parser("load", help="Assemble a series into a raw volume")
    load.add_argument("path", help="Slice file or series folder")
    load.add_argument(
        "-o", "--output", required=True, metavar="PREFIX",
        help="Output prefix; writes PREFIX.raw and PREFIX.json",
    )
    mode = load.add_mutually_exclusive_group()
    mode.add_argument(
        "--no-normalize", action="store_true",
        help="Keep source values instead of rescaling to the unsigned range",
    )
    mode.add_argument(
        "--float", action="store_true", help="Convert samples to float32"
    )

    bitmask = subparsers.add_parser("bitmask", help="Compute a window visibility mask")
    bitmask.add_argument("--center", type=float, default=0.5)
    bitmask.add_argument("--width", type=float, default=1.0)
    bitmask.add_argument("--low-cutoff", action="store_true")
    bitmask.add_argument("--high-cutoff", action="store_true")
    bitmask.add_argument("--edge-bits", type=int, default=0, metavar="N")
    bitmask.add_argument(
        "--key", action="append", nargs=5, type=float,
        metavar=("POS", "R", "G", "B", "A"),
        help="Color curve key; repeat to build a curve (default: opaque grey ramp)",
    )

    return parser


def run_info(args: argparse.Namespace) -> int:
    descriptor = DicomVolumeLoader().parse_header(args.path)
    print(json.dumps(descriptor.to_dict(), indent=2))
    return 0


def run_load(args: argparse.Namespace) -> int:
    # Without a flag the loader falls back to the configured defaults
    normalize: bool | None = None
    convert_to_float: bool | None = None
    if args.float:
        normalize, convert_to_float = False, True
    elif args.no_normalize:
        normalize, convert_to_float = False, False

    volume = DicomVolumeLoader().load(
        args.path, normalize=normalize, convert_to_float=convert_to_float
    )

    prefix = Path(args.output)
    prefix.parent.mkdir(parents=True, exist_ok=True)
    raw_path = prefix.with_name(prefix.name + ".raw")
    json_path = prefix.with_name(prefix.name + ".json")

    volume.buffer.tofile(raw_path)
    json_path.write_text(
        json.dumps(
            {
                "descriptor": volume.descriptor.to_dict(),
                "report": volume.report.to_dict(),
            },
            indent=2,
        )
    )

    print(f"[+] Wrote {raw_path} ({format_file_size(volume.buffer.size)})")
    print(f"[+] Wrote {json_path}")
    for warning in volume.report.warnings:
        print(f"[!] {warning}")
    return 0


def run_bitmask(args: argparse.Namespace) -> int:
    transform = WindowingTransform(
        center=args.center,
        width=args.width,
        low_cutoff=args.low_cutoff,
        high_cutoff=args.high_cutoff,
    )
    curve = (
        ColorCurve([(key[0], key[1:]) for key in args.key])
        if args.key
        else ColorCurve.default()
    )
    mask = compute_window_bitmask(transform, args.edge_bits, curve)
    print(f"mask:   {mask:031b}")
    print(f"hex:    0x{mask:08X}")
    print(f"packed: {pack_bitmask(mask)!r}")
    return 0


COMMANDS = {
    "info": run_info,
    "load": run_load,
    "bitmask": run_bitmask,
}


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns the process exit code."""
    parser = create_parser()
    args = parser.parse_args(argv)

    settings = get_settings()
    configure_logging(
        log_level="DEBUG" if args.verbose else settings.logging.log_level.value,
        json_format=settings.logging.log_format == "json",
    )

    try:
        return COMMANDS[args.command](args)
    except VolumeLoadError as e:
        print(f"[-] {e.error_code}: {e.message}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
