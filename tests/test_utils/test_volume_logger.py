"""Tests for dicom_volume.utils.logger module."""

import logging
from pathlib import Path

import numpy as np
import pytest
from structlog.testing import capture_logs

from dicom_volume.utils.logger import (
    SENSITIVE_FIELDS,
    add_timestamp,
    coerce_numpy_values,
    configure_logging,
    get_logger,
    redact_sensitive_data,
)


@pytest.fixture
def reset_logging(reset_structlog):
    """Clear logging handlers after a test that configures logging."""
    yield
    for handler in logging.root.handlers[:]:
        handler.close()
        logging.root.removeHandler(handler)


class TestRedactSensitiveData:
    """Tests for redact_sensitive_data processor."""

    def test_redacts_patient_keys(self):
        event_dict = {"event": "test", "patient_id": "12345", "PatientName": "Doe^John"}
        result = redact_sensitive_data(None, "info", event_dict)

        assert result["patient_id"] == "***REDACTED***"
        assert result["PatientName"] == "***REDACTED***"

    def test_preserves_volume_fields(self):
        event_dict = {"event": "volume_loaded", "dimensions": (2, 2, 3), "name": "ct"}
        result = redact_sensitive_data(None, "info", event_dict)

        assert result == {"event": "volume_loaded", "dimensions": (2, 2, 3), "name": "ct"}

    def test_known_fields(self):
        assert {"patient_id", "patient_name", "patient_birth_date"} <= SENSITIVE_FIELDS


class TestCoerceNumpyValues:
    """Tests for coerce_numpy_values processor."""

    def test_numpy_scalars_become_python(self):
        result = coerce_numpy_values(
            None, "info", {"min_value": np.float32(1.5), "count": np.int64(3), "n": 2}
        )

        assert result == {"min_value": 1.5, "count": 3, "n": 2}
        assert type(result["count"]) is int


class TestAddTimestamp:
    """Tests for add_timestamp processor."""

    def test_adds_utc_iso_timestamp(self):
        result = add_timestamp(None, "info", {"event": "test"})

        assert "T" in result["timestamp"]
        assert result["timestamp"].endswith("+00:00")


class TestConfigureLogging:
    """Tests for configure_logging function."""

    def test_sets_log_level(self, reset_logging):
        configure_logging(log_level="DEBUG", json_format=False)

        assert logging.root.level == logging.DEBUG

    def test_json_output_is_redacted(self, reset_logging, capsys):
        configure_logging(log_level="INFO", json_format=True)
        logger = get_logger("test_volume_logger.json")

        logger.info("slice_opened", patient_name="Doe^John", rows=512)

        err = capsys.readouterr().err
        assert '"event": "slice_opened"' in err
        assert '"rows": 512' in err
        assert "Doe^John" not in err

    def test_level_filters_debug(self, reset_logging, capsys):
        configure_logging(log_level="WARNING", json_format=True)
        logger = get_logger("test_volume_logger.filter")

        logger.debug("header_parsed")
        logger.warning("slice_dropped")

        err = capsys.readouterr().err
        assert "header_parsed" not in err
        assert "slice_dropped" in err

    def test_log_file(self, reset_logging, temp_dir):
        log_file = temp_dir / "logs" / "volume.log"
        configure_logging(log_level="INFO", json_format=True, log_file=log_file)
        get_logger("test_volume_logger.file").info("volume_loaded")

        for handler in logging.root.handlers:
            handler.flush()
        assert "volume_loaded" in Path(log_file).read_text()

    def test_clears_existing_handlers(self, reset_logging):
        handler = logging.StreamHandler()
        logging.root.addHandler(handler)

        configure_logging(log_level="INFO", json_format=False)

        assert handler not in logging.root.handlers


class TestGetLogger:
    """Tests for get_logger function."""

    def test_returns_structlog_logger(self):
        logger = get_logger("test_volume_logger.plain")

        assert hasattr(logger, "info")
        assert hasattr(logger, "warning")

    def test_events_are_capturable(self):
        with capture_logs() as captured:
            get_logger("test_volume_logger.capture").warning("slice_dropped", reason="x")

        assert captured == [
            {"event": "slice_dropped", "reason": "x", "log_level": "warning"}
        ]
