"""
Tests for the structured logging stack.

Covers:
1. Level gating through LoggingConfig
2. Templated console output with caller information
3. JSON lines file output decodable back into Log records
4. Disabled loggers and filters
5. Ring events emitted through the logger
"""

import os

import msgspec
import pytest

from boundring.logging import (
    Entry,
    Logger,
    LoggingConfig,
    LogLevel,
)
from boundring.logging.boundring_logging_models import RingInfo, RingWarning
from boundring.logging.streams.logger_stream import DEFAULT_LOGFILE
from boundring.errors import HostAlreadyExistsError
from boundring.ring import HashRing


@pytest.fixture
def logger():
    logger = Logger()
    yield logger
    logger.close()


# =============================================================================
# Level Gating
# =============================================================================


def test_log_level_names():
    assert LogLevel.to_level("warn") is LogLevel.WARN
    assert LogLevel.to_level("TRACE") is LogLevel.TRACE

    with pytest.raises(ValueError):
        LogLevel.to_level("verbose")


def test_enabled_respects_configured_level():
    config = LoggingConfig()
    config.update(log_level="info")

    assert config.enabled("ring", LogLevel.INFO)
    assert config.enabled("ring", LogLevel.ERROR)
    assert not config.enabled("ring", LogLevel.DEBUG)
    assert not config.enabled("ring", LogLevel.TRACE)


def test_disabled_logger_is_silent(logger: Logger, capsys):
    config = LoggingConfig()
    config.update(log_level="trace")
    config.disable("ring")

    try:
        logger.log(Entry(message="hidden", level=LogLevel.ERROR), name="ring")

    finally:
        config.enable("ring")

    assert capsys.readouterr().err == ""


# =============================================================================
# Console Output
# =============================================================================


def test_console_output_uses_template(logger: Logger, capsys):
    LoggingConfig().update(log_level="info")

    logger.log(
        Entry(message="registered", level=LogLevel.INFO),
        name="ring",
        template="{level} {function_name} {message}",
    )

    assert capsys.readouterr().err == (
        "INFO test_console_output_uses_template registered\n"
    )


def test_console_output_below_level_is_dropped(logger: Logger, capsys):
    LoggingConfig().update(log_level="warn")

    logger.log(Entry(message="quiet", level=LogLevel.INFO))

    assert capsys.readouterr().err == ""


def test_console_output_to_stdout(logger: Logger, capsys):
    LoggingConfig().update(log_level="info", log_output="stdout")

    logger.log(Entry(message="hello", level=LogLevel.INFO), template="{message}")

    captured = capsys.readouterr()
    assert captured.out == "hello\n"
    assert captured.err == ""


def test_filter_drops_entries(logger: Logger, capsys):
    LoggingConfig().update(log_level="info")

    logger.log(
        Entry(message="skip me", level=LogLevel.INFO),
        template="{message}",
        filter=lambda entry: "skip" not in entry.message,
    )

    assert capsys.readouterr().err == ""


# =============================================================================
# File Output
# =============================================================================


def test_file_output_writes_json_lines(logger: Logger, temp_log_directory: str):
    LoggingConfig().update(log_level="debug")
    logfile = os.path.join(temp_log_directory, "ring.json")

    logger.configure(name="ring", path=logfile)
    logger.log(
        RingInfo(
            message="Registered host A",
            address="A",
            replica_num=3,
            host_count=1,
        ),
        name="ring",
    )
    logger.log(Entry(message="second", level=LogLevel.WARN), name="ring")
    logger.close()

    with open(logfile, "rb") as logs:
        lines = logs.read().splitlines()

    assert len(lines) == 2

    first = msgspec.json.decode(lines[0])
    assert first["logger_name"] == "ring"
    assert first["function_name"] == "test_file_output_writes_json_lines"
    assert first["entry"]["message"] == "Registered host A"
    assert first["entry"]["address"] == "A"
    assert first["entry"]["level"] == "INFO"

    second = msgspec.json.decode(lines[1])
    assert second["entry"]["level"] == "WARN"


def test_configured_directory_routes_to_default_logfile(
    logger: Logger,
    temp_log_directory: str,
):
    LoggingConfig().update(log_level="info", log_directory=temp_log_directory)

    logger.log(Entry(message="to disk", level=LogLevel.INFO))
    logger.close()

    with open(os.path.join(temp_log_directory, DEFAULT_LOGFILE), "rb") as logs:
        record = msgspec.json.decode(logs.read().splitlines()[0])

    assert record["entry"]["message"] == "to disk"


def test_non_json_logfile_reports_error(logger: Logger, temp_log_directory: str, capsys):
    LoggingConfig().update(log_level="info")

    logger.log(
        Entry(message="bad path", level=LogLevel.INFO),
        path=os.path.join(temp_log_directory, "ring.log"),
    )

    assert "must use the .json extension" in capsys.readouterr().err


# =============================================================================
# Ring Events
# =============================================================================


def test_ring_emits_registration_and_rejection_events(
    logger: Logger,
    temp_log_directory: str,
):
    LoggingConfig().update(log_level="debug")
    logfile = os.path.join(temp_log_directory, "ring.json")
    logger.configure(name="ring", path=logfile)

    ring = HashRing(replica_num=2, logger=logger)
    ring.register_host("A")

    with pytest.raises(HostAlreadyExistsError):
        ring.register_host("A")

    logger.close()

    with open(logfile, "rb") as logs:
        records = [msgspec.json.decode(line) for line in logs.read().splitlines()]

    levels = [record["entry"]["level"] for record in records]
    assert levels == ["DEBUG", "DEBUG", "INFO", "WARN"]

    assert records[2]["entry"]["message"] == "Registered host A"
    assert records[2]["function_name"] == "register_host"
    assert records[3]["entry"]["address"] == "A"


def test_ring_warning_model_defaults():
    warning = RingWarning(message="Lookup against empty ring", host_count=0)

    assert warning.level is LogLevel.WARN
    assert warning.address is None
    assert warning.tags == set()
