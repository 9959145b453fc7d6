"""Tests for centralized logging configuration."""

import json
import logging
from decimal import Decimal
from logging.handlers import RotatingFileHandler

from lotledger.services.portfolio.models import Asset
from lotledger.services.portfolio.service import PortfolioService
from lotledger.system import LoggerFactory, LoggingConfig


def test_default_configuration():
    """Test logger factory with default configuration."""
    logger = LoggerFactory.get_logger()

    assert LoggerFactory.is_configured()
    assert hasattr(logger, "info")
    assert hasattr(logger, "warning")

    config = LoggerFactory.get_config()
    assert config.level == "INFO"
    assert config.format == "console"
    # File output is opt-in
    assert config.enable_file is False
    assert config.file_level == "WARNING"


def test_explicit_configuration():
    """Test configuring logger factory explicitly."""
    config = LoggingConfig(level="DEBUG", format="json", enable_file=False)

    LoggerFactory.configure(config)

    assert LoggerFactory.is_configured()
    assert LoggerFactory.get_config().level == "DEBUG"
    assert LoggerFactory.get_config().format == "json"


def test_auto_configure_on_first_use():
    """Test that logger auto-configures with defaults on first use."""
    assert not LoggerFactory.is_configured()

    logger = LoggerFactory.get_logger("lotledger.test")

    assert LoggerFactory.is_configured()
    assert hasattr(logger, "info")


def test_file_logging_writes_json_lines(tmp_path):
    """File logs are JSON lines with a log_timestamp key."""
    log_file = tmp_path / "test.log"

    config = LoggingConfig(
        level="INFO",
        enable_file=True,
        file_path=log_file,
        file_level="DEBUG",
        file_rotation=False,
    )
    LoggerFactory.configure(config)

    logger = LoggerFactory.get_logger()
    logger.error("file_manager.save_failed", path="x.txt")

    record = json.loads(log_file.read_text().strip())
    assert record["event"] == "file_manager.save_failed"
    assert record["path"] == "x.txt"
    assert record["level"].upper() == "ERROR"
    assert "log_timestamp" in record


def test_file_logging_creates_directory(tmp_path):
    """Test that file logging creates parent directories."""
    log_file = tmp_path / "logs" / "subdir" / "test.log"

    LoggerFactory.configure(LoggingConfig(enable_file=True, file_path=log_file, file_rotation=False))
    LoggerFactory.get_logger().warning("test")

    assert log_file.exists()


def test_rotating_file_handler(tmp_path):
    """Test rotating file handler configuration."""
    log_file = tmp_path / "rotating.log"

    config = LoggingConfig(
        enable_file=True,
        file_path=log_file,
        file_rotation=True,
        max_file_size_mb=1,
        backup_count=3,
    )
    LoggerFactory.configure(config)

    handlers = [h for h in logging.getLogger().handlers if isinstance(h, RotatingFileHandler)]
    handler = next((h for h in handlers if str(log_file) in str(h.baseFilename)), None)

    assert handler is not None
    assert handler.maxBytes == 1 * 1024 * 1024
    assert handler.backupCount == 3


def test_file_level_filters_entries(tmp_path):
    """File level is independent from console level."""
    log_file = tmp_path / "warn.log"

    config = LoggingConfig(
        level="DEBUG",
        enable_file=True,
        file_path=log_file,
        file_level="WARNING",
        file_rotation=False,
    )
    LoggerFactory.configure(config)

    logger = LoggerFactory.get_logger()
    logger.debug("debug.message")
    logger.info("info.message")
    logger.warning("warning.message")

    events = [json.loads(line)["event"] for line in log_file.read_text().splitlines() if line.strip()]
    assert events == ["warning.message"]


def test_portfolio_events_are_logged(tmp_path):
    """Portfolio operations emit dotted, component-prefixed events."""
    log_file = tmp_path / "portfolio.log"
    LoggerFactory.configure(
        LoggingConfig(level="WARNING", enable_file=True, file_path=log_file, file_level="INFO", file_rotation=False)
    )

    portfolio = PortfolioService.with_cash(Decimal("1000"))
    portfolio.buy(Asset.share("AAPL", Decimal("100")), 5)
    portfolio.sell("AAPL", 5, Decimal("110"))

    entries = [json.loads(line) for line in log_file.read_text().splitlines() if line.strip()]
    events = [entry["event"] for entry in entries]

    assert "portfolio_service.asset_bought" in events
    assert "portfolio_service.asset_sold" in events
    sold = next(entry for entry in entries if entry["event"] == "portfolio_service.asset_sold")
    assert sold["symbol"] == "AAPL"
    assert sold["realized_pnl"] == 50.0


def test_reset_clears_configuration():
    """Test that reset clears configuration."""
    LoggerFactory.configure(LoggingConfig(level="DEBUG"))
    assert LoggerFactory.get_config().level == "DEBUG"

    LoggerFactory.reset()

    assert not LoggerFactory.is_configured()
    assert LoggerFactory.get_config().level == "INFO"


def test_console_vs_json_format():
    """Test console vs JSON format configuration."""
    LoggerFactory.configure(LoggingConfig(format="console"))
    assert LoggerFactory.get_config().format == "console"

    LoggerFactory.reset()
    LoggerFactory.configure(LoggingConfig(format="json"))
    assert LoggerFactory.get_config().format == "json"
