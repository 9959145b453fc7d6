"""
Unit tests for system/config.py - System configuration.

Tests:
- SystemConfig defaults and YAML loading
- Search order: explicit path, environment variable, config/system.yaml
- Singleton functions: get_system_config(), reload_system_config()
"""

from decimal import Decimal
from pathlib import Path

import pytest

from lotledger.system import config as config_module
from lotledger.system.config import CONFIG_ENV_VAR, SystemConfig, get_system_config, reload_system_config

REPO_ROOT = Path(__file__).parents[3]

SAMPLE_YAML = """
logging:
  level: DEBUG
  format: json
portfolio:
  initial_cash: "2500.00"
  start_day: 3
  max_symbols: 5
  valuation:
    share_flat_fee: "2.50"
    lot_price_basis: acquisition
"""


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "system.yaml"
    path.write_text(SAMPLE_YAML)
    return path


@pytest.fixture(autouse=True)
def isolate_config(monkeypatch: pytest.MonkeyPatch):
    """Clear env var and singleton around each test."""
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    monkeypatch.setattr(config_module, "_system_config", None)
    yield


class TestSystemConfig:
    """Test SystemConfig construction and loading."""

    def test_defaults(self) -> None:
        config = SystemConfig()

        assert config.logging.level == "INFO"
        assert config.portfolio.initial_cash == Decimal("10000.00")
        assert config.portfolio.valuation.share_flat_fee == Decimal("5.00")
        assert config.portfolio.valuation.currency_spread_rate == Decimal("0.005")

    def test_load_explicit_path(self, config_file: Path) -> None:
        config = SystemConfig.load(config_file)

        assert config.logging.level == "DEBUG"
        assert config.logging.format == "json"
        assert config.portfolio.initial_cash == Decimal("2500.00")
        assert config.portfolio.start_day == 3
        assert config.portfolio.max_symbols == 5
        assert config.portfolio.valuation.share_flat_fee == Decimal("2.50")
        assert config.portfolio.valuation.lot_price_basis == "acquisition"
        # Unset values keep their defaults
        assert config.portfolio.valuation.commodity_storage_rate == Decimal("0.50")

    def test_load_missing_explicit_path_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            SystemConfig.load(tmp_path / "missing.yaml")

    def test_load_from_env_var(self, config_file: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(CONFIG_ENV_VAR, str(config_file))

        assert SystemConfig.load().portfolio.max_symbols == 5

    def test_load_without_file_uses_defaults(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)

        config = SystemConfig.load()

        assert config.logging == SystemConfig().logging
        assert config.portfolio.initial_cash == Decimal("10000.00")
        assert config.portfolio.max_symbols is None

    def test_load_default_location(self, config_file: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "config").mkdir()
        config_file.rename(tmp_path / "config" / "system.yaml")
        monkeypatch.chdir(tmp_path)

        assert SystemConfig.load().portfolio.start_day == 3

    def test_empty_file_uses_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("")

        assert SystemConfig.load(path).portfolio.initial_cash == Decimal("10000.00")

    def test_invalid_yaml_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "broken.yaml"
        path.write_text("logging: [unclosed\n")

        with pytest.raises(ValueError, match="Failed to parse YAML"):
            SystemConfig.load(path)

    def test_invalid_values_raise(self, tmp_path: Path) -> None:
        path = tmp_path / "invalid.yaml"
        path.write_text("portfolio:\n  initial_cash: '-1'\n")

        with pytest.raises(ValueError):
            SystemConfig.load(path)

    def test_non_mapping_root_raises(self) -> None:
        with pytest.raises(ValueError, match="mapping"):
            SystemConfig.from_dict(["not", "a", "mapping"])  # type: ignore[arg-type]

    def test_repository_sample_matches_defaults(self) -> None:
        config = SystemConfig.load(REPO_ROOT / "config" / "system.yaml")

        assert config.portfolio.valuation == SystemConfig().portfolio.valuation
        assert config.logging.level == "INFO"
        assert config.logging.enable_file is False


class TestSingleton:
    """Test cached system configuration."""

    def test_get_system_config_is_cached(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)

        assert get_system_config() is get_system_config()

    def test_reload_replaces_cached_config(self, config_file: Path) -> None:
        reloaded = reload_system_config(config_file)

        assert get_system_config() is reloaded
        assert get_system_config().portfolio.start_day == 3
