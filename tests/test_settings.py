"""
Settings and logging configuration tests.
"""
import logging

from responsible_tool.config.logging import LOGGER_NAME, configure_logging
from responsible_tool.config.settings import DEFAULT_TIMEZONE, Settings, get_settings, reset_settings


def test_defaults_point_at_shipped_mapping(monkeypatch):
    for var in ('RESPONSIBLE_MAPPING_CSV', 'RESPONSIBLE_MAPPING_JSON', 'RESPONSIBLE_TIMEZONE'):
        monkeypatch.delenv(var, raising=False)
    settings = Settings.load()
    assert settings.timezone == DEFAULT_TIMEZONE == "Europe/Nicosia"
    assert settings.mapping_csv.name == "responsible_mapping.csv"
    assert settings.mapping_json.exists()


def test_environment_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv('RESPONSIBLE_MAPPING_JSON', str(tmp_path / "m.json"))
    monkeypatch.setenv('RESPONSIBLE_TIMEZONE', "Europe/Athens")
    monkeypatch.setenv('RESPONSIBLE_LOG_LEVEL', "debug")
    reset_settings()
    try:
        settings = get_settings()
        assert settings.mapping_json == tmp_path / "m.json"
        assert settings.timezone == "Europe/Athens"
        assert settings.log_level == "DEBUG"
        assert get_settings() is settings
    finally:
        reset_settings()


def test_configure_logging_writes_file(tmp_path):
    logger = configure_logging("INFO", log_dir=tmp_path, enable_console=False)
    logging.getLogger(f"{LOGGER_NAME}.resolver").warning("No responsible found for order 1")
    for handler in logger.handlers:
        handler.flush()

    log_files = list(tmp_path.glob("responsible_*.log"))
    assert len(log_files) == 1
    assert "No responsible found for order 1" in log_files[0].read_text(encoding="utf-8")

    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


def test_api_bind_address_from_environment(monkeypatch):
    monkeypatch.setenv('RESPONSIBLE_API_HOST', "127.0.0.1")
    monkeypatch.setenv('RESPONSIBLE_API_PORT', "9100")
    settings = Settings.load()
    assert settings.api_host == "127.0.0.1"
    assert settings.api_port == 9100
