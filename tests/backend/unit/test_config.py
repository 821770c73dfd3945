from pathlib import Path

from shinyhunt.backend.config import load_settings


def test_load_settings_reads_expected_env(monkeypatch) -> None:
    monkeypatch.setenv("SHINYHUNT_STORAGE_PATH", "/tmp/hunt.json")
    monkeypatch.setenv("SHINYHUNT_DATABASE_URL", "postgresql://local")
    monkeypatch.setenv("SHINYHUNT_HOST", "localhost")
    monkeypatch.setenv("SHINYHUNT_PORT", "9000")
    monkeypatch.setenv("SHINYHUNT_LOG_LEVEL", "debug")

    settings = load_settings()

    assert settings.storage_path == "/tmp/hunt.json"
    assert settings.database_url == "postgresql://local"
    assert settings.host == "localhost"
    assert settings.port == 9000
    assert settings.log_level == "DEBUG"


def test_load_settings_applies_defaults(monkeypatch) -> None:
    monkeypatch.delenv("SHINYHUNT_STORAGE_PATH", raising=False)
    monkeypatch.delenv("SHINYHUNT_DATABASE_URL", raising=False)
    monkeypatch.delenv("SHINYHUNT_HOST", raising=False)
    monkeypatch.delenv("SHINYHUNT_PORT", raising=False)
    monkeypatch.delenv("SHINYHUNT_LOG_LEVEL", raising=False)

    settings = load_settings()

    assert settings.storage_path == str(Path.home() / ".shinyhunt" / "state.json")
    assert settings.database_url is None
    assert settings.host == "127.0.0.1"
    assert settings.port == 8000
    assert settings.log_level == "INFO"
