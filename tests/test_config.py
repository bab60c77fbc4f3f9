import pytest

from giftmatch.core.config import load_settings


def test_settings_defaults(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "sqlite+pysqlite:///:memory:")
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    monkeypatch.delenv("LOG_PATH", raising=False)
    monkeypatch.delenv("MATCH_MAX_TRIALS", raising=False)

    settings = load_settings()
    assert settings.database_url == "sqlite+pysqlite:///:memory:"
    assert settings.log_level == "INFO"
    assert settings.log_path == "logs/giftmatch.log"
    assert settings.match_max_trials == 10


def test_settings_require_database_url(monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    with pytest.raises(ValueError):
        load_settings()


def test_settings_read_max_trials(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "sqlite+pysqlite:///:memory:")
    monkeypatch.setenv("MATCH_MAX_TRIALS", "25")
    assert load_settings().match_max_trials == 25


@pytest.mark.parametrize("raw", ["zero", "0", "-3"])
def test_settings_reject_bad_max_trials(monkeypatch, raw):
    monkeypatch.setenv("DATABASE_URL", "sqlite+pysqlite:///:memory:")
    monkeypatch.setenv("MATCH_MAX_TRIALS", raw)
    with pytest.raises(ValueError):
        load_settings()
