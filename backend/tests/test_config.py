"""
Book Catalog Backend — Settings Tests
"""

import pytest
from pydantic import ValidationError as PydanticValidationError

from bookcatalog.config import Settings


def test_port_env_name(monkeypatch):
    monkeypatch.setenv("PORT", "8080")
    assert Settings(_env_file=None).backend_port == 8080


def test_defaults(monkeypatch):
    monkeypatch.delenv("PORT", raising=False)
    monkeypatch.delenv("BACKEND_PORT", raising=False)
    monkeypatch.delenv("SEARCH_QUERY_MAX_LENGTH", raising=False)
    settings = Settings(_env_file=None)
    assert settings.backend_port == 3000
    assert settings.search_query_max_length == 100


def test_log_level_normalized(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "debug")
    assert Settings(_env_file=None).log_level == "DEBUG"


def test_invalid_log_level(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "chatty")
    with pytest.raises(PydanticValidationError):
        Settings(_env_file=None)


def test_cors_origins_list():
    settings = Settings(_env_file=None, cors_origins="http://a.test, http://b.test,")
    assert settings.cors_origins_list == ["http://a.test", "http://b.test"]


def test_sync_driver_rejected():
    settings = Settings(_env_file=None, database_url="postgresql://u:p@localhost/db")
    with pytest.raises(ValueError, match="async driver"):
        settings.validate_required_for_production()
