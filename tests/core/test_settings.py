"""Tests for core.settings module.

Covers:
- TableModelSettings defaults
- Environment variable override with the TABLEMODEL_ prefix
- get_settings caching
"""

from tablemodel.core.settings import TableModelSettings, get_settings


class TestTableModelSettingsDefaults:
    def test_default_databases_empty(self):
        assert TableModelSettings().databases == {}

    def test_default_echo_off(self):
        assert TableModelSettings().echo_sql is False

    def test_default_log_level(self):
        assert TableModelSettings().log_level == "INFO"

    def test_default_json_logs_auto(self):
        assert TableModelSettings().json_logs is None


class TestTableModelSettingsEnvOverride:
    def test_databases_from_json_env(self, monkeypatch):
        monkeypatch.setenv("TABLEMODEL_DATABASES", '{"db1": "sqlite://"}')
        assert TableModelSettings().databases == {"db1": "sqlite://"}

    def test_log_level_from_env(self, monkeypatch):
        monkeypatch.setenv("TABLEMODEL_LOG_LEVEL", "DEBUG")
        assert TableModelSettings().log_level == "DEBUG"

    def test_unprefixed_env_ignored(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "ERROR")
        assert TableModelSettings().log_level == "INFO"


class TestGetSettings:
    def test_cached(self):
        assert get_settings() is get_settings()

    def test_cache_clear_rereads_env(self, monkeypatch):
        first = get_settings()
        monkeypatch.setenv("TABLEMODEL_ECHO_SQL", "true")
        get_settings.cache_clear()
        second = get_settings()
        assert second is not first
        assert second.echo_sql is True
