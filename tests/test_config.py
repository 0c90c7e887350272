"""tests/test_config.py"""
import pytest

from src.utils import config


class TestWeekdays:
    def test_names(self):
        assert config.parse_weekdays(["Tuesday", "friday"]) == [1, 4]

    def test_iso_numbers(self):
        assert config.parse_weekdays(["2", "5"]) == [1, 4]

    def test_invalid(self):
        with pytest.raises(ValueError):
            config.parse_weekdays(["someday"])


class TestSourceConfig:
    def setup_method(self):
        config._source_config_cache.clear()

    def teardown_method(self):
        config._source_config_cache.clear()

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("FIRST_ARCHIVE_YEAR", raising=False)
        monkeypatch.delenv("DRAW_WEEKDAYS", raising=False)
        assert config.get_first_archive_year() == 2009
        assert config.get_draw_weekdays() == [1, 4]

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("FIRST_ARCHIVE_YEAR", "2015")
        monkeypatch.setenv("DRAW_WEEKDAYS", "monday")
        assert config.get_first_archive_year() == 2015
        assert config.get_draw_weekdays() == [0]

    def test_unknown_source(self):
        with pytest.raises(ValueError):
            config.get_source_config("keno")
