"""Tests for wren.settings — the per-app settings map."""

import pytest

from wren.config import AppConfig
from wren.settings import Settings, as_bool


class TestAsBool:
    @pytest.mark.parametrize("value", ["no", "false", "0", "disable", "FALSE", "No"])
    def test_false_strings(self, value: str) -> None:
        assert as_bool(value) is False

    @pytest.mark.parametrize("value", ["yes", "true", "1", "on", ""])
    def test_other_strings_true(self, value: str) -> None:
        assert as_bool(value) is True

    def test_non_strings(self) -> None:
        assert as_bool(True) is True
        assert as_bool(0) is False
        assert as_bool([]) is False


class TestSettings:
    def test_last_write_wins(self) -> None:
        settings = Settings()
        settings["a"] = 1
        settings["a"] = 2
        assert settings["a"] == 2

    def test_none_removes(self) -> None:
        settings = Settings({"a": 1})
        settings["a"] = None
        assert "a" not in settings
        assert len(settings) == 0

    def test_initial_none_skipped(self) -> None:
        assert dict(Settings({"a": None, "b": 2})) == {"b": 2}

    def test_from_config(self) -> None:
        settings = Settings.from_config(AppConfig(env="test", x_powered_by=False))
        assert dict(settings) == {"env": "test", "view engine": "html", "x-powered-by": False}

    def test_env_default(self) -> None:
        assert Settings().env == "development"
        assert Settings({"env": "production"}).env == "production"

    def test_x_powered_by(self) -> None:
        assert Settings().x_powered_by is True
        assert Settings({"x-powered-by": "no"}).x_powered_by is False
        assert Settings({"x-powered-by": "yes"}).x_powered_by is True

    def test_repr(self) -> None:
        assert repr(Settings({"a": 1})) == "Settings({'a': 1})"
