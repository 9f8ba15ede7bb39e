"""
Tests for godotenv.core.config_manager: JSON config load / validate / save.
"""

import json

import pytest

from godotenv.core.config_manager import (
    DEFAULT_DOWNLOAD_TIMEOUT,
    DEFAULT_INSTALLATIONS_PATH,
    DEFAULT_REQUEST_TIMEOUT,
    ConfigManager,
    ConfigValidationError,
)


class TestLoad:
    def test_creates_default_file_when_missing(self, tmp_path):
        manager = ConfigManager(tmp_path)

        assert manager.get_installations_path() == DEFAULT_INSTALLATIONS_PATH
        assert manager.get_download_timeout() == DEFAULT_DOWNLOAD_TIMEOUT
        assert manager.get_request_timeout() == DEFAULT_REQUEST_TIMEOUT
        saved = json.loads((tmp_path / "config.json").read_text(encoding="utf-8"))
        assert saved["settings"]["godot"]["installations_path"] == DEFAULT_INSTALLATIONS_PATH

    def test_reads_existing_file(self, tmp_path):
        (tmp_path / "config.json").write_text(json.dumps({
            "settings": {
                "godot": {"installations_path": "engines"},
                "download_timeout": 60,
                "request_timeout": 3,
            },
        }), encoding="utf-8")

        manager = ConfigManager(tmp_path)

        assert manager.get_installations_path() == "engines"
        assert manager.get_download_timeout() == 60
        assert manager.get_request_timeout() == 3

    def test_fills_missing_fields(self, tmp_path):
        (tmp_path / "config.json").write_text(json.dumps({"settings": {"godot": {}}}), encoding="utf-8")

        manager = ConfigManager(tmp_path)

        assert manager.get_installations_path() == DEFAULT_INSTALLATIONS_PATH
        assert manager.get_download_timeout() == DEFAULT_DOWNLOAD_TIMEOUT

    def test_corrupt_file_falls_back_to_defaults(self, tmp_path):
        (tmp_path / "config.json").write_text("{not json", encoding="utf-8")

        manager = ConfigManager(tmp_path)

        assert manager.get_installations_path() == DEFAULT_INSTALLATIONS_PATH

    def test_invalid_file_falls_back_to_defaults(self, tmp_path):
        (tmp_path / "config.json").write_text(json.dumps({
            "settings": {"godot": {"installations_path": "../outside"}},
        }), encoding="utf-8")

        manager = ConfigManager(tmp_path)

        assert manager.get_installations_path() == DEFAULT_INSTALLATIONS_PATH

    def test_home_env_var_selects_directory(self, tmp_path, monkeypatch):
        monkeypatch.setenv("GODOTENV_HOME", str(tmp_path / "home"))

        manager = ConfigManager()

        assert manager.config_file == tmp_path / "home" / "config.json"


class TestValidate:
    @pytest.fixture
    def manager(self, tmp_path):
        return ConfigManager(tmp_path)

    @pytest.mark.parametrize("path", ["/abs/path", "a/../b", ""])
    def test_rejects_bad_installations_path(self, manager, path):
        with pytest.raises(ConfigValidationError):
            manager.set_value("settings.godot.installations_path", path)
        assert manager.get_installations_path() == DEFAULT_INSTALLATIONS_PATH

    @pytest.mark.parametrize("path", ["cache", "bin", "GodotSharp", ".", "./", "./cache", "cache/sub", "bin\\x"])
    def test_rejects_installations_path_overlapping_layout(self, manager, path):
        with pytest.raises(ConfigValidationError):
            manager.set_value("settings.godot.installations_path", path)
        assert manager.get_installations_path() == DEFAULT_INSTALLATIONS_PATH

    @pytest.mark.parametrize("path", ["engines", "cache2", "my/bin"])
    def test_accepts_installations_path_beside_layout(self, manager, path):
        manager.set_value("settings.godot.installations_path", path)
        assert manager.get_installations_path() == path

    def test_reserved_installations_path_in_file_falls_back_to_default(self, tmp_path):
        (tmp_path / "config.json").write_text(json.dumps({
            "settings": {"godot": {"installations_path": "cache"}},
        }), encoding="utf-8")

        assert ConfigManager(tmp_path).get_installations_path() == DEFAULT_INSTALLATIONS_PATH

    @pytest.mark.parametrize("value", [0, -1, True, "10"])
    def test_rejects_bad_timeout(self, manager, value):
        with pytest.raises(ConfigValidationError):
            manager.set_value("settings.download_timeout", value)

    def test_missing_settings(self, manager):
        with pytest.raises(ConfigValidationError):
            manager.validate_config({})


class TestSetValue:
    def test_persists_value(self, tmp_path):
        ConfigManager(tmp_path).set_value("settings.request_timeout", 20)

        assert ConfigManager(tmp_path).get_request_timeout() == 20

    def test_no_temp_file_left(self, tmp_path):
        ConfigManager(tmp_path).set_value("settings.godot.installations_path", "engines")

        assert sorted(p.name for p in tmp_path.iterdir()) == ["config.json"]
