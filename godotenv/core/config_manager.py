"""
配置管理器模块。

提供应用程序配置的加载、保存和验证功能。
"""

import copy
import json
import os
from pathlib import Path
from typing import Any, Optional

from godotenv.utils.app_dir import get_app_dir
from godotenv.utils.logger import get_logger
from godotenv.core.interfaces import IConfigManager
from godotenv.core.godot_repository import GODOT_BIN_PATH, GODOT_CACHE_PATH, GODOT_SHARP_PATH
from godotenv.utils.input_validator import InputValidator, InputValidationError

logger = get_logger()

DEFAULT_INSTALLATIONS_PATH = "installations"
DEFAULT_DOWNLOAD_TIMEOUT = 300
DEFAULT_REQUEST_TIMEOUT = 10

# Godot 数据目录下的固定条目，安装目录不能与之重叠
RESERVED_INSTALLATIONS_PATHS = {GODOT_CACHE_PATH, GODOT_BIN_PATH, GODOT_SHARP_PATH, ".", ""}


class ConfigValidationError(Exception):
    """配置验证错误异常。"""
    pass


class ConfigSaveError(Exception):
    """配置保存错误异常。"""
    pass


def _atomic_save_json(file_path: Path, data: Any, indent: int = 2) -> None:
    """
    原子保存 JSON 数据到文件，防止写入中断导致文件损坏。

    参数:
        file_path: 目标文件路径
        data: 要保存的数据
        indent: JSON 缩进
    """
    temp_path = file_path.with_suffix(file_path.suffix + ".tmp")

    try:
        with open(temp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=indent, ensure_ascii=False)
        os.replace(temp_path, file_path)
    except Exception:
        if temp_path.exists():
            temp_path.unlink()
        raise


class ConfigManager(IConfigManager):
    """
    配置管理器类。

    负责管理应用程序配置的加载、保存、验证和访问。
    实现 IConfigManager 抽象接口。
    """

    CONFIG_FILE_NAME = "config.json"

    REQUIRED_FIELDS = {
        "settings": dict,
    }

    SETTINGS_FIELDS = {
        "godot": dict,
        "download_timeout": int,
        "request_timeout": int,
    }

    def __init__(self, config_dir: Optional[Path] = None):
        """
        初始化配置管理器。

        参数:
            config_dir: 配置目录，默认为应用数据目录
        """
        self.config_dir = Path(config_dir) if config_dir else get_app_dir()
        self.config_file = self.config_dir / self.CONFIG_FILE_NAME
        self._config: dict[str, Any] = {}

    def _get_builtin_default_config(self) -> dict[str, Any]:
        """获取内置默认配置。"""
        return {
            "settings": {
                "godot": {
                    "installations_path": DEFAULT_INSTALLATIONS_PATH,
                },
                "download_timeout": DEFAULT_DOWNLOAD_TIMEOUT,
                "request_timeout": DEFAULT_REQUEST_TIMEOUT,
            },
        }

    def load_config(self) -> dict[str, Any]:
        """
        加载配置文件。

        如果配置文件不存在，则创建默认配置文件。

        返回:
            配置字典
        """
        try:
            if not self.config_file.exists():
                logger.info(f"配置文件不存在，创建默认配置: {self.config_file}")
                self._config = self._get_builtin_default_config()
                self.save_config()
                return self._config

            logger.debug(f"从文件加载配置: {self.config_file}")
            with open(self.config_file, "r", encoding="utf-8") as f:
                self._config = json.load(f)

            self._ensure_backward_compatibility()
            self.validate_config(self._config)
            logger.debug("配置加载成功")
            return self._config
        except (IOError, OSError, json.JSONDecodeError) as e:
            logger.error(f"加载配置文件失败，使用默认配置: {e}")
            self._config = self._get_builtin_default_config()
            return self._config
        except ConfigValidationError as e:
            logger.error(f"配置验证失败，使用默认配置: {e}")
            self._config = self._get_builtin_default_config()
            return self._config

    def _ensure_backward_compatibility(self) -> None:
        """
        确保配置向后兼容，为旧版本配置添加新字段。
        """
        if not isinstance(self._config, dict):
            raise ConfigValidationError("配置文件顶层必须是对象")

        defaults = self._get_builtin_default_config()["settings"]
        settings = self._config.setdefault("settings", {})
        if not isinstance(settings, dict):
            return

        for field, value in defaults.items():
            if field not in settings:
                settings[field] = copy.deepcopy(value)

        godot = settings.get("godot")
        if isinstance(godot, dict) and "installations_path" not in godot:
            godot["installations_path"] = DEFAULT_INSTALLATIONS_PATH

    def save_config(self, config: dict[str, Any] | None = None) -> None:
        """
        保存配置到文件。

        参数:
            config: 要保存的配置字典，如果为 None 则保存当前配置
        """
        try:
            if config is not None:
                self._config = config

            self.validate_config(self._config)

            self.config_dir.mkdir(parents=True, exist_ok=True)
            logger.debug(f"保存配置到 {self.config_file}")
            _atomic_save_json(self.config_file, self._config, indent=2)
            logger.debug("配置保存成功")
        except ConfigValidationError as e:
            logger.error(f"配置验证失败，无法保存: {e}")
            raise
        except (IOError, OSError) as e:
            logger.error(f"保存配置失败: {e}")
            raise ConfigSaveError(f"无法保存配置到 {self.config_file}: {e}") from e

    def validate_config(self, config: dict[str, Any]) -> bool:
        """
        验证配置的有效性。

        参数:
            config: 要验证的配置字典

        返回:
            验证通过返回 True

        抛出:
            ConfigValidationError: 配置验证失败时抛出
        """
        for field, expected_type in self.REQUIRED_FIELDS.items():
            if field not in config:
                raise ConfigValidationError(f"缺少必需字段: {field}")
            if not isinstance(config[field], expected_type):
                raise ConfigValidationError(
                    f"字段 '{field}' 必须是 {expected_type.__name__} 类型，"
                    f"实际为 {type(config[field]).__name__}"
                )

        settings = config["settings"]
        for field, expected_type in self.SETTINGS_FIELDS.items():
            if field not in settings:
                raise ConfigValidationError(f"settings 中缺少必需字段: {field}")
            # bool 是 int 的子类，需要单独排除
            if not isinstance(settings[field], expected_type) or isinstance(settings[field], bool):
                raise ConfigValidationError(
                    f"字段 'settings.{field}' 必须是 {expected_type.__name__} 类型，"
                    f"实际为 {type(settings[field]).__name__}"
                )

        installations_path = settings["godot"].get("installations_path")
        if not isinstance(installations_path, str):
            raise ConfigValidationError("字段 'settings.godot.installations_path' 必须是 str 类型")
        try:
            InputValidator.validate_path(installations_path)
        except InputValidationError as e:
            raise ConfigValidationError(f"字段 'settings.godot.installations_path' 无效: {e}") from e

        first_segment = os.path.normpath(installations_path).replace("\\", "/").split("/")[0]
        if first_segment in RESERVED_INSTALLATIONS_PATHS:
            raise ConfigValidationError(
                f"字段 'settings.godot.installations_path' 不能使用保留路径: {installations_path}"
            )

        for field in ("download_timeout", "request_timeout"):
            if settings[field] <= 0:
                raise ConfigValidationError(f"字段 'settings.{field}' 必须大于 0")

        logger.debug("配置验证通过")
        return True

    @property
    def config(self) -> dict[str, Any]:
        """
        获取配置字典（延迟加载）。

        返回:
            配置字典
        """
        if not self._config:
            self.load_config()
        return self._config

    def get_config(self) -> dict[str, Any]:
        """获取配置字典。"""
        return self.config

    def get_settings(self) -> dict[str, Any]:
        """获取 settings 配置部分。"""
        return self.config.get("settings", {})

    def get_installations_path(self) -> str:
        """
        获取 Godot 安装目录相对路径。

        返回:
            相对于 Godot 数据目录的安装路径
        """
        return self.get_settings().get("godot", {}).get(
            "installations_path", DEFAULT_INSTALLATIONS_PATH
        )

    def get_download_timeout(self) -> int:
        """获取下载超时时间（秒）。"""
        return self.get_settings().get("download_timeout", DEFAULT_DOWNLOAD_TIMEOUT)

    def get_request_timeout(self) -> int:
        """获取普通请求超时时间（秒）。"""
        return self.get_settings().get("request_timeout", DEFAULT_REQUEST_TIMEOUT)

    def set_value(self, key: str, value: Any) -> None:
        """
        按点号分隔的键路径设置配置值并保存。

        参数:
            key: 键路径，例如 settings.godot.installations_path
            value: 配置值

        抛出:
            ConfigValidationError: 新配置未通过验证时抛出，原配置保持不变
        """
        config = copy.deepcopy(self.config)
        keys = key.split(".")
        obj = config
        for k in keys[:-1]:
            if not isinstance(obj.get(k), dict):
                obj[k] = {}
            obj = obj[k]
        obj[keys[-1]] = value

        self.validate_config(config)
        self.save_config(config)
        logger.info(f"已设置配置 {key} = {value!r}")
