"""
应用数据目录模块。

计算 GodotEnv 在各平台上的应用数据目录。
"""

import os
import sys
from pathlib import Path

APP_NAME = "godotenv"
HOME_ENV_VAR = "GODOTENV_HOME"


def get_app_dir() -> Path:
    """
    获取应用程序数据目录路径。

    优先使用 GODOTENV_HOME 环境变量，否则按平台约定选择目录：
    Windows 为 %APPDATA%，macOS 为 ~/Library/Application Support，
    其他平台为 $XDG_CONFIG_HOME 或 ~/.config。

    返回:
        应用程序数据目录的 Path 对象
    """
    override = os.environ.get(HOME_ENV_VAR)
    if override:
        return Path(override)

    if sys.platform == "win32":
        base = os.environ.get("APPDATA") or str(Path.home() / "AppData" / "Roaming")
        return Path(base) / APP_NAME
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / APP_NAME

    base = os.environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    return Path(base) / APP_NAME
