"""
环境变量管理器模块。

提供用户级环境变量的读取和持久化设置功能：Windows 写入用户环境变量
注册表键，macOS/Linux 在 shell 配置文件中维护 export 语句。
"""

import os
import re
import sys
import ctypes
from pathlib import Path
from typing import Optional

from godotenv.utils.logger import get_logger
from godotenv.core.interfaces import IEnvManager

if sys.platform == "win32":
    import winreg

logger = get_logger()

ENV_KEY_PATH = "Environment"
WM_SETTINGCHANGE = 0x001A
HWND_BROADCAST = 0xFFFF
SMTO_ABORTIFHUNG = 0x0002
RC_MARKER = "# Added by godotenv"


class EnvManagerError(Exception):
    """环境变量管理错误异常。"""
    pass


class RegistryAccessError(EnvManagerError):
    """注册表访问错误异常。"""
    pass


def choose_rc_file(home: Optional[Path] = None) -> Path:
    """
    根据当前 shell 选择配置文件。

    参数:
        home: 用户主目录，默认为 Path.home()

    返回:
        shell 配置文件路径
    """
    shell = os.environ.get("SHELL", "")
    home = home or Path.home()
    if shell.endswith("zsh"):
        return home / ".zshrc"
    if shell.endswith("bash"):
        return home / ".bashrc"
    for candidate in (home / ".bashrc", home / ".zshrc"):
        if candidate.exists():
            return candidate
    return home / ".profile"


class EnvManager(IEnvManager):
    """
    环境变量管理器类。

    设置的值会同时写入当前进程环境，保证同一进程内随后的读取一致。
    实现 IEnvManager 抽象接口。
    """

    def __init__(self, rc_file: Optional[Path] = None):
        """
        初始化环境变量管理器。

        参数:
            rc_file: Unix 平台使用的 shell 配置文件，默认自动选择
        """
        self.is_windows = sys.platform == "win32"
        self.rc_file = rc_file

    def _get_rc_file(self) -> Path:
        return self.rc_file or choose_rc_file()

    @staticmethod
    def _export_pattern(name: str) -> re.Pattern:
        return re.compile(rf'^\s*export\s+{re.escape(name)}=(?P<value>.*)$')

    def get_env_var(self, name: str) -> Optional[str]:
        """
        获取环境变量值。

        优先读取当前进程环境，其次读取持久化的用户环境变量。

        参数:
            name: 环境变量名称

        返回:
            环境变量值，不存在则返回 None
        """
        value = os.environ.get(name)
        if value:
            return value

        if self.is_windows:
            return self._get_registry_value(name)
        return self._get_rc_value(name)

    def set_env_var(self, name: str, value: str) -> None:
        """
        设置并持久化环境变量值。

        参数:
            name: 环境变量名称
            value: 环境变量值

        抛出:
            EnvManagerError: 持久化失败时抛出
        """
        if self.is_windows:
            self._set_registry_value(name, value)
        else:
            self._set_rc_value(name, value)
        os.environ[name] = value
        logger.info(f"设置环境变量 {name}={value}")

    def _get_rc_value(self, name: str) -> Optional[str]:
        """从 shell 配置文件中读取 export 语句的值。"""
        rc_file = self._get_rc_file()
        if not rc_file.exists():
            return None
        pattern = self._export_pattern(name)
        value = None
        try:
            for line in rc_file.read_text(encoding="utf-8").splitlines():
                match = pattern.match(line)
                if match:
                    value = match.group("value").strip().strip('"').strip("'")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"读取 {rc_file} 失败: {e}")
            return None
        return value

    def _set_rc_value(self, name: str, value: str) -> None:
        """在 shell 配置文件中写入或替换 export 语句。"""
        rc_file = self._get_rc_file()
        export_line = f'export {name}="{value}"'
        pattern = self._export_pattern(name)

        try:
            lines = rc_file.read_text(encoding="utf-8").splitlines() if rc_file.exists() else []
            replaced = False
            new_lines = []
            for line in lines:
                if pattern.match(line):
                    if not replaced:
                        new_lines.append(export_line)
                        replaced = True
                    continue
                new_lines.append(line)

            if not replaced:
                if new_lines and new_lines[-1].strip():
                    new_lines.append("")
                new_lines.append(RC_MARKER)
                new_lines.append(export_line)

            rc_file.parent.mkdir(parents=True, exist_ok=True)
            rc_file.write_text("\n".join(new_lines) + "\n", encoding="utf-8")
            logger.debug(f"已更新 {rc_file}: {export_line}")
        except (OSError, UnicodeDecodeError) as e:
            error_msg = f"写入 {rc_file} 失败: {e}"
            logger.error(error_msg)
            raise EnvManagerError(error_msg) from e

    def _get_registry_value(self, name: str) -> Optional[str]:
        """读取用户环境变量注册表值。"""
        try:
            with winreg.OpenKey(winreg.HKEY_CURRENT_USER, ENV_KEY_PATH, 0, winreg.KEY_READ) as key:
                value, _ = winreg.QueryValueEx(key, name)
                logger.debug(f"读取环境变量 {name}={value}")
                return value
        except FileNotFoundError:
            logger.debug(f"环境变量 {name} 不存在")
            return None
        except OSError as e:
            logger.error(f"读取环境变量 {name} 失败: {e}")
            return None

    def _set_registry_value(self, name: str, value: str) -> None:
        """写入用户环境变量注册表值并广播更改。"""
        try:
            access = winreg.KEY_READ | winreg.KEY_SET_VALUE
            with winreg.OpenKey(winreg.HKEY_CURRENT_USER, ENV_KEY_PATH, 0, access) as key:
                reg_type = winreg.REG_EXPAND_SZ if "%" in value else winreg.REG_SZ
                winreg.SetValueEx(key, name, 0, reg_type, value)
        except OSError as e:
            error_msg = f"设置环境变量 {name} 失败: {e}"
            logger.error(error_msg)
            raise RegistryAccessError(error_msg) from e
        self.broadcast_change()

    def broadcast_change(self) -> None:
        """
        广播环境变量更改消息。

        通知系统和其他应用程序环境变量已更改。
        """
        try:
            result = ctypes.c_long()
            ctypes.windll.user32.SendMessageTimeoutW(
                HWND_BROADCAST,
                WM_SETTINGCHANGE,
                0,
                "Environment",
                SMTO_ABORTIFHUNG,
                5000,
                ctypes.byref(result)
            )
            logger.debug("已广播 WM_SETTINGCHANGE 消息")
        except (AttributeError, OSError) as e:
            logger.warning(f"广播环境变量更改消息失败: {e}")
