"""
平台路径规则模块。

根据操作系统和 CPU 架构计算 Godot 的下载文件名、解压后可执行文件
和 GodotSharp 目录的相对路径，并负责创建系统快捷方式。
"""

import os
import platform as _platform
import subprocess
import sys
from abc import abstractmethod
from pathlib import Path
from typing import Optional

from godotenv.utils.logger import get_logger
from godotenv.core.interfaces import IGodotPlatform
from godotenv.core.version_utils import SemanticVersion, godot_version_string

logger = get_logger()

GODOT_DOWNLOAD_BASE_URL = "https://github.com/godotengine/godot-builds/releases/download"


def _is_arm64() -> bool:
    return _platform.machine().lower() in ("arm64", "aarch64")


class GodotPlatform(IGodotPlatform):
    """
    平台规则基类。

    子类只需提供各自的压缩包文件名和目录结构。
    """

    def __init__(self, base_url: str = GODOT_DOWNLOAD_BASE_URL):
        """
        初始化平台规则。

        参数:
            base_url: Godot 发布包下载地址前缀
        """
        self.base_url = base_url.rstrip("/")

    def _file_prefix(self, version: SemanticVersion, is_dotnet: bool) -> str:
        mono = "_mono" if is_dotnet else ""
        return f"Godot_v{godot_version_string(version)}{mono}"

    @abstractmethod
    def get_download_filename(self, version: SemanticVersion, is_dotnet: bool) -> str:
        """获取发布页面上的压缩包文件名。"""
        pass

    def get_download_url(self, version: SemanticVersion, is_dotnet: bool) -> str:
        """
        获取指定版本的下载 URL。

        参数:
            version: 版本号
            is_dotnet: 是否为 .NET 版本

        返回:
            下载 URL
        """
        filename = self.get_download_filename(version, is_dotnet)
        return f"{self.base_url}/{godot_version_string(version)}/{filename}"

    def get_env_refresh_hint(self) -> Optional[str]:
        return None


class WindowsPlatform(GodotPlatform):
    """Windows 平台规则。"""

    def _arch(self) -> str:
        return "windows_arm64" if _is_arm64() else "win64"

    def get_download_filename(self, version: SemanticVersion, is_dotnet: bool) -> str:
        prefix = self._file_prefix(version, is_dotnet)
        if is_dotnet:
            return f"{prefix}_{self._arch()}.zip"
        return f"{prefix}_{self._arch()}.exe.zip"

    def get_relative_extracted_executable_path(self, version: SemanticVersion, is_dotnet: bool) -> str:
        prefix = self._file_prefix(version, is_dotnet)
        if is_dotnet:
            folder = f"{prefix}_{self._arch()}"
            return os.path.join(folder, f"{folder}.exe")
        return f"{prefix}_{self._arch()}.exe"

    def get_relative_godot_sharp_path(self, version: SemanticVersion, is_dotnet: bool) -> str:
        prefix = self._file_prefix(version, is_dotnet)
        return os.path.join(f"{prefix}_{self._arch()}", "GodotSharp")

    def create_shortcuts(self, symlink_path: str, installation_path: str) -> None:
        """
        在开始菜单中创建指向符号链接的快捷方式。

        参数:
            symlink_path: 激活符号链接路径
            installation_path: 安装目录
        """
        appdata = os.environ.get("APPDATA")
        if not appdata:
            logger.warning("未找到 APPDATA 环境变量，跳过创建快捷方式")
            return
        shortcut = os.path.join(appdata, "Microsoft", "Windows", "Start Menu", "Programs", "Godot.lnk")
        ps_script = (
            "$s = (New-Object -ComObject WScript.Shell).CreateShortcut($args[0]); "
            "$s.TargetPath = $args[1]; $s.WorkingDirectory = $args[2]; $s.Save()"
        )
        try:
            result = subprocess.run(
                [
                    "powershell", "-NoProfile", "-ExecutionPolicy", "Bypass",
                    "-Command", ps_script, shortcut, symlink_path, installation_path,
                ],
                capture_output=True,
                text=True,
                check=False,
            )
        except (FileNotFoundError, OSError) as e:
            logger.warning(f"PowerShell 不可用，跳过创建快捷方式: {e}")
            return
        if result.returncode != 0:
            logger.warning(f"创建快捷方式失败: {result.stderr.strip()}")
            return
        logger.debug(f"已创建快捷方式 {shortcut}")


class MacOSPlatform(GodotPlatform):
    """macOS 平台规则。"""

    def _app_name(self, is_dotnet: bool) -> str:
        return "Godot_mono.app" if is_dotnet else "Godot.app"

    def get_download_filename(self, version: SemanticVersion, is_dotnet: bool) -> str:
        os_name = "osx" if version.major <= 3 else "macos"
        return f"{self._file_prefix(version, is_dotnet)}_{os_name}.universal.zip"

    def get_relative_extracted_executable_path(self, version: SemanticVersion, is_dotnet: bool) -> str:
        return os.path.join(self._app_name(is_dotnet), "Contents", "MacOS", "Godot")

    def get_relative_godot_sharp_path(self, version: SemanticVersion, is_dotnet: bool) -> str:
        return os.path.join(self._app_name(is_dotnet), "Contents", "Resources", "GodotSharp")

    def create_shortcuts(self, symlink_path: str, installation_path: str) -> None:
        """
        在 ~/Applications 中创建指向已激活 .app 的链接。

        参数:
            symlink_path: 激活符号链接路径
            installation_path: 安装目录
        """
        apps = sorted(Path(installation_path).glob("*.app"))
        if not apps:
            logger.warning(f"安装目录中未找到 .app 包: {installation_path}")
            return
        applications_dir = Path.home() / "Applications"
        applications_dir.mkdir(parents=True, exist_ok=True)
        link = applications_dir / "Godot.app"
        if link.is_symlink() or link.is_file():
            link.unlink()
        elif link.exists():
            logger.warning(f"{link} 已存在且不是符号链接，跳过创建快捷方式")
            return
        link.symlink_to(apps[0], target_is_directory=True)
        logger.debug(f"已创建快捷方式 {link} -> {apps[0]}")

    def get_env_refresh_hint(self) -> Optional[str]:
        return "source ~/.zshrc"


class LinuxPlatform(GodotPlatform):
    """Linux 平台规则。"""

    def _arch(self, version: SemanticVersion, separator: str) -> str:
        if version.major <= 3:
            return f"x11{separator}64"
        return f"linux{separator}arm64" if _is_arm64() else f"linux{separator}x86_64"

    def get_download_filename(self, version: SemanticVersion, is_dotnet: bool) -> str:
        prefix = self._file_prefix(version, is_dotnet)
        separator = "_" if is_dotnet else "."
        return f"{prefix}_{self._arch(version, separator)}.zip"

    def get_relative_extracted_executable_path(self, version: SemanticVersion, is_dotnet: bool) -> str:
        prefix = self._file_prefix(version, is_dotnet)
        executable = f"{prefix}_{self._arch(version, '.')}"
        if is_dotnet:
            return os.path.join(f"{prefix}_{self._arch(version, '_')}", executable)
        return executable

    def get_relative_godot_sharp_path(self, version: SemanticVersion, is_dotnet: bool) -> str:
        prefix = self._file_prefix(version, is_dotnet)
        return os.path.join(f"{prefix}_{self._arch(version, '_')}", "GodotSharp")

    def create_shortcuts(self, symlink_path: str, installation_path: str) -> None:
        """
        创建指向激活符号链接的 .desktop 启动项。

        参数:
            symlink_path: 激活符号链接路径
            installation_path: 安装目录
        """
        data_home = os.environ.get("XDG_DATA_HOME") or str(Path.home() / ".local" / "share")
        applications_dir = Path(data_home) / "applications"
        applications_dir.mkdir(parents=True, exist_ok=True)
        desktop_file = applications_dir / "godot.desktop"
        desktop_file.write_text(
            "[Desktop Entry]\n"
            "Name=Godot Engine\n"
            "Comment=Multi-platform 2D and 3D game engine\n"
            f"Exec=\"{symlink_path}\" %f\n"
            f"Path={installation_path}\n"
            "Terminal=false\n"
            "Type=Application\n"
            "Categories=Development;IDE;\n"
            "StartupWMClass=Godot\n",
            encoding="utf-8",
        )
        logger.debug(f"已创建快捷方式 {desktop_file}")

    def get_env_refresh_hint(self) -> Optional[str]:
        return "source ~/.bashrc"


def get_platform() -> GodotPlatform:
    """
    根据当前操作系统返回平台规则实例。

    返回:
        GodotPlatform 子类实例
    """
    if sys.platform == "win32":
        return WindowsPlatform()
    if sys.platform == "darwin":
        return MacOSPlatform()
    return LinuxPlatform()
