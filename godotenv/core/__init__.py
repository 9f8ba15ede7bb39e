"""
GodotEnv 核心模块。

提供配置管理、环境变量管理、Godot 安装仓库和版本管理功能。
"""

from .interfaces import (
    IConfigManager, IEnvManager, IFileClient, INetworkClient, IZipClient,
    IGodotPlatform, IGodotRepository, IVersionManager,
)
from .models import GodotCompressedArchive, GodotInstallation
from .config_manager import ConfigManager, ConfigValidationError, ConfigSaveError
from .env_manager import EnvManager, EnvManagerError, RegistryAccessError
from .file_client import FileClient, FileClientError, SymlinkError
from .network_client import NetworkClient, NetworkClientError, DownloadError, DownloadCancelledError
from .zip_client import ZipClient, ExtractionError
from .platform import GodotPlatform, WindowsPlatform, MacOSPlatform, LinuxPlatform, get_platform
from .godot_repository import GodotRepository, GodotRepositoryError, RemoteVersionsError
from .version_manager import VersionManager, VersionManagerError, VersionNotInstalledError
from .version_utils import SemanticVersion, VersionError, InvalidVersionError
from . import version_utils

__all__ = [
    "IConfigManager", "IEnvManager", "IFileClient", "INetworkClient", "IZipClient",
    "IGodotPlatform", "IGodotRepository", "IVersionManager",
    "GodotCompressedArchive", "GodotInstallation",
    "ConfigManager", "ConfigValidationError", "ConfigSaveError",
    "EnvManager", "EnvManagerError", "RegistryAccessError",
    "FileClient", "FileClientError", "SymlinkError",
    "NetworkClient", "NetworkClientError", "DownloadError", "DownloadCancelledError",
    "ZipClient", "ExtractionError",
    "GodotPlatform", "WindowsPlatform", "MacOSPlatform", "LinuxPlatform", "get_platform",
    "GodotRepository", "GodotRepositoryError", "RemoteVersionsError",
    "VersionManager", "VersionManagerError", "VersionNotInstalledError",
    "SemanticVersion", "VersionError", "InvalidVersionError",
    "version_utils",
]
