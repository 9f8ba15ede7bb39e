"""
版本管理器模块。

提供 Godot 版本的安装、切换、卸载和列表功能。
"""

import threading
from typing import List, Optional, Tuple

from godotenv.utils.logger import get_logger
from godotenv.core.config_manager import ConfigManager
from godotenv.core.env_manager import EnvManager
from godotenv.core.file_client import FileClient
from godotenv.core.godot_repository import GodotRepository
from godotenv.core.interfaces import IVersionManager, ProgressCallback
from godotenv.core.models import GodotInstallation
from godotenv.core.network_client import NetworkClient
from godotenv.core.platform import get_platform
from godotenv.core.version_utils import SemanticVersion, sort_versions_desc
from godotenv.core.zip_client import ZipClient
from godotenv.utils.input_validator import InputValidator

logger = get_logger()


class VersionManagerError(Exception):
    """版本管理错误异常。"""
    pass


class VersionNotInstalledError(VersionManagerError):
    """版本未安装错误异常。"""
    pass


class VersionManager(IVersionManager):
    """
    版本管理器类。

    本类作为协调者，按 下载 -> 解压 -> 激活 的顺序调用 Godot 仓库。
    实现 IVersionManager 抽象接口。
    """

    def __init__(
        self,
        config_manager: ConfigManager,
        env_manager: EnvManager,
        repository: Optional[GodotRepository] = None,
    ):
        """
        初始化版本管理器。

        参数:
            config_manager: 配置管理器实例
            env_manager: 环境变量管理器实例
            repository: 可选的 Godot 仓库，默认使用真实的文件系统和网络客户端
        """
        self.config_manager = config_manager
        self.env_manager = env_manager

        if repository is None:
            repository = GodotRepository(
                config_manager=config_manager,
                file_client=FileClient(config_manager.config_dir),
                network_client=NetworkClient(
                    download_timeout=config_manager.get_download_timeout(),
                    request_timeout=config_manager.get_request_timeout(),
                ),
                zip_client=ZipClient(),
                platform=get_platform(),
                env_manager=env_manager,
            )
        self.repository = repository

    @staticmethod
    def _parse_version(version: str) -> SemanticVersion:
        InputValidator.validate_version_string(version)
        return SemanticVersion.parse(version.strip())

    def install(
        self,
        version: str,
        is_dotnet: bool,
        progress_callback: Optional[ProgressCallback] = None,
        cancel_event: Optional[threading.Event] = None,
        extract_progress_callback: Optional[ProgressCallback] = None,
    ) -> Tuple[GodotInstallation, bool]:
        """
        下载、解压并激活指定版本。

        参数:
            version: 版本字符串，格式为 MAJOR.MINOR.PATCH[-label]
            is_dotnet: 是否安装 .NET 版本
            progress_callback: 下载进度回调，参数为整数百分比
            cancel_event: 下载取消信号
            extract_progress_callback: 解压进度回调，为 None 时沿用 progress_callback

        返回:
            (安装, 是否新安装) 元组，已安装时直接返回现有安装且不做任何修改

        抛出:
            InputValidationError: 版本字符串格式无效时抛出
            DownloadError: 下载失败时抛出
            DownloadCancelledError: 下载被取消时抛出
            ExtractionError: 解压失败时抛出
        """
        semantic_version = self._parse_version(version)

        existing = self.repository.get_installation(semantic_version, is_dotnet)
        if existing is not None:
            logger.info(f"Godot {existing.version_name} 已安装: {existing.path}")
            return existing, False

        archive = self.repository.download_godot(
            semantic_version, is_dotnet, progress_callback, cancel_event
        )
        installation = self.repository.extract_godot_archive(
            archive, extract_progress_callback or progress_callback
        )
        self.repository.update_godot_symlink(installation)
        self.repository.add_or_update_godot_env_variable()

        logger.info(f"成功安装 Godot {installation.version_name}")
        return installation, True

    def use(self, version: str, is_dotnet: Optional[bool] = None) -> GodotInstallation:
        """
        切换到已安装的指定版本。

        参数:
            version: 版本字符串
            is_dotnet: 指定版本类型，None 时优先选择 .NET 版本

        返回:
            被激活的安装

        抛出:
            VersionNotInstalledError: 指定版本未安装时抛出
        """
        semantic_version = self._parse_version(version)
        installation = self.repository.get_installation(semantic_version, is_dotnet)
        if installation is None:
            flavor = {True: " dotnet", False: ""}.get(is_dotnet, "")
            raise VersionNotInstalledError(f"Godot {semantic_version}{flavor} 未安装")

        self.repository.update_godot_symlink(installation)
        self.repository.add_or_update_godot_env_variable()
        logger.info(f"已切换到 Godot {installation.version_name}")
        return installation

    def is_active(self, version: str, is_dotnet: bool) -> bool:
        """判断指定版本是否为当前激活的安装。"""
        installation = self.repository.get_installation(self._parse_version(version), is_dotnet)
        return installation is not None and installation.is_active_version

    def uninstall(self, version: str, is_dotnet: bool) -> bool:
        """
        卸载指定版本。

        参数:
            version: 版本字符串
            is_dotnet: 是否为 .NET 版本

        返回:
            卸载成功返回 True，未安装返回 False
        """
        return self.repository.uninstall(self._parse_version(version), is_dotnet)

    def list_installed(self) -> List[GodotInstallation]:
        return self.repository.get_installations_list()

    def list_remote(self) -> List[str]:
        """获取远程可用版本，按版本号降序排列。"""
        return sort_versions_desc(self.repository.get_remote_versions_list())

    def clear_cache(self) -> None:
        self.repository.clear_cache()

    def get_env(self) -> Optional[str]:
        """获取 GODOT 环境变量当前值。"""
        return self.repository.get_godot_env_variable()

    def get_env_path(self) -> str:
        """获取 GODOT 环境变量应指向的符号链接路径。"""
        return self.repository.godot_symlink_path

    def set_env(self) -> str:
        """
        将 GODOT 环境变量设置为符号链接路径。

        返回:
            设置的值
        """
        self.repository.add_or_update_godot_env_variable()
        return self.repository.godot_symlink_path
