"""
核心模块抽象接口定义。

定义配置、环境变量、文件系统、网络、解压、平台以及 Godot 仓库
等核心模块的抽象接口。
"""

import threading
from abc import ABC, abstractmethod
from typing import Any, Callable, List, Optional, Tuple

from godotenv.core.models import GodotCompressedArchive, GodotInstallation
from godotenv.core.version_utils import SemanticVersion

ProgressCallback = Callable[[int], None]
ByteProgressCallback = Callable[[int, int], None]
FractionProgressCallback = Callable[[float], None]


class IConfigManager(ABC):
    """配置管理器抽象接口。"""

    @abstractmethod
    def get_config(self) -> dict[str, Any]:
        """获取配置字典。"""
        pass

    @abstractmethod
    def save_config(self, config: dict[str, Any] | None = None) -> None:
        """保存配置到文件。"""
        pass

    @abstractmethod
    def get_settings(self) -> dict[str, Any]:
        """获取 settings 配置部分。"""
        pass

    @abstractmethod
    def get_installations_path(self) -> str:
        """获取 Godot 安装目录相对路径。"""
        pass

    @abstractmethod
    def get_download_timeout(self) -> int:
        """获取下载超时时间（秒）。"""
        pass

    @abstractmethod
    def get_request_timeout(self) -> int:
        """获取普通请求超时时间（秒）。"""
        pass


class IEnvManager(ABC):
    """环境变量管理器抽象接口。"""

    @abstractmethod
    def get_env_var(self, name: str) -> Optional[str]:
        """获取环境变量值。"""
        pass

    @abstractmethod
    def set_env_var(self, name: str, value: str) -> None:
        """设置环境变量值。"""
        pass


class IFileClient(ABC):
    """文件系统客户端抽象接口。"""

    @property
    @abstractmethod
    def app_data_dir(self) -> str:
        """应用数据目录。"""
        pass

    @abstractmethod
    def create_symlink(self, path: str, target: str) -> None:
        """创建或覆盖符号链接。"""
        pass

    @abstractmethod
    def file_symlink_target(self, path: str) -> Optional[str]:
        """读取符号链接目标，链接不存在返回 None。"""
        pass

    @abstractmethod
    def directory_exists(self, path: str) -> bool:
        """检查目录是否存在。"""
        pass

    @abstractmethod
    def file_exists(self, path: str) -> bool:
        """检查文件是否存在。"""
        pass

    @abstractmethod
    def create_directory(self, path: str) -> None:
        """创建目录（包括父目录）。"""
        pass

    @abstractmethod
    def delete_directory(self, path: str) -> None:
        """递归删除目录。"""
        pass

    @abstractmethod
    def delete_file(self, path: str) -> None:
        """删除文件或符号链接。"""
        pass

    @abstractmethod
    def create_file(self, path: str, contents: str) -> None:
        """写入文本文件。"""
        pass

    @abstractmethod
    def get_subdirectories(self, path: str) -> List[str]:
        """列出直接子目录名称。"""
        pass


class INetworkClient(ABC):
    """网络客户端抽象接口。"""

    @abstractmethod
    def download_file(
        self,
        url: str,
        destination_dir: str,
        filename: str,
        progress_callback: Optional[ByteProgressCallback] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> None:
        """流式下载文件。"""
        pass

    @abstractmethod
    def web_request_get(self, url: str) -> Any:
        """发送 GET 请求并返回响应对象。"""
        pass


class IZipClient(ABC):
    """压缩包解压客户端抽象接口。"""

    @abstractmethod
    def extract_to_directory(
        self,
        archive_path: str,
        destination_dir: str,
        progress_callback: Optional[FractionProgressCallback] = None,
    ) -> None:
        """解压压缩包到目标目录。"""
        pass


class IGodotPlatform(ABC):
    """Godot 平台路径规则抽象接口。"""

    @abstractmethod
    def get_download_url(self, version: SemanticVersion, is_dotnet: bool) -> str:
        """获取指定版本的下载 URL。"""
        pass

    @abstractmethod
    def get_relative_extracted_executable_path(self, version: SemanticVersion, is_dotnet: bool) -> str:
        """获取解压目录内可执行文件的相对路径。"""
        pass

    @abstractmethod
    def get_relative_godot_sharp_path(self, version: SemanticVersion, is_dotnet: bool) -> str:
        """获取解压目录内 GodotSharp 目录的相对路径。"""
        pass

    @abstractmethod
    def create_shortcuts(self, symlink_path: str, installation_path: str) -> None:
        """创建系统快捷方式。"""
        pass

    @abstractmethod
    def get_env_refresh_hint(self) -> Optional[str]:
        """返回使环境变量生效所需的 shell 命令提示。"""
        pass


class IGodotRepository(ABC):
    """Godot 安装仓库抽象接口。"""

    @abstractmethod
    def clear_cache(self) -> None:
        """清空下载缓存并重新创建缓存目录。"""
        pass

    @abstractmethod
    def get_installation(
        self, version: SemanticVersion, is_dotnet: Optional[bool] = None
    ) -> Optional[GodotInstallation]:
        """获取指定版本的安装，未安装返回 None。"""
        pass

    @abstractmethod
    def download_godot(
        self,
        version: SemanticVersion,
        is_dotnet: bool,
        progress_callback: Optional[ProgressCallback] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> GodotCompressedArchive:
        """下载指定版本的压缩包（命中缓存时跳过）。"""
        pass

    @abstractmethod
    def extract_godot_archive(
        self,
        archive: GodotCompressedArchive,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> GodotInstallation:
        """解压压缩包到安装目录。"""
        pass

    @abstractmethod
    def update_godot_symlink(self, installation: GodotInstallation) -> None:
        """将符号链接指向指定安装。"""
        pass

    @abstractmethod
    def add_or_update_godot_env_variable(self) -> None:
        """设置 GODOT 环境变量指向符号链接。"""
        pass

    @abstractmethod
    def get_godot_env_variable(self) -> Optional[str]:
        """获取 GODOT 环境变量值。"""
        pass

    @abstractmethod
    def get_installations_list(self) -> List[GodotInstallation]:
        """获取已安装版本列表。"""
        pass

    @abstractmethod
    def get_remote_versions_list(self) -> List[str]:
        """获取远程可用版本列表。"""
        pass

    @abstractmethod
    def uninstall(self, version: SemanticVersion, is_dotnet: bool) -> bool:
        """卸载指定版本。"""
        pass


class IVersionManager(ABC):
    """版本管理器抽象接口。"""

    @abstractmethod
    def install(
        self,
        version: str,
        is_dotnet: bool,
        progress_callback: Optional[ProgressCallback] = None,
        cancel_event: Optional[threading.Event] = None,
        extract_progress_callback: Optional[ProgressCallback] = None,
    ) -> Tuple[GodotInstallation, bool]:
        """下载、解压并激活指定版本。"""
        pass

    @abstractmethod
    def use(self, version: str, is_dotnet: Optional[bool] = None) -> GodotInstallation:
        """切换到已安装的指定版本。"""
        pass

    @abstractmethod
    def is_active(self, version: str, is_dotnet: bool) -> bool:
        """判断指定版本是否为当前激活的安装。"""
        pass

    @abstractmethod
    def uninstall(self, version: str, is_dotnet: bool) -> bool:
        """卸载指定版本。"""
        pass

    @abstractmethod
    def list_installed(self) -> List[GodotInstallation]:
        """列出已安装版本。"""
        pass

    @abstractmethod
    def list_remote(self) -> List[str]:
        """列出远程可用版本。"""
        pass
