"""
Godot 安装仓库模块。

负责 Godot 安装的完整生命周期：下载压缩包到缓存、解压到安装目录、
通过符号链接激活版本、枚举和卸载已安装版本。

所有安装信息都从文件系统重建，目录布局如下（位于应用数据目录下）:

    godot/installations/<name>/...      安装目录（子路径可配置）
    godot/cache/<name>/<name>.zip       下载缓存
    godot/cache/<name>/did_finish_download
    godot/bin                           -> 当前版本可执行文件
    godot/GodotSharp                    -> 当前 .NET 版本的 GodotSharp 目录
"""

import os
import threading
from typing import Callable, List, Optional

from godotenv.utils.logger import get_logger
from godotenv.core.interfaces import (
    IConfigManager,
    IEnvManager,
    IFileClient,
    IGodotPlatform,
    IGodotRepository,
    INetworkClient,
    IZipClient,
    ProgressCallback,
)
from godotenv.core.models import GodotCompressedArchive, GodotInstallation
from godotenv.core.version_utils import (
    InvalidVersionError,
    SemanticVersion,
    canonical_name,
    parse_canonical_name,
)

logger = get_logger()

GODOT_PATH = "godot"
GODOT_CACHE_PATH = "cache"
GODOT_BIN_PATH = "bin"
GODOT_SHARP_PATH = "GodotSharp"
GODOT_ENV_VAR_NAME = "GODOT"
DID_FINISH_DOWNLOAD_FILE_NAME = "did_finish_download"
GODOT_REMOTE_VERSIONS_URL = "https://api.nuget.org/v3-flatcontainer/godotsharp/index.json"


class GodotRepositoryError(Exception):
    """Godot 仓库错误异常。"""
    pass


class RemoteVersionsError(GodotRepositoryError):
    """远程版本列表格式错误异常。"""
    pass


def _percent_reporter(
    progress_callback: Optional[ProgressCallback],
    threshold: int = 1,
) -> Callable[[float], None]:
    """
    将 0.0 到 1.0 的完成比例转换为整数百分比回调。

    只有百分比较上次报告至少增加 threshold 时才会调用回调，
    因此报告的值单调不减。

    参数:
        progress_callback: 接收整数百分比的回调，可为 None
        threshold: 最小报告步长

    返回:
        接收完成比例的函数
    """
    last_percent = 0

    def report(fraction: float) -> None:
        nonlocal last_percent
        if progress_callback is None:
            return
        percent = min(100, max(0, int(fraction * 100)))
        if percent - last_percent >= threshold:
            last_percent = percent
            progress_callback(percent)

    return report


class GodotRepository(IGodotRepository):
    """
    Godot 安装仓库类。

    所有外部操作都通过注入的协作对象完成，便于在测试中替换。
    实现 IGodotRepository 抽象接口。
    """

    def __init__(
        self,
        config_manager: IConfigManager,
        file_client: IFileClient,
        network_client: INetworkClient,
        zip_client: IZipClient,
        platform: IGodotPlatform,
        env_manager: IEnvManager,
    ):
        """
        初始化 Godot 仓库。

        参数:
            config_manager: 配置管理器
            file_client: 文件系统客户端
            network_client: 网络客户端
            zip_client: 解压客户端
            platform: 平台路径规则
            env_manager: 环境变量管理器
        """
        self.config_manager = config_manager
        self.file_client = file_client
        self.network_client = network_client
        self.zip_client = zip_client
        self.platform = platform
        self.env_manager = env_manager

    @property
    def godot_root(self) -> str:
        return os.path.join(self.file_client.app_data_dir, GODOT_PATH)

    @property
    def godot_installations_path(self) -> str:
        return os.path.join(self.godot_root, self.config_manager.get_installations_path())

    @property
    def godot_cache_path(self) -> str:
        return os.path.join(self.godot_root, GODOT_CACHE_PATH)

    @property
    def godot_symlink_path(self) -> str:
        return os.path.join(self.godot_root, GODOT_BIN_PATH)

    @property
    def godot_sharp_symlink_path(self) -> str:
        return os.path.join(self.godot_root, GODOT_SHARP_PATH)

    @property
    def godot_symlink_target(self) -> Optional[str]:
        """当前激活符号链接的目标，未激活任何版本时为 None。"""
        return self.file_client.file_symlink_target(self.godot_symlink_path)

    def get_execution_path(self, installation_path: str, version: SemanticVersion, is_dotnet: bool) -> str:
        relative = self.platform.get_relative_extracted_executable_path(version, is_dotnet)
        return os.path.join(installation_path, relative)

    def get_godot_sharp_path(self, installation_path: str, version: SemanticVersion, is_dotnet: bool) -> str:
        relative = self.platform.get_relative_godot_sharp_path(version, is_dotnet)
        return os.path.join(installation_path, relative)

    def clear_cache(self) -> None:
        """清空下载缓存并重新创建空的缓存目录。"""
        if self.file_client.directory_exists(self.godot_cache_path):
            self.file_client.delete_directory(self.godot_cache_path)
        self.file_client.create_directory(self.godot_cache_path)
        logger.info(f"已清空下载缓存 {self.godot_cache_path}")

    def get_installation(
        self, version: SemanticVersion, is_dotnet: Optional[bool] = None
    ) -> Optional[GodotInstallation]:
        """
        获取指定版本的安装。

        参数:
            version: 版本号
            is_dotnet: True 只查找 .NET 版本，False 只查找普通版本，
                None 时两者都查找并优先返回 .NET 版本

        返回:
            GodotInstallation，未安装返回 None
        """
        if is_dotnet is not None:
            return self._read_installation(version, is_dotnet)
        return (
            self._read_installation(version, True)
            or self._read_installation(version, False)
        )

    def download_godot(
        self,
        version: SemanticVersion,
        is_dotnet: bool,
        progress_callback: Optional[ProgressCallback] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> GodotCompressedArchive:
        """
        下载指定版本的压缩包到缓存目录。

        压缩包和完成标记文件同时存在时直接使用缓存，不发起网络请求。
        否则清理残留文件后重新下载，成功后才写入完成标记。

        参数:
            version: 版本号
            is_dotnet: 是否为 .NET 版本
            progress_callback: 下载进度回调，参数为整数百分比
            cancel_event: 取消信号

        返回:
            GodotCompressedArchive 实例

        抛出:
            DownloadError: 下载失败时抛出
            DownloadCancelledError: 下载被取消时抛出
        """
        download_url = self.platform.get_download_url(version, is_dotnet)
        name = canonical_name(version, is_dotnet)
        cache_dir = os.path.join(self.godot_cache_path, name)
        cache_filename = f"{name}.zip"
        archive_path = os.path.join(cache_dir, cache_filename)
        marker_path = os.path.join(cache_dir, DID_FINISH_DOWNLOAD_FILE_NAME)

        archive = GodotCompressedArchive(
            name=name,
            filename=cache_filename,
            version=version,
            is_dotnet=is_dotnet,
            path=cache_dir,
        )

        did_finish_previous = self.file_client.file_exists(marker_path)
        archive_exists = self.file_client.file_exists(archive_path)

        if did_finish_previous and archive_exists:
            logger.info(f"使用已缓存的压缩包 {archive_path}")
            return archive

        if did_finish_previous:
            logger.debug(f"删除残留的完成标记 {marker_path}")
            self.file_client.delete_file(marker_path)
        if archive_exists:
            logger.debug(f"删除未完成的压缩包 {archive_path}")
            self.file_client.delete_file(archive_path)

        self.file_client.create_directory(cache_dir)
        logger.info(f"Godot 下载地址: {download_url}")

        report = _percent_reporter(progress_callback)

        def on_bytes(downloaded: int, total: int) -> None:
            if total > 0:
                report(downloaded / total)

        try:
            self.network_client.download_file(
                download_url,
                cache_dir,
                cache_filename,
                progress_callback=on_bytes,
                cancel_event=cancel_event,
            )
        except Exception:
            logger.error(f"Godot {version} 下载失败，已中止安装")
            raise

        self.file_client.create_file(marker_path, "done")
        logger.info(f"Godot {version} 下载完成")
        return archive

    def extract_godot_archive(
        self,
        archive: GodotCompressedArchive,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> GodotInstallation:
        """
        解压压缩包到安装目录。

        返回的安装总是标记为激活版本，但不会修改符号链接。

        参数:
            archive: 已下载的压缩包
            progress_callback: 解压进度回调，参数为整数百分比

        返回:
            GodotInstallation 实例
        """
        archive_path = os.path.join(archive.path, archive.filename)
        destination = os.path.join(self.godot_installations_path, archive.name)

        self.zip_client.extract_to_directory(
            archive_path,
            destination,
            progress_callback=_percent_reporter(progress_callback),
        )
        logger.info(f"已解压 Godot 到 {destination}")

        return GodotInstallation(
            name=archive.name,
            version=archive.version,
            is_dotnet=archive.is_dotnet,
            path=destination,
            execution_path=self.get_execution_path(destination, archive.version, archive.is_dotnet),
            is_active_version=True,
        )

    def update_godot_symlink(self, installation: GodotInstallation) -> None:
        """
        将激活符号链接指向指定安装，.NET 版本同时更新 GodotSharp 链接。

        可执行文件不存在时只记录错误，链接仍然会被创建。

        参数:
            installation: 要激活的安装
        """
        self.file_client.create_symlink(self.godot_symlink_path, installation.execution_path)
        self.platform.create_shortcuts(self.godot_symlink_path, installation.path)

        if installation.is_dotnet:
            godot_sharp_path = self.get_godot_sharp_path(
                installation.path, installation.version, installation.is_dotnet
            )
            logger.info(f"链接 GodotSharp {self.godot_sharp_symlink_path} -> {godot_sharp_path}")
            self.file_client.create_symlink(self.godot_sharp_symlink_path, godot_sharp_path)

        if not self.file_client.file_exists(installation.execution_path):
            logger.error(f"可执行文件路径不存在，安装可能不完整: {installation.execution_path}")

        logger.info(f"Godot 符号链接已更新 {self.godot_symlink_path} -> {installation.execution_path}")

    def add_or_update_godot_env_variable(self) -> None:
        """
        设置 GODOT 环境变量为符号链接路径。

        抛出:
            EnvManagerError: 持久化失败时抛出
        """
        self.env_manager.set_env_var(GODOT_ENV_VAR_NAME, self.godot_symlink_path)
        logger.info(f"已更新环境变量 {GODOT_ENV_VAR_NAME}={self.godot_symlink_path}")

    def get_godot_env_variable(self) -> Optional[str]:
        return self.env_manager.get_env_var(GODOT_ENV_VAR_NAME)

    def get_installations_list(self) -> List[GodotInstallation]:
        """
        从安装目录重建已安装版本列表。

        无法解析的目录名称只记录警告并跳过，不会被修改或删除。

        返回:
            按 version_name 升序排列的安装列表
        """
        installations_path = self.godot_installations_path
        if not self.file_client.directory_exists(installations_path):
            return []

        symlink_target = self.godot_symlink_target
        installations = []

        for name in self.file_client.get_subdirectories(installations_path):
            try:
                version, is_dotnet = parse_canonical_name(name)
            except InvalidVersionError:
                logger.warning(f"无法识别的安装目录，已跳过: {os.path.join(installations_path, name)}")
                continue

            path = os.path.join(installations_path, name)
            execution_path = self.get_execution_path(path, version, is_dotnet)
            installations.append(GodotInstallation(
                name=name,
                version=version,
                is_dotnet=is_dotnet,
                path=path,
                execution_path=execution_path,
                is_active_version=execution_path == symlink_target,
            ))

        return sorted(installations, key=lambda i: i.version_name)

    def get_remote_versions_list(self) -> List[str]:
        """
        获取远程可用的 Godot 版本列表。

        返回:
            版本字符串列表，顺序与远程目录一致

        抛出:
            requests.HTTPError: HTTP 状态码表示失败时抛出
            RemoteVersionsError: 响应内容格式无效时抛出
        """
        response = self.network_client.web_request_get(GODOT_REMOTE_VERSIONS_URL)
        response.raise_for_status()
        try:
            data = response.json()
        except ValueError as e:
            raise RemoteVersionsError(f"远程版本列表不是有效的 JSON: {e}") from e

        versions = data.get("versions") if isinstance(data, dict) else None
        if not isinstance(versions, list):
            raise RemoteVersionsError("远程版本列表缺少 versions 字段")
        return [str(v) for v in versions]

    def uninstall(self, version: SemanticVersion, is_dotnet: bool) -> bool:
        """
        卸载指定版本。

        卸载当前激活版本时会同时删除激活符号链接，GodotSharp 链接保持不变。

        参数:
            version: 版本号
            is_dotnet: 是否为 .NET 版本

        返回:
            卸载成功返回 True，未安装返回 False
        """
        installation = self.get_installation(version, is_dotnet)
        if installation is None:
            return False

        self.file_client.delete_directory(installation.path)
        logger.info(f"已删除 {installation.path}")

        if installation.is_active_version:
            self.file_client.delete_file(self.godot_symlink_path)
            logger.warning(
                f"已卸载当前激活的 Godot {installation.version_name}，"
                "请使用 use 命令切换到其他已安装的版本"
            )

        return True

    def _read_installation(self, version: SemanticVersion, is_dotnet: bool) -> Optional[GodotInstallation]:
        name = canonical_name(version, is_dotnet)
        path = os.path.join(self.godot_installations_path, name)
        if not self.file_client.directory_exists(path):
            return None

        execution_path = self.get_execution_path(path, version, is_dotnet)
        return GodotInstallation(
            name=name,
            version=version,
            is_dotnet=is_dotnet,
            path=path,
            execution_path=execution_path,
            is_active_version=execution_path == self.godot_symlink_target,
        )
