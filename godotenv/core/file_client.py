"""
文件系统客户端模块。

封装安装流程需要的目录、文件和符号链接操作。
"""

import os
import shutil
from pathlib import Path
from typing import List, Optional

from godotenv.utils.app_dir import get_app_dir
from godotenv.utils.logger import get_logger
from godotenv.core.interfaces import IFileClient

logger = get_logger()


class FileClientError(Exception):
    """文件系统操作错误异常。"""
    pass


class SymlinkError(FileClientError):
    """符号链接错误异常。"""
    pass


class FileClient(IFileClient):
    """
    文件系统客户端类。

    实现 IFileClient 抽象接口。
    """

    def __init__(self, app_data_dir: Optional[Path] = None):
        """
        初始化文件系统客户端。

        参数:
            app_data_dir: 应用数据目录，默认为平台约定目录
        """
        self._app_data_dir = str(app_data_dir) if app_data_dir else str(get_app_dir())

    @property
    def app_data_dir(self) -> str:
        return self._app_data_dir

    def create_symlink(self, path: str, target: str) -> None:
        """
        创建或覆盖符号链接。

        参数:
            path: 符号链接路径
            target: 链接目标

        抛出:
            SymlinkError: 创建失败时抛出
        """
        try:
            if os.path.islink(path) or os.path.isfile(path):
                os.unlink(path)
            elif os.path.isdir(path):
                raise SymlinkError(f"符号链接路径已被目录占用: {path}")
            os.makedirs(os.path.dirname(path), exist_ok=True)
            os.symlink(target, path, target_is_directory=os.path.isdir(target))
            logger.debug(f"已创建符号链接 {path} -> {target}")
        except OSError as e:
            error_msg = f"创建符号链接 {path} -> {target} 失败: {e}"
            logger.error(error_msg)
            raise SymlinkError(error_msg) from e

    def file_symlink_target(self, path: str) -> Optional[str]:
        """
        读取符号链接的目标。

        参数:
            path: 符号链接路径

        返回:
            链接目标，路径不存在或不是符号链接时返回 None
        """
        if not os.path.islink(path):
            return None
        return os.readlink(path)

    def directory_exists(self, path: str) -> bool:
        return os.path.isdir(path)

    def file_exists(self, path: str) -> bool:
        return os.path.isfile(path)

    def create_directory(self, path: str) -> None:
        os.makedirs(path, exist_ok=True)

    def delete_directory(self, path: str) -> None:
        """递归删除目录，目录不存在时忽略。"""
        if os.path.isdir(path):
            shutil.rmtree(path)
            logger.debug(f"已删除目录 {path}")

    def delete_file(self, path: str) -> None:
        """删除文件或符号链接，不存在时忽略。"""
        if os.path.islink(path) or os.path.exists(path):
            os.unlink(path)
            logger.debug(f"已删除 {path}")

    def create_file(self, path: str, contents: str) -> None:
        with open(path, "w", encoding="utf-8") as f:
            f.write(contents)

    def get_subdirectories(self, path: str) -> List[str]:
        """
        列出目录下的直接子目录名称。

        参数:
            path: 父目录

        返回:
            子目录名称列表（不跟随符号链接）
        """
        return sorted(
            entry.name for entry in os.scandir(path)
            if entry.is_dir(follow_symlinks=False)
        )
