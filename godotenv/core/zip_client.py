"""
解压模块。

提供带进度回调的 zip 解压功能，防止路径遍历并保留 Unix 权限位。
"""

import os
import shutil
import stat
import sys
import tempfile
import zipfile
from typing import Optional

from godotenv.utils.logger import get_logger
from godotenv.core.interfaces import IZipClient, FractionProgressCallback
from godotenv.utils.input_validator import InputValidator, InputValidationError

logger = get_logger()


class ExtractionError(Exception):
    """解压错误异常。"""
    pass


class ZipClient(IZipClient):
    """
    解压客户端类。

    先解压到目标目录旁的临时目录，完成后再移动到目标位置，
    因此中途失败不会留下解压了一半的安装目录。
    实现 IZipClient 抽象接口。
    """

    def extract_to_directory(
        self,
        archive_path: str,
        destination_dir: str,
        progress_callback: Optional[FractionProgressCallback] = None,
    ) -> None:
        """
        解压压缩包到目标目录。

        参数:
            archive_path: 压缩包路径
            destination_dir: 目标目录，已存在时会被替换
            progress_callback: 进度回调函数，参数为 0.0 到 1.0 的完成比例

        抛出:
            ExtractionError: 压缩包损坏或包含非法路径时抛出
        """
        parent_dir = os.path.dirname(os.path.abspath(destination_dir))
        os.makedirs(parent_dir, exist_ok=True)
        temp_extract = tempfile.mkdtemp(prefix=".extract-", dir=parent_dir)

        try:
            with zipfile.ZipFile(archive_path, "r") as zf:
                members = zf.infolist()
                total = len(members)

                for index, member in enumerate(members, start=1):
                    self._extract_member(zf, member, temp_extract)
                    if progress_callback:
                        progress_callback(index / total)

            if total == 0 and progress_callback:
                progress_callback(1.0)

            if os.path.exists(destination_dir):
                logger.warning(f"目标目录已存在，将被替换: {destination_dir}")
                shutil.rmtree(destination_dir)
            shutil.move(temp_extract, destination_dir)
            logger.info(f"已解压 {archive_path} 到 {destination_dir}")
        except zipfile.BadZipFile as e:
            error_msg = f"压缩包损坏: {archive_path}: {e}"
            logger.error(error_msg)
            raise ExtractionError(error_msg) from e
        finally:
            shutil.rmtree(temp_extract, ignore_errors=True)

    def _extract_member(self, zf: zipfile.ZipFile, member: zipfile.ZipInfo, base_dir: str) -> None:
        """
        解压单个条目。

        参数:
            zf: 已打开的压缩包
            member: 压缩包条目
            base_dir: 解压根目录
        """
        try:
            target = InputValidator.safe_join_path(base_dir, member.filename)
        except InputValidationError as e:
            raise ExtractionError(f"压缩包包含非法路径: {member.filename}") from e

        if member.is_dir():
            os.makedirs(target, exist_ok=True)
            return

        os.makedirs(os.path.dirname(target), exist_ok=True)
        unix_mode = member.external_attr >> 16

        if stat.S_ISLNK(unix_mode) and sys.platform != "win32":
            self._extract_symlink(zf, member, target, base_dir)
            return

        with zf.open(member) as source, open(target, "wb") as dest:
            shutil.copyfileobj(source, dest)

        mode = unix_mode & 0o777
        if mode and sys.platform != "win32":
            os.chmod(target, mode | stat.S_IRUSR)

    def _extract_symlink(
        self, zf: zipfile.ZipFile, member: zipfile.ZipInfo, target: str, base_dir: str
    ) -> None:
        """还原压缩包中的符号链接（macOS .app 包中常见），拒绝指向解压目录外的链接。"""
        link_target = zf.read(member).decode("utf-8")
        if os.path.isabs(link_target):
            raise ExtractionError(f"压缩包包含绝对路径符号链接: {member.filename} -> {link_target}")
        try:
            InputValidator.safe_join_path(base_dir, os.path.dirname(member.filename), link_target)
        except InputValidationError as e:
            raise ExtractionError(
                f"压缩包包含指向解压目录外的符号链接: {member.filename} -> {link_target}"
            ) from e
        if os.path.lexists(target):
            os.unlink(target)
        os.symlink(link_target, target)
