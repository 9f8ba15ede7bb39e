"""
输入验证模块。

提供用户输入的验证和 sanitization 功能。
"""

import os
import re

from godotenv.utils.logger import get_logger

logger = get_logger()


class InputValidationError(Exception):
    """输入验证错误异常。"""
    pass


class InputValidator:
    """
    输入验证器类。

    提供版本字符串、配置路径和文件名的验证与 sanitization 功能。
    """

    VERSION_PATTERN = re.compile(r'^\d+\.\d+\.\d+(?:-[0-9A-Za-z][0-9A-Za-z\-_]*(?:\.[0-9A-Za-z\-_]+)*)?$')
    INVALID_FILENAME_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')
    MAX_PATH_LENGTH = 1024
    MAX_VERSION_LENGTH = 100

    @classmethod
    def validate_version_string(cls, version: str) -> bool:
        """
        验证版本字符串的有效性。

        参数:
            version: 版本字符串，格式为 MAJOR.MINOR.PATCH[-label]

        返回:
            验证通过返回 True，否则抛出 InputValidationError
        """
        if not version or not version.strip():
            raise InputValidationError("版本号不能为空")

        version = version.strip()

        if len(version) > cls.MAX_VERSION_LENGTH:
            raise InputValidationError(f"版本号不能超过 {cls.MAX_VERSION_LENGTH} 个字符")

        if not cls.VERSION_PATTERN.match(version):
            raise InputValidationError(
                f"版本号格式无效: {version}（应为 MAJOR.MINOR.PATCH[-label]，例如 4.2.1 或 4.3.0-rc.1）"
            )

        return True

    @classmethod
    def validate_path(cls, path: str) -> bool:
        """
        验证配置中的相对路径。

        参数:
            path: 路径字符串

        返回:
            验证通过返回 True，否则抛出 InputValidationError
        """
        if not path or not path.strip():
            raise InputValidationError("路径不能为空")

        if len(path) > cls.MAX_PATH_LENGTH:
            raise InputValidationError(f"路径不能超过 {cls.MAX_PATH_LENGTH} 个字符")

        if os.path.isabs(path):
            raise InputValidationError(f"路径必须是相对路径: {path}")

        parts = re.split(r"[\\/]", path)
        if ".." in parts:
            raise InputValidationError("路径不能包含 ..")

        return True

    @classmethod
    def safe_join_path(cls, base_path: str, *paths: str) -> str:
        """
        安全连接路径，防止路径遍历。

        参数:
            base_path: 基础路径
            *paths: 要连接的路径部分

        返回:
            安全连接后的路径

        抛出:
            InputValidationError: 如果结果路径位于 base_path 外部
        """
        base = os.path.abspath(base_path)
        joined = os.path.abspath(os.path.join(base, *paths))
        if not joined.startswith(base + os.sep):
            raise InputValidationError(f"路径遍历检测: {joined}")
        return joined

    @classmethod
    def sanitize_filename(cls, name: str) -> str:
        """
        移除文件名中不允许出现的字符。

        参数:
            name: 原始名称

        返回:
            sanitized 后的名称
        """
        if not name:
            return ""
        sanitized = cls.INVALID_FILENAME_CHARS.sub("", name)
        if sanitized != name:
            logger.debug(f"文件名已清理: {name!r} -> {sanitized!r}")
        return sanitized
