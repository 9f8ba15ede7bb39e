"""
版本工具模块。

提供语义化版本号的解析与格式化、安装目录名称的编码与解码，
以及版本排序等工具函数。

安装目录名称是版本与 .NET 标记的唯一序列化形式：已安装版本列表
完全通过解析目录名称重建，不依赖额外的元数据文件。
"""

import re
from dataclasses import dataclass
from typing import List, Tuple

from godotenv.utils.input_validator import InputValidator


class VersionError(Exception):
    """版本错误异常。"""
    pass


class InvalidVersionError(VersionError):
    """版本格式无效错误异常。"""
    pass


SEMANTIC_VERSION_PATTERN = re.compile(
    r"^(?P<major>\d+)\.(?P<minor>\d+)\.(?P<patch>\d+)(?:-(?P<label>[0-9A-Za-z][0-9A-Za-z\-_]*(?:\.[0-9A-Za-z\-_]+)*))?$"
)

# 目录名称 -> 版本。标签组接受 word_digits（如 rc_1）以及任何不含下划线的标签。
DIRECTORY_TO_VERSION_PATTERN = re.compile(
    r"^godot_(?:dotnet_)?(?P<major>\d+)_(?P<minor>\d+)_(?P<patch>\d+)(?:_(?P<label>[0-9A-Za-z][0-9A-Za-z_\-]*))?$",
    re.IGNORECASE,
)

DOTNET_MARKER = "dotnet"


@dataclass(frozen=True)
class SemanticVersion:
    """
    语义化版本号。

    属性:
        major: 主版本号
        minor: 次版本号
        patch: 修订号
        label: 预发布标签（如 rc.1），无标签时为空字符串
    """

    major: int
    minor: int
    patch: int
    label: str = ""

    @classmethod
    def parse(cls, version: str) -> "SemanticVersion":
        """
        解析 MAJOR.MINOR.PATCH[-label] 格式的版本字符串。

        参数:
            version: 版本字符串

        返回:
            SemanticVersion 实例

        抛出:
            InvalidVersionError: 版本字符串格式无效时抛出
        """
        match = SEMANTIC_VERSION_PATTERN.match(version.strip()) if version else None
        if not match:
            raise InvalidVersionError(f"无效的版本号: {version!r}")
        return cls(
            major=int(match.group("major")),
            minor=int(match.group("minor")),
            patch=int(match.group("patch")),
            label=match.group("label") or "",
        )

    @property
    def version_string(self) -> str:
        """返回规范格式的版本字符串。"""
        base = f"{self.major}.{self.minor}.{self.patch}"
        return f"{base}-{self.label}" if self.label else base

    def sort_key(self) -> Tuple[int, int, int, int, str]:
        """返回用于数值排序的键，正式版排在同号预发布版之后。"""
        return (self.major, self.minor, self.patch, 0 if self.label else 1, self.label)

    def __str__(self) -> str:
        return self.version_string


def sanitize_label(version: SemanticVersion) -> str:
    """
    生成可用于文件系统的标签。

    参数:
        version: 版本号

    返回:
        清理非法字符并将 "." 替换为 "_" 后的标签
    """
    return InputValidator.sanitize_filename(version.label).replace(".", "_")


def canonical_name(version: SemanticVersion, is_dotnet: bool) -> str:
    """
    计算版本对应的安装目录名称。

    格式为 godot_[dotnet_]MAJOR_MINOR_PATCH_LABEL，首尾的下划线会被去除。

    参数:
        version: 版本号
        is_dotnet: 是否为 .NET 版本

    返回:
        目录名称，例如 godot_dotnet_4_3_0_rc_1
    """
    prefix = "godot_dotnet_" if is_dotnet else "godot_"
    name = (
        f"{prefix}{version.major}_{version.minor}_{version.patch}_"
        f"{sanitize_label(version)}"
    )
    return name.strip("_")


def parse_canonical_name(name: str) -> Tuple[SemanticVersion, bool]:
    """
    将安装目录名称解析回版本号和 .NET 标记。

    标签中的 "_" 会被还原为 "."，因此本身包含下划线的标签无法无损还原。
    .NET 标记通过名称中是否包含 "dotnet" 判断。

    参数:
        name: 目录名称

    返回:
        (版本号, 是否为 .NET 版本) 元组

    抛出:
        InvalidVersionError: 名称不符合目录命名规则时抛出
    """
    match = DIRECTORY_TO_VERSION_PATTERN.match(name)
    if not match:
        raise InvalidVersionError(f"无法从目录名称解析版本: {name!r}")

    label = match.group("label") or ""
    version = SemanticVersion(
        major=int(match.group("major")),
        minor=int(match.group("minor")),
        patch=int(match.group("patch")),
        label=label.replace("_", "."),
    )
    is_dotnet = DOTNET_MARKER in name.lower()
    return version, is_dotnet


def godot_version_string(version: SemanticVersion) -> str:
    """
    生成 Godot 发布页面使用的版本字符串。

    修订号为 0 时省略，标签中的 "." 被移除，无标签时使用 stable。
    例如 4.2.1 -> 4.2.1-stable，4.3.0-rc.1 -> 4.3-rc1。

    参数:
        version: 版本号

    返回:
        Godot 版本字符串
    """
    base = f"{version.major}.{version.minor}"
    if version.patch:
        base += f".{version.patch}"
    label = version.label.replace(".", "") if version.label else "stable"
    return f"{base}-{label}"


def _parse_version(version_str: str) -> tuple:
    """
    解析版本字符串为可比较的元组。

    参数:
        version_str: 版本字符串

    返回:
        版本元组 (major, minor, patch, ...)
    """
    parts = re.findall(r'\d+', version_str)
    return tuple(int(p) for p in parts) if parts else (0,)


def _version_sort_key(version_str: str) -> tuple:
    """无法按语义化版本解析的字符串排在最后，彼此之间按数字部分比较。"""
    try:
        return (1, SemanticVersion.parse(version_str).sort_key())
    except InvalidVersionError:
        return (0, _parse_version(version_str))


def sort_versions_desc(versions: List[str]) -> List[str]:
    """
    按版本号降序排列版本字符串列表。

    参数:
        versions: 版本字符串列表

    返回:
        排序后的版本列表
    """
    return sorted(versions, key=_version_sort_key, reverse=True)
