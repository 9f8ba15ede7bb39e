"""
数据模型模块。

定义压缩包与安装目录的数据结构。
"""

from dataclasses import dataclass

from godotenv.core.version_utils import SemanticVersion


@dataclass(frozen=True)
class GodotCompressedArchive:
    """
    已下载但尚未解压的 Godot 压缩包。

    属性:
        name: 规范目录名称
        filename: 压缩包文件名
        version: 版本号
        is_dotnet: 是否为 .NET 版本
        path: 缓存目录路径
    """

    name: str
    filename: str
    version: SemanticVersion
    is_dotnet: bool
    path: str


@dataclass(frozen=True)
class GodotInstallation:
    """
    已解压的 Godot 安装。

    is_active_version 不会持久化，每次读取时通过比较 execution_path
    与当前符号链接目标计算得出。

    属性:
        name: 规范目录名称
        version: 版本号
        is_dotnet: 是否为 .NET 版本
        path: 安装目录路径
        execution_path: 可执行文件路径
        is_active_version: 是否为当前激活的版本
    """

    name: str
    version: SemanticVersion
    is_dotnet: bool
    path: str
    execution_path: str
    is_active_version: bool

    @property
    def version_name(self) -> str:
        """用于显示和排序的版本名称。"""
        suffix = " dotnet" if self.is_dotnet else ""
        return f"{self.version}{suffix}"
