"""
GodotEnv 命令行接口模块。
"""

import argparse
import json
import logging
import sys
import threading
from typing import Callable, Tuple

import requests

from godotenv import __version__
from godotenv.core.config_manager import ConfigManager, ConfigValidationError, ConfigSaveError
from godotenv.core.env_manager import EnvManager, EnvManagerError
from godotenv.core.file_client import FileClientError
from godotenv.core.godot_repository import GodotRepositoryError
from godotenv.core.network_client import NetworkClientError, DownloadCancelledError
from godotenv.core.version_manager import VersionManager, VersionNotInstalledError
from godotenv.core.version_utils import VersionError
from godotenv.core.zip_client import ExtractionError
from godotenv.utils.input_validator import InputValidationError
from godotenv.utils.logger import get_logger, setup_logger
from godotenv.utils.permission_manager import is_admin

logger = get_logger()

# 等待后台安装线程时的轮询间隔，保证 Ctrl+C 能及时响应
JOIN_POLL_INTERVAL = 0.2


def create_parser() -> argparse.ArgumentParser:
    """
    创建并配置命令行参数解析器。

    返回:
        配置好的 ArgumentParser 实例
    """
    parser = argparse.ArgumentParser(
        prog="godotenv",
        description="GodotEnv - Godot 引擎版本管理器",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
示例:
  godotenv install 4.2.1           安装 Godot 4.2.1
  godotenv install 4.3.0-rc.1 --dotnet
                                   安装 Godot 4.3 RC1 的 .NET 版本
  godotenv use 4.2.1               切换到 Godot 4.2.1
  godotenv list                    列出已安装版本
  godotenv list --remote           列出远程可用版本
  godotenv cache clear             清空下载缓存
  godotenv env path                显示 GODOT 环境变量应指向的路径
        """,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="启用详细输出",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        title="命令",
        description="可用的 CLI 命令",
    )

    install_parser = subparsers.add_parser(
        "install",
        help="下载、安装并激活指定版本",
    )
    install_parser.add_argument(
        "version",
        help="要安装的版本，例如 4.2.1 或 4.3.0-rc.1",
    )
    install_parser.add_argument(
        "--dotnet",
        action="store_true",
        help="安装支持 C# 的 .NET 版本",
    )

    use_parser = subparsers.add_parser(
        "use",
        help="切换到已安装的指定版本",
    )
    use_parser.add_argument(
        "version",
        help="要切换到的版本",
    )
    flavor_group = use_parser.add_mutually_exclusive_group()
    flavor_group.add_argument(
        "--dotnet",
        dest="dotnet",
        action="store_true",
        default=None,
        help="只使用 .NET 版本",
    )
    flavor_group.add_argument(
        "--no-dotnet",
        dest="dotnet",
        action="store_false",
        help="只使用普通版本",
    )

    uninstall_parser = subparsers.add_parser(
        "uninstall",
        help="卸载指定版本",
    )
    uninstall_parser.add_argument(
        "version",
        help="要卸载的版本",
    )
    uninstall_parser.add_argument(
        "--dotnet",
        action="store_true",
        help="卸载 .NET 版本",
    )

    list_parser = subparsers.add_parser(
        "list",
        help="列出已安装版本",
    )
    list_parser.add_argument(
        "--remote",
        "-r",
        action="store_true",
        help="显示远程可用版本",
    )

    cache_parser = subparsers.add_parser(
        "cache",
        help="管理下载缓存",
    )
    cache_parser.add_argument(
        "action",
        choices=["clear"],
        help="clear: 清空下载缓存",
    )

    env_parser = subparsers.add_parser(
        "env",
        help="管理 GODOT 环境变量",
    )
    env_parser.add_argument(
        "action",
        choices=["get", "path", "set"],
        help="get: 显示当前值；path: 显示应指向的符号链接路径；set: 设置为符号链接路径",
    )

    config_parser = subparsers.add_parser(
        "config",
        help="显示或编辑配置",
    )
    config_parser.add_argument(
        "--set",
        "-s",
        type=str,
        help="设置配置值（格式：key=value）",
    )

    return parser


def run_cli(args: argparse.Namespace) -> int:
    """
    运行命令行接口。

    参数:
        args: 解析后的命令行参数

    返回:
        退出码（0 表示成功）
    """
    setup_logger(
        level=logging.DEBUG if args.verbose else logging.INFO,
        log_to_console=args.verbose,
    )

    if sys.platform == "win32" and not is_admin():
        print("警告：当前未以管理员权限运行。")
        print("创建符号链接需要管理员权限或开启开发者模式。")

    if args.command is None:
        print("未指定命令。使用 --help 查看帮助信息。")
        return 1

    command_handlers = {
        "install": handle_install,
        "use": handle_use,
        "uninstall": handle_uninstall,
        "list": handle_list,
        "cache": handle_cache,
        "env": handle_env,
        "config": handle_config,
    }

    handler = command_handlers.get(args.command)
    if not handler:
        print(f"未知命令: {args.command}")
        return 1

    try:
        return handler(args)
    except (InputValidationError, VersionError) as e:
        print(f"错误: {e}")
        return 2
    except VersionNotInstalledError as e:
        print(f"错误: {e}")
        print("使用 godotenv install 安装该版本。")
        return 1
    except DownloadCancelledError:
        print("\n已取消。")
        return 130
    except (
        NetworkClientError,
        ExtractionError,
        FileClientError,
        EnvManagerError,
        GodotRepositoryError,
        ConfigSaveError,
        requests.exceptions.RequestException,
    ) as e:
        logger.exception(f"命令 {args.command} 执行失败")
        print(f"\n错误: {e}")
        return 1


def _get_managers() -> Tuple[ConfigManager, VersionManager]:
    """
    获取管理器实例。

    返回:
        包含 ConfigManager、VersionManager 的元组
    """
    config_manager = ConfigManager()
    env_manager = EnvManager()
    version_manager = VersionManager(config_manager, env_manager)
    return config_manager, version_manager


def _make_progress_printer(label: str) -> Callable[[int], None]:
    """创建在同一行刷新的进度条打印函数，到达 100% 时换行。"""

    def progress(percent: int) -> None:
        bar_len = 40
        filled = int(bar_len * percent / 100)
        bar = "=" * filled + "-" * (bar_len - filled)
        end = "\n" if percent >= 100 else ""
        print(f"\r{label} [{bar}] {percent}%", end=end, flush=True)

    return progress


def _print_env_hint(version_manager: VersionManager) -> None:
    hint = version_manager.repository.platform.get_env_refresh_hint()
    if hint:
        print(f"请运行 `{hint}` 或重新打开终端使环境变量生效。")
    else:
        print("注意：可能需要重启终端才能使更改生效。")


def handle_install(args: argparse.Namespace) -> int:
    """
    处理 install 命令：下载、解压并激活指定版本。

    安装在后台线程中运行，按 Ctrl+C 会通知下载在下一个数据块处停止。

    参数:
        args: 解析后的命令行参数

    返回:
        退出码
    """
    _, version_manager = _get_managers()
    flavor = " (.NET)" if args.dotnet else ""
    print(f"正在安装 Godot {args.version}{flavor}...")

    cancel_event = threading.Event()
    outcome = {}

    def worker() -> None:
        try:
            outcome["result"] = version_manager.install(
                args.version,
                args.dotnet,
                progress_callback=_make_progress_printer("下载"),
                cancel_event=cancel_event,
                extract_progress_callback=_make_progress_printer("解压"),
            )
        except Exception as e:
            outcome["error"] = e

    thread = threading.Thread(target=worker, name="godotenv-install", daemon=True)
    thread.start()
    try:
        while thread.is_alive():
            thread.join(JOIN_POLL_INTERVAL)
    except KeyboardInterrupt:
        cancel_event.set()
        thread.join()

    if "error" in outcome:
        raise outcome["error"]

    installation, newly_installed = outcome["result"]
    if not newly_installed:
        print(f"Godot {installation.version_name} 已安装: {installation.path}")
        print(f"使用 godotenv use {installation.version} 切换到该版本。")
        return 0

    print(f"成功安装 Godot {installation.version_name}")
    print(f"符号链接: {version_manager.get_env_path()} -> {installation.execution_path}")
    _print_env_hint(version_manager)
    return 0


def handle_use(args: argparse.Namespace) -> int:
    """
    处理 use 命令：切换到已安装的指定版本。

    参数:
        args: 解析后的命令行参数

    返回:
        退出码
    """
    _, version_manager = _get_managers()
    installation = version_manager.use(args.version, args.dotnet)
    print(f"成功切换到 Godot {installation.version_name}")
    _print_env_hint(version_manager)
    return 0


def handle_uninstall(args: argparse.Namespace) -> int:
    """
    处理 uninstall 命令：卸载指定版本。

    参数:
        args: 解析后的命令行参数

    返回:
        退出码
    """
    _, version_manager = _get_managers()
    flavor = " (.NET)" if args.dotnet else ""
    was_active = version_manager.is_active(args.version, args.dotnet)

    if not version_manager.uninstall(args.version, args.dotnet):
        print(f"Godot {args.version}{flavor} 未安装")
        return 1

    print(f"成功卸载 Godot {args.version}{flavor}")
    if was_active:
        print("已卸载当前激活的版本，请使用 godotenv use 切换到其他已安装的版本。")
    return 0


def handle_list(args: argparse.Namespace) -> int:
    """
    处理 list 命令：列出已安装或远程可用的版本。

    参数:
        args: 解析后的命令行参数

    返回:
        退出码
    """
    _, version_manager = _get_managers()

    if args.remote:
        print("正在获取远程版本...")
        versions = version_manager.list_remote()
        if not versions:
            print("未找到远程版本")
            return 0
        print("Godot 可用版本:")
        for v in versions:
            print(f"  {v}")
        return 0

    installations = version_manager.list_installed()
    if not installations:
        print("未找到已安装的 Godot 版本")
        return 0

    print("Godot 已安装版本:")
    for installation in installations:
        marker = " *" if installation.is_active_version else "  "
        print(f"{marker} {installation.version_name}")
        if args.verbose:
            print(f"     路径: {installation.path}")
    return 0


def handle_cache(args: argparse.Namespace) -> int:
    """
    处理 cache 命令：清空下载缓存。

    参数:
        args: 解析后的命令行参数

    返回:
        退出码
    """
    _, version_manager = _get_managers()
    if args.action == "clear":
        version_manager.clear_cache()
        print("已清空下载缓存")
    return 0


def handle_env(args: argparse.Namespace) -> int:
    """
    处理 env 命令：显示或设置 GODOT 环境变量。

    参数:
        args: 解析后的命令行参数

    返回:
        退出码
    """
    _, version_manager = _get_managers()

    if args.action == "get":
        value = version_manager.get_env()
        print(value or "未设置")
    elif args.action == "path":
        print(version_manager.get_env_path())
    else:
        value = version_manager.set_env()
        print(f"已设置 GODOT={value}")
        _print_env_hint(version_manager)
    return 0


def handle_config(args: argparse.Namespace) -> int:
    """
    处理 config 命令：显示或编辑配置。

    参数:
        args: 解析后的命令行参数

    返回:
        退出码
    """
    config_manager = ConfigManager()

    if args.set:
        key, _, value = args.set.partition("=")
        if not key or not value:
            print("格式无效。请使用: key=value")
            return 1

        try:
            value = json.loads(value)
        except json.JSONDecodeError:
            pass

        try:
            config_manager.set_value(key, value)
        except ConfigValidationError as e:
            print(f"配置无效: {e}")
            return 1
        print(f"已设置 {key} = {value}")
    else:
        print(json.dumps(config_manager.get_config(), indent=2, ensure_ascii=False))

    return 0
