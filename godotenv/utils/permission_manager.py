import ctypes
import os
import sys


def is_admin() -> bool:
    """
    检测当前进程是否具有管理员权限。

    Windows 上创建符号链接需要管理员权限或开发者模式。

    Returns:
        bool: 如果具有管理员（或 root）权限返回 True，否则返回 False
    """
    if sys.platform != "win32":
        return hasattr(os, "geteuid") and os.geteuid() == 0
    try:
        return bool(ctypes.windll.shell32.IsUserAnAdmin())
    except (AttributeError, OSError):
        return False
