"""
日志模块。

提供应用程序日志的配置和管理功能。
"""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from godotenv.utils.app_dir import get_app_dir

_logger: Optional[logging.Logger] = None

LOGGER_NAME = "GodotEnv"
LOG_FILE_NAME = "godotenv.log"
LOG_FORMAT = "%(asctime)s - %(levelname)s - %(module)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
MAX_BYTES = 5 * 1024 * 1024
BACKUP_COUNT = 5


def get_log_dir() -> Path:
    """获取默认日志目录。"""
    return get_app_dir() / "logs"


def setup_logger(
    level: int = logging.INFO,
    log_to_file: bool = True,
    log_to_console: bool = True,
    log_dir: Optional[Path] = None,
    max_bytes: int = MAX_BYTES,
    backup_count: int = BACKUP_COUNT,
) -> logging.Logger:
    """
    配置并初始化日志记录器。

    重复调用时会重新配置处理器，因此可以在命令行解析后
    根据 --verbose 调整日志级别。

    参数:
        level: 日志级别，默认为 INFO
        log_to_file: 是否输出到文件，默认为 True
        log_to_console: 是否输出到控制台，默认为 True
        log_dir: 日志文件目录，默认为应用数据目录下的 logs 目录
        max_bytes: 单个日志文件最大字节数，默认为 5MB
        backup_count: 保留的备份文件数量，默认为 5

    返回:
        配置好的 Logger 实例
    """
    global _logger

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    file_error: Optional[OSError] = None

    if log_to_file:
        target_dir = log_dir or get_log_dir()
        try:
            target_dir.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                target_dir / LOG_FILE_NAME,
                maxBytes=max_bytes,
                backupCount=backup_count,
                encoding="utf-8",
            )
            file_handler.setLevel(level)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)
        except OSError as e:
            file_error = e

    if log_to_console:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    if file_error is not None:
        # 日志目录不可写时只保留控制台输出
        logger.warning(f"无法创建日志文件: {file_error}")

    _logger = logger
    return logger


def get_logger() -> logging.Logger:
    """
    获取日志记录器实例。

    如果尚未初始化，则返回未配置处理器的 GodotEnv 记录器，
    由入口点调用 setup_logger 完成配置。

    返回:
        Logger 实例
    """
    if _logger is None:
        return logging.getLogger(LOGGER_NAME)
    return _logger


def set_log_level(level: int) -> None:
    """
    设置日志级别。

    参数:
        level: 日志级别（如 logging.DEBUG、logging.INFO 等）
    """
    logger = get_logger()
    logger.setLevel(level)
    for handler in logger.handlers:
        handler.setLevel(level)
