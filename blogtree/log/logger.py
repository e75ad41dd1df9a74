"""
日志配置

标准库 logging 的薄封装：控制台与轮转文件输出、微秒时间戳、
按模块名获取 blogtree 命名空间下的日志器。
"""

import inspect
import logging
import os
from datetime import datetime
from logging.handlers import RotatingFileHandler
from typing import Any, Optional

DEFAULT_LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(filename)s:%(lineno)d - %(message)s"
SQL_LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
DEFAULT_DATEFMT = "%Y-%m-%d %H:%M:%S"

ROOT_NAMESPACE = "blogtree"


class MicrosecondFormatter(logging.Formatter):
    """时间戳精确到微秒，如 2024-05-06 07:08:09.123456"""

    def formatTime(self, record, datefmt=None):
        moment = datetime.fromtimestamp(record.created)
        return f"{moment.strftime(datefmt or DEFAULT_DATEFMT)}.{moment.microsecond:06d}"


def create_formatter(
    log_format: str = None,
    datefmt: str = DEFAULT_DATEFMT,
    use_microseconds: bool = True,
) -> logging.Formatter:
    formatter_cls = MicrosecondFormatter if use_microseconds else logging.Formatter
    return formatter_cls(fmt=log_format or DEFAULT_LOG_FORMAT, datefmt=datefmt)


def _file_handler(log_file: str, max_bytes: int, backup_count: int, encoding: str) -> logging.Handler:
    directory = os.path.dirname(log_file)
    if directory:
        os.makedirs(directory, exist_ok=True)
    if max_bytes > 0:
        return RotatingFileHandler(log_file, maxBytes=max_bytes, backupCount=backup_count, encoding=encoding)
    return logging.FileHandler(log_file, encoding=encoding)


def setup_logger(
    name: str = None,
    level: str = "INFO",
    log_file: str = None,
    log_format: str = None,
    console: bool = True,
    use_microseconds: bool = True,
    propagate: bool = True,
    max_bytes: int = 10 * 1024 * 1024,
    backup_count: int = 5,
    encoding: str = "utf-8",
) -> logging.Logger:
    """配置并返回日志器，已有的处理器会被替换

    Args:
        name: 日志器名称，None 表示根日志器
        log_file: 日志文件路径，不传则不写文件
        max_bytes: 单个文件上限，0 表示不轮转

    使用示例:
        setup_logger("blogtree.orm.tree", level="DEBUG")
        setup_logger("blogtree", log_file="logs/blogtree.log", max_bytes=1024 * 1024)
    """
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    logger.propagate = propagate
    logger.handlers.clear()

    formatter = create_formatter(log_format, use_microseconds=use_microseconds)
    handlers = []
    if console:
        handlers.append(logging.StreamHandler())
    if log_file:
        handlers.append(_file_handler(log_file, max_bytes, backup_count, encoding))
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    return logger


def setup_sql_logger(level: str = "DEBUG", log_file: str = None) -> logging.Logger:
    """SQLAlchemy 语句日志，不写文件时输出到控制台"""
    return setup_logger(
        "sqlalchemy.engine",
        level=level,
        log_file=log_file,
        log_format=SQL_LOG_FORMAT,
        console=not log_file,
        propagate=False,
    )


def setup_root_logger(config: Any = None, config_path: str = None, **overrides) -> logging.Logger:
    """按 LoggingSettings 配置根日志器，子日志器继承其处理器

    Args:
        config: LoggingSettings
        config_path: YAML 配置文件，读取其中的 logging 段
        **overrides: 直接传给 setup_logger 的参数，优先于配置

    使用示例:
        setup_root_logger(config=settings.logging)
        setup_root_logger(config_path="config/settings.yaml")
        setup_root_logger(level="DEBUG")
    """
    from blogtree.config import ConfigLoader, LoggingSettings

    if config is None:
        section = ConfigLoader.load_section(config_path, "logging") if config_path else {}
        config = LoggingSettings(**section)

    if config.sql_log_enabled:
        setup_sql_logger(level=config.sql_log_level)

    options = {
        "level": config.level,
        "log_file": config.file_path or None,
        "console": config.enable_console,
        "max_bytes": config.parsed_file_max_bytes,
        "backup_count": config.file_backup_count,
        "encoding": config.file_encoding,
        "propagate": False,
    }
    options.update(overrides)
    return setup_logger(None, **options)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """获取日志器

    - 不传名称：使用调用方模块的 __name__
    - 不含点号的简写：加 blogtree. 前缀，如 "tree" -> "blogtree.tree"
    - 其他名称原样使用
    """
    if name is None:
        caller = inspect.currentframe().f_back
        name = caller.f_globals.get("__name__", ROOT_NAMESPACE) if caller else ROOT_NAMESPACE
    elif "." not in name and name != ROOT_NAMESPACE:
        name = f"{ROOT_NAMESPACE}.{name}"
    return logging.getLogger(name)


api_logger = get_logger("api")
