"""日志模块

使用示例:
    from blogtree.log import setup_root_logger, get_logger

    setup_root_logger(config=settings.logging)
    logger = get_logger()
"""

from .logger import (
    setup_logger,
    setup_root_logger,
    setup_sql_logger,
    create_formatter,
    MicrosecondFormatter,
    DEFAULT_LOG_FORMAT,
    api_logger,
    get_logger,
)

__all__ = [
    "setup_logger",
    "setup_root_logger",
    "setup_sql_logger",
    "create_formatter",
    "MicrosecondFormatter",
    "DEFAULT_LOG_FORMAT",
    "api_logger",
    "get_logger",
]
