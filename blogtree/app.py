"""应用入口

使用示例:
    uvicorn "blogtree.app:create_app" --factory

    # 或在代码中
    from blogtree.app import create_app
    from blogtree.config import load_yaml_config, AppSettings

    app = create_app(load_yaml_config("config/settings.yaml", AppSettings))
"""

from typing import Optional

from fastapi import FastAPI

from blogtree.config import AppSettings
from blogtree.content import create_content_router
from blogtree.exceptions import register_exception_handlers
from blogtree.log import get_logger, setup_root_logger
from blogtree.middleware import RequestIDMiddleware, RequestLoggingMiddleware
from blogtree.orm import Base, get_engine, init_database

logger = get_logger("blogtree.app")


def create_app(settings: Optional[AppSettings] = None, configure_logging: bool = True) -> FastAPI:
    """创建 FastAPI 应用

    Args:
        settings: 应用配置，不传则从环境变量读取
        configure_logging: 是否配置根日志器（测试中通常关闭，保留 pytest 的日志捕获）
    """
    settings = settings or AppSettings()

    if configure_logging:
        setup_root_logger(config=settings.logging)

    init_database(config=settings.database, logging_config=settings.logging)
    # 导入模型后建表
    from blogtree.content import models  # noqa: F401
    Base.metadata.create_all(get_engine())

    app = FastAPI(title=settings.app_name, debug=settings.debug)
    app.include_router(create_content_router(settings.tree), prefix=settings.api_prefix)
    register_exception_handlers(app, debug=settings.debug)

    # 后添加的中间件在外层：RequestID 先执行，session 清理在最外层完成
    app.add_middleware(RequestLoggingMiddleware, skip_paths=["/docs", "/openapi.json"])
    app.add_middleware(RequestIDMiddleware)

    logger.info(f"{settings.app_name} 启动完成，API 前缀 {settings.api_prefix}")
    return app
