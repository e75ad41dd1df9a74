"""
数据库会话管理

session 以请求ID为作用域键（scoped_session + ContextVar）：
同一请求内的模型操作、服务与 TreeMutator 共享一个 session，
请求结束时由 RequestIDMiddleware 调用 on_request_end() 提交并移除。

公开 API:
- db_manager: 数据库管理器单例
- init_database(): 初始化引擎与 scoped_session
- get_engine(): 获取数据库引擎
- get_db(): FastAPI 依赖注入
- db_session_scope(): 脚本、测试等非 HTTP 场景
- on_request_end(): 请求结束清理
"""

import logging
import os
import time
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, AsyncGenerator, Dict, Generator, Optional
from uuid import uuid4

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, scoped_session, sessionmaker
from sqlalchemy.pool import StaticPool

from blogtree.config import DatabaseSettings
from blogtree.log import get_logger

_logger = get_logger("blogtree.orm.session")

__all__ = [
    'db_manager',
    'init_database',
    'get_engine',
    'get_db',
    'db_session_scope',
    'on_request_end',
]

_SQLITE_PREFIX = "sqlite:///"

_POOL_OPTIONS = ("pool_size", "max_overflow", "pool_timeout", "pool_recycle")


def _engine_options(url: str, options: Dict[str, Any]) -> Dict[str, Any]:
    """根据 URL 生成 create_engine 参数

    - SQLite 内存库：StaticPool 单连接，所有 session 看到同一份数据
    - SQLite 文件库：允许跨线程，busy timeout 取 pool_timeout
    - 其他数据库：使用连接池参数
    """
    kwargs = {"echo": options["echo"], "pool_pre_ping": options["pool_pre_ping"]}

    if not url.startswith(_SQLITE_PREFIX):
        kwargs.update({key: options[key] for key in _POOL_OPTIONS})
        return kwargs

    path = url[len(_SQLITE_PREFIX):]
    if path in ("", ":memory:"):
        kwargs["connect_args"] = {"check_same_thread": False}
        kwargs["poolclass"] = StaticPool
        return kwargs

    _logger.info(f"SQLite 数据库文件: {os.path.abspath(path)}")
    kwargs["connect_args"] = {"check_same_thread": False, "timeout": options["pool_timeout"]}
    kwargs.update({key: options[key] for key in _POOL_OPTIONS})
    return kwargs


def _attach_timing(engine: Engine) -> None:
    """记录每条 SQL 的执行耗时到 sqlalchemy.engine 日志"""
    sql_logger = logging.getLogger("sqlalchemy.engine")

    @event.listens_for(engine, "before_cursor_execute")
    def _start(conn, cursor, statement, parameters, context, executemany):
        conn.info.setdefault("blogtree_query_start", []).append(time.perf_counter())

    @event.listens_for(engine, "after_cursor_execute")
    def _stop(conn, cursor, statement, parameters, context, executemany):
        elapsed = time.perf_counter() - conn.info["blogtree_query_start"].pop()
        sql_logger.debug(f"[耗时 {elapsed * 1000:.2f}ms]")


class DatabaseManager:
    """数据库管理器（单例）

    使用示例:
        from blogtree.orm import db_manager

        db_manager.init(database_url="sqlite:///./blog.db")
        session = db_manager.get_session()
    """
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return
        self._engine: Optional[Engine] = None
        self._session_scope: Optional[scoped_session] = None
        self._request_id: ContextVar[str] = ContextVar("blogtree_request_id", default="")
        # 请求内创建 session 后锁定 request_id，避免作用域键中途改变导致 session 泄漏
        self._request_locked: ContextVar[bool] = ContextVar("blogtree_request_locked", default=False)
        self._initialized = True

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise RuntimeError("数据库未初始化，请先调用 init_database()")
        return self._engine

    @property
    def session_scope(self) -> scoped_session:
        if self._session_scope is None:
            raise RuntimeError("数据库未初始化，请先调用 init_database()")
        return self._session_scope

    @property
    def is_initialized(self) -> bool:
        return self._engine is not None

    def init(
        self,
        database_url: str = None,
        config: Any = None,
        logging_config: Any = None,
        **options,
    ):
        """初始化引擎与 scoped_session，并绑定 CoreModel.query

        Args:
            database_url: 数据库连接URL，提供 config 时以 config.url 为准
            config: DatabaseSettings
            logging_config: LoggingSettings，读取 sql_log_enabled
            **options: echo / pool_size / max_overflow / pool_timeout / pool_recycle / pool_pre_ping

        Returns:
            tuple: (engine, session_scope)
        """
        if config is None:
            config = DatabaseSettings(url=database_url or DatabaseSettings().url, **options)
        sql_log_enabled = bool(getattr(logging_config, "sql_log_enabled", False))

        settings = config.model_dump()
        if sql_log_enabled:
            settings["echo"] = "debug"

        _logger.info(f"数据库连接: {config.url}")
        try:
            self._engine = create_engine(config.url, **_engine_options(config.url, settings))
        except Exception as e:
            _logger.error(f"创建数据库引擎失败: {e}")
            raise

        if sql_log_enabled:
            _attach_timing(self._engine)

        factory = sessionmaker(autocommit=False, autoflush=True, bind=self._engine)
        self._session_scope = scoped_session(factory, scopefunc=self._get_request_id)

        from .core_model import CoreModel
        CoreModel.query = self._session_scope.query_property()

        _logger.info("数据库初始化完成")
        return self._engine, self._session_scope

    def get_session(self) -> Session:
        """当前请求的 session，首次获取后锁定 request_id"""
        session = self.session_scope()
        if not self._request_locked.get():
            self._request_locked.set(True)
        return session

    def cleanup(self):
        """提交剩余改动并移除当前请求的 session（幂等）"""
        request_id = self._request_id.get()
        scope = self._session_scope
        if scope is not None and scope.registry.has():
            session = scope()
            if session.new or session.dirty or session.deleted:
                try:
                    session.commit()
                except Exception as e:
                    _logger.warning(f"[request_id={request_id}] 请求结束自动提交失败，已回滚: {e}")
                    session.rollback()
            scope.remove()
            _logger.debug(f"[request_id={request_id}] session 已移除")

        self._request_id.set("")
        self._request_locked.set(False)

    def dispose(self):
        if self._session_scope is not None:
            self._session_scope.remove()
        if self._engine is not None:
            self._engine.dispose()
        self._engine = None
        self._session_scope = None

    # ==================== 请求ID（内部使用） ====================

    def _set_request_id(self, request_id: str = None) -> str:
        if self._request_locked.get():
            return self._request_id.get()
        request_id = request_id or uuid4().hex[:8]
        self._request_id.set(request_id)
        self._request_locked.set(True)
        return request_id

    def _get_request_id(self) -> str:
        request_id = self._request_id.get()
        if not request_id:
            request_id = uuid4().hex[:8]
            self._request_id.set(request_id)
        return request_id


db_manager = DatabaseManager()


def init_database(database_url: str = None, config: Any = None, logging_config: Any = None, **options):
    """db_manager.init() 的便捷包装

    使用示例:
        init_database(config=settings.database, logging_config=settings.logging)
        init_database("sqlite:///:memory:")
    """
    return db_manager.init(database_url, config=config, logging_config=logging_config, **options)


def get_engine() -> Engine:
    return db_manager.engine


def on_request_end():
    db_manager.cleanup()


async def get_db() -> AsyncGenerator[Session, None]:
    """当前请求的数据库 session（FastAPI 依赖注入）

    异步依赖与请求处理共享 RequestIDMiddleware 设置的上下文；
    提交与清理由中间件在请求结束时完成。
    """
    yield db_manager.get_session()


@contextmanager
def db_session_scope(request_id: str = None, auto_commit: bool = True) -> Generator[Session, None, None]:
    """非 HTTP 场景的 session 上下文

    使用示例:
        with db_session_scope(request_id="seed") as session:
            CategoryService(session).reset_categories()
    """
    db_manager._set_request_id(request_id)
    session = db_manager.get_session()
    try:
        yield session
        if auto_commit:
            session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        on_request_end()
