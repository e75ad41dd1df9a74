"""
Pytest 公共配置和 Fixtures

- memory_engine: 内存数据库引擎（StaticPool）
- db_session: 绑定 CoreModel.query 的 scoped_session，已建表
- app / client: 使用内存数据库的完整应用与测试客户端
"""

from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, scoped_session, sessionmaker
from sqlalchemy.pool import StaticPool

from blogtree.orm import Base, CoreModel, db_manager


# ==================== 文件 Fixtures ====================

@pytest.fixture
def temp_dir(tmp_path) -> str:
    return str(tmp_path)


@pytest.fixture
def temp_file(tmp_path):
    """写入 tmp_path 下的文件并返回路径，同名调用覆盖内容"""

    def write(name: str, content: str = "") -> str:
        target = tmp_path / name
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
        return str(target)

    return write


# ==================== 数据库 Fixtures ====================

@pytest.fixture
def memory_engine():
    """创建内存数据库引擎

    StaticPool + check_same_thread=False：所有操作共用一个连接，允许跨线程访问。
    """
    engine = create_engine(
        "sqlite:///:memory:",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(memory_engine) -> Generator[Session, None, None]:
    """已建表的会话，CoreModel.query 绑定到同一个 scoped_session"""
    from blogtree.content import models  # noqa: F401

    Base.metadata.create_all(bind=memory_engine)
    SessionLocal = sessionmaker(autocommit=False, autoflush=True, bind=memory_engine)
    session_scope = scoped_session(SessionLocal)
    CoreModel.query = session_scope.query_property()
    try:
        yield session_scope()
    finally:
        session_scope.remove()
        Base.metadata.drop_all(bind=memory_engine)


# ==================== FastAPI Fixtures ====================

@pytest.fixture
def app():
    """使用内存数据库的完整应用"""
    from blogtree.app import create_app
    from blogtree.config import AppSettings, DatabaseSettings

    settings = AppSettings(database=DatabaseSettings(url="sqlite:///:memory:"))
    test_app = create_app(settings, configure_logging=False)
    yield test_app
    db_manager.dispose()


@pytest.fixture
def client(app) -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c
