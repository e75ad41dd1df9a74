"""事务管理器测试

测试 TransactionManager 的核心功能：
1. 提交与回滚
2. 传播行为（REQUIRED, MANDATORY, NEVER, NESTED, REQUIRES_NEW）
3. 回调（after_commit / after_rollback）
4. 提交抑制
"""

import pytest
from sqlalchemy import func, select

from blogtree.content.models import Menu
from blogtree.orm.transaction import (
    PropagationError,
    TransactionAlreadyCommittedError,
    TransactionPropagation,
    TransactionState,
    get_current_transaction,
    transaction_manager,
)


def menu_count(session):
    session.expire_all()
    return session.execute(select(func.count(Menu.id))).scalar_one()


class TestBasicTransaction:
    """基础事务测试"""

    @pytest.fixture(autouse=True)
    def setup_db(self, db_session):
        self.session = db_session
        self.tm = transaction_manager

    def test_commit_on_exit(self):
        with self.tm.transaction(session=self.session) as tx:
            self.session.add(Menu(name="首页", sort_order=10))
            assert tx.is_active
        assert tx.state == TransactionState.COMMITTED
        assert menu_count(self.session) == 1

    def test_rollback_on_exception(self):
        with pytest.raises(ValueError):
            with self.tm.transaction(session=self.session) as tx:
                self.session.add(Menu(name="首页", sort_order=10))
                self.session.flush()
                raise ValueError("boom")
        assert tx.state == TransactionState.ROLLED_BACK
        assert menu_count(self.session) == 0

    def test_commit_twice_is_rejected(self):
        with self.tm.transaction(session=self.session) as tx:
            pass
        with pytest.raises(TransactionAlreadyCommittedError):
            tx.commit()

    def test_context_cleared_after_exit(self):
        with self.tm.transaction(session=self.session):
            assert get_current_transaction() is not None
        assert get_current_transaction() is None
        assert not self.tm.is_in_transaction()


class TestPropagation:
    """传播行为测试"""

    @pytest.fixture(autouse=True)
    def setup_db(self, db_session):
        self.session = db_session
        self.tm = transaction_manager

    def test_required_joins_outer(self):
        with self.tm.transaction(session=self.session) as outer:
            with self.tm.transaction(session=self.session) as inner:
                assert inner is outer
                assert outer.nesting_level == 2
                self.session.add(Menu(name="关于", sort_order=10))
            # 内层退出不提交
            assert outer.is_active
            assert outer.nesting_level == 1
        assert menu_count(self.session) == 1

    def test_inner_failure_rolls_back_outer(self):
        with pytest.raises(RuntimeError):
            with self.tm.transaction(session=self.session):
                self.session.add(Menu(name="A", sort_order=10))
                with self.tm.transaction(session=self.session):
                    self.session.add(Menu(name="B", sort_order=20))
                    raise RuntimeError("inner")
        assert menu_count(self.session) == 0

    def test_mandatory_requires_transaction(self):
        with pytest.raises(PropagationError):
            with self.tm.transaction(session=self.session, propagation=TransactionPropagation.MANDATORY):
                pass

    def test_never_rejects_transaction(self):
        with self.tm.transaction(session=self.session):
            with pytest.raises(PropagationError):
                with self.tm.transaction(session=self.session, propagation=TransactionPropagation.NEVER):
                    pass

    def test_nested_requires_outer(self):
        with pytest.raises(PropagationError):
            with self.tm.transaction(session=self.session, propagation=TransactionPropagation.NESTED):
                pass


class TestHooksAndSuppression:
    """回调与提交抑制测试"""

    @pytest.fixture(autouse=True)
    def setup_db(self, db_session):
        self.session = db_session
        self.tm = transaction_manager

    def test_after_commit_runs_once(self):
        calls = []
        with self.tm.transaction(session=self.session) as tx:
            tx.after_commit(lambda ctx: calls.append("commit"))
            tx.after_rollback(lambda ctx: calls.append("rollback"))
        assert calls == ["commit"]

    def test_after_rollback_runs_on_error(self):
        calls = []
        with pytest.raises(KeyError):
            with self.tm.transaction(session=self.session) as tx:
                tx.after_rollback(lambda ctx: calls.append("rollback"))
                raise KeyError("x")
        assert calls == ["rollback"]

    def test_failing_callback_does_not_break_commit(self):
        def broken(ctx):
            raise RuntimeError("callback")

        with self.tm.transaction(session=self.session) as tx:
            tx.after_commit(broken)
            self.session.add(Menu(name="A", sort_order=10))
        assert menu_count(self.session) == 1

    def test_model_commit_suppressed_inside_transaction(self):
        with pytest.raises(RuntimeError):
            with self.tm.transaction(session=self.session):
                Menu(name="A", sort_order=10).save(commit=True)
                assert self.tm.should_suppress_commit()
                raise RuntimeError("abort")
        assert menu_count(self.session) == 0

    def test_allow_commit_lifts_suppression(self):
        with self.tm.transaction(session=self.session) as tx:
            with tx.allow_commit():
                assert not tx.should_suppress_commit()
            assert tx.should_suppress_commit()


class TestSavepoint:
    """保存点测试

    pysqlite 默认不发出 BEGIN，保存点需要按 SQLAlchemy 文档的方式接管事务开始。
    """

    @pytest.fixture(autouse=True)
    def setup_db(self):
        from sqlalchemy import create_engine, event
        from sqlalchemy.orm import Session
        from sqlalchemy.pool import StaticPool

        from blogtree.orm import Base

        engine = create_engine(
            "sqlite://",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )

        @event.listens_for(engine, "connect")
        def do_connect(dbapi_connection, connection_record):
            dbapi_connection.isolation_level = None

        @event.listens_for(engine, "begin")
        def do_begin(conn):
            conn.exec_driver_sql("BEGIN")

        Base.metadata.create_all(engine)
        self.session = Session(engine)
        yield
        self.session.close()
        engine.dispose()

    def test_nested_failure_keeps_outer_work(self):
        with transaction_manager.transaction(session=self.session):
            self.session.add(Menu(name="首页", sort_order=10))
            self.session.flush()
            with pytest.raises(ValueError):
                with transaction_manager.transaction(
                    session=self.session,
                    propagation=TransactionPropagation.NESTED,
                ):
                    self.session.add(Menu(name="博客", sort_order=20))
                    self.session.flush()
                    raise ValueError("boom")
        names = self.session.execute(select(Menu.name)).scalars().all()
        assert names == ["首页"]

    def test_released_savepoint_commits_with_outer(self):
        with transaction_manager.transaction(session=self.session) as tx:
            with tx.savepoint("sp_menu") as sp:
                self.session.add(Menu(name="首页", sort_order=10))
            assert sp.state == TransactionState.COMMITTED
        assert menu_count(self.session) == 1
