"""日志工具测试"""

import logging
from logging.handlers import RotatingFileHandler

import pytest

from blogtree.log import MicrosecondFormatter, create_formatter, get_logger, setup_logger, setup_root_logger


@pytest.fixture
def named_logger():
    name = "blogtree.test_logger"
    yield name
    logging.getLogger(name).handlers.clear()


class TestGetLogger:

    def test_short_name_gets_prefix(self):
        assert get_logger("tree").name == "blogtree.tree"

    def test_dotted_name_kept(self):
        assert get_logger("sqlalchemy.engine").name == "sqlalchemy.engine"

    def test_infers_module_name(self):
        assert get_logger().name == __name__


class TestSetupLogger:

    def test_console_handler(self, named_logger):
        logger = setup_logger(named_logger, level="DEBUG")
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0].formatter, MicrosecondFormatter)

    def test_repeated_setup_replaces_handlers(self, named_logger):
        setup_logger(named_logger)
        logger = setup_logger(named_logger)
        assert len(logger.handlers) == 1

    def test_rotating_file(self, named_logger, temp_dir):
        log_file = f"{temp_dir}/logs/tree.log"
        logger = setup_logger(
            named_logger,
            log_file=log_file,
            console=False,
            max_bytes=1024,
            backup_count=2,
        )
        handler = logger.handlers[0]
        assert isinstance(handler, RotatingFileHandler)
        assert handler.maxBytes == 1024

        logger.info("分类已移动")
        handler.flush()
        with open(log_file, encoding="utf-8") as f:
            assert "分类已移动" in f.read()
        handler.close()


class TestFormatter:

    def test_microseconds(self):
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "msg", None, None)
        record.created = 1700000000.123456
        formatted = create_formatter().formatTime(record)
        assert len(formatted.rsplit(".", 1)[1]) == 6

    def test_plain_formatter(self):
        assert not isinstance(create_formatter(use_microseconds=False), MicrosecondFormatter)


class TestSetupRootLogger:

    @pytest.fixture(autouse=True)
    def restore_root(self):
        root = logging.getLogger()
        saved = (root.level, root.handlers[:], root.propagate)
        yield
        root.setLevel(saved[0])
        root.handlers[:] = saved[1]
        root.propagate = saved[2]

    def test_from_settings(self, temp_dir):
        from blogtree.config import LoggingSettings

        config = LoggingSettings(
            level="WARNING",
            file_path=f"{temp_dir}/root.log",
            file_max_bytes="1KB",
            enable_console=False,
        )
        root = setup_root_logger(config=config)
        assert root.level == logging.WARNING
        assert len(root.handlers) == 1
        assert root.handlers[0].maxBytes == 1024
        root.handlers[0].close()

    def test_overrides_win(self):
        from blogtree.config import LoggingSettings

        root = setup_root_logger(config=LoggingSettings(level="WARNING"), level="DEBUG")
        assert root.level == logging.DEBUG
