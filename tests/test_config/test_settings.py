"""配置类测试"""

import pytest
from pydantic import ValidationError

from blogtree.config import AppSettings, LoggingSettings, TreeSettings, parse_file_size


class TestParseFileSize:

    @pytest.mark.parametrize("value, expected", [
        ("10MB", 10 * 1024 * 1024),
        ("1kb", 1024),
        ("512", 512),
        (" 1.5 GB ", int(1.5 * 1024 ** 3)),
        (2048, 2048),
    ])
    def test_valid(self, value, expected):
        assert parse_file_size(value) == expected

    def test_invalid(self):
        with pytest.raises(ValueError):
            parse_file_size("ten megabytes")


class TestTreeSettings:

    def test_defaults(self):
        settings = TreeSettings()
        assert settings.order_step == 10
        assert settings.renumber_on_exhaustion is True
        assert settings.protected_category_slug == "uncategorized"

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("BLOGTREE_TREE_ORDER_STEP", "100")
        monkeypatch.setenv("BLOGTREE_TREE_RENUMBER_ON_EXHAUSTION", "false")
        settings = TreeSettings()
        assert settings.order_step == 100
        assert settings.renumber_on_exhaustion is False

    def test_step_must_be_positive(self):
        with pytest.raises(ValidationError):
            TreeSettings(order_step=0)


class TestAppSettings:

    def test_nested_defaults(self):
        settings = AppSettings()
        assert settings.api_prefix == "/api"
        assert settings.tree.order_step == 10
        assert settings.database.url.startswith("sqlite:///")

    def test_logging_computed_size(self):
        assert LoggingSettings(file_max_bytes="2MB").parsed_file_max_bytes == 2 * 1024 * 1024
