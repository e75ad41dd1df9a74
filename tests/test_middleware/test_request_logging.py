"""请求日志中间件测试"""

import logging

import pytest
from fastapi import FastAPI
from fastapi.responses import JSONResponse
from fastapi.testclient import TestClient

from blogtree.middleware import RequestLoggingMiddleware


@pytest.fixture
def client():
    app = FastAPI()

    @app.get("/ok")
    async def ok():
        return {"ok": True}

    @app.get("/bad")
    async def bad():
        return JSONResponse(status_code=422, content={})

    @app.get("/docs-like")
    async def docs_like():
        return {}

    app.add_middleware(RequestLoggingMiddleware, skip_paths=["/docs-like"])
    with TestClient(app) as c:
        yield c


class TestRequestLoggingMiddleware:

    def test_success_logged_as_info(self, client, caplog):
        with caplog.at_level(logging.INFO, logger="blogtree.api"):
            client.get("/ok", params={"a": "1"})
        records = [r for r in caplog.records if r.name == "blogtree.api"]
        assert len(records) == 1
        assert records[0].levelno == logging.INFO
        assert "GET /ok?a=1 -> 200" in records[0].getMessage()

    def test_client_error_logged_as_warning(self, client, caplog):
        with caplog.at_level(logging.INFO, logger="blogtree.api"):
            client.get("/bad")
        records = [r for r in caplog.records if r.name == "blogtree.api"]
        assert records[0].levelno == logging.WARNING

    def test_skip_paths(self, client, caplog):
        with caplog.at_level(logging.INFO, logger="blogtree.api"):
            client.get("/docs-like")
        assert not [r for r in caplog.records if r.name == "blogtree.api"]
