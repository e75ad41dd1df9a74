"""全局异常处理器测试"""

import pytest
from fastapi import FastAPI, Query
from fastapi.testclient import TestClient

from blogtree.exceptions import CycleError, NodeNotFoundError, register_exception_handlers
from blogtree.exceptions.handlers import translate_validation_error


def build_app(debug=False):
    app = FastAPI()
    register_exception_handlers(app, debug=debug)

    @app.get("/missing")
    async def missing():
        raise NodeNotFoundError(9, model_name="Menu")

    @app.get("/cycle")
    async def cycle():
        raise CycleError(1, 2)

    @app.get("/number")
    async def number(value: int = Query(...)):
        return {"value": value}

    @app.get("/crash")
    async def crash():
        raise RuntimeError("boom")

    return app


@pytest.fixture
def client():
    with TestClient(build_app(), raise_server_exceptions=False) as c:
        yield c


class TestBusinessExceptionHandler:

    def test_not_found(self, client):
        response = client.get("/missing")
        assert response.status_code == 404
        body = response.json()
        assert body == {
            "status": "error",
            "message": "Menu 不存在: 9",
            "msg_details": [],
            "data": {},
            "error_code": "NODE_NOT_FOUND",
        }

    def test_cycle(self, client):
        response = client.get("/cycle")
        assert response.status_code == 400
        assert response.json()["error_code"] == "CYCLE_DETECTED"
        assert "debug_info" not in response.json()

    def test_debug_info(self):
        with TestClient(build_app(debug=True)) as c:
            body = c.get("/cycle").json()
        assert body["debug_info"] == {"node_id": "1", "parent_id": "2"}


class TestValidationHandler:

    def test_missing_query(self, client):
        response = client.get("/number")
        assert response.status_code == 422
        body = response.json()
        assert body["error_code"] == "VALIDATION_ERROR"
        assert body["msg_details"] == ["value: 此字段为必填项"]

    def test_int_parsing(self, client):
        body = client.get("/number", params={"value": "abc"}).json()
        assert body["msg_details"] == ["value: 必须是整数"]

    def test_translator_templates(self):
        message = translate_validation_error({"type": "string_too_long", "ctx": {"max_length": 100}})
        assert message == "长度不能超过 100 个字符"
        assert translate_validation_error({"type": "unknown_type"}) is None

    def test_template_without_context(self):
        assert translate_validation_error({"type": "greater_than"}) == "必须大于 {gt}"


class TestFallbackHandlers:

    def test_unknown_route(self, client):
        response = client.get("/nope")
        assert response.status_code == 404
        assert response.json()["error_code"] == "HTTP_404"

    def test_unhandled_exception(self, client):
        response = client.get("/crash")
        assert response.status_code == 500
        body = response.json()
        assert body["error_code"] == "INTERNAL_SERVER_ERROR"
        assert "boom" not in body["message"]
