"""响应模块测试"""

import json
from dataclasses import dataclass
from datetime import datetime

from blogtree.orm.tree import MoveResult, Position
from blogtree.response import Resp, ResponseStatus, make_response, serialize_data


def body(response):
    return json.loads(response.body)


class TestResp:

    def test_ok(self):
        response = Resp.OK(data={"id": 1}, message="创建成功")
        assert response.status_code == 200
        assert body(response) == {
            "status": "success",
            "message": "创建成功",
            "msg_details": [],
            "data": {"id": 1},
        }

    def test_none_data_becomes_empty_dict(self):
        assert body(Resp.OK())["data"] == {}

    def test_make_response_error(self):
        response = make_response("冲突", msg_details=["slug"], status_code=409,
                                 response_status=ResponseStatus.ERROR)
        assert response.status_code == 409
        assert body(response) == {
            "status": "error",
            "message": "冲突",
            "msg_details": ["slug"],
            "data": {},
        }


class TestSerializeData:

    def test_datetime_and_enum(self):
        data = {"at": datetime(2024, 1, 2, 3, 4, 5), "position": Position.AFTER}
        assert serialize_data(data) == {"at": "2024-01-02 03:04:05", "position": "after"}

    def test_nested_none_kept(self):
        assert serialize_data({"parent_id": None}) == {"parent_id": None}

    def test_to_dict_objects(self):
        result = MoveResult(node_id=1, old_parent_id=None, new_parent_id=2, old_order=10, new_order=20)
        data = serialize_data([result])
        assert data[0]["new_parent_id"] == 2
        assert data[0]["renumbered_groups"] == []

    def test_plain_values(self):
        @dataclass
        class Point:
            x: int

        point = Point(1)
        assert serialize_data((1, "a")) == [1, "a"]
        assert serialize_data(point) is point
