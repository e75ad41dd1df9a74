"""菜单 API 测试"""

import pytest

from blogtree.content.models import Menu
from blogtree.content.services import MenuService
from blogtree.orm import db_session_scope

BASE = "/api/menus"


@pytest.fixture
def seeded(client):
    """首页 / 博客（含子菜单 归档）/ 关于（未启用），返回 {name: id}"""
    with db_session_scope() as session:
        service = MenuService(session)
        service.create_menu(name="首页", url="/")
        blog = service.create_menu(name="博客", url="/blog")
        service.create_menu(name="归档", url="/blog/archive", parent_id=blog.id)
        service.create_menu(name="关于", url="/about", is_active=False)
        ids = {m.name: m.id for m in session.query(Menu).all()}
    return ids


def read_menus():
    with db_session_scope() as session:
        return {m.name: (m.parent_id, m.sort_order) for m in session.query(Menu).all()}


class TestMenuApi:

    def test_list_all_active(self, client, seeded):
        body = client.get(f"{BASE}/list").json()
        assert [m["name"] for m in body["data"]] == ["首页", "博客", "归档"]

    def test_list_roots(self, client, seeded):
        body = client.get(f"{BASE}/list", params={"parent_id": "null"}).json()
        assert [m["name"] for m in body["data"]] == ["首页", "博客"]

    def test_list_children(self, client, seeded):
        body = client.get(f"{BASE}/list", params={"parent_id": seeded["博客"]}).json()
        assert [m["name"] for m in body["data"]] == ["归档"]

    def test_list_invalid_parent(self, client, seeded):
        response = client.get(f"{BASE}/list", params={"parent_id": "abc"})
        assert response.status_code == 422

    def test_tree_with_inactive(self, client, seeded):
        body = client.get(f"{BASE}/tree", params={"include_inactive": "true"}).json()
        assert [m["name"] for m in body["data"]] == ["首页", "博客", "关于"]
        assert body["data"][1]["children"][0]["name"] == "归档"

    def test_create_and_get(self, client, seeded):
        created = client.post(
            f"{BASE}/create",
            json={"name": "GitHub", "url": "https://github.com", "isExternal": True},
        ).json()["data"]
        assert created["sort_order"] == 40
        assert created["is_external"] is True

        body = client.get(f"{BASE}/get", params={"menu_id": created["id"]}).json()
        assert body["data"]["url"] == "https://github.com"

    def test_update_to_root(self, client, seeded):
        response = client.post(
            f"{BASE}/update",
            params={"menu_id": seeded["归档"]},
            json={"parentId": None},
        )
        assert response.status_code == 200
        assert read_menus()["归档"] == (None, 40)

    def test_delete_with_children(self, client, seeded):
        response = client.post(f"{BASE}/delete", params={"menu_id": seeded["博客"]})
        assert response.status_code == 422
        assert "博客" in read_menus()

    def test_delete(self, client, seeded):
        response = client.post(f"{BASE}/delete", params={"menu_id": seeded["首页"]})
        assert response.json()["data"] == {"id": seeded["首页"]}
        assert read_menus()["博客"] == (None, 10)

    def test_reorder_before(self, client, seeded):
        response = client.post(
            f"{BASE}/reorder",
            json={"activeId": seeded["关于"], "position": "before", "overId": seeded["首页"]},
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["result"]["new_parent_id"] is None
        roots = [m["name"] for m in data["menus"] if m["parent_id"] is None]
        assert roots == ["关于", "首页", "博客"]

    def test_reorder_inside_cycle(self, client, seeded):
        response = client.post(
            f"{BASE}/reorder",
            json={"activeId": seeded["博客"], "position": "inside", "newParentId": seeded["归档"]},
        )
        assert response.status_code == 400
        assert response.json()["error_code"] == "CYCLE_DETECTED"
        assert read_menus()["博客"] == (None, 20)

    def test_reorder_invalid_position(self, client, seeded):
        response = client.post(
            f"{BASE}/reorder",
            json={"activeId": seeded["关于"], "position": "sideways"},
        )
        assert response.status_code == 422

    def test_response_has_request_id(self, client, seeded):
        response = client.get(f"{BASE}/list")
        assert response.headers.get("x-request-id")
