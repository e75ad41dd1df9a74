"""
内容模块 - 菜单 API
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from blogtree.config import TreeSettings
from blogtree.exceptions import ValidationException
from blogtree.orm import get_db
from blogtree.response import ItemResponse, ListResponse, OkResponse, Resp

from ..helpers import UNSET
from ..schemas import MenuCreate, MenuDTO, MenuReorder, MenuUpdate
from ..services import MenuService


def _parse_parent_id(value: Optional[str]):
    """parent_id 查询参数：不传返回全部，"null" 表示根菜单"""
    if value is None or value == "":
        return UNSET
    if value.lower() == "null":
        return None
    try:
        return int(value)
    except ValueError:
        raise ValidationException("无效的 parent_id", details=[f"parent_id: {value}"])


def create_menu_router(settings: Optional[TreeSettings] = None) -> APIRouter:
    """创建菜单路由

    生成的路由:
        GET  /list     - 菜单列表（parent_id=null 只返回根菜单）
        GET  /tree     - 菜单树
        GET  /get      - 菜单详情
        POST /create   - 创建菜单
        POST /update   - 更新菜单
        POST /delete   - 删除菜单（有子菜单时拒绝）
        POST /reorder  - 移动菜单（before / after / inside / root）
    """
    router = APIRouter()
    settings = settings or TreeSettings()

    async def _service(db: Session = Depends(get_db)) -> MenuService:
        return MenuService(db, settings=settings)

    @router.get("/list", response_model=ListResponse[MenuDTO], summary="获取菜单列表")
    async def list_menus(
        parent_id: Optional[str] = Query(None, description="父菜单ID，null 表示根菜单"),
        include_inactive: bool = Query(False, description="是否包含未启用的菜单"),
        service: MenuService = Depends(_service),
    ):
        menus = service.list_menus(
            parent_id=_parse_parent_id(parent_id),
            include_inactive=include_inactive,
        )
        return Resp.OK(data=MenuDTO.from_list(menus))

    @router.get("/tree", response_model=OkResponse, summary="获取菜单树")
    async def get_menu_tree(
        include_inactive: bool = Query(False, description="是否包含未启用的菜单"),
        service: MenuService = Depends(_service),
    ):
        return Resp.OK(data=service.get_tree(include_inactive=include_inactive))

    @router.get("/get", response_model=ItemResponse[MenuDTO], summary="获取菜单详情")
    async def get_menu(
        menu_id: int = Query(..., description="菜单ID"),
        service: MenuService = Depends(_service),
    ):
        return Resp.OK(data=MenuDTO.from_entity(service.get_menu(menu_id)))

    @router.post("/create", response_model=ItemResponse[MenuDTO], summary="创建菜单")
    async def create_menu(data: MenuCreate, service: MenuService = Depends(_service)):
        menu = service.create_menu(**data.model_dump())
        return Resp.OK(data=MenuDTO.from_entity(menu), message="创建成功")

    @router.post("/update", response_model=ItemResponse[MenuDTO], summary="更新菜单")
    async def update_menu(
        data: MenuUpdate,
        menu_id: int = Query(..., description="菜单ID"),
        service: MenuService = Depends(_service),
    ):
        menu = service.update_menu(menu_id, **data.model_dump(exclude_unset=True))
        return Resp.OK(data=MenuDTO.from_entity(menu), message="更新成功")

    @router.post("/delete", response_model=OkResponse, summary="删除菜单")
    async def delete_menu(
        menu_id: int = Query(..., description="菜单ID"),
        service: MenuService = Depends(_service),
    ):
        return Resp.OK(data=service.delete_menu(menu_id), message="删除成功")

    @router.post("/reorder", response_model=OkResponse, summary="移动菜单")
    async def reorder_menus(data: MenuReorder, service: MenuService = Depends(_service)):
        result = service.reorder(
            active_id=data.active_id,
            position=data.position,
            over_id=data.over_id,
            new_parent_id=data.new_parent_id,
        )
        return Resp.OK(data=result, message="菜单排序更新成功")

    return router
