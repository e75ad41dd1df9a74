"""
内容模块 - 分类 API

动词风格路由，只使用 GET 和 POST。
API 层只负责参数接收、DTO 转换、调用服务层；业务异常由全局异常处理器转换为响应。
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from blogtree.config import TreeSettings
from blogtree.orm import get_db
from blogtree.response import ItemResponse, ListResponse, OkResponse, Resp

from ..schemas import (
    CategoryBulkUpdate,
    CategoryCreate,
    CategoryDTO,
    CategoryReorder,
    CategoryUpdate,
)
from ..services import CategoryService


def create_category_router(settings: Optional[TreeSettings] = None) -> APIRouter:
    """创建分类路由

    生成的路由:
        GET  /list         - 分类列表（public=true 只返回有已发布文章的分类）
        GET  /tree         - 分类树
        GET  /get          - 分类详情
        POST /create       - 创建分类
        POST /update       - 更新分类
        POST /delete       - 删除分类
        POST /reorder      - 拖拽排序
        POST /bulk-update  - 批量更新排序
        POST /reset        - 重置为默认分类
    """
    router = APIRouter()
    settings = settings or TreeSettings()

    async def _service(db: Session = Depends(get_db)) -> CategoryService:
        return CategoryService(db, settings=settings)

    # ==================== 查询接口 ====================

    @router.get(
        "/list",
        response_model=ListResponse[CategoryDTO],
        summary="获取分类列表",
    )
    async def list_categories(
        public: bool = Query(False, description="是否只返回有已发布文章的分类"),
        service: CategoryService = Depends(_service),
    ):
        return Resp.OK(data=service.list_categories(public=public))

    @router.get("/tree", response_model=OkResponse, summary="获取分类树")
    async def get_category_tree(
        public: bool = Query(False, description="是否只返回有已发布文章的分类"),
        service: CategoryService = Depends(_service),
    ):
        return Resp.OK(data=service.get_tree(public=public))

    @router.get("/get", response_model=ItemResponse[CategoryDTO], summary="获取分类详情")
    async def get_category(
        category_id: int = Query(..., description="分类ID"),
        service: CategoryService = Depends(_service),
    ):
        category = service.get_category(category_id)
        return Resp.OK(data=CategoryDTO.from_entity(category))

    # ==================== 写入接口 ====================

    @router.post("/create", response_model=ItemResponse[CategoryDTO], summary="创建分类")
    async def create_category(
        data: CategoryCreate,
        service: CategoryService = Depends(_service),
    ):
        category = service.create_category(
            name=data.name,
            slug=data.slug,
            description=data.description,
            parent_id=data.parent_id,
        )
        return Resp.OK(data=CategoryDTO.from_entity(category), message="创建成功")

    @router.post("/update", response_model=ItemResponse[CategoryDTO], summary="更新分类")
    async def update_category(
        data: CategoryUpdate,
        category_id: int = Query(..., description="分类ID"),
        service: CategoryService = Depends(_service),
    ):
        category = service.update_category(category_id, **data.model_dump(exclude_unset=True))
        return Resp.OK(data=CategoryDTO.from_entity(category), message="更新成功")

    @router.post("/delete", response_model=OkResponse, summary="删除分类")
    async def delete_category(
        category_id: int = Query(..., description="分类ID"),
        service: CategoryService = Depends(_service),
    ):
        result = service.delete_category(category_id)
        return Resp.OK(data=result, message="分类删除成功")

    @router.post("/reorder", response_model=OkResponse, summary="拖拽排序")
    async def reorder_categories(
        data: CategoryReorder,
        service: CategoryService = Depends(_service),
    ):
        result = service.reorder(
            active_id=data.active_id,
            over_id=data.over_id,
            new_parent_id=data.new_parent_or_unset(),
        )
        return Resp.OK(
            data={"result": result, "categories": service.list_categories()},
            message="排序更新成功",
        )

    @router.post("/bulk-update", response_model=ListResponse[CategoryDTO], summary="批量更新排序")
    async def bulk_update_orders(
        data: CategoryBulkUpdate,
        service: CategoryService = Depends(_service),
    ):
        items = [item.to_patch() for item in data.items]
        return Resp.OK(data=service.bulk_update_orders(items), message="排序更新成功")

    @router.post("/reset", response_model=ListResponse[CategoryDTO], summary="重置分类")
    async def reset_categories(service: CategoryService = Depends(_service)):
        return Resp.OK(data=service.reset_categories(), message="分类数据已成功重置")

    return router
