"""分类相关 Schema"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from blogtree.content.helpers import UNSET
from blogtree.orm import DTO


class CategoryCreate(BaseModel):
    """创建分类请求"""
    name: Optional[str] = Field(None, max_length=100, description="分类名称")
    slug: Optional[str] = Field(None, max_length=100, description="URL别名")
    description: Optional[str] = Field(None, description="描述")
    parent_id: Optional[int] = Field(None, alias="parentId", description="父分类ID")

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {"name": "技术", "slug": "technology", "parentId": None}
        },
    )


class CategoryUpdate(BaseModel):
    """更新分类请求，只更新显式传入的字段"""
    name: Optional[str] = Field(None, max_length=100, description="分类名称")
    slug: Optional[str] = Field(None, max_length=100, description="URL别名")
    description: Optional[str] = Field(None, description="描述")
    parent_id: Optional[int] = Field(None, alias="parentId", description="父分类ID，null 表示移到根级别")

    model_config = ConfigDict(populate_by_name=True)


class CategoryReorder(BaseModel):
    """拖拽排序请求

    newParentId 未传时按 overId 推断放在其前或后；
    显式传入且与 overId 的父分类不同时，作为该父分类的最后一个子分类。
    """
    active_id: Optional[int] = Field(None, alias="activeId", description="被拖动的分类ID")
    over_id: Optional[int] = Field(None, alias="overId", description="放置目标分类ID")
    new_parent_id: Optional[int] = Field(None, alias="newParentId", description="新的父分类ID")

    model_config = ConfigDict(populate_by_name=True)

    def new_parent_or_unset(self):
        if "new_parent_id" in self.model_fields_set:
            return self.new_parent_id
        return UNSET


class CategoryOrderItem(BaseModel):
    """批量排序项"""
    id: int = Field(..., description="分类ID")
    sort_order: int = Field(..., alias="order", description="排序序号")
    parent_id: Optional[int] = Field(None, alias="parentId", description="父分类ID")

    model_config = ConfigDict(populate_by_name=True)

    def to_patch(self) -> dict:
        patch = {"id": self.id, "sort_order": self.sort_order}
        if "parent_id" in self.model_fields_set:
            patch["parent_id"] = self.parent_id
        return patch


class CategoryBulkUpdate(BaseModel):
    items: List[CategoryOrderItem] = Field(default_factory=list, description="排序项列表")


class CategoryDTO(DTO):
    """分类响应"""
    id: int = Field(..., description="分类ID")
    name: str = Field(..., description="分类名称")
    slug: str = Field(..., description="URL别名")
    description: Optional[str] = Field(None, description="描述")
    parent_id: Optional[int] = Field(None, description="父分类ID")
    sort_order: int = Field(0, description="排序序号")
    post_count: int = Field(0, description="已发布文章数")
    created_at: Optional[str] = Field(None, description="创建时间")
    updated_at: Optional[str] = Field(None, description="更新时间")
