"""菜单相关 Schema"""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from blogtree.orm import DTO


class MenuCreate(BaseModel):
    """创建菜单请求"""
    name: Optional[str] = Field(None, max_length=100, description="菜单名称")
    description: Optional[str] = Field(None, description="描述")
    url: Optional[str] = Field(None, max_length=500, description="链接地址")
    is_external: bool = Field(False, alias="isExternal", description="是否外部链接")
    is_active: bool = Field(True, alias="isActive", description="是否启用")
    parent_id: Optional[int] = Field(None, alias="parentId", description="父菜单ID")
    sort_order: Optional[int] = Field(None, alias="order", description="排序序号，不传则追加到末尾")

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {"name": "首页", "url": "/", "parentId": None, "isActive": True}
        },
    )


class MenuUpdate(BaseModel):
    """更新菜单请求，只更新显式传入的字段"""
    name: Optional[str] = Field(None, max_length=100, description="菜单名称")
    description: Optional[str] = Field(None, description="描述")
    url: Optional[str] = Field(None, max_length=500, description="链接地址")
    is_external: Optional[bool] = Field(None, alias="isExternal", description="是否外部链接")
    is_active: Optional[bool] = Field(None, alias="isActive", description="是否启用")
    parent_id: Optional[int] = Field(None, alias="parentId", description="父菜单ID，null 表示移到根级别")

    model_config = ConfigDict(populate_by_name=True)


class MenuReorder(BaseModel):
    """菜单移动请求"""
    active_id: Optional[int] = Field(None, alias="activeId", description="被移动的菜单ID")
    position: Literal["before", "after", "inside", "root"] = Field(..., description="放置位置")
    over_id: Optional[int] = Field(None, alias="overId", description="参照菜单ID")
    new_parent_id: Optional[int] = Field(None, alias="newParentId", description="inside 的目标父菜单ID")

    model_config = ConfigDict(populate_by_name=True)


class MenuDTO(DTO):
    """菜单响应"""
    id: int = Field(..., description="菜单ID")
    name: str = Field(..., description="菜单名称")
    description: Optional[str] = Field(None, description="描述")
    url: Optional[str] = Field(None, description="链接地址")
    is_external: bool = Field(False, description="是否外部链接")
    is_active: bool = Field(True, description="是否启用")
    parent_id: Optional[int] = Field(None, description="父菜单ID")
    sort_order: int = Field(0, description="排序序号")
    created_at: Optional[str] = Field(None, description="创建时间")
    updated_at: Optional[str] = Field(None, description="更新时间")
