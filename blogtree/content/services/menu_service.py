"""
内容模块 - 菜单服务

菜单的增删改查与移动。移动使用显式的放置位置（before / after / inside / root）。
"""

from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from blogtree.config import TreeSettings
from blogtree.exceptions import NodeNotFoundError, ValidationException
from blogtree.log import get_logger
from blogtree.orm import transaction_manager
from blogtree.orm.tree import NodeStore, Position, TreeMutator, close_gap

from ..helpers import UNSET, clean_text
from ..models import Menu
from ..schemas import MenuDTO

logger = get_logger("blogtree.content.menu")


class MenuService:
    """菜单服务

    使用示例:
        service = MenuService()
        home = service.create_menu(name="首页", url="/")
        service.reorder(about.id, "before", over_id=home.id)
    """

    def __init__(self, session: Session = None, settings: TreeSettings = None):
        self._session = session
        self.settings = settings or TreeSettings()

    @property
    def session(self) -> Session:
        if self._session is None:
            self._session = Menu.query.session
        return self._session

    @property
    def mutator(self) -> TreeMutator:
        return TreeMutator(
            Menu,
            session=self.session,
            step=self.settings.order_step,
            renumber_on_exhaustion=self.settings.renumber_on_exhaustion,
        )

    # ==================== 查询 ====================

    def list_menus(self, parent_id=UNSET, include_inactive: bool = False) -> List[Menu]:
        """获取菜单列表

        Args:
            parent_id: 不传返回全部；None 返回根菜单；其他值返回该菜单的直接子菜单
            include_inactive: 是否包含未启用的菜单
        """
        stmt = select(Menu)
        if parent_id is not UNSET:
            stmt = stmt.where(Menu.parent_id.is_(None) if parent_id is None else Menu.parent_id == parent_id)
        if not include_inactive:
            stmt = stmt.where(Menu.is_active.is_(True))
        # 根菜单（parent_id 为 NULL）排在最前
        stmt = stmt.order_by(Menu.parent_id.is_not(None), Menu.parent_id, Menu.sort_order, Menu.id)
        return list(self.session.execute(stmt).scalars())

    def get_tree(self, include_inactive: bool = False) -> List[dict]:
        return MenuDTO.from_tree(self.list_menus(include_inactive=include_inactive))

    def get_menu(self, menu_id: int) -> Menu:
        menu = self.session.get(Menu, menu_id)
        if menu is None:
            raise NodeNotFoundError(menu_id, model_name="Menu", message="菜单不存在")
        return menu

    # ==================== 增删改 ====================

    def create_menu(
        self,
        name: str,
        url: Optional[str] = None,
        description: Optional[str] = None,
        parent_id: Optional[int] = None,
        is_external: bool = False,
        is_active: bool = True,
        sort_order: Optional[int] = None,
    ) -> Menu:
        """创建菜单

        sort_order 不传时追加到同级末尾（最大序号 + step）。
        """
        name = clean_text(name)
        if not name:
            raise ValidationException("菜单名称不能为空", details=["name 不能为空"])

        with transaction_manager.transaction(session=self.session):
            if parent_id is not None and self.session.get(Menu, parent_id) is None:
                raise NodeNotFoundError(parent_id, model_name="Menu", message="父级菜单未找到")

            mutator = self.mutator
            menu = Menu(
                name=name,
                description=clean_text(description),
                url=clean_text(url),
                is_external=bool(is_external),
                is_active=bool(is_active),
                parent_id=parent_id,
                sort_order=sort_order if sort_order is not None else mutator.append_order(parent_id),
            )
            self.session.add(menu)
            self.session.flush()
            if sort_order is not None:
                mutator.normalize_group(parent_id)

        logger.info(f"菜单创建成功: id={menu.id} name={menu.name} order={menu.sort_order}")
        return menu

    def update_menu(self, menu_id: int, **fields) -> Menu:
        """更新菜单，parent_id 变更经由 TreeMutator"""
        menu = self.get_menu(menu_id)

        if "name" in fields:
            fields["name"] = clean_text(fields["name"])
            if not fields["name"]:
                raise ValidationException("菜单名称不能为空", details=["name 不能为空"])
        for key in ("description", "url"):
            if key in fields:
                fields[key] = clean_text(fields[key])
        for key in ("is_external", "is_active"):
            if key in fields and fields[key] is None:
                fields.pop(key)
        fields.pop("sort_order", None)

        with transaction_manager.transaction(session=self.session):
            if "parent_id" in fields:
                new_parent_id = fields.pop("parent_id")
                if new_parent_id != menu.parent_id:
                    if new_parent_id is None:
                        self.mutator.move(menu_id, Position.ROOT)
                    else:
                        self.mutator.move(menu_id, Position.INSIDE, new_parent_id=new_parent_id)
            menu.update(**fields)
            self.session.flush()

        logger.info(f"菜单更新成功: id={menu_id}")
        return menu

    def delete_menu(self, menu_id: int) -> Dict[str, Any]:
        """删除菜单，有子菜单时拒绝"""
        menu = self.get_menu(menu_id)

        with transaction_manager.transaction(session=self.session):
            store = NodeStore(Menu, self.session, lock=True)
            children = store.children(menu_id)
            if children:
                raise ValidationException(
                    "请先删除或移动子菜单",
                    details=[f"菜单 {menu_id} 下有 {len(children)} 个子菜单"],
                )
            store.apply_shift(close_gap(
                menu.parent_id,
                menu.sort_order,
                store.next_order(menu.parent_id, menu.sort_order, exclude_id=menu_id),
                exclude_id=menu_id,
            ))
            self.session.delete(menu)
            self.session.flush()

        logger.info(f"菜单已删除: id={menu_id}")
        return {"id": menu_id}

    # ==================== 移动 ====================

    def reorder(
        self,
        active_id: Optional[int],
        position: str,
        over_id: Optional[int] = None,
        new_parent_id: Optional[int] = None,
    ) -> Dict[str, Any]:
        """移动菜单

        inside 时优先使用 new_parent_id，未给出则以 over_id 作为父菜单。

        Returns:
            {"result": MoveResult, "menus": 移动后的全部菜单（含未启用）}
        """
        if active_id is None:
            raise ValidationException("缺少必要参数: activeId")
        try:
            position = Position(position)
        except ValueError:
            raise ValidationException("无效的位置参数", details=[f"position: {position}"])

        result = self.mutator.move(active_id, position, reference_id=over_id, new_parent_id=new_parent_id)
        return {
            "result": result,
            "menus": MenuDTO.from_list(self.list_menus(include_inactive=True)),
        }
