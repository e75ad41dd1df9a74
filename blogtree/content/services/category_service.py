"""
内容模块 - 分类服务

提供分类的增删改查、拖拽排序、批量排序与重置。

设计原则：
- 层级与排序的变更全部交给 TreeMutator，服务层只负责推断放置意图
- 业务规则校验失败抛出 BusinessException 子类，由异常处理器转换为响应
- 多步写操作放在同一个事务中
"""

from typing import Any, Dict, List, Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.orm import Session

from blogtree.config import TreeSettings
from blogtree.exceptions import (
    ErrorCode,
    NodeNotFoundError,
    ResourceConflictException,
    ResourceNotFoundException,
    ValidationException,
)
from blogtree.log import get_logger
from blogtree.orm import transaction_manager
from blogtree.orm.tree import MoveResult, NodeStore, Position, TreeMutator, close_gap

from ..helpers import UNSET, clean_text
from ..models import Category, Post
from ..schemas import CategoryDTO

logger = get_logger("blogtree.content.category")

DEFAULT_CATEGORIES = [
    {"name": "未分类", "slug": "uncategorized", "description": "默认分类", "sort_order": 0},
    {"name": "技术", "slug": "technology", "description": "技术相关文章", "sort_order": 10},
    {"name": "生活", "slug": "life", "description": "生活相关文章", "sort_order": 20},
]


class CategoryService:
    """分类服务

    使用示例:
        service = CategoryService()
        tech = service.create_category(name="技术", slug="technology")
        service.reorder(active_id=python.id, over_id=tech.id)
    """

    def __init__(self, session: Session = None, settings: TreeSettings = None):
        self._session = session
        self.settings = settings or TreeSettings()

    @property
    def session(self) -> Session:
        if self._session is None:
            self._session = Category.query.session
        return self._session

    @property
    def mutator(self) -> TreeMutator:
        return TreeMutator(
            Category,
            session=self.session,
            step=self.settings.order_step,
            renumber_on_exhaustion=self.settings.renumber_on_exhaustion,
        )

    # ==================== 查询 ====================

    def _published_counts(self) -> Dict[int, int]:
        rows = self.session.execute(
            select(Post.category_id, func.count(Post.id))
            .where(Post.published.is_(True), Post.category_id.is_not(None))
            .group_by(Post.category_id)
        ).all()
        return {category_id: total for category_id, total in rows}

    def list_categories(self, public: bool = False) -> List[CategoryDTO]:
        """获取分类列表（附带已发布文章数）

        Args:
            public: 前台请求只返回有已发布文章的分类
        """
        counts = self._published_counts()
        categories = self.session.execute(
            select(Category).order_by(Category.sort_order, Category.id)
        ).scalars().all()

        result = [
            CategoryDTO.from_entity(category, post_count=counts.get(category.id, 0))
            for category in categories
        ]
        if public:
            result = [item for item in result if item.post_count > 0]
        logger.debug(f"获取 {len(categories)} 个分类，返回 {len(result)} 个 (public={public})")
        return result

    def get_tree(self, public: bool = False) -> List[dict]:
        return CategoryDTO.from_tree(self.list_categories(public=public))

    def get_category(self, category_id: int) -> Category:
        category = self.session.get(Category, category_id)
        if category is None:
            raise NodeNotFoundError(category_id, model_name="Category", message="分类不存在")
        return category

    # ==================== 校验 ====================

    def _check_unique(self, name: Optional[str], slug: Optional[str], exclude_id: Optional[int] = None):
        for field, value, label in (("name", name, "分类名称"), ("slug", slug, "分类别名")):
            if value is None:
                continue
            stmt = select(Category.id).where(getattr(Category, field) == value)
            if exclude_id is not None:
                stmt = stmt.where(Category.id != exclude_id)
            if self.session.execute(stmt).first() is not None:
                raise ResourceConflictException(
                    f"{label}已存在: {value}",
                    code=ErrorCode.DUPLICATE_ENTRY,
                    field=field,
                    value=value,
                )

    # ==================== 增删改 ====================

    def create_category(
        self,
        name: str,
        slug: str,
        description: Optional[str] = None,
        parent_id: Optional[int] = None,
    ) -> Category:
        """创建分类，追加到同级末尾

        Raises:
            ValidationException: 名称或别名为空
            ResourceConflictException: 名称或别名已存在
            NodeNotFoundError: 父分类不存在
        """
        name, slug = clean_text(name), clean_text(slug)
        if not name or not slug:
            missing = [label for label, value in (("name", name), ("slug", slug)) if not value]
            raise ValidationException("分类名称和别名是必填项", details=[f"{m} 不能为空" for m in missing])

        self._check_unique(name, slug)

        with transaction_manager.transaction(session=self.session):
            if parent_id is not None and self.session.get(Category, parent_id) is None:
                raise NodeNotFoundError(parent_id, model_name="Category", message="父分类不存在")

            category = Category(
                name=name,
                slug=slug,
                description=clean_text(description),
                parent_id=parent_id,
                sort_order=self.mutator.append_order(parent_id),
            )
            self.session.add(category)
            self.session.flush()

        logger.info(f"分类创建成功: id={category.id} slug={category.slug} order={category.sort_order}")
        return category

    def update_category(self, category_id: int, **fields) -> Category:
        """更新分类

        parent_id 变更经由 TreeMutator 移动到新父分类末尾（None 表示根级别），
        sort_order 不能通过本方法修改。
        """
        category = self.get_category(category_id)

        for key in ("name", "slug"):
            if key in fields:
                fields[key] = clean_text(fields[key])
                if not fields[key]:
                    raise ValidationException("分类名称和别名不能为空", details=[f"{key} 不能为空"])
        if "description" in fields:
            fields["description"] = clean_text(fields["description"])

        self._check_unique(fields.get("name"), fields.get("slug"), exclude_id=category_id)
        fields.pop("sort_order", None)

        with transaction_manager.transaction(session=self.session):
            if "parent_id" in fields:
                new_parent_id = fields.pop("parent_id")
                if new_parent_id != category.parent_id:
                    if new_parent_id is None:
                        self.mutator.move(category_id, Position.ROOT)
                    else:
                        self.mutator.move(category_id, Position.INSIDE, new_parent_id=new_parent_id)
            category.update(**fields)
            self.session.flush()

        logger.info(f"分类更新成功: id={category_id}")
        return category

    def delete_category(self, category_id: int) -> Dict[str, Any]:
        """删除分类

        在一个事务内：
        1. 文章转移到兜底分类
        2. 直接子分类提升到根级别末尾
        3. 收回原分组中的空位
        4. 删除分类

        Raises:
            ValidationException: 删除兜底分类
            ResourceNotFoundException: 兜底分类不存在
        """
        protected_slug = self.settings.protected_category_slug
        category = self.get_category(category_id)
        if category.slug == protected_slug:
            raise ValidationException('无法删除"未分类"分类，这是系统默认分类')

        with transaction_manager.transaction(session=self.session):
            sentinel = self.session.execute(
                select(Category).where(Category.slug == protected_slug)
            ).scalar_one_or_none()
            if sentinel is None:
                raise ResourceNotFoundException('系统错误：未找到"未分类"分类', slug=protected_slug)

            moved_posts = self.session.execute(
                update(Post)
                .where(Post.category_id == category_id)
                .values(category_id=sentinel.id)
                .execution_options(synchronize_session="fetch")
            ).rowcount

            store = NodeStore(Category, self.session, lock=True)
            mutator = self.mutator
            promoted = [child.id for child in store.children(category_id)]
            for child_id in promoted:
                mutator.move(child_id, Position.ROOT)

            category = store.get(category_id)
            store.apply_shift(close_gap(
                category.parent_id,
                category.sort_order,
                store.next_order(category.parent_id, category.sort_order, exclude_id=category_id),
                exclude_id=category_id,
            ))
            self.session.delete(category)
            self.session.flush()

        logger.info(f"分类已删除: id={category_id}, 转移文章 {moved_posts} 篇, 提升子分类 {promoted}")
        return {"id": category_id, "moved_posts": moved_posts, "promoted_children": promoted}

    # ==================== 排序 ====================

    def infer_position(self, active: Category, over: Category, new_parent_id=UNSET):
        """根据拖拽结果推断放置意图

        Returns:
            (position, reference_id, new_parent_id)
        """
        if new_parent_id is UNSET or new_parent_id == over.parent_id:
            if active.parent_id == over.parent_id and active.sort_order < over.sort_order:
                return Position.AFTER, over.id, None
            if active.parent_id == over.parent_id:
                return Position.BEFORE, over.id, None
            return Position.AFTER, over.id, None
        if new_parent_id is None:
            return Position.ROOT, None, None
        return Position.INSIDE, None, new_parent_id

    def reorder(self, active_id: Optional[int], over_id: Optional[int], new_parent_id=UNSET) -> MoveResult:
        """拖拽排序

        Raises:
            ValidationException: activeId 或 overId 缺失
            NodeNotFoundError / SelfParentError / CycleError / TreeTransactionError
        """
        if active_id is None or over_id is None:
            raise ValidationException("缺少必要参数", details=["activeId 和 overId 是必填项"])

        active = self.get_category(active_id)
        over = self.session.get(Category, over_id)
        if over is None:
            raise NodeNotFoundError(over_id, model_name="Category", message="目标分类不存在")

        if active.id == over.id and (new_parent_id is UNSET or new_parent_id == over.parent_id):
            # 拖回原位置，不做修改
            logger.debug(f"分类拖拽: active={active_id} 落在自身，忽略")
            return MoveResult(active.id, active.parent_id, active.parent_id, active.sort_order, active.sort_order)

        position, reference_id, parent_id = self.infer_position(active, over, new_parent_id)
        logger.debug(f"分类拖拽: active={active_id} over={over_id} -> {position.value}")
        return self.mutator.move(active_id, position, reference_id=reference_id, new_parent_id=parent_id)

    def bulk_update_orders(self, items: List[Dict[str, Any]]) -> List[CategoryDTO]:
        """批量更新排序

        Args:
            items: [{"id": 1, "sort_order": 10, "parent_id": None}, ...]，parent_id 可省略

        每个父分类变更都经过环检测；涉及的分组出现重复或耗尽的序号时重新编号。
        """
        if not items:
            raise ValidationException("请提供有效的分类排序数据")

        mutator = self.mutator
        with transaction_manager.transaction(session=self.session):
            store = NodeStore(Category, self.session, lock=True)
            touched = []
            for item in items:
                node_id = item.get("id")
                node = store.get(node_id)
                if node is None:
                    raise NodeNotFoundError(node_id, model_name="Category", message="分类不存在")

                parent_id = node.parent_id
                if "parent_id" in item and item["parent_id"] != node.parent_id:
                    parent_id = item["parent_id"]
                    mutator.check_parent(node_id, parent_id)
                    touched.append(node.parent_id)

                order = item.get("sort_order", node.sort_order)
                store.set_position(node, parent_id, order)
                touched.append(parent_id)

            for parent_id in dict.fromkeys(touched):
                mutator.normalize_group(parent_id)

        logger.info(f"分类排序批量更新成功: {len(items)} 项")
        return self.list_categories()

    def reset_categories(self) -> List[CategoryDTO]:
        """重置为默认分类，所有文章的分类置空"""
        with transaction_manager.transaction(session=self.session):
            self.session.execute(
                update(Post).values(category_id=None).execution_options(synchronize_session=False)
            )
            self.session.execute(
                update(Category).values(parent_id=None).execution_options(synchronize_session=False)
            )
            self.session.execute(delete(Category).execution_options(synchronize_session=False))
            self.session.expunge_all()

            for data in DEFAULT_CATEGORIES:
                self.session.add(Category(parent_id=None, **data))
            self.session.flush()

        logger.info("分类数据重置完成")
        return self.list_categories()
