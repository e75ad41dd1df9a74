"""树形数据的扁平/嵌套转换

使用示例:
    from blogtree.orm.tree import build_tree_list, flatten_tree

    flat_list = [
        {"id": 1, "parent_id": None, "name": "技术", "sort_order": 10},
        {"id": 2, "parent_id": 1, "name": "Python", "sort_order": 10},
        {"id": 3, "parent_id": None, "name": "生活", "sort_order": 20},
    ]
    tree = build_tree_list(flat_list, sort_key=by_sort_order)
"""

from typing import Any, Callable, Dict, List, Optional


Row = Dict[str, Any]


def by_sort_order(node: Row) -> tuple:
    """同级排序键：(sort_order, id)"""
    return (node.get("sort_order") or 0, node.get("id") or 0)


def build_tree_list(
    nodes: List[Row],
    id_field: str = "id",
    parent_field: str = "parent_id",
    children_field: str = "children",
    sort_key: Optional[Callable[[Row], Any]] = None,
) -> List[Row]:
    """扁平行 -> 嵌套树

    父节点不在列表中的行（例如被过滤掉的父菜单）提升为根。
    sort_key 为空时保持输入顺序。
    """
    by_id = {row[id_field]: {**row, children_field: []} for row in nodes}
    roots: List[Row] = []
    for row in by_id.values():
        parent = by_id.get(row.get(parent_field))
        (parent[children_field] if parent is not None else roots).append(row)

    if sort_key is not None:
        pending = [roots]
        while pending:
            siblings = pending.pop()
            siblings.sort(key=sort_key)
            pending.extend(row[children_field] for row in siblings if row[children_field])
    return roots


def flatten_tree(
    tree: List[Row],
    children_field: str = "children",
    level_field: Optional[str] = None,
) -> List[Row]:
    """嵌套树 -> 先序扁平行，去掉 children；level_field 指定时写入深度（根为 1）"""
    out: List[Row] = []
    pending = [(row, 1) for row in reversed(tree)]
    while pending:
        row, depth = pending.pop()
        flat = {key: value for key, value in row.items() if key != children_field}
        if level_field:
            flat[level_field] = depth
        out.append(flat)
        pending.extend((child, depth + 1) for child in reversed(row.get(children_field) or []))
    return out


__all__ = [
    "by_sort_order",
    "build_tree_list",
    "flatten_tree",
]
