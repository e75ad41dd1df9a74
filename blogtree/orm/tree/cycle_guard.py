"""环检测

判断"把节点 A 挂到节点 B 下"是否会在父子关系中形成环。

祖先链通过 get_parent_id 回调逐级读取，与存储解耦：
    - 数据库场景：NodeStore.get_parent_id（带行锁的单点读取）
    - 内存场景：dict.get

使用示例:
    parents = {1: None, 2: 1, 3: 2}
    would_create_cycle(1, 3, parents.get, max_hops=len(parents))  # True
    would_create_cycle(3, 1, parents.get, max_hops=len(parents))  # False
"""

from typing import Any, Callable, Optional

ParentLookup = Callable[[Any], Optional[Any]]


def _walk_hits(start_id: Any, targets: set, get_parent_id: ParentLookup, max_hops: int) -> bool:
    """从 start_id 沿 parent_id 向上走，遇到 targets 中的节点返回 True

    visited 集合每次调用新建，不跨请求共享。
    走到根节点（None）或不存在的节点时返回 False；
    超过 max_hops 说明存储中已有环或数据损坏，按命中处理。
    """
    visited = set(targets)
    current = start_id
    hops = 0
    while current is not None:
        if current in visited:
            return True
        visited.add(current)
        hops += 1
        if hops > max_hops:
            return True
        current = get_parent_id(current)
    return False


def would_create_cycle(
    moving_id: Any,
    candidate_parent_id: Optional[Any],
    get_parent_id: ParentLookup,
    max_hops: int,
) -> bool:
    """把 moving_id 挂到 candidate_parent_id 下是否会形成环

    Args:
        moving_id: 要移动的节点
        candidate_parent_id: 候选父节点，None 表示根级别（总是安全）
        get_parent_id: 返回节点父 ID 的回调，节点不存在时返回 None
        max_hops: 迭代上限，通常取节点总数

    Returns:
        True 表示会形成环，调用方必须拒绝该移动
    """
    if candidate_parent_id is None:
        return False
    if candidate_parent_id == moving_id:
        return True
    return _walk_hits(candidate_parent_id, {moving_id}, get_parent_id, max_hops)


def is_descendant(
    node_id: Any,
    ancestor_id: Any,
    get_parent_id: ParentLookup,
    max_hops: int,
) -> bool:
    """node_id 当前是否位于 ancestor_id 的子树中（不含自身）"""
    if node_id is None or ancestor_id is None or node_id == ancestor_id:
        return False
    return _walk_hits(get_parent_id(node_id), {ancestor_id}, get_parent_id, max_hops)


__all__ = [
    "ParentLookup",
    "would_create_cycle",
    "is_descendant",
]
