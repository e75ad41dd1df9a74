"""环检测测试"""

import pytest

from blogtree.orm.tree import is_descendant, would_create_cycle


@pytest.fixture
def chain():
    # A(1) -> B(2) -> C(3)，D(4) 为独立根节点
    return {1: None, 2: 1, 3: 2, 4: None}


class TestWouldCreateCycle:
    """把节点挂到候选父节点下是否成环"""

    def test_root_is_always_safe(self, chain):
        assert would_create_cycle(1, None, chain.get, len(chain)) is False

    def test_self_parent(self, chain):
        assert would_create_cycle(2, 2, chain.get, len(chain)) is True

    def test_move_under_descendant(self, chain):
        """A 挂到 C 下会成环"""
        assert would_create_cycle(1, 3, chain.get, len(chain)) is True

    def test_move_under_direct_child(self, chain):
        assert would_create_cycle(2, 3, chain.get, len(chain)) is True

    def test_move_under_unrelated_node(self, chain):
        assert would_create_cycle(1, 4, chain.get, len(chain)) is False

    def test_move_leaf_under_ancestor(self, chain):
        """C 挂到 A 下不成环"""
        assert would_create_cycle(3, 1, chain.get, len(chain)) is False

    def test_missing_node_treated_as_root(self, chain):
        assert would_create_cycle(1, 99, chain.get, len(chain)) is False

    def test_corrupted_store_is_rejected(self):
        """存储中已有环时，超过迭代上限按成环处理"""
        parents = {1: 2, 2: 1, 3: None}
        assert would_create_cycle(3, 1, parents.get, len(parents)) is True

    def test_hop_cap(self):
        """长链超过上限时拒绝"""
        parents = {i: i - 1 for i in range(1, 50)}
        parents[0] = None
        assert would_create_cycle(100, 49, parents.get, max_hops=10) is True
        assert would_create_cycle(100, 49, parents.get, max_hops=len(parents)) is False

    def test_lookup_calls_are_bounded(self, chain):
        calls = []

        def lookup(node_id):
            calls.append(node_id)
            return chain.get(node_id)

        would_create_cycle(4, 3, lookup, len(chain))
        assert calls == [3, 2, 1]

    def test_no_state_between_calls(self, chain):
        """每次调用使用新的 visited 集合"""
        assert would_create_cycle(1, 3, chain.get, len(chain)) is True
        assert would_create_cycle(4, 3, chain.get, len(chain)) is False
        assert would_create_cycle(1, 3, chain.get, len(chain)) is True


class TestIsDescendant:

    def test_descendant(self, chain):
        assert is_descendant(3, 1, chain.get, len(chain)) is True

    def test_not_descendant(self, chain):
        assert is_descendant(1, 3, chain.get, len(chain)) is False
        assert is_descendant(4, 1, chain.get, len(chain)) is False

    def test_self_is_not_descendant(self, chain):
        assert is_descendant(2, 2, chain.get, len(chain)) is False
