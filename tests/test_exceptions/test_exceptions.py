"""异常类测试"""

from blogtree.exceptions import (
    BusinessException,
    CycleError,
    Err,
    ErrorCode,
    NodeNotFoundError,
    ResourceNotFoundException,
    SelfParentError,
    TreeStructureError,
    TreeTransactionError,
    ValidationException,
)


class TestBusinessException:

    def test_defaults(self):
        exc = BusinessException("操作失败")
        assert exc.code == ErrorCode.BUSINESS_ERROR
        assert exc.status_code == 400
        assert exc.details == []
        assert str(exc) == "操作失败"

    def test_to_dict_copies_details(self):
        exc = ValidationException("无效", details=["name 不能为空"], field="name")
        data = exc.to_dict()
        data["details"].append("x")
        assert exc.details == ["name 不能为空"]
        assert data["extra"] == {"field": "name"}
        assert data["status_code"] == 422

    def test_error_code_is_str(self):
        assert ErrorCode.CYCLE_DETECTED == "CYCLE_DETECTED"


class TestTreeErrors:

    def test_node_not_found(self):
        exc = NodeNotFoundError(5, model_name="Category")
        assert isinstance(exc, ResourceNotFoundException)
        assert exc.status_code == 404
        assert exc.code == ErrorCode.NODE_NOT_FOUND
        assert exc.node_id == 5
        assert exc.extra["resource_type"] == "Category"

    def test_structure_errors(self):
        self_parent = SelfParentError(3)
        cycle = CycleError(1, 3)
        for exc in (self_parent, cycle):
            assert isinstance(exc, TreeStructureError)
            assert exc.status_code == 400
        assert self_parent.code == ErrorCode.SELF_PARENT
        assert cycle.code == ErrorCode.CYCLE_DETECTED
        assert cycle.extra == {"node_id": 1, "parent_id": 3}

    def test_transaction_error(self):
        exc = TreeTransactionError(node_id=7)
        assert exc.status_code == 500
        assert exc.code == ErrorCode.TRANSACTION_FAILED


class TestErr:

    def test_shortcuts(self):
        assert Err.not_found().status_code == 404
        assert Err.conflict("别名已存在", field="slug").extra == {"field": "slug"}
        assert Err.invalid().status_code == 422
        assert Err.fail().status_code == 400
