"""内容模块辅助定义"""


class _Unset:
    """未传参数的占位值，与显式传入的 None（根级别）区分"""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET = _Unset()


def clean_text(value):
    """去掉首尾空白，空字符串视为 None"""
    if value is None:
        return None
    value = str(value).strip()
    return value or None
