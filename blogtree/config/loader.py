"""YAML 配置加载

使用示例:
    from blogtree.config import ConfigLoader, load_yaml_config, AppSettings

    raw = ConfigLoader.load("config/settings.yaml")
    settings = load_yaml_config("config/settings.yaml", AppSettings, debug=True)
"""

import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Type, TypeVar

import yaml

T = TypeVar("T")


class ConfigLoader:
    """读取 YAML 文件为字典，按绝对路径缓存

    相对路径相对 base_dir 解析，未给出 base_dir 时相对当前工作目录。
    """

    _cache: Dict[str, Dict[str, Any]] = {}

    @staticmethod
    def resolve(config_path: str, base_dir: Optional[str] = None) -> str:
        path = Path(config_path)
        if not path.is_absolute() and base_dir:
            path = Path(base_dir) / path
        return os.path.abspath(path)

    @classmethod
    def load(cls, config_path: str, base_dir: Optional[str] = None, use_cache: bool = True) -> Dict[str, Any]:
        """
        Raises:
            FileNotFoundError: 文件不存在
            yaml.YAMLError: YAML 格式错误
        """
        key = cls.resolve(config_path, base_dir)
        if use_cache and key in cls._cache:
            return cls._cache[key]

        path = Path(key)
        if not path.is_file():
            raise FileNotFoundError(f"配置文件不存在: {key}")
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}

        if use_cache:
            cls._cache[key] = data
        return data

    @classmethod
    def load_section(cls, config_path: str, section: str, base_dir: Optional[str] = None) -> Dict[str, Any]:
        """读取顶层的一个配置段，如 logging；不存在时返回空字典"""
        return dict(cls.load(config_path, base_dir).get(section) or {})

    @classmethod
    def reload(cls, config_path: str, base_dir: Optional[str] = None) -> Dict[str, Any]:
        cls._cache.pop(cls.resolve(config_path, base_dir), None)
        return cls.load(config_path, base_dir)

    @classmethod
    def clear_cache(cls) -> None:
        cls._cache.clear()

    @classmethod
    def get_cached_paths(cls) -> List[str]:
        return list(cls._cache)


def load_yaml_config(config_path: str, settings_class: Type[T], base_dir: Optional[str] = None, **overrides) -> T:
    """YAML 内容与 overrides 合并后构造 Settings 实例，overrides 不写回缓存"""
    values = {**ConfigLoader.load(config_path, base_dir), **overrides}
    return settings_class(**values)
