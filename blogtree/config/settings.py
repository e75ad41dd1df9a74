"""
配置模块
提供 blogtree 的默认配置，业务项目可以继承并覆盖
"""

import re
from typing import Union

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings


_SIZE_UNITS = {"B": 1, "KB": 1024, "MB": 1024 ** 2, "GB": 1024 ** 3}


def parse_file_size(size_str: Union[str, int, float]) -> int:
    """解析文件大小字符串，如 "10MB" -> 10485760

    Raises:
        ValueError: 格式无效
    """
    if isinstance(size_str, (int, float)):
        return int(size_str)

    match = re.fullmatch(r"\s*([\d.]+)\s*([KMG]?B)?\s*", str(size_str).upper())
    if not match:
        raise ValueError(f"无效的文件大小: {size_str}")
    number, unit = match.groups()
    return int(float(number) * _SIZE_UNITS[unit or "B"])


class DatabaseSettings(BaseSettings):
    """数据库配置

    使用示例:
        from blogtree.config import DatabaseSettings

        db_config = DatabaseSettings(url="sqlite:///./blog.db")
    """
    url: str = Field(default="sqlite:///./blog.db", description="数据库连接URL")
    echo: bool = Field(default=False, description="是否打印SQL语句")
    pool_pre_ping: bool = Field(default=True, description="连接前检查")
    pool_size: int = Field(default=5, description="连接池大小")
    max_overflow: int = Field(default=10, description="连接池最大溢出")
    pool_timeout: int = Field(default=30, description="连接超时（秒）")
    pool_recycle: int = Field(default=3600, description="连接回收时间（秒）")

    class Config:
        env_prefix = "BLOGTREE_DB_"


class LoggingSettings(BaseSettings):
    """日志配置

    使用示例:
        log_config = LoggingSettings(level="DEBUG", file_path="logs/app.log")
        max_bytes = log_config.parsed_file_max_bytes
    """
    level: str = Field(default="INFO", description="日志级别")
    file_path: str = Field(default="", description="日志文件路径，为空表示只输出到控制台")
    file_max_bytes: str = Field(default="10MB", description="单个日志文件最大大小")
    file_backup_count: int = Field(default=5, description="保留的备份文件数量")
    file_encoding: str = Field(default="utf-8", description="文件编码")
    enable_console: bool = Field(default=True, description="是否启用控制台输出")

    sql_log_enabled: bool = Field(default=False, description="是否启用SQL日志")
    sql_log_level: str = Field(default="DEBUG", description="SQL日志级别")

    @computed_field
    @property
    def parsed_file_max_bytes(self) -> int:
        """解析文件最大字节数字符串为整数"""
        return parse_file_size(self.file_max_bytes)

    class Config:
        env_prefix = "BLOGTREE_LOG_"


class TreeSettings(BaseSettings):
    """树形排序配置

    分类与菜单共用同一套排序规则：
        - order_step: 追加节点时在同级最大序号上增加的步长
        - renumber_on_exhaustion: 相邻序号之间没有空隙时，是否按步长重新编号整个同级分组
        - protected_category_slug: 不可删除的兜底分类，删除分类时文章转移到此分类
    """
    order_step: int = Field(default=10, ge=1, description="追加节点的排序步长")
    renumber_on_exhaustion: bool = Field(default=True, description="序号耗尽时是否重新编号同级分组")
    protected_category_slug: str = Field(default="uncategorized", description="兜底分类的 slug")

    class Config:
        env_prefix = "BLOGTREE_TREE_"


class AppSettings(BaseSettings):
    """应用基础配置

    配置优先级（从高到低）:
        环境变量 > YAML 配置文件 > 代码中的默认值

    内置子配置及环境变量前缀:
        - database: DatabaseSettings (BLOGTREE_DB_)
        - logging:  LoggingSettings  (BLOGTREE_LOG_)
        - tree:     TreeSettings     (BLOGTREE_TREE_)

    使用示例:
        from blogtree.config import AppSettings, load_yaml_config

        settings = load_yaml_config("config/settings.yaml", AppSettings)

    YAML 配置示例 (config/settings.yaml):
        app_name: "My Blog"
        database:
          url: "sqlite:///./blog.db"
        logging:
          level: "INFO"
        tree:
          order_step: 10
    """
    app_name: str = Field(default="blogtree", description="应用名称")
    api_prefix: str = Field(default="/api", description="API 路由前缀")
    debug: bool = Field(default=False, description="调试模式")

    database: DatabaseSettings = DatabaseSettings()
    logging: LoggingSettings = LoggingSettings()
    tree: TreeSettings = TreeSettings()

    class Config:
        env_prefix = "BLOGTREE_"
