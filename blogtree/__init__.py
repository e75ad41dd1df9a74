"""blogtree - 博客分类与菜单的有序树管理

主要模块:
- blogtree.orm.tree: 有序邻接表（环检测、序号分配、节点移动）
- blogtree.content: 分类与菜单的服务和 API
- blogtree.config / log / exceptions / response: 配置、日志、异常、统一响应
"""

__version__ = "0.1.0"
