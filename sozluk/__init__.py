"""Sozluk - 论坛/词典站点后端。

模块结构：
- common: 最基础层（异常基类、日志系统）
- domain: 领域层（实体模型、仓储接口与实现、事务管理）
- infrastructure: 基础设施层（存储上下文、数据库连接管理）
- application: 应用层（配置、错误处理、登录处理器、HTTP 路由）
- utils: 工具（密码哈希、JWT）
- commands: 命令行工具
"""

__version__ = "0.1.0"
