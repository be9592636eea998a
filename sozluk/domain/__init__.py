"""Domain 层。

- models: 实体与映射
- repository: 通用仓储与具体实体仓储
- transaction: 工作单元
- exceptions: 领域异常
"""
