"""Application 层。

- app: 应用框架与组件
- config: 配置
- errors: 应用层异常与错误处理链
- features: 命令/查询处理器
- routers: HTTP 接口
"""
