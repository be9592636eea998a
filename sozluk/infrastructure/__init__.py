"""Infrastructure 层：数据库连接与存储上下文。"""
