"""应用层功能（命令/查询处理器）。"""
