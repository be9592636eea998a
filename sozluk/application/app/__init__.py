"""应用框架模块。

提供 SozlukApp 和 Component 系统。
"""

from .base import Component, SozlukApp
from .components import CORSComponent, DatabaseComponent, RequestLoggingComponent

__all__ = [
    "CORSComponent",
    "Component",
    "DatabaseComponent",
    "RequestLoggingComponent",
    "SozlukApp",
]
