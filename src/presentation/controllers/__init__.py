"""
Controllers Package - Presentation Layer

This package contains FastAPI controllers (routers) that handle
HTTP requests and responses. Controllers are responsible for
input validation, error handling, and mapping between API DTOs
and application layer use cases.
"""

from .circle_proxy_controller import router as circle_proxy_router
from .devices_controller import router as devices_router
from .home_assistant_proxy_controller import router as home_assistant_proxy_router
from .system_controller import router as system_router

__all__ = [
    "circle_proxy_router",
    "devices_router",
    "home_assistant_proxy_router",
    "system_router",
]
