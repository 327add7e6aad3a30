"""
Composition root.

Settings are read from the environment and .env, wired into the
dependency container, and exposed through the ASGI app (``src.main.app``)
and the command line (``python -m src.main``).
"""

from .config import AppSettings, get_settings
from .container import AppContainer, app_lifespan, get_container, init_container

__all__ = [
    "AppContainer",
    "AppSettings",
    "app_lifespan",
    "get_container",
    "get_settings",
    "init_container",
]
