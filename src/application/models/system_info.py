"""Lightweight settings structures consumed by the application layer."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SystemInfo:
    """Subset of configuration required by system-related use cases."""

    title: str
    description: str
    version: str
    environment: str
    git_commit: str
    build_time: str
    home_assistant_url: str
    home_assistant_proxy_prefix: str
    home_assistant_token_configured: bool
    circle_api_url: str
    circle_proxy_prefix: str
    circle_api_key_configured: bool
    entity_secret_mode: str
