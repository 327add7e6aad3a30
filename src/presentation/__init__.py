"""HTTP surface: device control, dev proxies and system endpoints."""

from src.presentation import controllers

__all__ = ["controllers"]
