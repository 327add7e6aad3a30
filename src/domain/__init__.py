"""
Domain Layer Package

This package contains the core business logic and rules of the application.
It defines entities, gateway contracts, and services without dependencies on
external frameworks or infrastructure concerns.
"""

# Re-export submodules
from src.domain import entities, gateways, ports, services

__all__ = ["entities", "gateways", "services", "ports"]
