"""
HTTP API
========
FastAPI router, health endpoints and the application factory.
"""

from .app import Container, build_container, create_app
from .deps import subject_dependency
from .health import create_health_router
from .router import create_auth_router

__all__ = [
    "Container",
    "build_container",
    "create_app",
    "create_auth_router",
    "create_health_router",
    "subject_dependency",
]
