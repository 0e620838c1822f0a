"""
API layer - FastAPI application

Contains:
- main: application factory and exception handlers
- routes: query and health endpoints
- schemas: request/response models
- dependencies: service container
"""

from cryptolens.api.main import app, create_app
from cryptolens.api.schemas import (
    QueryRequest,
    QueryResponse,
    HealthResponse,
    ErrorResponse,
)
from cryptolens.api.dependencies import (
    get_orchestrator,
    get_settings,
    ServiceContainer,
)

__all__ = [
    # application
    "app",
    "create_app",
    # request/response models
    "QueryRequest",
    "QueryResponse",
    "HealthResponse",
    "ErrorResponse",
    # dependencies
    "get_orchestrator",
    "get_settings",
    "ServiceContainer",
]
