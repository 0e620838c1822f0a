"""
Health routes - service status
"""

from fastapi import APIRouter, Depends
from datetime import datetime, timezone

from cryptolens.api.schemas import HealthResponse
from cryptolens.api.dependencies import get_provider_config, get_settings, Settings
from cryptolens.config import ProviderConfig
from cryptolens.domain.models import QueryCategory


router = APIRouter(tags=["Health"])


@router.get(
    "/",
    summary="API root",
    description="Welcome message and basic API information"
)
async def root(settings: Settings = Depends(get_settings)):
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": settings.APP_VERSION,
        "docs": "/docs",
        "query": "/api/v1/query",
    }


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Which data services have credentials, and what the API can answer"
)
async def health_check(
    settings: Settings = Depends(get_settings),
    providers: ProviderConfig = Depends(get_provider_config),
) -> HealthResponse:
    services = providers.configured_keys()
    # Keyless services and the synthetic fallback are always available
    services.update({"defillama": True, "dexscreener": True, "synthetic_fallback": True})
    services["llm"] = settings.llm.enabled

    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc),
        version=settings.APP_VERSION,
        services=services,
        capabilities=[category.value for category in QueryCategory],
    )


@router.get(
    "/ready",
    summary="Readiness check",
    description="Whether the service accepts requests (Kubernetes readiness probe)"
)
async def readiness_check():
    return {"ready": True}


@router.get(
    "/live",
    summary="Liveness check",
    description="Whether the service is alive (Kubernetes liveness probe)"
)
async def liveness_check():
    return {"alive": True}
