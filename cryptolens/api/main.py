"""
CryptoLens API - application entry point

Crypto market query API built on a Clean/Hexagonal architecture.

Features:
- Intent resolution (language model with a deterministic rule fallback)
- Ordered provider fallback chains ending in synthetic data
- Answers that never fail for lack of upstream data
- Request tracing and structured logging
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import time
import logging

from cryptolens.api.routes import query_router, health_router
from cryptolens.api.dependencies import get_settings, get_service_container
from cryptolens.api.schemas import ErrorResponse
from cryptolens.domain.models import ErrorCode
from cryptolens.infrastructure.errors import CryptoLensError, InvalidInputError, InternalFailure
from cryptolens.infrastructure.logging import setup_logging


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle"""
    logger.info("CryptoLens API starting...")

    # Warm up the service container
    try:
        get_service_container()
        logger.info("Service container initialized")
    except Exception as e:
        logger.error(f"Service container initialization failed: {e}")

    yield

    logger.info("CryptoLens API shutting down...")


def _error_response(
    status_code: int,
    error_code: str,
    message: str,
    request: Request,
    details: dict = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(
            success=False,
            error_code=error_code,
            error_message=message,
            details=details or {},
            request_id=request.headers.get("X-Request-ID"),
        ).model_dump(mode="json"),
    )


def create_app() -> FastAPI:
    """Create the FastAPI application"""
    settings = get_settings()
    setup_logging(level=settings.LOG_LEVEL, json_format=settings.LOG_JSON)

    app = FastAPI(
        title=settings.APP_NAME,
        description="""
# CryptoLens API

Answers free-text questions about the crypto market: pump.fun and Bonk
launches, DeFi TVL and yields, prices, news, trending coins and sentiment.

## Quick start

```python
import requests

response = requests.post(
    "http://localhost:8000/api/v1/query",
    json={"query": "pump.fun tokens above $19,000 market cap in the last hour"}
)
print(response.json()["answer"])
```
        """,
        version=settings.APP_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Request logging middleware
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start_time = time.time()

        request_id = request.headers.get("X-Request-ID", str(time.time()))

        logger.info(f"[{request_id}] {request.method} {request.url.path}")

        try:
            response = await call_next(request)

            duration = (time.time() - start_time) * 1000
            logger.info(
                f"[{request_id}] done {response.status_code} - {duration:.2f}ms"
            )

            response.headers["X-Request-ID"] = request_id
            response.headers["X-Response-Time"] = f"{duration:.2f}ms"

            return response

        except Exception as e:
            duration = (time.time() - start_time) * 1000
            logger.error(
                f"[{request_id}] error - {duration:.2f}ms - {str(e)}"
            )
            raise

    # ==================== Exception handlers ====================

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = [
            {"field": ".".join(str(part) for part in error.get("loc", ())), "message": error.get("msg", "")}
            for error in exc.errors()
        ]
        return _error_response(
            400,
            ErrorCode.INVALID_INPUT.value,
            "Query is missing or empty",
            request,
            details={"errors": errors},
        )

    @app.exception_handler(InvalidInputError)
    async def invalid_input_handler(request: Request, exc: InvalidInputError):
        return _error_response(400, exc.error_code.value, exc.message, request, details=exc.details)

    @app.exception_handler(InternalFailure)
    async def internal_failure_handler(request: Request, exc: InternalFailure):
        return _error_response(500, exc.error_code.value, exc.message, request, details=exc.details)

    @app.exception_handler(CryptoLensError)
    async def cryptolens_error_handler(request: Request, exc: CryptoLensError):
        logger.error(f"Unrecovered {exc.error_code.value}: {exc.message}")
        return _error_response(500, ErrorCode.INTERNAL_ERROR.value, InternalFailure.GENERIC_MESSAGE, request)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return _error_response(
            500,
            ErrorCode.INTERNAL_ERROR.value,
            "Internal server error, please try again later",
            request,
        )

    app.include_router(health_router)
    app.include_router(query_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    uvicorn.run(
        "cryptolens.api.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )
