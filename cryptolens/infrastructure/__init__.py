"""
Infrastructure layer - cross-cutting concerns

Contains:
- logging: structured logging setup
- errors: exception hierarchy and conversion helpers
"""

from cryptolens.infrastructure.logging import (
    setup_logging,
    get_logger,
    LogContext,
    StructuredFormatter,
    SimpleFormatter,
)
from cryptolens.infrastructure.errors import (
    CryptoLensError,
    InvalidInputError,
    ProviderFailure,
    ValidationExhaustion,
    SynthesisFailure,
    InternalFailure,
    to_internal_failure,
)

__all__ = [
    # logging
    "setup_logging",
    "get_logger",
    "LogContext",
    "StructuredFormatter",
    "SimpleFormatter",
    # errors
    "CryptoLensError",
    "InvalidInputError",
    "ProviderFailure",
    "ValidationExhaustion",
    "SynthesisFailure",
    "InternalFailure",
    "to_internal_failure",
]
