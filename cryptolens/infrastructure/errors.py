"""
Error handling - unified error definitions

Provides:
- Business exception hierarchy
- Error code mapping
- Conversion of unexpected exceptions

Only ``InvalidInputError`` and ``InternalFailure`` ever reach a caller.
``ProviderFailure``, ``ValidationExhaustion`` and ``SynthesisFailure`` are
recovered locally by the fallback chain or the synthesizer tiers.
"""

from typing import Any, Dict, Optional
import logging

from cryptolens.domain.models import ErrorCode, FailureKind


logger = logging.getLogger(__name__)


# ==================== Exception hierarchy ====================

class CryptoLensError(Exception):
    """CryptoLens base exception"""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a dictionary"""
        return {
            "error_code": self.error_code.value,
            "message": self.message,
            "details": self.details,
        }


class InvalidInputError(CryptoLensError):
    """The request is malformed; reported to the caller as a client error"""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(
            message=message,
            error_code=ErrorCode.INVALID_INPUT,
            details={"field": field} if field else {}
        )


class ProviderFailure(CryptoLensError):
    """A provider call failed (network, timeout, malformed payload)"""

    def __init__(self, source: str, kind: FailureKind, reason: Optional[str] = None):
        message = f"Provider '{source}' failed with {kind.value}"
        if reason:
            message += f": {reason}"
        self.source = source
        self.kind = kind
        super().__init__(
            message=message,
            error_code=ErrorCode.PROVIDER_FAILURE,
            details={"source": source, "kind": kind.value, "reason": reason}
        )


class ValidationExhaustion(CryptoLensError):
    """Every record a provider returned failed the sanity checks"""

    def __init__(self, source: str, raw_count: int):
        super().__init__(
            message=f"All {raw_count} records from '{source}' failed validation",
            error_code=ErrorCode.VALIDATION_EXHAUSTED,
            details={"source": source, "raw_count": raw_count}
        )


class SynthesisFailure(CryptoLensError):
    """The language model could not produce an answer"""

    def __init__(self, message: str, provider: Optional[str] = None):
        super().__init__(
            message=message,
            error_code=ErrorCode.SYNTHESIS_FAILURE,
            details={"provider": provider}
        )


class InternalFailure(CryptoLensError):
    """Unexpected exception during orchestration"""

    GENERIC_MESSAGE = "Failed to process query"

    def __init__(self, elapsed_ms: int, cause: Optional[BaseException] = None):
        self.elapsed_ms = elapsed_ms
        self.cause = cause
        super().__init__(
            message=self.GENERIC_MESSAGE,
            error_code=ErrorCode.INTERNAL_ERROR,
            details={"elapsed_ms": elapsed_ms}
        )


# ==================== Error handling helpers ====================

def to_internal_failure(e: Exception, elapsed_ms: int, context: Optional[str] = None) -> CryptoLensError:
    """
    Convert an unexpected exception into what the caller may see

    Args:
        e: original exception
        elapsed_ms: time spent on the request so far
        context: operation name used in the log line

    Returns:
        CryptoLensError: ``e`` itself for client errors, otherwise an
        ``InternalFailure`` carrying the elapsed time
    """
    if isinstance(e, (InvalidInputError, InternalFailure)):
        return e

    logger.error(
        f"Unexpected failure in {context or 'orchestration'} after {elapsed_ms}ms: {e}",
        exc_info=e,
    )
    return InternalFailure(elapsed_ms=elapsed_ms, cause=e)
