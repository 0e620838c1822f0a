"""
HTTP provider base - shared plumbing for every REST data source

Subclasses implement ``_fetch_records``; this base turns every failure
mode into a ``FetchFailure`` so the fallback chain never sees an exception.
"""

import logging
import math
from abc import abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import requests

from cryptolens.config import ProviderConfig
from cryptolens.domain.models import (
    FailureKind,
    FetchCriteria,
    FetchFailure,
    FetchResult,
    FetchSuccess,
    Record,
)
from cryptolens.infrastructure.errors import ProviderFailure
from cryptolens.ports.interfaces import ProviderPort


logger = logging.getLogger(__name__)


class HttpProvider(ProviderPort):
    """
    Base class for JSON-over-HTTP providers

    Implements ProviderPort: one ``fetch`` makes the provider's request(s)
    with the configured timeout and maps the payload to records.
    """

    name = "http"
    USER_AGENT = "CryptoLens/2.0 (+https://github.com/cryptolens)"

    def __init__(self, config: ProviderConfig):
        """
        Args:
            config: API keys, base URLs and timeout
        """
        self.config = config
        self.timeout = config.timeout_seconds

    def fetch(self, criteria: FetchCriteria) -> FetchResult:
        try:
            records = self._fetch_records(criteria)
        except ProviderFailure as e:
            logger.info(f"[{self.name}] {e.message}")
            return FetchFailure(kind=e.kind, detail=e.message)
        except requests.exceptions.Timeout:
            return self._failure(FailureKind.NETWORK_ERROR, f"timed out after {self.timeout}s")
        except requests.exceptions.RequestException as e:
            return self._failure(FailureKind.NETWORK_ERROR, f"request failed: {e}")
        except (KeyError, IndexError, ValueError, TypeError, AttributeError, ArithmeticError) as e:
            return self._failure(FailureKind.MALFORMED_RESPONSE, f"could not parse response: {e}")

        if not records:
            return self._failure(FailureKind.EMPTY_RESULT, "no records returned")

        logger.debug(f"[{self.name}] fetched {len(records)} records")
        return FetchSuccess(records=tuple(records))

    @abstractmethod
    def _fetch_records(self, criteria: FetchCriteria) -> List[Record]:
        """Make the request(s) and map the payload; may raise"""
        pass

    # ==================== Helpers ====================

    def _failure(self, kind: FailureKind, detail: str) -> FetchFailure:
        logger.info(f"[{self.name}] {kind.value}: {detail}")
        return FetchFailure(kind=kind, detail=detail)

    def _get_json(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """GET ``url`` and decode the JSON body"""
        request_headers = {"User-Agent": self.USER_AGENT, "Accept": "application/json"}
        if headers:
            request_headers.update(headers)

        response = requests.get(url, params=params, headers=request_headers, timeout=self.timeout)
        response.raise_for_status()

        try:
            return response.json()
        except ValueError:
            raise ProviderFailure(self.name, FailureKind.MALFORMED_RESPONSE, "response body is not JSON")

    def _malformed(self, reason: str) -> ProviderFailure:
        return ProviderFailure(self.name, FailureKind.MALFORMED_RESPONSE, reason)


def to_float(value: Any, default: Optional[float] = 0.0) -> Optional[float]:
    """Lenient numeric conversion; providers send numbers as strings too"""
    if value is None or value == "":
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return number if math.isfinite(number) else default


def to_int(value: Any, default: int = 0) -> int:
    """Counts (holders, mentions); non-numeric or non-finite values give ``default``"""
    number = to_float(value, None)
    return int(number) if number is not None else default


def from_epoch(value: Any) -> Optional[datetime]:
    """Epoch seconds or milliseconds to an aware UTC datetime"""
    seconds = to_float(value, None)
    if seconds is None:
        return None
    if seconds > 1e12:
        seconds /= 1000.0
    try:
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None


def from_iso(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
