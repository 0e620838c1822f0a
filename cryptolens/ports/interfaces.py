"""
Port interfaces - the core of dependency inversion

Every interaction with the outside world goes through these interfaces;
concrete implementations live in the adapters layer.

Design principles:
1. Interface segregation: each port holds only related methods
2. Dependency inversion: aggregation and orchestration depend on ports only
3. Failure as data: providers return ``FetchFailure`` instead of raising
"""

from abc import ABC, abstractmethod
from typing import Any, List

from cryptolens.domain.models import (
    FetchCriteria,
    FetchResult,
    Record,
    RecordKind,
)


# ==================== Data ports ====================

class ProviderPort(ABC):
    """One external data source for one record category"""

    #: Provenance tag reported when this provider satisfies an aggregation
    name: str = "provider"

    @abstractmethod
    def fetch(self, criteria: FetchCriteria) -> FetchResult:
        """
        Fetch and shape-normalize records

        Args:
            criteria: symbols, time window, threshold, chain and limit

        Returns:
            FetchResult: ``FetchSuccess`` with records of the provider's
            category, or ``FetchFailure`` with the failure kind.
            Never raises.
        """
        pass


class SyntheticPort(ABC):
    """Last link of every fallback chain"""

    kind: RecordKind

    @abstractmethod
    def generate(self, criteria: FetchCriteria) -> List[Record]:
        """
        Generate plausible placeholder records

        Args:
            criteria: the same criteria the real providers received

        Returns:
            List[Record]: exactly ``criteria.limit`` records (one per
            symbol for symbol-keyed categories) that satisfy the criteria.
            Never raises.
        """
        pass


# ==================== Service ports ====================

class LLMPort(ABC):
    """Language-model service"""

    @abstractmethod
    def extract_intent(self, query: str) -> str:
        """
        Ask the model for a JSON intent

        Args:
            query: the user's query

        Returns:
            str: raw model output, expected to be a JSON object

        Raises:
            Exception: any transport or provider error
        """
        pass

    @abstractmethod
    def synthesize_answer(self, prompt: str) -> str:
        """
        Ask the model for a natural-language answer

        Args:
            prompt: fully built synthesis prompt

        Returns:
            str: answer text

        Raises:
            SynthesisFailure: the call failed
        """
        pass


class EventSink(ABC):
    """Structured observability events emitted by the core"""

    @abstractmethod
    def emit(self, event: str, **fields: Any) -> None:
        """
        Record one event

        Args:
            event: dotted event name, e.g. ``provider.failed``
            **fields: JSON-serializable event attributes
        """
        pass
