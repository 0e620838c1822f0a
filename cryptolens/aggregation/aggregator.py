"""
Fallback aggregator - walk a provider chain until one yields usable records

Design principles:
1. Short-circuit: the first provider with validated, refined records wins;
   later providers are never called
2. Never empty-handed: when every real provider fails, the synthetic
   generator supplies exactly ``criteria.limit`` records
3. Observable: every step is reported to the event sink and kept as a
   ``ProviderAttempt``
"""

import logging
from typing import List, Optional, Sequence

from cryptolens.aggregation.chains import CategoryChain
from cryptolens.aggregation.validator import clean
from cryptolens.domain.models import (
    SYNTHETIC_PROVENANCE,
    AggregationResult,
    FailureKind,
    FetchCriteria,
    FetchFailure,
    ProviderAttempt,
    Record,
)
from cryptolens.infrastructure.errors import ValidationExhaustion
from cryptolens.ports.interfaces import EventSink


logger = logging.getLogger(__name__)


class FallbackAggregator:
    """
    Runs one category chain

    Synchronous by design; the orchestrator moves each aggregation onto a
    worker thread.
    """

    def __init__(self, events: EventSink):
        self.events = events

    def aggregate(self, chain: CategoryChain, criteria: FetchCriteria) -> AggregationResult:
        """
        Fetch, clean and refine provider by provider

        Args:
            chain: the category's ordered providers and synthetic generator
            criteria: what to fetch

        Returns:
            AggregationResult: records of the chain's kind with provenance
        """
        attempts: List[ProviderAttempt] = []
        exhausted_sources: List[ValidationExhaustion] = []

        for provider in chain.providers:
            try:
                result = provider.fetch(criteria)
            except Exception as e:
                logger.warning(f"Provider {provider.name} raised instead of failing: {e}", exc_info=True)
                result = FetchFailure(kind=FailureKind.NETWORK_ERROR, detail=f"unexpected error: {e}")

            if isinstance(result, FetchFailure):
                attempts.append(ProviderAttempt(provider.name, result.kind.value))
                self.events.emit(
                    "provider.failed",
                    category=chain.category.value,
                    provider=provider.name,
                    kind=result.kind.value,
                    detail=result.detail,
                )
                continue

            raw_count = len(result.records)
            valid = clean(result.records)
            if not valid:
                exhausted_sources.append(ValidationExhaustion(provider.name, raw_count))
                attempts.append(ProviderAttempt(provider.name, "invalid", raw_count, 0))
                self.events.emit(
                    "provider.failed",
                    category=chain.category.value,
                    provider=provider.name,
                    kind="invalid",
                    detail=exhausted_sources[-1].message,
                )
                continue

            refined = chain.apply(valid, criteria)
            attempts.append(ProviderAttempt(provider.name, "ok", raw_count, len(refined)))
            if not refined:
                self.events.emit(
                    "provider.failed",
                    category=chain.category.value,
                    provider=provider.name,
                    kind="filtered",
                    detail=f"{len(valid)} valid records, none matched the criteria",
                )
                continue

            self.events.emit(
                "provider.succeeded",
                category=chain.category.value,
                provider=provider.name,
                count=len(refined),
            )
            return AggregationResult(
                kind=chain.kind,
                records=tuple(refined),
                provenance=provider.name,
                attempts=tuple(attempts),
            )

        return self._synthesize(chain, criteria, attempts, exhausted_sources)

    def _synthesize(
        self,
        chain: CategoryChain,
        criteria: FetchCriteria,
        attempts: List[ProviderAttempt],
        exhausted_sources: Sequence[ValidationExhaustion],
    ) -> AggregationResult:
        records = chain.synthetic.generate(criteria)
        exhausted = bool(exhausted_sources)

        fields = {"category": chain.category.value, "count": len(records)}
        if exhausted:
            fields["validation_exhausted"] = [e.to_dict() for e in exhausted_sources]
        self.events.emit("aggregation.synthetic", **fields)

        return AggregationResult(
            kind=chain.kind,
            records=tuple(records),
            provenance=SYNTHETIC_PROVENANCE,
            attempts=tuple(attempts),
            validation_exhausted=exhausted,
        )


def merge_combined(*results: AggregationResult) -> List[Record]:
    """
    Merge token aggregations into one ranking

    Market cap descending, ties by name ascending, remaining ties keep the
    per-source order (``sorted`` is stable).
    """
    merged: List[Record] = []
    for result in results:
        merged.extend(result.records)
    return sorted(merged, key=lambda token: (-token.market_cap, token.name))


def provenance_of(results: Sequence[Optional[AggregationResult]]) -> List[str]:
    """Distinct provenance tags in first-seen order"""
    seen: List[str] = []
    for result in results:
        if result is not None and result.provenance not in seen:
            seen.append(result.provenance)
    return seen
