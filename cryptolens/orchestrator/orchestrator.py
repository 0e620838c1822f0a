"""
Query orchestrator - single entry point for answering a query

Design principles:
1. Single entry: every query goes through ``handle_query``
2. Dependency injection: chains, resolver, synthesizer and event sink are
   passed in
3. Failure isolation: supplementary data never breaks the primary answer
4. Concurrency: independent aggregations run together on worker threads
"""

import asyncio
import dataclasses
import logging
import time
from typing import Awaitable, List, Optional, Tuple

from cryptolens.adapters.synthetic_adapter import DEFAULT_SENTIMENT_SYMBOLS
from cryptolens.aggregation.aggregator import FallbackAggregator, merge_combined, provenance_of
from cryptolens.aggregation.chains import ChainFactory
from cryptolens.domain.models import (
    AggregationResult,
    FetchCriteria,
    Orchestration,
    QueryCategory,
    QueryIntent,
    QueryMetadata,
    QueryResult,
    Record,
)
from cryptolens.infrastructure.errors import InvalidInputError, to_internal_failure
from cryptolens.infrastructure.logging import LogContext
from cryptolens.orchestrator.intent_resolver import IntentResolver
from cryptolens.ports.interfaces import EventSink, LLMPort
from cryptolens.presentation.synthesizer import ResponseSynthesizer


logger = logging.getLogger(__name__)


# Records requested per category; symbol-keyed categories ask for one per symbol
CATEGORY_LIMITS = {
    QueryCategory.TOKEN_LAUNCH: 20,
    QueryCategory.ECOSYSTEM_TOKEN: 20,
    QueryCategory.COMBINED: 20,
    QueryCategory.DEFI_TVL: 20,
    QueryCategory.DEFI_YIELD: 20,
    QueryCategory.GENERAL_MARKET: 10,
    QueryCategory.TRENDING: 10,
    QueryCategory.NEWS: 10,
}
SUPPLEMENTARY_NEWS_LIMIT = 5


class QueryOrchestrator:
    """
    Query orchestrator

    Responsibilities:
    1. Validate the query and resolve its intent
    2. Run the category's aggregation(s) plus any supplementary ones
    3. Have the synthesizer write the answer
    4. Return a QueryResult
    """

    def __init__(
        self,
        chain_factory: ChainFactory,
        resolver: IntentResolver,
        synthesizer: ResponseSynthesizer,
        events: EventSink,
    ):
        """
        Args:
            chain_factory: builds fresh provider chains per query
            resolver: turns text into an intent
            synthesizer: turns records into an answer
            events: structured event sink
        """
        self.chains = chain_factory
        self.resolver = resolver
        self.synthesizer = synthesizer
        self.events = events
        self.aggregator = FallbackAggregator(events)

    async def handle_query(self, query: str) -> QueryResult:
        """
        Answer one free-text query

        Args:
            query: the user's question

        Returns:
            QueryResult: answer, records, metadata and timing

        Raises:
            InvalidInputError: ``query`` is not a non-empty string
            InternalFailure: an unexpected error occurred; carries elapsed_ms
        """
        if not isinstance(query, str) or not query.strip():
            raise InvalidInputError("Query must be a non-empty string", field="query")

        start = time.perf_counter()
        try:
            resolution = await asyncio.to_thread(self.resolver.resolve, query)
            intent = resolution.intent
            self.events.emit(
                "intent.resolved",
                source=resolution.source.value,
                category=intent.category.value,
                symbols=list(intent.symbols),
            )

            orchestration = await self.handle(intent, started=start)

            answer = await asyncio.to_thread(
                self.synthesizer.synthesize,
                query,
                orchestration.intent,
                list(orchestration.records),
                orchestration.metadata,
                orchestration.elapsed_ms,
                orchestration.validation_exhausted,
            )
        except Exception as e:
            elapsed_ms = int((time.perf_counter() - start) * 1000)
            raise to_internal_failure(e, elapsed_ms, "handle_query") from e

        result = QueryResult(
            query=query,
            answer=answer,
            records=orchestration.records,
            metadata=orchestration.metadata,
            intent=orchestration.intent,
            resolution_source=resolution.source,
            elapsed_ms=orchestration.elapsed_ms,
        )
        self.events.emit(
            "query.completed",
            category=orchestration.intent.category.value,
            sources=list(orchestration.metadata.providers),
            total_results=orchestration.metadata.total_count,
            elapsed_ms=orchestration.elapsed_ms,
        )
        return result

    async def handle(self, intent: QueryIntent, started: Optional[float] = None) -> Orchestration:
        """
        Gather every record an intent needs

        Args:
            intent: the resolved intent
            started: ``time.perf_counter()`` reading the elapsed time counts
                from; defaults to now. ``handle_query`` passes its own start
                so intent resolution is included

        Returns:
            Orchestration: primary records followed by supplementary ones
        """
        start = started if started is not None else time.perf_counter()
        intent = self._normalize(intent)

        supplementary = self._supplementary_tasks(intent)
        with LogContext(logger, "aggregation", category=intent.category.value, supplementary=len(supplementary)):
            outcomes = await asyncio.gather(self._primary(intent), *supplementary)
        (records, primaries), extras = outcomes[0], outcomes[1:]

        all_records: List[Record] = list(records)
        for extra in extras:
            if extra is not None:
                all_records.extend(extra.records)

        kind = primaries[0].kind
        metadata = QueryMetadata(
            kind=kind,
            providers=tuple(provenance_of(list(primaries) + list(extras))),
            total_count=len(all_records),
        )
        return Orchestration(
            intent=intent,
            records=tuple(all_records),
            metadata=metadata,
            elapsed_ms=int((time.perf_counter() - start) * 1000),
            validation_exhausted=any(p.validation_exhausted for p in primaries),
            aggregations=tuple(primaries) + tuple(e for e in extras if e is not None),
        )

    # ==================== Dispatch ====================

    @staticmethod
    def _normalize(intent: QueryIntent) -> QueryIntent:
        if intent.category == QueryCategory.PRICE and not intent.symbols:
            return dataclasses.replace(intent, category=QueryCategory.GENERAL_MARKET)
        if intent.category == QueryCategory.SENTIMENT and not intent.symbols:
            return dataclasses.replace(intent, symbols=DEFAULT_SENTIMENT_SYMBOLS)
        return intent

    @staticmethod
    def _criteria(intent: QueryIntent, category: QueryCategory) -> FetchCriteria:
        if category in (QueryCategory.PRICE, QueryCategory.SENTIMENT):
            limit = len(intent.symbols)
        else:
            limit = CATEGORY_LIMITS[category]
        return FetchCriteria(
            symbols=intent.symbols,
            timeframe_hours=intent.timeframe_hours,
            threshold=intent.threshold,
            chain=intent.chain,
            limit=limit,
        )

    async def _aggregate(self, category: QueryCategory, criteria: FetchCriteria) -> AggregationResult:
        chain = self.chains.build(category)
        return await asyncio.to_thread(self.aggregator.aggregate, chain, criteria)

    async def _primary(self, intent: QueryIntent) -> Tuple[List[Record], List[AggregationResult]]:
        criteria = self._criteria(intent, intent.category)

        if intent.category == QueryCategory.COMBINED:
            pumpfun, bonk = await asyncio.gather(
                self._aggregate(QueryCategory.TOKEN_LAUNCH, dataclasses.replace(criteria, platform="pumpfun")),
                self._aggregate(QueryCategory.ECOSYSTEM_TOKEN, dataclasses.replace(criteria, platform="bonk")),
            )
            return merge_combined(pumpfun, bonk), [pumpfun, bonk]

        result = await self._aggregate(intent.category, criteria)
        return list(result.records), [result]

    def _supplementary_tasks(self, intent: QueryIntent) -> List[Awaitable[Optional[AggregationResult]]]:
        tasks = []
        if intent.include_news and intent.category != QueryCategory.NEWS:
            criteria = FetchCriteria(symbols=intent.symbols, limit=SUPPLEMENTARY_NEWS_LIMIT)
            tasks.append(self._supplementary(QueryCategory.NEWS, criteria))
        if intent.include_sentiment and intent.symbols and intent.category != QueryCategory.SENTIMENT:
            criteria = FetchCriteria(symbols=intent.symbols, limit=len(intent.symbols))
            tasks.append(self._supplementary(QueryCategory.SENTIMENT, criteria))
        return tasks

    async def _supplementary(self, category: QueryCategory, criteria: FetchCriteria) -> Optional[AggregationResult]:
        try:
            return await self._aggregate(category, criteria)
        except Exception as e:
            logger.warning(f"Supplementary {category.value} data failed: {e}", exc_info=True)
            self.events.emit("supplementary.failed", category=category.value, error=str(e))
            return None


def create_orchestrator(
    chain_factory: ChainFactory,
    events: EventSink,
    llm_port: Optional[LLMPort] = None,
) -> QueryOrchestrator:
    """
    Create a QueryOrchestrator

    Wires the resolver and synthesizer around the same language model port;
    convenient for dependency injection and tests.
    """
    return QueryOrchestrator(
        chain_factory=chain_factory,
        resolver=IntentResolver(llm_port=llm_port),
        synthesizer=ResponseSynthesizer(llm_port=llm_port, events=events),
        events=events,
    )
