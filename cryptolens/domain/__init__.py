"""
Domain layer - core business entities and value objects

Contains:
- QueryIntent: structured reading of a query
- Record variants: TokenRecord, ProtocolRecord, YieldPoolRecord,
  PriceRecord, NewsRecord, TrendingRecord, SentimentRecord
- AggregationResult: validated records of one category plus provenance
- QueryResult: the answer returned for one query
"""

from cryptolens.domain.models import (
    QueryCategory,
    Metric,
    RecordKind,
    FailureKind,
    ResolutionSource,
    ErrorCode,
    SYNTHETIC_PROVENANCE,
    QueryIntent,
    Parsed,
    FallbackUsed,
    IntentResolution,
    TokenRecord,
    ProtocolRecord,
    YieldPoolRecord,
    PriceRecord,
    NewsRecord,
    TrendingRecord,
    SentimentRecord,
    Record,
    FetchCriteria,
    FetchSuccess,
    FetchFailure,
    FetchResult,
    ProviderAttempt,
    AggregationResult,
    QueryMetadata,
    Orchestration,
    QueryResult,
)

__all__ = [
    "QueryCategory",
    "Metric",
    "RecordKind",
    "FailureKind",
    "ResolutionSource",
    "ErrorCode",
    "SYNTHETIC_PROVENANCE",
    "QueryIntent",
    "Parsed",
    "FallbackUsed",
    "IntentResolution",
    "TokenRecord",
    "ProtocolRecord",
    "YieldPoolRecord",
    "PriceRecord",
    "NewsRecord",
    "TrendingRecord",
    "SentimentRecord",
    "Record",
    "FetchCriteria",
    "FetchSuccess",
    "FetchFailure",
    "FetchResult",
    "ProviderAttempt",
    "AggregationResult",
    "QueryMetadata",
    "Orchestration",
    "QueryResult",
]
