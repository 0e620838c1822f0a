"""
Core domain models - every business entity and value object

Design principles:
1. Immutability: value objects are frozen dataclasses
2. Explicit variants: every record carries a ``kind`` discriminant
3. Self-describing: each field has one clear meaning
4. Serializable: ``to_dict()`` produces JSON-ready dictionaries
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, ClassVar, Dict, Optional, Tuple, Union


# ==================== Enumerations ====================

class QueryCategory(str, Enum):
    """What a query is asking about"""
    TOKEN_LAUNCH = "token_launch"           # pump.fun launches
    ECOSYSTEM_TOKEN = "ecosystem_token"     # Bonk ecosystem tokens
    COMBINED = "combined"                   # pump.fun + Bonk together
    DEFI_TVL = "defi_tvl"                   # protocol TVL rankings
    DEFI_YIELD = "defi_yield"               # yield farming pools
    PRICE = "price"                         # spot prices for tickers
    NEWS = "news"                           # crypto headlines
    TRENDING = "trending"                   # trending coins
    SENTIMENT = "sentiment"                 # social sentiment
    GENERAL_MARKET = "general_market"       # top coins by market cap


class Metric(str, Enum):
    """Measure the query focuses on"""
    MCAP = "mcap"
    VOLUME = "volume"
    COUNT = "count"
    COMPARISON = "comparison"
    PRICE = "price"
    TVL = "tvl"
    APY = "apy"
    SENTIMENT = "sentiment"
    NEWS = "news"


class RecordKind(str, Enum):
    """Discriminant of the record union"""
    TOKEN = "token"
    PROTOCOL = "protocol"
    YIELD_POOL = "yield_pool"
    PRICE = "price"
    NEWS = "news"
    TRENDING = "trending"
    SENTIMENT = "sentiment"


class FailureKind(str, Enum):
    """Why a provider produced nothing usable"""
    NETWORK_ERROR = "network_error"
    MALFORMED_RESPONSE = "malformed_response"
    EMPTY_RESULT = "empty_result"


class ResolutionSource(str, Enum):
    """Which intent parser produced the intent"""
    PARSED = "parsed"
    FALLBACK = "fallback"


class ErrorCode(str, Enum):
    """Error codes"""
    SUCCESS = "success"
    INVALID_INPUT = "invalid_input"
    PROVIDER_FAILURE = "provider_failure"
    VALIDATION_EXHAUSTED = "validation_exhausted"
    SYNTHESIS_FAILURE = "synthesis_failure"
    INTERNAL_ERROR = "internal_error"


SYNTHETIC_PROVENANCE = "synthetic"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


# ==================== Query intent ====================

@dataclass(frozen=True)
class QueryIntent:
    """Structured reading of a free-text query"""
    category: QueryCategory
    metric: Metric = Metric.COUNT
    threshold: Optional[float] = None
    timeframe_hours: float = 24.0
    symbols: Tuple[str, ...] = ()
    chain: Optional[str] = None
    comparison: bool = False
    include_news: bool = False
    include_sentiment: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category.value,
            "metric": self.metric.value,
            "threshold": self.threshold,
            "timeframe_hours": self.timeframe_hours,
            "symbols": list(self.symbols),
            "chain": self.chain,
            "comparison": self.comparison,
            "include_news": self.include_news,
            "include_sentiment": self.include_sentiment,
        }


@dataclass(frozen=True)
class Parsed:
    """The language model's reading was well-formed and is used as is"""
    intent: QueryIntent
    source: ClassVar[ResolutionSource] = ResolutionSource.PARSED


@dataclass(frozen=True)
class FallbackUsed:
    """The deterministic classifier produced the intent"""
    intent: QueryIntent
    reason: str = ""
    source: ClassVar[ResolutionSource] = ResolutionSource.FALLBACK


IntentResolution = Union[Parsed, FallbackUsed]


# ==================== Records ====================

@dataclass(frozen=True)
class TokenRecord:
    """A launchpad token (pump.fun or Bonk ecosystem)"""
    kind: ClassVar[RecordKind] = RecordKind.TOKEN

    id: str
    name: str
    symbol: str
    platform: str                   # "pumpfun" | "bonk"
    launch_time: datetime
    market_cap: float
    price_usd: float
    volume_24h: float = 0.0
    holders: int = 0
    creator: Optional[str] = None
    description: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "id": self.id,
            "name": self.name,
            "symbol": self.symbol,
            "platform": self.platform,
            "launch_time": _iso(self.launch_time),
            "market_cap": self.market_cap,
            "price_usd": self.price_usd,
            "volume_24h": self.volume_24h,
            "holders": self.holders,
            "creator": self.creator,
            "description": self.description,
        }


@dataclass(frozen=True)
class ProtocolRecord:
    """A DeFi protocol with its total value locked"""
    kind: ClassVar[RecordKind] = RecordKind.PROTOCOL

    id: str
    name: str
    symbol: str
    tvl: float
    category: str = ""
    chains: Tuple[str, ...] = ()
    change_1d: Optional[float] = None
    change_7d: Optional[float] = None
    url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "id": self.id,
            "name": self.name,
            "symbol": self.symbol,
            "tvl": self.tvl,
            "category": self.category,
            "chains": list(self.chains),
            "change_1d": self.change_1d,
            "change_7d": self.change_7d,
            "url": self.url,
        }


@dataclass(frozen=True)
class YieldPoolRecord:
    """A yield farming pool; ``name`` is the project"""
    kind: ClassVar[RecordKind] = RecordKind.YIELD_POOL

    pool: str
    name: str
    symbol: str
    chain: str
    apy: float
    tvl_usd: float
    apy_base: Optional[float] = None
    apy_reward: Optional[float] = None
    stablecoin: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "pool": self.pool,
            "name": self.name,
            "symbol": self.symbol,
            "chain": self.chain,
            "apy": self.apy,
            "tvl_usd": self.tvl_usd,
            "apy_base": self.apy_base,
            "apy_reward": self.apy_reward,
            "stablecoin": self.stablecoin,
        }


@dataclass(frozen=True)
class PriceRecord:
    """Spot price for one coin"""
    kind: ClassVar[RecordKind] = RecordKind.PRICE

    symbol: str
    name: str
    price: Optional[float]
    change_24h_percent: float = 0.0
    market_cap: Optional[float] = None
    volume_24h: Optional[float] = None
    rank: Optional[int] = None
    last_updated: datetime = field(default_factory=utc_now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "symbol": self.symbol,
            "name": self.name,
            "price": self.price,
            "change_24h_percent": self.change_24h_percent,
            "market_cap": self.market_cap,
            "volume_24h": self.volume_24h,
            "rank": self.rank,
            "last_updated": _iso(self.last_updated),
        }


@dataclass(frozen=True)
class NewsRecord:
    """A news article; ``name`` is the headline"""
    kind: ClassVar[RecordKind] = RecordKind.NEWS

    id: str
    name: str
    symbol: str = ""
    summary: str = ""
    url: Optional[str] = None
    source: str = ""
    published_at: Optional[datetime] = None
    related_coins: Tuple[str, ...] = ()
    sentiment: str = "neutral"      # positive, negative, neutral

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "id": self.id,
            "name": self.name,
            "symbol": self.symbol,
            "summary": self.summary,
            "url": self.url,
            "source": self.source,
            "published_at": _iso(self.published_at),
            "related_coins": list(self.related_coins),
            "sentiment": self.sentiment,
        }


@dataclass(frozen=True)
class TrendingRecord:
    """A trending coin"""
    kind: ClassVar[RecordKind] = RecordKind.TRENDING

    id: str
    name: str
    symbol: str
    trending_rank: int
    price: Optional[float] = None
    change_24h_percent: float = 0.0
    market_cap: Optional[float] = None
    volume_24h: float = 0.0
    trending_score: float = 0.0
    reason: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "id": self.id,
            "name": self.name,
            "symbol": self.symbol,
            "trending_rank": self.trending_rank,
            "price": self.price,
            "change_24h_percent": self.change_24h_percent,
            "market_cap": self.market_cap,
            "volume_24h": self.volume_24h,
            "trending_score": self.trending_score,
            "reason": self.reason,
        }


@dataclass(frozen=True)
class SentimentRecord:
    """Social sentiment for one coin"""
    kind: ClassVar[RecordKind] = RecordKind.SENTIMENT

    name: str
    symbol: str
    bullish_percent: float
    bearish_percent: float
    neutral_percent: float
    total_mentions: int = 0
    sentiment_score: float = 0.0    # -1 .. 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "name": self.name,
            "symbol": self.symbol,
            "bullish_percent": self.bullish_percent,
            "bearish_percent": self.bearish_percent,
            "neutral_percent": self.neutral_percent,
            "total_mentions": self.total_mentions,
            "sentiment_score": self.sentiment_score,
        }


Record = Union[
    TokenRecord,
    ProtocolRecord,
    YieldPoolRecord,
    PriceRecord,
    NewsRecord,
    TrendingRecord,
    SentimentRecord,
]


# ==================== Fetching ====================

@dataclass(frozen=True)
class FetchCriteria:
    """What a provider is asked for"""
    symbols: Tuple[str, ...] = ()
    timeframe_hours: float = 24.0
    threshold: Optional[float] = None
    chain: Optional[str] = None
    limit: int = 20
    platform: Optional[str] = None


@dataclass(frozen=True)
class FetchSuccess:
    """Provider answered with shape-normalized records"""
    records: Tuple[Record, ...]


@dataclass(frozen=True)
class FetchFailure:
    """Provider produced nothing usable"""
    kind: FailureKind
    detail: str = ""


FetchResult = Union[FetchSuccess, FetchFailure]


@dataclass(frozen=True)
class ProviderAttempt:
    """One step of a fallback chain, kept for diagnostics"""
    provider: str
    outcome: str            # "ok", a FailureKind value or "invalid"
    raw_count: int = 0
    kept_count: int = 0


@dataclass(frozen=True)
class AggregationResult:
    """Homogeneous, validated records plus where they came from"""
    kind: RecordKind
    records: Tuple[Record, ...]
    provenance: str
    attempts: Tuple[ProviderAttempt, ...] = ()
    validation_exhausted: bool = False

    @property
    def count(self) -> int:
        return len(self.records)

    @property
    def is_synthetic(self) -> bool:
        return self.provenance == SYNTHETIC_PROVENANCE


# ==================== Query result ====================

@dataclass(frozen=True)
class QueryMetadata:
    """Summary of what a query result contains"""
    kind: RecordKind
    providers: Tuple[str, ...]
    total_count: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "sources": list(self.providers),
            "total_results": self.total_count,
        }


@dataclass(frozen=True)
class Orchestration:
    """Merged records of one query, before the answer is written"""
    intent: QueryIntent
    records: Tuple[Record, ...]
    metadata: QueryMetadata
    elapsed_ms: int
    validation_exhausted: bool = False
    aggregations: Tuple[AggregationResult, ...] = ()


@dataclass(frozen=True)
class QueryResult:
    """Everything returned for one query"""
    query: str
    answer: str
    records: Tuple[Record, ...]
    metadata: QueryMetadata
    intent: QueryIntent
    resolution_source: ResolutionSource
    elapsed_ms: int
    timestamp: datetime = field(default_factory=utc_now)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a dictionary (for JSON serialization)"""
        return {
            "query": self.query,
            "answer": self.answer,
            "data": [record.to_dict() for record in self.records],
            "metadata": self.metadata.to_dict(),
            "intent": self.intent.to_dict(),
            "resolution": self.resolution_source.value,
            "timestamp": self.timestamp.isoformat(),
            "elapsed_ms": self.elapsed_ms,
        }
