"""
Domain model tests
"""

import pytest
from dataclasses import FrozenInstanceError

from cryptolens.domain.models import (
    ErrorCode,
    FallbackUsed,
    Metric,
    NewsRecord,
    Parsed,
    QueryCategory,
    QueryIntent,
    QueryMetadata,
    QueryResult,
    RecordKind,
    ResolutionSource,
    SentimentRecord,
    YieldPoolRecord,
)
from cryptolens.domain.symbols import canonical_chain, coin_for, display_name


class TestEnums:
    """Enumeration tests"""

    def test_query_categories(self):
        assert {c.value for c in QueryCategory} == {
            "token_launch", "ecosystem_token", "combined", "defi_tvl", "defi_yield",
            "price", "news", "trending", "sentiment", "general_market",
        }

    def test_error_codes(self):
        assert ErrorCode.INVALID_INPUT.value == "invalid_input"
        assert ErrorCode.INTERNAL_ERROR.value == "internal_error"

    def test_resolution_sources(self):
        intent = QueryIntent(category=QueryCategory.PRICE)
        assert Parsed(intent).source == ResolutionSource.PARSED
        assert FallbackUsed(intent).source == ResolutionSource.FALLBACK


class TestQueryIntent:
    """QueryIntent tests"""

    def test_defaults(self):
        intent = QueryIntent(category=QueryCategory.TOKEN_LAUNCH)
        assert intent.metric == Metric.COUNT
        assert intent.timeframe_hours == 24.0
        assert intent.threshold is None
        assert intent.symbols == ()

    def test_immutable(self):
        intent = QueryIntent(category=QueryCategory.PRICE)
        with pytest.raises(FrozenInstanceError):
            intent.category = QueryCategory.NEWS

    def test_to_dict(self):
        intent = QueryIntent(category=QueryCategory.PRICE, metric=Metric.PRICE, symbols=("SOL", "BTC"))
        data = intent.to_dict()
        assert data["category"] == "price"
        assert data["metric"] == "price"
        assert data["symbols"] == ["SOL", "BTC"]


class TestRecords:
    """Record variant tests"""

    def test_kind_discriminant(self, token_factory, price_factory, protocol_factory):
        assert token_factory().kind == RecordKind.TOKEN
        assert price_factory().kind == RecordKind.PRICE
        assert protocol_factory().kind == RecordKind.PROTOCOL

    def test_token_to_dict(self, token_factory):
        data = token_factory(name="WOJAK", market_cap=50_000).to_dict()
        assert data["kind"] == "token"
        assert data["name"] == "WOJAK"
        assert data["market_cap"] == 50_000
        assert data["launch_time"].endswith("+00:00")

    def test_news_to_dict_without_date(self):
        data = NewsRecord(id="n1", name="Bitcoin rallies").to_dict()
        assert data["published_at"] is None
        assert data["sentiment"] == "neutral"

    def test_yield_and_sentiment_to_dict(self):
        pool = YieldPoolRecord(pool="p1", name="Raydium", symbol="SOL-USDC", chain="Solana", apy=12.5, tvl_usd=1e6)
        assert pool.to_dict()["kind"] == "yield_pool"

        reading = SentimentRecord(
            name="Solana", symbol="SOL",
            bullish_percent=60, bearish_percent=20, neutral_percent=20,
            sentiment_score=0.4,
        )
        assert reading.to_dict()["sentiment_score"] == 0.4


class TestQueryResult:
    """QueryResult tests"""

    def test_to_dict(self, price_factory):
        intent = QueryIntent(category=QueryCategory.PRICE, symbols=("SOL",))
        result = QueryResult(
            query="SOL price",
            answer="Current prices: SOL: $178.45",
            records=(price_factory(),),
            metadata=QueryMetadata(kind=RecordKind.PRICE, providers=("coingecko",), total_count=1),
            intent=intent,
            resolution_source=ResolutionSource.FALLBACK,
            elapsed_ms=42,
        )

        data = result.to_dict()
        assert data["answer"] == "Current prices: SOL: $178.45"
        assert data["data"][0]["kind"] == "price"
        assert data["metadata"] == {"kind": "price", "sources": ["coingecko"], "total_results": 1}
        assert data["resolution"] == "fallback"
        assert data["elapsed_ms"] == 42


class TestSymbols:
    """Reference table tests"""

    def test_coin_lookup_is_case_insensitive(self):
        assert coin_for("sol").name == "Solana"
        assert coin_for("NOPE") is None

    def test_display_name_falls_back_to_ticker(self):
        assert display_name("ETH") == "Ethereum"
        assert display_name("xyz") == "XYZ"

    def test_canonical_chain(self):
        assert canonical_chain("solana") == "Solana"
        assert canonical_chain("bsc") == "BSC"
        assert canonical_chain("sui") == "Sui"
        assert canonical_chain(None) is None
