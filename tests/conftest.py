"""
Test configuration - pytest fixtures and test doubles
"""

import random
import time
from datetime import timedelta
from typing import Callable, Dict, List, Optional

import pytest
from unittest.mock import Mock

from cryptolens.adapters.event_sink_adapter import RecordingEventSink
from cryptolens.adapters.synthetic_adapter import (
    SyntheticNewsGenerator,
    SyntheticPriceGenerator,
    SyntheticProtocolGenerator,
    SyntheticSentimentGenerator,
    SyntheticTokenGenerator,
    SyntheticTrendingGenerator,
    SyntheticYieldGenerator,
)
from cryptolens.aggregation.chains import (
    CategoryChain,
    keep_order,
    refine_by_symbol,
    refine_protocols,
    refine_tokens,
    refine_yields,
)
from cryptolens.config import ProviderConfig
from cryptolens.domain.models import (
    FailureKind,
    FetchCriteria,
    FetchFailure,
    FetchSuccess,
    PriceRecord,
    ProtocolRecord,
    QueryCategory,
    QueryMetadata,
    Record,
    RecordKind,
    TokenRecord,
    utc_now,
)
from cryptolens.ports.interfaces import ProviderPort


# ==================== Test doubles ====================

class FakeProvider(ProviderPort):
    """Provider returning canned records (or a failure) and counting calls"""

    def __init__(
        self,
        name: str,
        records: Optional[List[Record]] = None,
        failure: Optional[FailureKind] = None,
        delay: float = 0.0,
        error: Optional[Exception] = None,
    ):
        self.name = name
        self.records = records or []
        self.failure = failure
        self.delay = delay
        self.error = error
        self.calls: List[FetchCriteria] = []

    def fetch(self, criteria: FetchCriteria):
        self.calls.append(criteria)
        if self.delay:
            time.sleep(self.delay)
        if self.error is not None:
            raise self.error
        if self.failure is not None:
            return FetchFailure(kind=self.failure, detail=f"{self.name} down")
        return FetchSuccess(records=tuple(self.records))


CHAIN_SHAPES = {
    QueryCategory.TOKEN_LAUNCH: (RecordKind.TOKEN, lambda rng: SyntheticTokenGenerator("pumpfun", rng), refine_tokens),
    QueryCategory.ECOSYSTEM_TOKEN: (RecordKind.TOKEN, lambda rng: SyntheticTokenGenerator("bonk", rng), refine_tokens),
    QueryCategory.DEFI_TVL: (RecordKind.PROTOCOL, SyntheticProtocolGenerator, refine_protocols),
    QueryCategory.DEFI_YIELD: (RecordKind.YIELD_POOL, SyntheticYieldGenerator, refine_yields),
    QueryCategory.PRICE: (RecordKind.PRICE, SyntheticPriceGenerator, refine_by_symbol),
    QueryCategory.GENERAL_MARKET: (RecordKind.PRICE, SyntheticPriceGenerator, keep_order),
    QueryCategory.TRENDING: (RecordKind.TRENDING, SyntheticTrendingGenerator, keep_order),
    QueryCategory.NEWS: (RecordKind.NEWS, SyntheticNewsGenerator, keep_order),
    QueryCategory.SENTIMENT: (RecordKind.SENTIMENT, SyntheticSentimentGenerator, refine_by_symbol),
}


class FakeChainFactory:
    """
    Chain factory whose real providers are supplied per category

    Categories without providers get a chain of one failing provider,
    so they end in synthetic data.
    """

    def __init__(self, providers: Optional[Dict[QueryCategory, List[ProviderPort]]] = None, seed: int = 7):
        self.providers = providers or {}
        self.rng = random.Random(seed)
        self.built: List[QueryCategory] = []

    def build(self, category: QueryCategory) -> CategoryChain:
        kind, synthetic, refine = CHAIN_SHAPES[category]
        self.built.append(category)
        providers = self.providers.get(
            category,
            [FakeProvider(f"{category.value}-down", failure=FailureKind.NETWORK_ERROR)],
        )
        return CategoryChain(
            category=category,
            kind=kind,
            providers=providers,
            synthetic=synthetic(self.rng),
            refine=refine,
        )


# ==================== Record builders ====================

def make_token(
    name: str = "PEPE",
    market_cap: float = 25_000.0,
    minutes_ago: float = 10.0,
    platform: str = "pumpfun",
    **overrides,
) -> TokenRecord:
    fields = dict(
        id=f"{platform}-{name.lower()}",
        name=name,
        symbol=name[:8],
        platform=platform,
        launch_time=utc_now() - timedelta(minutes=minutes_ago),
        market_cap=market_cap,
        price_usd=market_cap / 1_000_000_000,
    )
    fields.update(overrides)
    return TokenRecord(**fields)


def make_price(symbol: str = "SOL", price: Optional[float] = 178.45, **overrides) -> PriceRecord:
    fields = dict(symbol=symbol, name=symbol.title(), price=price, change_24h_percent=2.5)
    fields.update(overrides)
    return PriceRecord(**fields)


def make_protocol(name: str = "Lido", tvl: float = 28e9, chains=("Ethereum",), **overrides) -> ProtocolRecord:
    fields = dict(id=name.lower(), name=name, symbol=name[:3].upper(), tvl=tvl, chains=tuple(chains))
    fields.update(overrides)
    return ProtocolRecord(**fields)


# ==================== Fixtures ====================

@pytest.fixture
def rng():
    """Seeded random source"""
    return random.Random(42)


@pytest.fixture
def events():
    """In-memory event sink"""
    return RecordingEventSink()


@pytest.fixture
def provider_config():
    """Provider configuration without any keys"""
    return ProviderConfig(timeout_seconds=2.0)


@pytest.fixture
def token_factory() -> Callable[..., TokenRecord]:
    return make_token


@pytest.fixture
def price_factory() -> Callable[..., PriceRecord]:
    return make_price


@pytest.fixture
def protocol_factory() -> Callable[..., ProtocolRecord]:
    return make_protocol


@pytest.fixture
def price_metadata():
    return QueryMetadata(kind=RecordKind.PRICE, providers=("coingecko",), total_count=1)


@pytest.fixture
def mock_llm_port():
    """Language model port that returns a price intent and a fixed answer"""
    port = Mock()
    port.extract_intent.return_value = '{"category": "price", "symbols": ["SOL"]}'
    port.synthesize_answer.return_value = "SOL is trading at $178.45."
    return port


@pytest.fixture
def fake_provider() -> Callable[..., FakeProvider]:
    """Factory for canned providers"""
    return FakeProvider


@pytest.fixture
def fake_chains() -> Callable[..., FakeChainFactory]:
    """Factory for chain factories with canned providers"""
    return FakeChainFactory
