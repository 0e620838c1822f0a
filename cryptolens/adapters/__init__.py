"""
Adapters layer - concrete implementations of the port interfaces

Contains:
- http_provider: shared HTTP plumbing for REST providers
- pumpfun_adapter / bonk_adapter: launchpad tokens
- defillama_adapter: protocol TVL and yield pools
- price_adapter: spot prices and market listings
- market_adapter: trending coins, news, social sentiment
- synthetic_adapter: placeholder data at the end of every chain
- llm_adapter: LiteLLM language model
- event_sink_adapter: where structured events go
"""

from cryptolens.adapters.http_provider import HttpProvider
from cryptolens.adapters.pumpfun_adapter import PumpFunProvider
from cryptolens.adapters.bonk_adapter import (
    BonkApiProvider,
    DexScreenerBonkProvider,
    JupiterBonkProvider,
)
from cryptolens.adapters.defillama_adapter import (
    DefiLlamaProtocolsProvider,
    DefiLlamaYieldsProvider,
)
from cryptolens.adapters.price_adapter import (
    CoinGeckoPriceProvider,
    CoinCapPriceProvider,
    CoinMarketCapListingsProvider,
    CoinGeckoMarketsProvider,
)
from cryptolens.adapters.market_adapter import (
    CoinGeckoTrendingProvider,
    DexScreenerTrendingProvider,
    LunarCrushTrendingProvider,
    NewsApiProvider,
    LunarCrushSentimentProvider,
)
from cryptolens.adapters.synthetic_adapter import (
    SyntheticTokenGenerator,
    SyntheticProtocolGenerator,
    SyntheticYieldGenerator,
    SyntheticPriceGenerator,
    SyntheticTrendingGenerator,
    SyntheticNewsGenerator,
    SyntheticSentimentGenerator,
)
from cryptolens.adapters.llm_adapter import LiteLLMAdapter
from cryptolens.adapters.event_sink_adapter import (
    LoggingEventSink,
    NullEventSink,
    RecordingEventSink,
)

__all__ = [
    "HttpProvider",
    "PumpFunProvider",
    "BonkApiProvider",
    "DexScreenerBonkProvider",
    "JupiterBonkProvider",
    "DefiLlamaProtocolsProvider",
    "DefiLlamaYieldsProvider",
    "CoinGeckoPriceProvider",
    "CoinCapPriceProvider",
    "CoinMarketCapListingsProvider",
    "CoinGeckoMarketsProvider",
    "CoinGeckoTrendingProvider",
    "DexScreenerTrendingProvider",
    "LunarCrushTrendingProvider",
    "NewsApiProvider",
    "LunarCrushSentimentProvider",
    "SyntheticTokenGenerator",
    "SyntheticProtocolGenerator",
    "SyntheticYieldGenerator",
    "SyntheticPriceGenerator",
    "SyntheticTrendingGenerator",
    "SyntheticNewsGenerator",
    "SyntheticSentimentGenerator",
    "LiteLLMAdapter",
    "LoggingEventSink",
    "NullEventSink",
    "RecordingEventSink",
]
