"""
Fallback chains - which providers serve a category, in which order, and how
their records are refined against the criteria

Provider order inside each chain reflects observed reliability, most
reliable first:

- token_launch: pump.fun frontend API, then the api and site hosts
- ecosystem_token: Bonk API, DexScreener, Jupiter (BONK itself only)
- defi_tvl / defi_yield: DefiLlama (keyless)
- price: CoinGecko, CoinCap
- general_market: CoinMarketCap (keyed), CoinGecko markets
- trending: CoinGecko, DexScreener, LunarCrush (keyed)
- news: NewsAPI (keyed)
- sentiment: LunarCrush (keyed)

Every chain ends with a synthetic generator. A ``ChainFactory`` builds
fresh chains for each query so no provider state is shared between queries.
"""

import random
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Callable, Dict, List, Optional, Sequence

from cryptolens.adapters.bonk_adapter import BonkApiProvider, DexScreenerBonkProvider, JupiterBonkProvider
from cryptolens.adapters.defillama_adapter import DefiLlamaProtocolsProvider, DefiLlamaYieldsProvider
from cryptolens.adapters.market_adapter import (
    CoinGeckoTrendingProvider,
    DexScreenerTrendingProvider,
    LunarCrushSentimentProvider,
    LunarCrushTrendingProvider,
    NewsApiProvider,
)
from cryptolens.adapters.price_adapter import (
    CoinCapPriceProvider,
    CoinGeckoMarketsProvider,
    CoinGeckoPriceProvider,
    CoinMarketCapListingsProvider,
)
from cryptolens.adapters.pumpfun_adapter import PumpFunProvider
from cryptolens.adapters.synthetic_adapter import (
    SyntheticNewsGenerator,
    SyntheticPriceGenerator,
    SyntheticProtocolGenerator,
    SyntheticSentimentGenerator,
    SyntheticTokenGenerator,
    SyntheticTrendingGenerator,
    SyntheticYieldGenerator,
)
from cryptolens.config import ProviderConfig
from cryptolens.domain.models import (
    FetchCriteria,
    QueryCategory,
    Record,
    RecordKind,
    utc_now,
)
from cryptolens.ports.interfaces import ProviderPort, SyntheticPort


Refinement = Callable[[List[Record], FetchCriteria], List[Record]]

MIN_YIELD_TVL = 10_000


# ==================== Refinements ====================

def refine_tokens(records: List[Record], criteria: FetchCriteria) -> List[Record]:
    """Above the threshold, launched inside the window, newest first"""
    cutoff = utc_now() - timedelta(hours=criteria.timeframe_hours)
    kept = [
        token for token in records
        if token.launch_time >= cutoff
        and (criteria.threshold is None or token.market_cap > criteria.threshold)
    ]
    kept.sort(key=lambda token: token.launch_time, reverse=True)
    return kept


def _on_chain(chains: Sequence[str], chain: Optional[str]) -> bool:
    if not chain:
        return True
    wanted = chain.lower()
    return any(c.lower() == wanted for c in chains)


def refine_protocols(records: List[Record], criteria: FetchCriteria) -> List[Record]:
    kept = [p for p in records if _on_chain(p.chains, criteria.chain)]
    kept.sort(key=lambda p: p.tvl, reverse=True)
    return kept


def refine_yields(records: List[Record], criteria: FetchCriteria) -> List[Record]:
    kept = [
        pool for pool in records
        if _on_chain((pool.chain,), criteria.chain)
        and pool.apy > 0
        and pool.tvl_usd > MIN_YIELD_TVL
    ]
    kept.sort(key=lambda pool: pool.apy, reverse=True)
    return kept


def refine_by_symbol(records: List[Record], criteria: FetchCriteria) -> List[Record]:
    """Requested symbols only, first record per symbol"""
    if not criteria.symbols:
        return list(records)
    wanted = {symbol.upper() for symbol in criteria.symbols}
    seen = set()
    kept = []
    for record in records:
        symbol = record.symbol.upper()
        if symbol in wanted and symbol not in seen:
            seen.add(symbol)
            kept.append(record)
    return kept


def keep_order(records: List[Record], criteria: FetchCriteria) -> List[Record]:
    return list(records)


# ==================== Chains ====================

@dataclass
class CategoryChain:
    """Ordered real providers plus the synthetic generator that ends the chain"""
    category: QueryCategory
    kind: RecordKind
    providers: List[ProviderPort]
    synthetic: SyntheticPort
    refine: Refinement = keep_order

    def apply(self, records: List[Record], criteria: FetchCriteria) -> List[Record]:
        """Category refinement followed by truncation to the limit"""
        return self.refine(records, criteria)[:criteria.limit]


@dataclass
class ChainFactory:
    """Builds fresh provider chains from the provider configuration"""
    config: ProviderConfig
    rng: Optional[random.Random] = None
    _builders: Dict[QueryCategory, Callable[[], CategoryChain]] = field(init=False, repr=False)

    def __post_init__(self):
        self._builders = {
            QueryCategory.TOKEN_LAUNCH: self._token_launch,
            QueryCategory.ECOSYSTEM_TOKEN: self._ecosystem_token,
            QueryCategory.DEFI_TVL: self._defi_tvl,
            QueryCategory.DEFI_YIELD: self._defi_yield,
            QueryCategory.PRICE: self._price,
            QueryCategory.GENERAL_MARKET: self._general_market,
            QueryCategory.TRENDING: self._trending,
            QueryCategory.NEWS: self._news,
            QueryCategory.SENTIMENT: self._sentiment,
        }

    def build(self, category: QueryCategory) -> CategoryChain:
        """
        Build the chain serving ``category``

        Raises:
            KeyError: ``combined`` has no chain of its own; it is served by
            the token_launch and ecosystem_token chains together
        """
        return self._builders[category]()

    def _token_launch(self) -> CategoryChain:
        return CategoryChain(
            category=QueryCategory.TOKEN_LAUNCH,
            kind=RecordKind.TOKEN,
            providers=[PumpFunProvider(self.config, url) for url in self.config.pump_fun_endpoints],
            synthetic=SyntheticTokenGenerator("pumpfun", self.rng),
            refine=refine_tokens,
        )

    def _ecosystem_token(self) -> CategoryChain:
        return CategoryChain(
            category=QueryCategory.ECOSYSTEM_TOKEN,
            kind=RecordKind.TOKEN,
            providers=[
                BonkApiProvider(self.config),
                DexScreenerBonkProvider(self.config),
                JupiterBonkProvider(self.config),
            ],
            synthetic=SyntheticTokenGenerator("bonk", self.rng),
            refine=refine_tokens,
        )

    def _defi_tvl(self) -> CategoryChain:
        return CategoryChain(
            category=QueryCategory.DEFI_TVL,
            kind=RecordKind.PROTOCOL,
            providers=[DefiLlamaProtocolsProvider(self.config)],
            synthetic=SyntheticProtocolGenerator(self.rng),
            refine=refine_protocols,
        )

    def _defi_yield(self) -> CategoryChain:
        return CategoryChain(
            category=QueryCategory.DEFI_YIELD,
            kind=RecordKind.YIELD_POOL,
            providers=[DefiLlamaYieldsProvider(self.config)],
            synthetic=SyntheticYieldGenerator(self.rng),
            refine=refine_yields,
        )

    def _price(self) -> CategoryChain:
        return CategoryChain(
            category=QueryCategory.PRICE,
            kind=RecordKind.PRICE,
            providers=[CoinGeckoPriceProvider(self.config), CoinCapPriceProvider(self.config)],
            synthetic=SyntheticPriceGenerator(self.rng),
            refine=refine_by_symbol,
        )

    def _general_market(self) -> CategoryChain:
        return CategoryChain(
            category=QueryCategory.GENERAL_MARKET,
            kind=RecordKind.PRICE,
            providers=[CoinMarketCapListingsProvider(self.config), CoinGeckoMarketsProvider(self.config)],
            synthetic=SyntheticPriceGenerator(self.rng),
        )

    def _trending(self) -> CategoryChain:
        return CategoryChain(
            category=QueryCategory.TRENDING,
            kind=RecordKind.TRENDING,
            providers=[
                CoinGeckoTrendingProvider(self.config),
                DexScreenerTrendingProvider(self.config),
                LunarCrushTrendingProvider(self.config),
            ],
            synthetic=SyntheticTrendingGenerator(self.rng),
        )

    def _news(self) -> CategoryChain:
        return CategoryChain(
            category=QueryCategory.NEWS,
            kind=RecordKind.NEWS,
            providers=[NewsApiProvider(self.config)],
            synthetic=SyntheticNewsGenerator(self.rng),
        )

    def _sentiment(self) -> CategoryChain:
        return CategoryChain(
            category=QueryCategory.SENTIMENT,
            kind=RecordKind.SENTIMENT,
            providers=[LunarCrushSentimentProvider(self.config)],
            synthetic=SyntheticSentimentGenerator(self.rng),
            refine=refine_by_symbol,
        )
