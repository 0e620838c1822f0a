"""
Synthetic adapters - implement SyntheticPort, the last link of every chain

Generated records are plausible and always satisfy the criteria they were
generated for: token market caps clear the threshold, launches fall inside
the window, prices sit near a reference table. Randomness comes from an
injectable ``random.Random`` so tests can seed it.
"""

import random
import string
from datetime import timedelta
from typing import List, Optional, Sequence, Tuple

from cryptolens.adapters.market_adapter import extract_coins, headline_sentiment
from cryptolens.domain.models import (
    SYNTHETIC_PROVENANCE,
    FetchCriteria,
    NewsRecord,
    PriceRecord,
    ProtocolRecord,
    RecordKind,
    SentimentRecord,
    TokenRecord,
    TrendingRecord,
    YieldPoolRecord,
    utc_now,
)
from cryptolens.domain.symbols import KNOWN_COINS, canonical_chain, coin_for, display_name
from cryptolens.ports.interfaces import SyntheticPort


DEFAULT_SENTIMENT_SYMBOLS = ("BTC", "ETH", "SOL")
TOKEN_SUPPLY = 1_000_000_000

# (probability, low, high) market cap buckets
PUMPFUN_BUCKETS = ((0.60, 1_000, 50_000), (0.25, 50_000, 500_000), (0.15, 500_000, 10_000_000))
BONK_BUCKETS = ((0.70, 100, 10_000), (0.20, 10_000, 100_000), (0.10, 100_000, 1_000_000))

PUMPFUN_NAMES = (
    "PEPE", "WOJAK", "DOGE2", "SHIB2", "BONK2", "WIF", "POPCAT", "BOOK", "PNUT", "GOAT",
    "MOODENG", "CHILLGUY", "FARTCOIN", "ZEREBRO", "AI16Z", "VIRTUAL", "GRIFFAIN", "SHOGGOTH",
    "MEMEME", "DEGENAI", "TRUMP47", "ELONMARS", "SOLCAT", "MOONDOG", "ROCKETPEPE",
)
BONK_NAMES = (
    "BONK", "DOBONK", "BABYBONK", "BONKINU", "BONKARMY", "MEGABONK", "SUPERBONK",
    "BONKDOGE", "BONKPEPE", "BONKWIF", "BONKCOIN", "MINIBONK", "BONKSWAP",
    "BONKFI", "BONKDAO", "BONKNFT", "BONKVERSE", "BONKPAD", "BONKBOT", "BONKX",
)

PROTOCOLS = (
    # name, symbol, category, chains, tvl
    ("Lido", "LDO", "Liquid Staking", ("Ethereum", "Solana"), 28e9),
    ("Aave", "AAVE", "Lending", ("Ethereum", "Polygon", "Avalanche", "Arbitrum"), 12e9),
    ("EigenLayer", "EIGEN", "Restaking", ("Ethereum",), 11e9),
    ("MakerDAO", "MKR", "CDP", ("Ethereum",), 7.5e9),
    ("Uniswap", "UNI", "Dexes", ("Ethereum", "Arbitrum", "Polygon", "Base"), 5e9),
    ("Jito", "JTO", "Liquid Staking", ("Solana",), 2.4e9),
    ("Curve", "CRV", "Dexes", ("Ethereum", "Arbitrum", "Polygon"), 2.2e9),
    ("Raydium", "RAY", "Dexes", ("Solana",), 1.9e9),
    ("Kamino", "KMNO", "Lending", ("Solana",), 1.6e9),
    ("Jupiter", "JUP", "Dexes", ("Solana",), 1.5e9),
    ("Pendle", "PENDLE", "Yield", ("Ethereum", "Arbitrum"), 1.3e9),
    ("Marinade", "MNDE", "Liquid Staking", ("Solana",), 1.1e9),
    ("PancakeSwap", "CAKE", "Dexes", ("BSC", "Ethereum"), 1.7e9),
    ("GMX", "GMX", "Derivatives", ("Arbitrum", "Avalanche"), 0.6e9),
)

YIELD_POOLS = (
    # project, symbol, chain
    ("Uniswap V3", "USDC-ETH", "Ethereum"),
    ("Raydium", "SOL-USDC", "Solana"),
    ("Aave V3", "USDC", "Arbitrum"),
    ("Curve", "3CRV", "Ethereum"),
    ("Kamino", "JITOSOL-SOL", "Solana"),
    ("Orca", "BONK-SOL", "Solana"),
    ("PancakeSwap", "CAKE-BNB", "BSC"),
    ("Pendle", "PT-EETH", "Ethereum"),
    ("GMX", "GLP", "Arbitrum"),
    ("Trader Joe", "AVAX-USDC", "Avalanche"),
)

TRENDING_SYMBOLS = ("BONK", "WIF", "POPCAT", "PEPE", "MOODENG", "PNUT", "GOAT", "FARTCOIN", "AI16Z", "CHILLGUY")

HEADLINES = (
    "{name} rallies as traders pile into Solana memecoins",
    "{name} slips after profit taking across the market",
    "Analysts weigh {name} outlook ahead of macro data",
    "{name} network activity surges to monthly high",
    "Institutional desks add {name} exposure, filings show",
    "{name} funding rates drop as leverage unwinds",
)


class SyntheticGenerator(SyntheticPort):
    """Shared randomness helpers for all generators"""

    name = SYNTHETIC_PROVENANCE

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def _jitter(self, value: float, spread: float) -> float:
        return value * (1 + self.rng.uniform(-spread, spread))

    def _suffix(self, length: int = 6) -> str:
        return "".join(self.rng.choice(string.ascii_lowercase + string.digits) for _ in range(length))

    @staticmethod
    def _variant(names: Sequence[str], index: int) -> str:
        base = names[index % len(names)]
        variation = index // len(names) + 1
        return f"{base}{variation}" if variation > 1 else base


# ==================== Tokens ====================

class SyntheticTokenGenerator(SyntheticGenerator):
    """
    Launchpad tokens with a platform-specific market cap distribution

    pump.fun: 60% under $50K, 25% up to $500K, 15% up to $10M.
    Bonk: 70% $100-$10K, 20% up to $100K, 10% up to $1M.
    """

    kind = RecordKind.TOKEN

    def __init__(self, platform: str = "pumpfun", rng: Optional[random.Random] = None):
        super().__init__(rng)
        self.platform = platform
        if platform == "bonk":
            self.names, self.buckets, self.recent_hours, self.recent_share = BONK_NAMES, BONK_BUCKETS, 12.0, 0.8
        else:
            self.names, self.buckets, self.recent_hours, self.recent_share = PUMPFUN_NAMES, PUMPFUN_BUCKETS, 6.0, 0.7

    def generate(self, criteria: FetchCriteria) -> List[TokenRecord]:
        now = utc_now()
        tokens = []
        for index in range(criteria.limit):
            name = self._variant(self.names, index)
            market_cap = self._market_cap(criteria.threshold)
            hours_ago = self._hours_ago(criteria.timeframe_hours)
            tokens.append(TokenRecord(
                id=f"{self.platform}{index + 1}{self._suffix()}",
                name=name,
                symbol=name[:8],
                platform=self.platform,
                launch_time=now - timedelta(hours=hours_ago),
                market_cap=market_cap,
                price_usd=market_cap / TOKEN_SUPPLY,
                volume_24h=round(market_cap * self.rng.uniform(0.0, 0.3), 2),
                holders=int(self.rng.uniform(10, 10 + market_cap / 100)),
                creator=self._suffix(8),
                description=f"{name} - synthetic {self.platform} token",
            ))
        tokens.sort(key=lambda token: token.launch_time, reverse=True)
        return tokens

    def _market_cap(self, threshold: Optional[float]) -> float:
        roll = self.rng.random()
        cumulative = 0.0
        low, high = self.buckets[-1][1:]
        for share, bucket_low, bucket_high in self.buckets:
            cumulative += share
            if roll < cumulative:
                low, high = bucket_low, bucket_high
                break

        if threshold is not None and low <= threshold:
            low = threshold + 1
            high = max(high, low * 3)
        return float(round(self.rng.uniform(low, high)))

    def _hours_ago(self, window: float) -> float:
        # Stay clear of the window edge so refinement at a later instant agrees
        usable = window * 0.95
        if self.rng.random() < self.recent_share:
            return self.rng.uniform(0, min(self.recent_hours, usable))
        return self.rng.uniform(0, usable)


# ==================== DeFi ====================

class SyntheticProtocolGenerator(SyntheticGenerator):
    """Protocols by TVL; restricted to the requested chain when given"""

    kind = RecordKind.PROTOCOL

    def generate(self, criteria: FetchCriteria) -> List[ProtocolRecord]:
        chain = canonical_chain(criteria.chain)
        catalogue = [p for p in PROTOCOLS if chain is None or chain in p[3]] or list(PROTOCOLS)

        records = []
        for index in range(criteria.limit):
            name, symbol, category, chains, tvl = catalogue[index % len(catalogue)]
            generation = index // len(catalogue)
            if chain and chain not in chains:
                chains = (chain,)
            records.append(ProtocolRecord(
                id=f"{name.lower().replace(' ', '-')}-{generation + 1}",
                name=f"{name} V{generation + 2}" if generation else name,
                symbol=symbol,
                tvl=round(self._jitter(tvl / (generation + 1), 0.1), 2),
                category=category,
                chains=chains,
                change_1d=round(self.rng.uniform(-5, 5), 2),
                change_7d=round(self.rng.uniform(-12, 12), 2),
            ))
        records.sort(key=lambda record: record.tvl, reverse=True)
        return records


class SyntheticYieldGenerator(SyntheticGenerator):
    """Yield pools with positive APY and meaningful TVL"""

    kind = RecordKind.YIELD_POOL

    def generate(self, criteria: FetchCriteria) -> List[YieldPoolRecord]:
        chain = canonical_chain(criteria.chain)
        catalogue = [p for p in YIELD_POOLS if chain is None or p[2] == chain] or list(YIELD_POOLS)

        records = []
        for index in range(criteria.limit):
            project, symbol, pool_chain = catalogue[index % len(catalogue)]
            apy_base = round(self.rng.uniform(1, 15), 2)
            apy_reward = round(self.rng.uniform(0, 30), 2)
            records.append(YieldPoolRecord(
                pool=f"pool-{self._suffix(10)}",
                name=project,
                symbol=symbol,
                chain=chain or pool_chain,
                apy=round(apy_base + apy_reward, 2),
                tvl_usd=round(self.rng.uniform(2e5, 8e7), 2),
                apy_base=apy_base,
                apy_reward=apy_reward,
                stablecoin=symbol in ("USDC", "USDT", "3CRV"),
            ))
        records.sort(key=lambda record: record.apy, reverse=True)
        return records


# ==================== Prices ====================

class SyntheticPriceGenerator(SyntheticGenerator):
    """
    One price per requested symbol, within 5% of a reference price

    With no symbols, the largest known coins by market cap are listed
    instead (the general market view).
    """

    kind = RecordKind.PRICE

    def generate(self, criteria: FetchCriteria) -> List[PriceRecord]:
        symbols = list(criteria.symbols) or self._top_symbols(criteria.limit)
        ranked = not criteria.symbols

        records = []
        for index, symbol in enumerate(symbols):
            coin = coin_for(symbol)
            if coin:
                price = self._jitter(coin.reference_price, 0.05)
                market_cap = self._jitter(coin.market_cap, 0.05)
            else:
                price = self.rng.uniform(0.5, 100)
                market_cap = None
            records.append(PriceRecord(
                symbol=symbol.upper(),
                name=display_name(symbol),
                price=price,
                change_24h_percent=round(self.rng.uniform(-8, 8), 2),
                market_cap=market_cap,
                volume_24h=market_cap * self.rng.uniform(0.02, 0.1) if market_cap else None,
                rank=index + 1 if ranked else None,
            ))
        return records

    @staticmethod
    def _top_symbols(limit: int) -> List[str]:
        by_cap = sorted(KNOWN_COINS.values(), key=lambda coin: coin.market_cap, reverse=True)
        symbols = [coin.symbol for coin in by_cap[:limit]]
        symbols.extend(f"ALT{n}" for n in range(1, limit - len(symbols) + 1))
        return symbols


# ==================== Market ====================

class SyntheticTrendingGenerator(SyntheticGenerator):
    kind = RecordKind.TRENDING

    def generate(self, criteria: FetchCriteria) -> List[TrendingRecord]:
        records = []
        for index in range(criteria.limit):
            symbol = self._variant(TRENDING_SYMBOLS, index)
            coin = coin_for(symbol)
            price = self._jitter(coin.reference_price, 0.05) if coin else self.rng.uniform(0.0001, 2)
            records.append(TrendingRecord(
                id=symbol.lower(),
                name=coin.name if coin else symbol.title(),
                symbol=symbol,
                trending_rank=index + 1,
                price=price,
                change_24h_percent=round(self.rng.uniform(-10, 40), 2),
                market_cap=self._jitter(coin.market_cap, 0.05) if coin else price * TOKEN_SUPPLY,
                volume_24h=round(self.rng.uniform(1e6, 5e7), 2),
                trending_score=float(max(100 - index * 5, 1)),
                reason="Elevated search and trading activity",
            ))
        return records


class SyntheticNewsGenerator(SyntheticGenerator):
    kind = RecordKind.NEWS

    def generate(self, criteria: FetchCriteria) -> List[NewsRecord]:
        symbols = list(criteria.symbols) or ["BTC", "ETH", "SOL", "BONK"]
        now = utc_now()
        records = []
        age = 0.0
        for index in range(criteria.limit):
            symbol = symbols[index % len(symbols)]
            title = HEADLINES[index % len(HEADLINES)].format(name=display_name(symbol))
            text = f"{title} {symbol}"
            age += self.rng.uniform(0.2, 1.5)
            records.append(NewsRecord(
                id=f"synthetic-news-{index + 1}",
                name=title,
                symbol=symbol,
                summary=f"Market update covering {display_name(symbol)} ({symbol}).",
                source="CryptoLens Wire",
                published_at=now - timedelta(hours=age),
                related_coins=extract_coins(text) or (symbol,),
                sentiment=headline_sentiment(title),
            ))
        return records


class SyntheticSentimentGenerator(SyntheticGenerator):
    """Sentiment split per symbol; percentages always sum to 100"""

    kind = RecordKind.SENTIMENT

    def generate(self, criteria: FetchCriteria) -> List[SentimentRecord]:
        symbols: Tuple[str, ...] = criteria.symbols or DEFAULT_SENTIMENT_SYMBOLS
        records = []
        for symbol in symbols:
            bullish = round(self.rng.uniform(30, 70), 1)
            bearish = round(self.rng.uniform(15, min(50, 95 - bullish)), 1)
            neutral = round(100 - bullish - bearish, 1)
            records.append(SentimentRecord(
                name=display_name(symbol),
                symbol=symbol.upper(),
                bullish_percent=bullish,
                bearish_percent=bearish,
                neutral_percent=neutral,
                total_mentions=int(self.rng.uniform(100, 10_000)),
                sentiment_score=round((bullish - bearish) / 100, 3),
            ))
        return records
