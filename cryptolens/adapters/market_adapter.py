"""
Market adapters - implement ProviderPort for trending coins, news and
social sentiment
"""

import logging
import re
from typing import Any, Dict, List, Tuple

import requests

from cryptolens.adapters.http_provider import HttpProvider, from_iso, to_float, to_int
from cryptolens.domain.models import (
    FetchCriteria,
    NewsRecord,
    SentimentRecord,
    TrendingRecord,
)
from cryptolens.domain.symbols import display_name
from cryptolens.infrastructure.errors import ProviderFailure


logger = logging.getLogger(__name__)

TRENDING_PAGE = 10


# ==================== Trending ====================

class CoinGeckoTrendingProvider(HttpProvider):
    """
    CoinGecko search trends, priced with a second ``/simple/price`` call

    When the price call fails the coins are still returned, unpriced.
    """

    name = "coingecko-trending"

    def _fetch_records(self, criteria: FetchCriteria) -> List[TrendingRecord]:
        payload = self._get_json(f"{self.config.coingecko_url}/search/trending")
        items = [entry["item"] for entry in payload["coins"][:TRENDING_PAGE]]
        if not items:
            return []

        quotes = self._quotes([item["id"] for item in items])
        records = []
        for index, item in enumerate(items):
            quote = quotes.get(item["id"], {})
            records.append(TrendingRecord(
                id=item["id"],
                name=item.get("name") or "",
                symbol=str(item.get("symbol", "")).upper(),
                trending_rank=index + 1,
                price=to_float(quote.get("usd"), None),
                change_24h_percent=to_float(quote.get("usd_24h_change")),
                market_cap=to_float(quote.get("usd_market_cap"), None),
                trending_score=float(100 - index * 10),
                reason="High search volume on CoinGecko",
            ))
        return records

    def _quotes(self, ids: List[str]) -> Dict[str, Dict[str, Any]]:
        headers = {}
        if self.config.coingecko_api_key:
            headers["x-cg-demo-api-key"] = self.config.coingecko_api_key
        try:
            return self._get_json(
                f"{self.config.coingecko_url}/simple/price",
                params={
                    "ids": ",".join(ids),
                    "vs_currencies": "usd",
                    "include_24hr_change": "true",
                    "include_market_cap": "true",
                },
                headers=headers,
            )
        except (requests.exceptions.RequestException, ProviderFailure) as e:
            logger.info(f"[{self.name}] price lookup failed, returning unpriced coins: {e}")
            return {}


class DexScreenerTrendingProvider(HttpProvider):
    """Most active Solana pairs on DexScreener"""

    name = "dexscreener-trending"

    def _fetch_records(self, criteria: FetchCriteria) -> List[TrendingRecord]:
        payload = self._get_json(
            f"{self.config.dexscreener_url}/search",
            params={"q": "trending solana"},
        )
        pairs = (payload.get("pairs") or [])[:TRENDING_PAGE]
        return [
            TrendingRecord(
                id=str(pair["baseToken"]["address"]),
                name=pair["baseToken"].get("name") or "",
                symbol=pair["baseToken"].get("symbol") or "",
                trending_rank=index + 1,
                price=to_float(pair.get("priceUsd"), None),
                change_24h_percent=to_float((pair.get("priceChange") or {}).get("h24")),
                market_cap=to_float(pair.get("fdv"), None),
                volume_24h=to_float((pair.get("volume") or {}).get("h24")),
                trending_score=float(90 - index * 8),
                reason="High DEX trading volume",
            )
            for index, pair in enumerate(pairs)
        ]


class LunarCrushTrendingProvider(HttpProvider):
    """Assets with the highest LunarCrush social score"""

    name = "lunarcrush-trending"

    def _fetch_records(self, criteria: FetchCriteria) -> List[TrendingRecord]:
        payload = self._get_json(
            f"{self.config.lunarcrush_url}/assets",
            params={
                "key": self.config.lunarcrush_api_key,
                "sort": "social_score",
                "limit": TRENDING_PAGE,
            },
        )
        return [
            TrendingRecord(
                id=str(asset.get("id") or asset["symbol"]),
                name=asset.get("name") or "",
                symbol=asset.get("symbol") or "",
                trending_rank=index + 1,
                price=to_float(asset.get("price"), None),
                change_24h_percent=to_float(asset.get("percent_change_24h")),
                market_cap=to_float(asset.get("market_cap"), None),
                volume_24h=to_float(asset.get("volume_24h")),
                trending_score=to_float(asset.get("social_score")),
                reason="High social media activity",
            )
            for index, asset in enumerate(payload["data"])
        ]


# ==================== News ====================

COIN_PATTERN = re.compile(
    r"\b(BTC|ETH|SOL|ADA|DOT|LINK|UNI|AAVE|SUSHI|COMP|MKR|SNX|YFI|CRV|BAL|BONK|PEPE|DOGE|SHIB)\b",
    re.IGNORECASE,
)
POSITIVE_WORDS = ("surge", "pump", "bullish", "rally", "gains", "rise", "moon", "soar")
NEGATIVE_WORDS = ("crash", "dump", "bearish", "fall", "drop", "plunge", "decline", "slump")


def extract_coins(text: str) -> Tuple[str, ...]:
    """Tickers mentioned in ``text``, upper-cased, first mention first"""
    seen = []
    for match in COIN_PATTERN.findall(text):
        symbol = match.upper()
        if symbol not in seen:
            seen.append(symbol)
    return tuple(seen)


def headline_sentiment(text: str) -> str:
    """Keyword vote: positive, negative or neutral"""
    lowered = text.lower()
    positive = sum(1 for word in POSITIVE_WORDS if word in lowered)
    negative = sum(1 for word in NEGATIVE_WORDS if word in lowered)
    if positive > negative:
        return "positive"
    if negative > positive:
        return "negative"
    return "neutral"


class NewsApiProvider(HttpProvider):
    """Crypto headlines from NewsAPI ``/everything``"""

    name = "newsapi"
    QUERY = "cryptocurrency OR bitcoin OR ethereum OR blockchain OR defi"

    def _fetch_records(self, criteria: FetchCriteria) -> List[NewsRecord]:
        query = self.QUERY
        if criteria.symbols:
            query = " OR ".join(display_name(symbol) for symbol in criteria.symbols)

        payload = self._get_json(
            f"{self.config.news_api_url}/everything",
            params={
                "q": query,
                "sortBy": "publishedAt",
                "language": "en",
                "pageSize": criteria.limit,
                "apiKey": self.config.news_api_key,
            },
        )

        records = []
        for article in payload["articles"]:
            text = f"{article.get('title') or ''} {article.get('description') or ''}"
            coins = extract_coins(text)
            records.append(NewsRecord(
                id=article.get("url") or article.get("title") or "",
                name=article.get("title") or "",
                symbol=coins[0] if coins else "",
                summary=article.get("description") or "",
                url=article.get("url"),
                source=(article.get("source") or {}).get("name") or "",
                published_at=from_iso(article.get("publishedAt")),
                related_coins=coins,
                sentiment=headline_sentiment(text),
            ))
        return records


# ==================== Sentiment ====================

class LunarCrushSentimentProvider(HttpProvider):
    """Per-coin social sentiment from LunarCrush, one request per symbol"""

    name = "lunarcrush"

    def _fetch_records(self, criteria: FetchCriteria) -> List[SentimentRecord]:
        records = []
        for symbol in criteria.symbols:
            payload = self._get_json(
                f"{self.config.lunarcrush_url}/assets",
                params={"key": self.config.lunarcrush_api_key, "symbol": symbol},
            )
            data = payload.get("data") or []
            if data:
                records.append(self._to_record(data[0], symbol))
        return records

    def _to_record(self, asset: Dict[str, Any], symbol: str) -> SentimentRecord:
        sentiment = asset.get("sentiment") or {}
        bullish = to_float(sentiment.get("bullish"), 33.0)
        bearish = to_float(sentiment.get("bearish"), 33.0)
        neutral = to_float(sentiment.get("neutral"), 34.0)
        return SentimentRecord(
            name=asset.get("name") or display_name(symbol),
            symbol=str(asset.get("symbol") or symbol).upper(),
            bullish_percent=bullish,
            bearish_percent=bearish,
            neutral_percent=neutral,
            total_mentions=to_int(asset.get("social_mentions")),
            sentiment_score=(bullish - bearish) / 100.0,
        )
