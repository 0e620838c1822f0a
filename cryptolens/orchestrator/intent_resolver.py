"""
Intent resolver - soft routing for free-text queries

Design principles:
1. LLM first: the language model's reading is used when it is well-formed
2. Rule fallback: any model failure drops to a deterministic classifier
3. Never fails: every query resolves to some intent
4. Reproducible: the classifier's category precedence is fixed

Fallback category precedence:
    price > defi (yield, else tvl) > news > trending > sentiment
    > general market > token family (combined, ecosystem or launch)
"""

import json
import logging
import re
from typing import List, Optional, Sequence, Tuple

from pydantic import BaseModel, Field, ValidationError, field_validator

from cryptolens.domain.models import (
    FallbackUsed,
    IntentResolution,
    Metric,
    Parsed,
    QueryCategory,
    QueryIntent,
)
from cryptolens.domain.symbols import KNOWN_CHAINS, KNOWN_COINS, NON_TICKER_WORDS, canonical_chain
from cryptolens.ports.interfaces import LLMPort


logger = logging.getLogger(__name__)


# Upper bounds on criteria: a year of history, and a market cap no asset comes
# near
MAX_TIMEFRAME_HOURS = 24 * 365
MAX_THRESHOLD = 1e15


DEFAULT_METRICS = {
    QueryCategory.TOKEN_LAUNCH: Metric.COUNT,
    QueryCategory.ECOSYSTEM_TOKEN: Metric.COUNT,
    QueryCategory.COMBINED: Metric.COMPARISON,
    QueryCategory.DEFI_TVL: Metric.TVL,
    QueryCategory.DEFI_YIELD: Metric.APY,
    QueryCategory.PRICE: Metric.PRICE,
    QueryCategory.NEWS: Metric.NEWS,
    QueryCategory.TRENDING: Metric.VOLUME,
    QueryCategory.SENTIMENT: Metric.SENTIMENT,
    QueryCategory.GENERAL_MARKET: Metric.MCAP,
}


class IntentPayload(BaseModel):
    """Shape the language model must return"""

    category: QueryCategory
    metric: Optional[Metric] = None
    threshold: Optional[float] = Field(default=None, ge=0, le=MAX_THRESHOLD, allow_inf_nan=False)
    timeframe_hours: float = Field(default=24.0, gt=0, le=MAX_TIMEFRAME_HOURS, allow_inf_nan=False)
    symbols: List[str] = Field(default_factory=list)
    chain: Optional[str] = None
    comparison: bool = False
    include_news: bool = False
    include_sentiment: bool = False

    @field_validator('symbols')
    @classmethod
    def normalize_symbols(cls, v: List[str]) -> List[str]:
        """Upper-case, strip cashtags, drop blanks and duplicates"""
        seen: List[str] = []
        for symbol in v:
            cleaned = symbol.strip().lstrip('$').upper()
            if cleaned and cleaned not in seen:
                seen.append(cleaned)
        return seen

    def to_intent(self) -> QueryIntent:
        return QueryIntent(
            category=self.category,
            metric=self.metric or DEFAULT_METRICS[self.category],
            threshold=self.threshold,
            timeframe_hours=self.timeframe_hours,
            symbols=tuple(self.symbols),
            chain=canonical_chain(self.chain),
            comparison=self.comparison,
            include_news=self.include_news,
            include_sentiment=self.include_sentiment,
        )


class IntentResolver:
    """
    Intent resolver

    Responsibilities:
    1. Ask the language model for a structured intent
    2. Validate what it returns
    3. Classify deterministically when the model is absent or fails
    """

    # Category keywords (rule fallback)
    PRICE_WORDS = ("price", "worth", "trading at", "cost", "how much is")
    DEFI_WORDS = ("tvl", "total value locked", "defi", "protocol", "yield", "apy", "farm")
    YIELD_WORDS = ("yield", "apy", "farm", "farming")
    NEWS_WORDS = ("news", "update", "headline")
    TRENDING_WORDS = ("trending", "hot", "popular")
    SENTIMENT_WORDS = ("sentiment", "bullish", "bearish", "mood")
    RANKING_WORDS = ("top", "ranking", "largest", "biggest")
    PUMPFUN_WORDS = ("pump.fun", "pumpfun", "pump fun")
    BONK_WORDS = ("bonk",)
    LAUNCH_WORDS = ("launch", "launched", "new token")
    COMPARISON_WORDS = ("vs", "versus", "compare")
    MCAP_WORDS = ("mcap", "market cap", "marketcap")
    VOLUME_WORDS = ("volume",)

    # $-prefixed, comma-grouped, k-suffixed or plain numbers
    NUMBER_PATTERN = re.compile(r'(\$\s?)?(\d[\d,]*(?:\.\d+)?)\s?(k\b)?')
    CASHTAG_PATTERN = re.compile(r'\$([A-Za-z]{2,10})\b')

    def __init__(self, llm_port: Optional[LLMPort] = None):
        """
        Args:
            llm_port: language model port (optional; rules only without it)
        """
        self.llm = llm_port

    def resolve(self, query: str) -> IntentResolution:
        """
        Resolve a query into an intent

        Args:
            query: the user's query

        Returns:
            IntentResolution: ``Parsed`` when the model's reading was used,
            ``FallbackUsed`` otherwise
        """
        if self.llm is None:
            return FallbackUsed(self.classify(query), reason="no language model configured")

        try:
            raw = self.llm.extract_intent(query)
            return Parsed(self.parse_payload(raw))
        except (ValueError, ValidationError) as e:
            reason = f"unusable model output: {e}"
        except Exception as e:
            reason = f"model call failed: {e}"

        logger.info(f"Intent extraction fell back to rules ({reason})")
        return FallbackUsed(self.classify(query), reason=reason)

    @staticmethod
    def parse_payload(raw: str) -> QueryIntent:
        """
        Validate the model's JSON text

        Raises:
            ValueError: not JSON (``json.JSONDecodeError``) or not an object
            ValidationError: JSON that does not match ``IntentPayload``
        """
        text = re.sub(r'```(?:json)?\s*', '', raw or '').strip()
        data = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError("intent payload is not a JSON object")
        return IntentPayload.model_validate(data).to_intent()

    # ==================== Rule-based classification ====================

    def classify(self, query: str) -> QueryIntent:
        """Deterministic classifier; identical input gives an identical intent"""
        text = query.lower()

        category = self._classify_category(text)
        threshold = self._extract_threshold(text)
        comparison = self._has(text, self.COMPARISON_WORDS)

        if threshold is not None or self._has(text, self.MCAP_WORDS):
            metric = Metric.MCAP
        elif self._has(text, self.VOLUME_WORDS):
            metric = Metric.VOLUME
        else:
            metric = DEFAULT_METRICS[category]

        return QueryIntent(
            category=category,
            metric=metric,
            threshold=threshold,
            timeframe_hours=self._extract_timeframe(text),
            symbols=tuple(self._extract_symbols(query)),
            chain=self._extract_chain(text),
            comparison=comparison,
            include_news=category != QueryCategory.NEWS and self._has(text, self.NEWS_WORDS),
            include_sentiment=category != QueryCategory.SENTIMENT and self._has(text, self.SENTIMENT_WORDS),
        )

    def _classify_category(self, text: str) -> QueryCategory:
        mentions_pumpfun = self._has(text, self.PUMPFUN_WORDS)
        mentions_bonk = self._has(text, self.BONK_WORDS)

        if self._has(text, self.PRICE_WORDS):
            return QueryCategory.PRICE
        if self._has(text, self.DEFI_WORDS):
            if self._has(text, self.YIELD_WORDS):
                return QueryCategory.DEFI_YIELD
            return QueryCategory.DEFI_TVL
        if self._has(text, self.NEWS_WORDS):
            return QueryCategory.NEWS
        if self._has(text, self.TRENDING_WORDS):
            return QueryCategory.TRENDING
        if self._has(text, self.SENTIMENT_WORDS):
            return QueryCategory.SENTIMENT
        launchpad = mentions_pumpfun or mentions_bonk or self._has(text, self.LAUNCH_WORDS)
        if self._has(text, self.RANKING_WORDS) and not launchpad:
            return QueryCategory.GENERAL_MARKET

        if mentions_pumpfun and mentions_bonk:
            return QueryCategory.COMBINED
        if mentions_bonk:
            return QueryCategory.ECOSYSTEM_TOKEN
        return QueryCategory.TOKEN_LAUNCH

    @staticmethod
    def _has(text: str, words: Sequence[str]) -> bool:
        # Plurals count ("prices", "headlines")
        return any(re.search(rf'\b{re.escape(word)}s?\b', text) for word in words)

    def _extract_threshold(self, text: str) -> Optional[float]:
        for match in self.NUMBER_PATTERN.finditer(text):
            dollar, number, thousands = match.groups()
            # Part of a word or time span, e.g. "24h" or "v3"
            if match.start() > 0 and text[match.start() - 1].isalnum():
                continue
            if re.match(r'[a-z]', text[match.end(2):match.end(2) + 1]) and not thousands:
                continue
            try:
                value = float(number.replace(',', ''))
            except ValueError:
                continue
            if thousands:
                return min(value * 1000, MAX_THRESHOLD)
            if dollar or ',' in number or (value >= 1000 and value.is_integer()):
                return min(value, MAX_THRESHOLD)
        return None

    @staticmethod
    def _extract_timeframe(text: str) -> float:
        if re.search(r'\bhours?\b', text):
            return 1.0
        if re.search(r'\bweeks?\b', text):
            return 168.0
        return 24.0

    def _extract_symbols(self, query: str) -> List[str]:
        """Known tickers and cashtags, in order of first appearance"""
        text = query.lower()
        found: List[Tuple[int, str]] = []

        for coin in KNOWN_COINS.values():
            positions = [
                m.start()
                for alias in coin.aliases
                for m in [re.search(rf'\b{re.escape(alias)}\b', text)]
                if m
            ]
            upper = re.search(rf'\b{coin.symbol}\b', query)
            if upper:
                positions.append(upper.start())
            if positions:
                found.append((min(positions), coin.symbol))

        for m in self.CASHTAG_PATTERN.finditer(query):
            symbol = m.group(1).upper()
            if symbol not in NON_TICKER_WORDS:
                found.append((m.start(), symbol))

        symbols: List[str] = []
        for _, symbol in sorted(found, key=lambda item: item[0]):
            if symbol not in symbols:
                symbols.append(symbol)
        return symbols

    @staticmethod
    def _extract_chain(text: str) -> Optional[str]:
        hits = [
            (m.start(), name)
            for key, name in KNOWN_CHAINS.items()
            for m in [re.search(rf'\b{key}\b', text)]
            if m
        ]
        return min(hits)[1] if hits else None
