"""
Intent resolver tests
"""

import pytest
from unittest.mock import Mock

from pydantic import ValidationError

from cryptolens.domain.models import (
    FallbackUsed,
    Metric,
    Parsed,
    QueryCategory,
    ResolutionSource,
)
from cryptolens.orchestrator.intent_resolver import (
    MAX_THRESHOLD,
    MAX_TIMEFRAME_HOURS,
    IntentPayload,
    IntentResolver,
)


@pytest.fixture
def resolver():
    """Rules-only resolver"""
    return IntentResolver()


class TestRuleClassification:
    """Deterministic classifier tests"""

    @pytest.mark.parametrize("query,category", [
        ("What's the SOL price?", QueryCategory.PRICE),
        ("How much is bitcoin worth", QueryCategory.PRICE),
        ("Top DeFi protocols on Solana by TVL", QueryCategory.DEFI_TVL),
        ("Best yield farms on Ethereum", QueryCategory.DEFI_YIELD),
        ("highest APY pools", QueryCategory.DEFI_YIELD),
        ("latest crypto news", QueryCategory.NEWS),
        ("what's trending", QueryCategory.TRENDING),
        ("is the market bullish on ETH", QueryCategory.SENTIMENT),
        ("top 10 cryptocurrencies", QueryCategory.GENERAL_MARKET),
        ("new pump.fun tokens today", QueryCategory.TOKEN_LAUNCH),
        ("bonk launches this week", QueryCategory.ECOSYSTEM_TOKEN),
        ("Compare pump.fun and bonk launches today", QueryCategory.COMBINED),
        ("anything interesting?", QueryCategory.TOKEN_LAUNCH),
    ])
    def test_categories(self, resolver, query, category):
        assert resolver.classify(query).category == category

    def test_precedence_price_over_defi(self, resolver):
        assert resolver.classify("price of the top defi protocol token").category == QueryCategory.PRICE

    def test_precedence_defi_over_news(self, resolver):
        assert resolver.classify("defi protocol news").category == QueryCategory.DEFI_TVL

    def test_top_launches_stay_token_family(self, resolver):
        assert resolver.classify("top pump.fun launches").category == QueryCategory.TOKEN_LAUNCH
        assert resolver.classify("biggest bonk tokens").category == QueryCategory.ECOSYSTEM_TOKEN

    def test_deterministic(self, resolver):
        query = "How many pump.fun tokens launched in the last hour are above $19,000 market cap?"
        assert resolver.classify(query) == resolver.classify(query)

    def test_pumpfun_threshold_query(self, resolver):
        intent = resolver.classify(
            "How many pump.fun tokens launched in the last hour are above $19,000 market cap?"
        )
        assert intent.category == QueryCategory.TOKEN_LAUNCH
        assert intent.threshold == 19_000
        assert intent.timeframe_hours == 1
        assert intent.metric == Metric.MCAP


class TestParameterExtraction:
    """Threshold, timeframe, symbol and chain extraction"""

    @pytest.mark.parametrize("query,threshold", [
        ("tokens above $19,000", 19_000),
        ("tokens above $50k", 50_000),
        ("tokens above 25k market cap", 25_000),
        ("tokens above 1,500", 1_500),
        ("tokens over 5000", 5_000),
        ("tokens above $250", 250),
        ("tokens in the last 24h", None),
        ("uniswap v3 pools", None),
        ("top 10 tokens", None),
    ])
    def test_threshold(self, resolver, query, threshold):
        assert resolver._extract_threshold(query) == threshold

    @pytest.mark.parametrize("query,hours", [
        ("launched in the last hour", 1),
        ("launched in the past 3 hours", 1),
        ("launched this week", 168),
        ("launched today", 24),
    ])
    def test_timeframe(self, resolver, query, hours):
        assert resolver.classify(query).timeframe_hours == hours

    def test_symbols_in_order_of_appearance(self, resolver):
        assert resolver.classify("price of ethereum and BTC and $wif").symbols == ("ETH", "BTC", "WIF")

    def test_symbols_deduplicated(self, resolver):
        assert resolver.classify("SOL price, solana price").symbols == ("SOL",)

    def test_cashtag_stopwords_ignored(self, resolver):
        assert resolver.classify("price of $USD").symbols == ()

    def test_no_symbols(self, resolver):
        assert resolver.classify("show me prices").symbols == ()

    def test_common_words_are_not_tickers(self, resolver):
        intent = resolver.classify("send me the news link, dot the i's")
        assert intent.symbols == ()
        assert not intent.include_sentiment

    def test_upper_case_tickers_still_match(self, resolver):
        assert resolver.classify("LINK and $DOT price").symbols == ("LINK", "DOT")

    def test_huge_threshold_is_capped(self, resolver):
        assert resolver.classify("tokens above $" + "9" * 400).threshold == MAX_THRESHOLD

    def test_chain(self, resolver):
        assert resolver.classify("Top DeFi protocols on Solana by TVL").chain == "Solana"
        assert resolver.classify("yield farms on bsc or ethereum").chain == "BSC"
        assert resolver.classify("best yields").chain is None

    def test_supplementary_flags(self, resolver):
        intent = resolver.classify("SOL price with latest news and sentiment")
        assert intent.category == QueryCategory.PRICE
        assert intent.include_news
        assert intent.include_sentiment

    def test_comparison_flag(self, resolver):
        assert resolver.classify("pump.fun vs bonk").comparison


class TestModelResolution:
    """Language model path tests"""

    def test_parsed_when_model_output_is_valid(self, mock_llm_port):
        resolution = IntentResolver(mock_llm_port).resolve("sol?")

        assert isinstance(resolution, Parsed)
        assert resolution.source == ResolutionSource.PARSED
        assert resolution.intent.category == QueryCategory.PRICE
        assert resolution.intent.symbols == ("SOL",)
        assert resolution.intent.metric == Metric.PRICE

    def test_code_fences_are_stripped(self):
        llm = Mock()
        llm.extract_intent.return_value = '```json\n{"category": "defi_tvl", "chain": "solana"}\n```'

        resolution = IntentResolver(llm).resolve("tvl on solana")

        assert isinstance(resolution, Parsed)
        assert resolution.intent.chain == "Solana"

    @pytest.mark.parametrize("raw", [
        "not json at all",
        '["price"]',
        '{"category": "weather"}',
        '{"category": "price", "timeframe_hours": -1}',
        '{"category": "price", "timeframe_hours": 1e9}',
        '{"category": "price", "threshold": 1e300}',
        '{"category": "token_launch", "threshold": "lots"}',
        "",
    ])
    def test_unusable_output_falls_back(self, raw):
        llm = Mock()
        llm.extract_intent.return_value = raw

        resolution = IntentResolver(llm).resolve("What's the SOL price?")

        assert isinstance(resolution, FallbackUsed)
        assert resolution.intent.category == QueryCategory.PRICE
        assert resolution.intent.symbols == ("SOL",)

    def test_model_error_falls_back(self):
        llm = Mock()
        llm.extract_intent.side_effect = TimeoutError("model timed out")

        resolution = IntentResolver(llm).resolve("bonk launches")

        assert isinstance(resolution, FallbackUsed)
        assert "model timed out" in resolution.reason
        assert resolution.intent.category == QueryCategory.ECOSYSTEM_TOKEN

    def test_no_model_falls_back(self):
        resolution = IntentResolver().resolve("latest crypto news")
        assert isinstance(resolution, FallbackUsed)
        assert resolution.source == ResolutionSource.FALLBACK


class TestIntentPayload:
    """Payload validation tests"""

    def test_symbols_normalized(self):
        payload = IntentPayload(category="price", symbols=["$sol", " btc ", "SOL", ""])
        assert payload.symbols == ["SOL", "BTC"]

    def test_default_metric_by_category(self):
        assert IntentPayload(category="defi_yield").to_intent().metric == Metric.APY
        assert IntentPayload(category="combined").to_intent().metric == Metric.COMPARISON

    def test_negative_threshold_rejected(self):
        with pytest.raises(ValidationError):
            IntentPayload(category="token_launch", threshold=-5)

    def test_timeframe_upper_bound(self):
        assert IntentPayload(category="token_launch", timeframe_hours=MAX_TIMEFRAME_HOURS).timeframe_hours == 8760
        with pytest.raises(ValidationError):
            IntentPayload(category="token_launch", timeframe_hours=1e9)

    def test_threshold_upper_bound(self):
        with pytest.raises(ValidationError):
            IntentPayload(category="token_launch", threshold=1e300)
