"""
Query orchestrator tests
"""

import time
from datetime import timedelta

import pytest
from unittest.mock import Mock, patch

from cryptolens.aggregation.chains import ChainFactory
from cryptolens.config import ProviderConfig
from cryptolens.domain.models import (
    FailureKind,
    QueryCategory,
    QueryIntent,
    RecordKind,
    ResolutionSource,
    utc_now,
)
from cryptolens.infrastructure.errors import InternalFailure, InvalidInputError
from cryptolens.orchestrator.orchestrator import CATEGORY_LIMITS, create_orchestrator


PUMPFUN_QUERY = "How many pump.fun tokens launched in the last hour are above $19,000 market cap?"


class TestHandleQuery:
    """End-to-end query handling with test doubles at the provider seam"""

    @pytest.mark.asyncio
    async def test_pumpfun_threshold_query_with_dead_providers(self, events, fake_chains):
        orchestrator = create_orchestrator(fake_chains(), events)

        result = await orchestrator.handle_query(PUMPFUN_QUERY)

        assert result.intent.category == QueryCategory.TOKEN_LAUNCH
        assert result.intent.threshold == 19_000
        assert result.intent.timeframe_hours == 1
        assert result.resolution_source == ResolutionSource.FALLBACK
        assert len(result.records) == CATEGORY_LIMITS[QueryCategory.TOKEN_LAUNCH]

        cutoff = utc_now() - timedelta(hours=1)
        assert all(t.market_cap > 19_000 for t in result.records)
        assert all(t.launch_time >= cutoff for t in result.records)
        assert result.metadata.providers == ("synthetic",)
        assert result.answer.startswith(
            "Found 20 pump.fun tokens above $19,000 market cap launched in the last 1 hour"
        )

    @pytest.mark.asyncio
    async def test_sol_price_from_first_provider(self, events, fake_chains, fake_provider, price_factory):
        coingecko = fake_provider("coingecko", records=[price_factory("SOL", price=178.45)])
        coincap = fake_provider("coincap", records=[price_factory("SOL", price=1.0)])
        orchestrator = create_orchestrator(
            fake_chains({QueryCategory.PRICE: [coingecko, coincap]}), events
        )

        result = await orchestrator.handle_query("What's the SOL price?")

        assert result.intent.category == QueryCategory.PRICE
        assert [r.symbol for r in result.records] == ["SOL"]
        assert result.records[0].price == 178.45
        assert result.metadata.kind == RecordKind.PRICE
        assert result.metadata.providers == ("coingecko",)
        assert result.answer.startswith("Current prices: SOL: $178.45 (in ")
        assert result.answer.endswith(f"{result.elapsed_ms}ms)")
        assert coincap.calls == []

    @pytest.mark.asyncio
    async def test_sol_price_synthetic_when_providers_fail(self, events, fake_chains, fake_provider):
        dead = [fake_provider("coingecko", failure=FailureKind.NETWORK_ERROR)]
        orchestrator = create_orchestrator(fake_chains({QueryCategory.PRICE: dead}), events)

        result = await orchestrator.handle_query("What's the SOL price?")

        assert len(result.records) == 1
        assert result.records[0].symbol == "SOL"
        assert 178.45 * 0.95 <= result.records[0].price <= 178.45 * 1.05
        assert result.metadata.providers == ("synthetic",)

    @pytest.mark.asyncio
    async def test_llm_used_for_intent_and_answer(self, events, fake_chains, mock_llm_port):
        orchestrator = create_orchestrator(fake_chains(), events, llm_port=mock_llm_port)

        result = await orchestrator.handle_query("sol?")

        assert result.resolution_source == ResolutionSource.PARSED
        assert result.intent.symbols == ("SOL",)
        assert result.answer == "SOL is trading at $178.45."
        assert events.of("synthesis.tier") == [{"tier": "llm_data"}]

    @pytest.mark.asyncio
    async def test_events_emitted(self, events, fake_chains):
        orchestrator = create_orchestrator(fake_chains(), events)

        await orchestrator.handle_query("latest crypto news")

        names = events.names()
        assert names[0] == "intent.resolved"
        assert names[-1] == "query.completed"
        assert events.of("intent.resolved")[0]["source"] == "fallback"
        assert events.of("query.completed")[0]["total_results"] == CATEGORY_LIMITS[QueryCategory.NEWS]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("query", ["", "   ", None, 42])
    async def test_invalid_query_rejected(self, events, fake_chains, query):
        orchestrator = create_orchestrator(fake_chains(), events)

        with pytest.raises(InvalidInputError):
            await orchestrator.handle_query(query)

    @pytest.mark.asyncio
    async def test_unexpected_error_becomes_internal_failure(self, events, fake_chains):
        chains = fake_chains()
        chains.build = Mock(side_effect=RuntimeError("boom"))
        orchestrator = create_orchestrator(chains, events)

        with pytest.raises(InternalFailure) as exc_info:
            await orchestrator.handle_query("What's the SOL price?")

        assert exc_info.value.message == InternalFailure.GENERIC_MESSAGE
        assert exc_info.value.elapsed_ms >= 0
        assert "boom" not in exc_info.value.message
        assert isinstance(exc_info.value.cause, RuntimeError)

    @pytest.mark.asyncio
    async def test_raising_provider_falls_through_to_next(self, events, fake_chains, fake_provider, price_factory):
        broken = fake_provider("broken", error=RuntimeError("boom"))
        coincap = fake_provider("coincap", records=[price_factory("SOL")])
        orchestrator = create_orchestrator(fake_chains({QueryCategory.PRICE: [broken, coincap]}), events)

        result = await orchestrator.handle_query("What's the SOL price?")

        assert result.metadata.providers == ("coincap",)
        failure = events.of("provider.failed")[0]
        assert failure["provider"] == "broken"
        assert failure["kind"] == "network_error"

    @pytest.mark.asyncio
    async def test_garbage_provider_payload_still_answers(self, events):
        coin = {
            "mint": "m1",
            "name": "Glitch",
            "symbol": "GLT",
            "usd_market_cap": 50_000,
            "total_supply": 1e9,
            "created_timestamp": 1e300,
            "holder_count": float("inf"),
        }
        response = Mock(status_code=200)
        response.json.return_value = [coin]
        orchestrator = create_orchestrator(ChainFactory(ProviderConfig(timeout_seconds=1.0)), events)

        with patch("cryptolens.adapters.http_provider.requests.get", return_value=response):
            result = await orchestrator.handle_query(PUMPFUN_QUERY)

        assert result.answer
        assert result.metadata.providers == ("synthetic",)
        assert len(result.records) == CATEGORY_LIMITS[QueryCategory.TOKEN_LAUNCH]

    @pytest.mark.asyncio
    async def test_out_of_range_model_timeframe_falls_back_to_rules(self, events, fake_chains):
        llm = Mock()
        llm.extract_intent.return_value = '{"category": "token_launch", "timeframe_hours": 1e9}'
        llm.synthesize_answer.return_value = "Plenty of launches."
        orchestrator = create_orchestrator(fake_chains(), events, llm_port=llm)

        result = await orchestrator.handle_query("pumpfun tokens since forever")

        assert result.resolution_source == ResolutionSource.FALLBACK
        assert result.intent.timeframe_hours == 24
        assert result.answer == "Plenty of launches."

    @pytest.mark.asyncio
    async def test_elapsed_time_includes_intent_resolution(self, events, fake_chains):
        llm = Mock()

        def slow_intent(query):
            time.sleep(0.2)
            return '{"category": "price", "symbols": ["SOL"]}'

        llm.extract_intent.side_effect = slow_intent
        llm.synthesize_answer.return_value = "SOL is trading at $178.45."
        orchestrator = create_orchestrator(fake_chains(), events, llm_port=llm)

        result = await orchestrator.handle_query("sol?")

        assert result.resolution_source == ResolutionSource.PARSED
        assert result.elapsed_ms >= 200


class TestDispatch:
    """Category dispatch and supplementary data"""

    @pytest.mark.asyncio
    async def test_price_without_symbols_becomes_general_market(self, events, fake_chains):
        chains = fake_chains()
        orchestrator = create_orchestrator(chains, events)

        orchestration = await orchestrator.handle(QueryIntent(category=QueryCategory.PRICE))

        assert orchestration.intent.category == QueryCategory.GENERAL_MARKET
        assert chains.built == [QueryCategory.GENERAL_MARKET]
        assert len(orchestration.records) == CATEGORY_LIMITS[QueryCategory.GENERAL_MARKET]
        assert orchestration.records[0].symbol == "BTC"

    @pytest.mark.asyncio
    async def test_sentiment_without_symbols_uses_default_basket(self, events, fake_chains):
        orchestrator = create_orchestrator(fake_chains(), events)

        orchestration = await orchestrator.handle(QueryIntent(category=QueryCategory.SENTIMENT))

        assert [r.symbol for r in orchestration.records] == ["BTC", "ETH", "SOL"]
        for reading in orchestration.records:
            total = reading.bullish_percent + reading.bearish_percent + reading.neutral_percent
            assert total == pytest.approx(100, abs=0.2)

    @pytest.mark.asyncio
    async def test_combined_runs_branches_concurrently(self, events, fake_chains, fake_provider, token_factory):
        pumpfun = fake_provider("pump.fun", records=[token_factory("PEPE", 40_000)], delay=0.4)
        bonk = fake_provider("bonk-api", records=[token_factory("BONKX", 90_000, platform="bonk")], delay=0.4)
        orchestrator = create_orchestrator(
            fake_chains({
                QueryCategory.TOKEN_LAUNCH: [pumpfun],
                QueryCategory.ECOSYSTEM_TOKEN: [bonk],
            }),
            events,
        )

        start = time.perf_counter()
        orchestration = await orchestrator.handle(QueryIntent(category=QueryCategory.COMBINED))
        elapsed = time.perf_counter() - start

        assert elapsed < 0.75
        assert [t.name for t in orchestration.records] == ["BONKX", "PEPE"]
        assert orchestration.metadata.providers == ("pump.fun", "bonk-api")
        assert pumpfun.calls[0].platform == "pumpfun"
        assert bonk.calls[0].platform == "bonk"

    @pytest.mark.asyncio
    async def test_combined_with_dead_providers(self, events, fake_chains):
        orchestrator = create_orchestrator(fake_chains(), events)

        orchestration = await orchestrator.handle(QueryIntent(category=QueryCategory.COMBINED))

        caps = [t.market_cap for t in orchestration.records]
        assert len(caps) == 2 * CATEGORY_LIMITS[QueryCategory.COMBINED]
        assert caps == sorted(caps, reverse=True)
        assert {t.platform for t in orchestration.records} == {"pumpfun", "bonk"}

    @pytest.mark.asyncio
    async def test_supplementary_news_appended(self, events, fake_chains, fake_provider, price_factory):
        orchestrator = create_orchestrator(
            fake_chains({QueryCategory.PRICE: [fake_provider("coingecko", records=[price_factory("SOL")])]}),
            events,
        )

        orchestration = await orchestrator.handle(
            QueryIntent(category=QueryCategory.PRICE, symbols=("SOL",), include_news=True)
        )

        kinds = [r.kind for r in orchestration.records]
        assert kinds[0] == RecordKind.PRICE
        assert kinds[1:] == [RecordKind.NEWS] * 5
        assert orchestration.metadata.kind == RecordKind.PRICE
        assert orchestration.metadata.providers == ("coingecko", "synthetic")

    @pytest.mark.asyncio
    async def test_supplementary_failure_is_not_fatal(self, events, fake_chains, fake_provider, price_factory):
        chains = fake_chains({QueryCategory.PRICE: [fake_provider("coingecko", records=[price_factory("SOL")])]})
        build = chains.build

        def build_without_news(category):
            if category == QueryCategory.NEWS:
                raise RuntimeError("news exploded")
            return build(category)

        chains.build = build_without_news
        orchestrator = create_orchestrator(chains, events)

        result = await orchestrator.handle_query("SOL price with the latest news")

        assert [r.symbol for r in result.records] == ["SOL"]
        failure = events.of("supplementary.failed")[0]
        assert failure["category"] == "news"
        assert "news exploded" in failure["error"]

    @pytest.mark.asyncio
    async def test_supplementary_sentiment_needs_symbols(self, events, fake_chains):
        chains = fake_chains()
        orchestrator = create_orchestrator(chains, events)

        await orchestrator.handle(QueryIntent(category=QueryCategory.TRENDING, include_sentiment=True))

        assert chains.built == [QueryCategory.TRENDING]
