"""
Response synthesizer - turns records into a natural-language answer

Design principles:
1. Never fails: three tiers, each tried only if the previous one failed
2. Template driven: the last tier is a static template per category
3. Honest: when records failed validation the model is not asked to
   describe them

Tiers:
1. LLM with data - the first records, variant-specific fields
2. LLM intelligent fallback - explains the gap, answers from general knowledge
3. Static template
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Type

from cryptolens.adapters.event_sink_adapter import NullEventSink
from cryptolens.domain.models import (
    NewsRecord,
    PriceRecord,
    ProtocolRecord,
    QueryCategory,
    QueryIntent,
    QueryMetadata,
    Record,
    SentimentRecord,
    TokenRecord,
    TrendingRecord,
    YieldPoolRecord,
)
from cryptolens.infrastructure.errors import SynthesisFailure
from cryptolens.ports.interfaces import EventSink, LLMPort


logger = logging.getLogger(__name__)

PROMPT_RECORD_LIMIT = 10
TEMPLATE_RECORD_LIMIT = 5


# ==================== Formatting helpers ====================

def money(value: Optional[float]) -> str:
    """Dollar amount with precision scaled to magnitude"""
    if value is None:
        return "n/a"
    if value >= 1e9:
        return f"${value / 1e9:,.2f}B"
    if value >= 1e6:
        return f"${value / 1e6:,.2f}M"
    if value >= 1:
        return f"${value:,.2f}"
    return f"${value:.8f}".rstrip("0").rstrip(".")


def describe_record(record: Record) -> str:
    """One prompt line with the fields that matter for the record's variant"""
    if isinstance(record, PriceRecord):
        return f"- {record.name} ({record.symbol}): {money(record.price)}, 24h {record.change_24h_percent:+.2f}%"
    if isinstance(record, ProtocolRecord):
        chains = ", ".join(record.chains[:4]) or "n/a"
        return f"- {record.name}: TVL {money(record.tvl)}, category {record.category or 'n/a'}, chains {chains}"
    if isinstance(record, YieldPoolRecord):
        return f"- {record.name} {record.symbol}: APY {record.apy:.2f}%, TVL {money(record.tvl_usd)}, chain {record.chain}"
    if isinstance(record, TokenRecord):
        launched = record.launch_time.strftime("%Y-%m-%d %H:%M UTC")
        return f"- {record.name} ({record.symbol}, {record.platform}): {money(record.market_cap)} mcap, launched {launched}"
    if isinstance(record, NewsRecord):
        return f"- \"{record.name}\" ({record.source or 'unknown source'}, {record.sentiment})"
    if isinstance(record, TrendingRecord):
        return f"- #{record.trending_rank} {record.name} ({record.symbol}): {money(record.price)}, {record.reason}"
    if isinstance(record, SentimentRecord):
        return (
            f"- {record.name} ({record.symbol}): {record.bullish_percent:.0f}% bullish / "
            f"{record.bearish_percent:.0f}% bearish, score {record.sentiment_score:+.2f}"
        )
    return f"- {record.name}"


# ==================== Templates ====================

class AnswerTemplate(ABC):
    """Static answer for one category"""

    @abstractmethod
    def render(self, intent: QueryIntent, records: List[Record], metadata: QueryMetadata, elapsed_ms: int) -> str:
        pass

    @staticmethod
    def of_type(records: List[Record], record_type: type) -> List[Record]:
        return [record for record in records if isinstance(record, record_type)]


class PriceTemplate(AnswerTemplate):
    def render(self, intent, records, metadata, elapsed_ms):
        prices = self.of_type(records, PriceRecord)
        if not prices:
            return GenericTemplate().render(intent, records, metadata, elapsed_ms)
        listed = ", ".join(f"{p.symbol}: {money(p.price)}" for p in prices)
        return f"Current prices: {listed} (in {elapsed_ms}ms)"


class TokenTemplate(AnswerTemplate):
    """Counts launches, naming the threshold and window"""

    def render(self, intent, records, metadata, elapsed_ms):
        tokens = self.of_type(records, TokenRecord)
        window = f"{intent.timeframe_hours:g} hour{'s' if intent.timeframe_hours != 1 else ''}"
        platform = {
            QueryCategory.ECOSYSTEM_TOKEN: "Bonk ecosystem",
            QueryCategory.COMBINED: "pump.fun and Bonk",
        }.get(intent.category, "pump.fun")

        answer = f"Found {len(tokens)} {platform} tokens"
        if intent.threshold is not None:
            answer += f" above ${intent.threshold:,.0f} market cap"
        answer += f" launched in the last {window} (in {elapsed_ms}ms)."

        if tokens:
            top = sorted(tokens, key=lambda t: t.market_cap, reverse=True)[:TEMPLATE_RECORD_LIMIT]
            answer += " Largest: " + ", ".join(f"{t.name} ({money(t.market_cap)})" for t in top) + "."
        return answer


class ProtocolTemplate(AnswerTemplate):
    def render(self, intent, records, metadata, elapsed_ms):
        protocols = self.of_type(records, ProtocolRecord)[:TEMPLATE_RECORD_LIMIT]
        where = f" on {intent.chain}" if intent.chain else ""
        leaders = ", ".join(f"{p.name} ({money(p.tvl)})" for p in protocols)
        return f"Top DeFi protocols by TVL{where}: {leaders}."


class YieldTemplate(AnswerTemplate):
    def render(self, intent, records, metadata, elapsed_ms):
        pools = self.of_type(records, YieldPoolRecord)[:TEMPLATE_RECORD_LIMIT]
        where = f" on {intent.chain}" if intent.chain else ""
        listed = ", ".join(f"{p.name} {p.symbol} {p.apy:.2f}% APY" for p in pools)
        return f"Highest yields{where}: {listed}."


class NewsTemplate(AnswerTemplate):
    def render(self, intent, records, metadata, elapsed_ms):
        articles = self.of_type(records, NewsRecord)[:TEMPLATE_RECORD_LIMIT]
        headlines = "; ".join(article.name for article in articles)
        return f"Latest crypto headlines: {headlines}."


class TrendingTemplate(AnswerTemplate):
    def render(self, intent, records, metadata, elapsed_ms):
        coins = self.of_type(records, TrendingRecord)[:TEMPLATE_RECORD_LIMIT]
        listed = ", ".join(f"#{c.trending_rank} {c.name} ({c.symbol})" for c in coins)
        return f"Trending now: {listed}."


class SentimentTemplate(AnswerTemplate):
    def render(self, intent, records, metadata, elapsed_ms):
        readings = self.of_type(records, SentimentRecord)
        listed = ", ".join(
            f"{s.symbol}: {s.bullish_percent:.0f}% bullish / {s.bearish_percent:.0f}% bearish"
            for s in readings
        )
        return f"Social sentiment: {listed}."


class GeneralMarketTemplate(AnswerTemplate):
    def render(self, intent, records, metadata, elapsed_ms):
        coins = self.of_type(records, PriceRecord)[:TEMPLATE_RECORD_LIMIT]
        listed = ", ".join(f"{c.name} ({c.symbol}) {money(c.price)}" for c in coins)
        return f"Top cryptocurrencies by market cap: {listed}."


class GenericTemplate(AnswerTemplate):
    def render(self, intent, records, metadata, elapsed_ms):
        return f"Found {len(records)} results for your query in {elapsed_ms}ms."


TEMPLATES: Dict[QueryCategory, Type[AnswerTemplate]] = {
    QueryCategory.PRICE: PriceTemplate,
    QueryCategory.TOKEN_LAUNCH: TokenTemplate,
    QueryCategory.ECOSYSTEM_TOKEN: TokenTemplate,
    QueryCategory.COMBINED: TokenTemplate,
    QueryCategory.DEFI_TVL: ProtocolTemplate,
    QueryCategory.DEFI_YIELD: YieldTemplate,
    QueryCategory.NEWS: NewsTemplate,
    QueryCategory.TRENDING: TrendingTemplate,
    QueryCategory.SENTIMENT: SentimentTemplate,
    QueryCategory.GENERAL_MARKET: GeneralMarketTemplate,
}


# ==================== Synthesizer ====================

class ResponseSynthesizer:
    """
    Response synthesizer

    Walks the three tiers and reports which one produced the answer.
    """

    DATA_PROMPT = """Answer this cryptocurrency question using the data below.

Question: "{query}"
Data: {count} {kind} records from {sources}, fetched in {elapsed_ms}ms
{records}

Answer directly with concrete numbers. Summarize when there are many results.
Keep the answer under 300 words."""

    FALLBACK_PROMPT = """Live market data for this cryptocurrency question is unavailable or unreliable right now.

Question: "{query}"

Say briefly that live data could not be verified, then give the most useful
answer you can from general knowledge. {guidance}
Do not invent specific current prices or figures. Keep it under 200 words."""

    CATEGORY_GUIDANCE = {
        QueryCategory.TOKEN_LAUNCH: "Explain how pump.fun launches work and what market caps new tokens typically reach.",
        QueryCategory.ECOSYSTEM_TOKEN: "Describe the Bonk ecosystem on Solana and how its tokens usually trade.",
        QueryCategory.COMBINED: "Contrast pump.fun launches with Bonk ecosystem tokens.",
        QueryCategory.DEFI_TVL: "Name the protocols that usually lead by TVL and what drives TVL.",
        QueryCategory.DEFI_YIELD: "Explain where yields come from and the risks behind high APYs.",
        QueryCategory.PRICE: "Describe the asset and what typically moves its price.",
        QueryCategory.NEWS: "Point to reliable crypto news sources and recent themes.",
        QueryCategory.TRENDING: "Explain how trending lists are formed and what usually trends.",
        QueryCategory.SENTIMENT: "Explain how social sentiment is measured and how to read it.",
        QueryCategory.GENERAL_MARKET: "Name the assets that usually lead by market cap.",
    }

    def __init__(self, llm_port: Optional[LLMPort] = None, events: Optional[EventSink] = None):
        """
        Args:
            llm_port: language model port (optional; templates only without it)
            events: event sink notified of the tier used (discarded when omitted)
        """
        self.llm = llm_port
        self.events = events if events is not None else NullEventSink()

    def synthesize(
        self,
        query: str,
        intent: QueryIntent,
        records: List[Record],
        metadata: QueryMetadata,
        elapsed_ms: int,
        validation_exhausted: bool = False,
    ) -> str:
        """
        Write the answer

        Args:
            query: the user's question
            intent: the resolved intent
            records: merged records, primary first
            metadata: kind, sources and count
            elapsed_ms: aggregation time
            validation_exhausted: every provider record failed validation

        Returns:
            str: non-empty answer text
        """
        if self.llm is not None:
            if records and not validation_exhausted:
                answer = self._try_llm(self.data_prompt(query, records, metadata, elapsed_ms), "llm_data")
                if answer:
                    return answer

            answer = self._try_llm(self.fallback_prompt(query, intent), "llm_fallback")
            if answer:
                return answer

        self._report("template")
        return self.render_template(intent, records, metadata, elapsed_ms)

    def data_prompt(self, query: str, records: List[Record], metadata: QueryMetadata, elapsed_ms: int) -> str:
        lines = "\n".join(describe_record(record) for record in records[:PROMPT_RECORD_LIMIT])
        return self.DATA_PROMPT.format(
            query=query,
            count=len(records),
            kind=metadata.kind.value,
            sources=", ".join(metadata.providers) or "unknown sources",
            elapsed_ms=elapsed_ms,
            records=lines,
        )

    def fallback_prompt(self, query: str, intent: QueryIntent) -> str:
        return self.FALLBACK_PROMPT.format(
            query=query,
            guidance=self.CATEGORY_GUIDANCE.get(intent.category, ""),
        )

    @staticmethod
    def render_template(intent: QueryIntent, records: List[Record], metadata: QueryMetadata, elapsed_ms: int) -> str:
        template = TEMPLATES.get(intent.category, GenericTemplate)()
        if not records:
            template = GenericTemplate()
        return template.render(intent, records, metadata, elapsed_ms)

    def _try_llm(self, prompt: str, tier: str) -> Optional[str]:
        try:
            answer = self.llm.synthesize_answer(prompt)
        except SynthesisFailure as e:
            logger.info(f"Synthesis tier {tier} failed: {e.message}")
            return None
        except Exception as e:
            logger.warning(f"Synthesis tier {tier} raised unexpectedly: {e}", exc_info=True)
            return None
        if not answer or not answer.strip():
            logger.info(f"Synthesis tier {tier} returned an empty answer")
            return None
        self._report(tier)
        return answer.strip()

    def _report(self, tier: str) -> None:
        self.events.emit("synthesis.tier", tier=tier)
