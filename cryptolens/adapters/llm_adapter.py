"""
LLM adapter - implements LLMPort

Uses LiteLLM for intent extraction and answer synthesis.
"""

import logging
from typing import Optional

from litellm import completion

from cryptolens.config import LLMConfig
from cryptolens.infrastructure.errors import SynthesisFailure
from cryptolens.ports.interfaces import LLMPort


logger = logging.getLogger(__name__)


class LiteLLMAdapter(LLMPort):
    """
    LiteLLM adapter

    Implements LLMPort; the intent prompt asks for a bare JSON object that
    the intent resolver validates.
    """

    SYSTEM_PROMPT = (
        "You are a cryptocurrency market analyst. Answer with concrete numbers, "
        "be concise, and never invent data that is not in the prompt."
    )

    INTENT_PROMPT = """Classify this cryptocurrency query and extract its parameters.

Categories:
- token_launch: new pump.fun tokens ("pump.fun tokens above $50k today")
- ecosystem_token: Bonk ecosystem tokens ("new bonk tokens")
- combined: pump.fun and Bonk together ("compare pump.fun and bonk launches")
- defi_tvl: protocol TVL rankings ("top DeFi protocols on Solana by TVL")
- defi_yield: yield farming pools ("best APY farms on Ethereum")
- price: spot price of named coins ("price of SOL and BTC")
- news: crypto news ("latest bitcoin news")
- trending: trending coins ("what is trending")
- sentiment: social sentiment ("how bullish is ETH")
- general_market: top coins by market cap ("top 10 cryptocurrencies")

Query: {query}

Return only JSON (no markdown code fences):
{{
    "category": "one of the categories above",
    "metric": "mcap | volume | count | comparison | price | tvl | apy | sentiment | news",
    "threshold": number or null (USD, e.g. 19000 for "$19k"),
    "timeframe_hours": number (1 for "hour", 168 for "week", default 24),
    "symbols": ["upper-case tickers, e.g. SOL"],
    "chain": "chain name or null",
    "comparison": true or false,
    "include_news": true or false,
    "include_sentiment": true or false
}}"""

    def __init__(self, config: LLMConfig):
        """
        Args:
            config: provider, model, credentials and timeout
        """
        self.provider = config.provider
        self.model = config.model
        self.api_key = config.api_key
        self.api_base = config.api_base
        self.timeout = config.timeout_seconds

    @property
    def model_id(self) -> str:
        return f"{self.provider}/{self.model}" if self.provider else self.model

    def _call_llm(self, messages: list, temperature: float = 0.3, max_tokens: Optional[int] = None) -> str:
        response = completion(
            model=self.model_id,
            messages=messages,
            temperature=temperature,
            max_tokens=max_tokens,
            api_key=self.api_key,
            api_base=self.api_base,
            timeout=self.timeout,
        )
        return response.choices[0].message.content or ""

    def extract_intent(self, query: str) -> str:
        messages = [{"role": "user", "content": self.INTENT_PROMPT.format(query=query)}]
        return self._call_llm(messages, temperature=0.1, max_tokens=300)

    def synthesize_answer(self, prompt: str) -> str:
        messages = [
            {"role": "system", "content": self.SYSTEM_PROMPT},
            {"role": "user", "content": prompt},
        ]
        try:
            answer = self._call_llm(messages, temperature=0.3, max_tokens=600)
        except Exception as e:
            raise SynthesisFailure(f"LLM call failed: {e}", provider=self.model_id)

        if not answer.strip():
            raise SynthesisFailure("LLM returned an empty answer", provider=self.model_id)
        return answer.strip()
