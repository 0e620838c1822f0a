"""
Configuration - read once from the environment (and .env) into explicit
objects that are handed to providers and adapters at construction time.
"""

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import List, Optional

from dotenv import load_dotenv

# Load all environment variables from .env
load_dotenv()


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


# Provider calls are bounded to 10-15 seconds
MIN_PROVIDER_TIMEOUT = 10.0
MAX_PROVIDER_TIMEOUT = 15.0


# ============================================
# Data providers
# ============================================

@dataclass(frozen=True)
class ProviderConfig:
    """API keys, base URLs and the per-call timeout for every provider"""
    pump_fun_api_key: Optional[str] = None
    bonk_api_key: Optional[str] = None
    coinmarketcap_api_key: Optional[str] = None
    coingecko_api_key: Optional[str] = None
    news_api_key: Optional[str] = None
    lunarcrush_api_key: Optional[str] = None
    timeout_seconds: float = 12.0

    pump_fun_endpoints: tuple = (
        "https://frontend-api.pump.fun/coins",
        "https://api.pump.fun/coins",
        "https://pump.fun/api/coins",
    )
    bonk_api_url: str = "https://api.bonkbot.io"
    dexscreener_url: str = "https://api.dexscreener.com/latest/dex"
    jupiter_url: str = "https://price.jup.ag/v4"
    defillama_url: str = "https://api.llama.fi"
    defillama_yields_url: str = "https://yields.llama.fi"
    coingecko_url: str = "https://api.coingecko.com/api/v3"
    coincap_url: str = "https://api.coincap.io/v2"
    coinmarketcap_url: str = "https://pro-api.coinmarketcap.com/v1"
    news_api_url: str = "https://newsapi.org/v2"
    lunarcrush_url: str = "https://api.lunarcrush.com/v2"

    @classmethod
    def from_env(cls) -> "ProviderConfig":
        return cls(
            pump_fun_api_key=os.getenv("PUMP_FUN_API_KEY"),
            bonk_api_key=os.getenv("BONK_API_KEY"),
            coinmarketcap_api_key=os.getenv("COINMARKETCAP_API_KEY"),
            coingecko_api_key=os.getenv("COINGECKO_API_KEY"),
            news_api_key=os.getenv("NEWS_API_KEY"),
            lunarcrush_api_key=os.getenv("LUNARCRUSH_API_KEY"),
            timeout_seconds=min(
                max(float(os.getenv("PROVIDER_TIMEOUT", "12")), MIN_PROVIDER_TIMEOUT),
                MAX_PROVIDER_TIMEOUT,
            ),
        )

    def configured_keys(self) -> dict:
        """Which keyed services have credentials (for the health endpoint)"""
        return {
            "pumpfun": bool(self.pump_fun_api_key),
            "bonk": bool(self.bonk_api_key),
            "coinmarketcap": bool(self.coinmarketcap_api_key),
            "coingecko": bool(self.coingecko_api_key),
            "newsapi": bool(self.news_api_key),
            "lunarcrush": bool(self.lunarcrush_api_key),
        }


# ============================================
# Language model
# ============================================

@dataclass(frozen=True)
class LLMConfig:
    """LiteLLM provider settings; no api_key means the model is disabled"""
    provider: str = "openai"
    model: str = "gpt-4o-mini"
    api_key: Optional[str] = None
    api_base: Optional[str] = None
    timeout_seconds: float = 15.0

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    @classmethod
    def from_env(cls) -> "LLMConfig":
        return cls(
            provider=os.getenv("LLM_PROVIDER", "openai"),
            model=os.getenv("LLM_MODEL", "gpt-4o-mini"),
            api_key=os.getenv("LLM_API_KEY") or os.getenv("OPENAI_API_KEY"),
            api_base=os.getenv("LLM_API_BASE"),
            timeout_seconds=float(os.getenv("LLM_TIMEOUT", "15")),
        )


# ============================================
# Application
# ============================================

class Settings:
    """Application settings"""

    APP_NAME: str = "CryptoLens API"
    APP_VERSION: str = "2.0.0"
    DEBUG: bool = _env_flag('DEBUG')

    HOST: str = os.getenv('HOST', '0.0.0.0')
    PORT: int = int(os.getenv('PORT', '8000'))

    CORS_ORIGINS: List[str] = os.getenv('CORS_ORIGINS', '*').split(',')

    LOG_LEVEL: str = os.getenv('LOG_LEVEL', 'INFO')
    LOG_JSON: bool = _env_flag('LOG_JSON')

    def __init__(self):
        self.providers = ProviderConfig.from_env()
        self.llm = LLMConfig.from_env()


@lru_cache()
def get_settings() -> Settings:
    """Get the application settings"""
    return Settings()
