"""
Dependency injection - FastAPI dependency wiring

Creates every service in one place so each exists once and has a clear
lifecycle.
"""

from functools import lru_cache
from typing import Optional
import logging

from cryptolens.adapters.event_sink_adapter import LoggingEventSink
from cryptolens.adapters.llm_adapter import LiteLLMAdapter
from cryptolens.aggregation.chains import ChainFactory
from cryptolens.config import ProviderConfig, Settings, get_settings
from cryptolens.orchestrator import QueryOrchestrator, create_orchestrator


logger = logging.getLogger(__name__)


class ServiceContainer:
    """
    Service container - owns every service instance

    Singleton so the orchestrator and its adapters are reused across requests.
    Provider chains themselves are built fresh per query by the chain factory.
    """

    _instance: Optional['ServiceContainer'] = None
    _initialized: bool = False

    def __new__(cls, settings: Optional[Settings] = None):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, settings: Optional[Settings] = None):
        if self._initialized:
            return

        self._settings = settings or get_settings()
        self._events = LoggingEventSink()

        # LLM adapter (optional)
        self._llm: Optional[LiteLLMAdapter] = None
        if self._settings.llm.enabled:
            self._llm = LiteLLMAdapter(self._settings.llm)
            logger.info(f"Language model enabled: {self._llm.model_id}")
        else:
            logger.info("No language model key configured, using rules and templates")

        self._chain_factory = ChainFactory(self._settings.providers)
        self._orchestrator = create_orchestrator(
            chain_factory=self._chain_factory,
            events=self._events,
            llm_port=self._llm,
        )

        self._initialized = True

    @property
    def orchestrator(self) -> QueryOrchestrator:
        return self._orchestrator

    @property
    def provider_config(self) -> ProviderConfig:
        return self._settings.providers

    @property
    def llm_enabled(self) -> bool:
        return self._llm is not None


@lru_cache()
def get_service_container() -> ServiceContainer:
    """
    Get the service container singleton

    lru_cache makes sure it is created only once
    """
    return ServiceContainer()


def get_orchestrator() -> QueryOrchestrator:
    """FastAPI dependency: the query orchestrator"""
    return get_service_container().orchestrator


def get_provider_config() -> ProviderConfig:
    """FastAPI dependency: provider configuration"""
    return get_settings().providers


__all__ = [
    "ServiceContainer",
    "get_service_container",
    "get_orchestrator",
    "get_provider_config",
    "get_settings",
    "Settings",
]
