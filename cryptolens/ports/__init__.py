"""
Ports layer - interfaces to the outside world

Following dependency inversion, aggregation and orchestration depend only on
these abstract interfaces; adapters provide the implementations.

Contains:
- ProviderPort: external data source for one record category
- SyntheticPort: placeholder-data generator ending every fallback chain
- LLMPort: language-model service
- EventSink: structured observability events
"""

from cryptolens.ports.interfaces import (
    ProviderPort,
    SyntheticPort,
    LLMPort,
    EventSink,
)

__all__ = [
    "ProviderPort",
    "SyntheticPort",
    "LLMPort",
    "EventSink",
]
