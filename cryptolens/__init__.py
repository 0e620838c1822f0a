"""
CryptoLens - crypto market query assistant

Built on a Clean/Hexagonal architecture, answering questions about:
- pump.fun and Bonk ecosystem token launches
- DeFi protocol TVL and yield pools
- Spot prices, trending coins, news and social sentiment

Layers:
- domain: core models and the coin/chain reference tables
- ports: port interfaces
- adapters: external service adapters
- aggregation: provider fallback chains and validation
- orchestrator: intent resolution and query handling
- presentation: answer writing
- infrastructure: logging and errors
- api: FastAPI routes

Quick start:
```python
import asyncio
from cryptolens.adapters import LoggingEventSink
from cryptolens.aggregation import ChainFactory
from cryptolens.config import get_settings
from cryptolens.orchestrator import create_orchestrator

orchestrator = create_orchestrator(ChainFactory(get_settings().providers), LoggingEventSink())
result = asyncio.run(orchestrator.handle_query("What's the SOL price?"))
print(result.answer)
```
"""

__version__ = "2.0.0"
__author__ = "CryptoLens Team"

# Core domain models
from cryptolens.domain.models import (
    QueryCategory,
    QueryIntent,
    QueryResult,
    RecordKind,
    TokenRecord,
    PriceRecord,
)

# Orchestrator
from cryptolens.orchestrator import (
    IntentResolver,
    QueryOrchestrator,
    create_orchestrator,
)

# Answer writing
from cryptolens.presentation import ResponseSynthesizer

__all__ = [
    "__version__",
    "__author__",
    # domain models
    "QueryCategory",
    "QueryIntent",
    "QueryResult",
    "RecordKind",
    "TokenRecord",
    "PriceRecord",
    # orchestrator
    "IntentResolver",
    "QueryOrchestrator",
    "create_orchestrator",
    # answers
    "ResponseSynthesizer",
]
