"""
Data validator - sanity rules applied to every provider batch

``clean`` is pure, stable (survivors keep their order) and idempotent.
A record survives only if every rule applicable to its variant passes:

- prices must be positive (optional prices only when present)
- market caps and TVL must be positive (optional market caps only when present)
- APY must lie in [0, 1,000,000]
- names must not be blank
- sentiment scores must lie in [-1, 1]
- no field may be NaN or infinite
"""

import math
from typing import Iterable, List, Optional

from cryptolens.domain.models import (
    NewsRecord,
    PriceRecord,
    ProtocolRecord,
    Record,
    SentimentRecord,
    TokenRecord,
    TrendingRecord,
    YieldPoolRecord,
)


MAX_APY = 1_000_000.0


def _positive(value: Optional[float]) -> bool:
    return value is not None and math.isfinite(value) and value > 0


def _positive_if_present(value: Optional[float]) -> bool:
    return value is None or _positive(value)


def _finite(value: Optional[float]) -> bool:
    return value is None or math.isfinite(value)


def _named(record: Record) -> bool:
    return bool(record.name and record.name.strip())


def is_valid(record: Record) -> bool:
    """Whether one record passes the rules for its variant"""
    if not _named(record):
        return False

    if isinstance(record, TokenRecord):
        return (
            _positive(record.price_usd)
            and _positive(record.market_cap)
            and _finite(record.volume_24h)
            and record.launch_time is not None
        )
    if isinstance(record, PriceRecord):
        return (
            _positive(record.price)
            and _positive_if_present(record.market_cap)
            and _finite(record.change_24h_percent)
            and _finite(record.volume_24h)
        )
    if isinstance(record, TrendingRecord):
        return (
            _positive_if_present(record.price)
            and _positive_if_present(record.market_cap)
            and _finite(record.change_24h_percent)
        )
    if isinstance(record, ProtocolRecord):
        return _positive(record.tvl) and _finite(record.change_1d) and _finite(record.change_7d)
    if isinstance(record, YieldPoolRecord):
        return (
            _positive(record.tvl_usd)
            and _finite(record.apy)
            and 0 <= record.apy <= MAX_APY
        )
    if isinstance(record, SentimentRecord):
        return (
            _finite(record.sentiment_score)
            and -1.0 <= record.sentiment_score <= 1.0
            and all(_finite(v) for v in (record.bullish_percent, record.bearish_percent, record.neutral_percent))
        )
    if isinstance(record, NewsRecord):
        return True
    return False


def clean(records: Iterable[Record]) -> List[Record]:
    """
    Drop records that fail the sanity rules

    Args:
        records: one provider's shape-normalized batch

    Returns:
        List[Record]: the survivors, in their original order
    """
    return [record for record in records if is_valid(record)]
