"""
Aggregation layer - provider chains, validation and fallback

Contains:
- validator: sanity rules (``clean``)
- chains: per-category provider chains and refinements
- aggregator: the fallback walk and the combined merge
"""

from cryptolens.aggregation.validator import clean, is_valid
from cryptolens.aggregation.chains import CategoryChain, ChainFactory
from cryptolens.aggregation.aggregator import FallbackAggregator, merge_combined, provenance_of

__all__ = [
    "clean",
    "is_valid",
    "CategoryChain",
    "ChainFactory",
    "FallbackAggregator",
    "merge_combined",
    "provenance_of",
]
