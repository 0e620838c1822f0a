"""
Presentation layer - answer writing

Contains:
- ResponseSynthesizer: LLM tiers with static templates as the last resort
- AnswerTemplate subclasses: one static answer per category
"""

from cryptolens.presentation.synthesizer import (
    ResponseSynthesizer,
    AnswerTemplate,
    TEMPLATES,
    describe_record,
    money,
)

__all__ = [
    "ResponseSynthesizer",
    "AnswerTemplate",
    "TEMPLATES",
    "describe_record",
    "money",
]
