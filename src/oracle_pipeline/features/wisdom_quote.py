"""Contemplative quotes in the voice of Osho, matched to a feeling."""

from __future__ import annotations

import dataclasses
from datetime import datetime
from typing import Any

from oracle_pipeline.core import schema
from oracle_pipeline.core.types import _require
from oracle_pipeline.fallback import ContentPool, Sampler
from oracle_pipeline.orchestrator import Feature
from oracle_pipeline.prompts import PromptTemplate

NAME = "wisdom_quote"

RELEVANCE_RANGE = (90, 99)


@dataclasses.dataclass(frozen=True, slots=True)
class WisdomQuoteRequest:
    emotion: str
    context: str

    def __post_init__(self) -> None:
        for name in ("emotion", "context"):
            value = getattr(self, name)
            _require(
                condition=isinstance(value, str) and value.strip() != "",
                message="must be a non-empty str",
                field_name=name,
            )


CONTRACT = schema.SchemaContract(
    NAME,
    (
        schema.string("text"),
        schema.string("category"),
        schema.integer("relevance", *RELEVANCE_RANGE),
    ),
)

TEMPLATE = PromptTemplate(
    name=NAME,
    system=(
        "You are channeling the wisdom of Osho (Bhagwan Shree Rajneesh). Offer "
        "profound, authentic quotes in his style that speak to human emotions and "
        "spiritual growth. Never repeat the same wisdom twice."
    ),
    user=(
        "Share a unique Osho quote for someone feeling {emotion} in the context "
        "of: {context}. Make it profound and transformative. Give the quote text, "
        "a one or two word spiritual category, and how relevant it is as a "
        "percentage between 90 and 99."
    ),
    temperature=0.9,
)

POOL = ContentPool(
    NAME,
    {
        "quotes": (
            {"text": "Be realistic: Plan for a miracle.", "category": "Hope"},
            {
                "text": "The moment you accept yourself, you become beautiful.",
                "category": "Self-Love",
            },
            {
                "text": "Drop the idea of becoming someone, because you are "
                "already a masterpiece.",
                "category": "Self-Worth",
            },
            {"text": "Life begins where fear ends.", "category": "Courage"},
            {
                "text": "The real question is not whether life exists after death. "
                "The real question is whether you are alive before death.",
                "category": "Presence",
            },
            {
                "text": "Experience life in all possible ways. Good and bad, bitter "
                "and sweet, dark and light.",
                "category": "Acceptance",
            },
            {
                "text": "Don't move the way fear makes you move. Move the way love "
                "makes you move.",
                "category": "Love",
            },
            {
                "text": "Silence is the space in which you can meet yourself.",
                "category": "Meditation",
            },
        ),
    },
)


def _recipe(request: WisdomQuoteRequest, sampler: Sampler, now: datetime) -> dict[str, Any]:
    quote = sampler.pick("quotes")
    return {
        "text": quote["text"],
        "category": quote["category"],
        "relevance": sampler.integer(*RELEVANCE_RANGE),
    }


def _bind(request: WisdomQuoteRequest, now: datetime) -> dict[str, Any]:
    return {"emotion": request.emotion.strip(), "context": request.context.strip()}


FEATURE = Feature(
    name=NAME,
    contract=CONTRACT,
    template=TEMPLATE,
    pool=POOL,
    recipe=_recipe,
    bind=_bind,
    retries=1,
    count_fallback_usage=False,
)
