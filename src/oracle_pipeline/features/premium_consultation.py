"""Premium one-question consultations with a spiritual life coach.

The question's complexity tier sets how much practical guidance the answer
carries. Fallback answers stay generic and never pretend to address the
question's specifics.
"""

from __future__ import annotations

import dataclasses
from datetime import datetime
from typing import Any

from oracle_pipeline.core import schema
from oracle_pipeline.core.types import _require
from oracle_pipeline.fallback import ContentPool, Sampler
from oracle_pipeline.orchestrator import Feature
from oracle_pipeline.prompts import PromptTemplate

NAME = "premium_consultation"

# Practical steps offered per complexity tier
COMPLEXITY_STEPS = {"simple": 3, "moderate": 4, "complex": 5}


@dataclasses.dataclass(frozen=True, slots=True)
class ConsultationRequest:
    """A question and its tier: ``simple``, ``moderate`` or ``complex``."""

    question: str
    complexity: str = "simple"

    def __post_init__(self) -> None:
        _require(
            condition=isinstance(self.question, str) and self.question.strip() != "",
            message="must be a non-empty str",
            field_name="question",
        )
        tier = self.complexity.strip().lower() if isinstance(self.complexity, str) else None
        _require(
            condition=tier in COMPLEXITY_STEPS,
            message=f"must be one of {', '.join(COMPLEXITY_STEPS)}",
            field_name="complexity",
        )
        object.__setattr__(self, "complexity", tier)


CONTRACT = schema.SchemaContract(
    NAME,
    (
        schema.string("advice"),
        schema.string_list("spiritualInsights", min_items=2),
        schema.string_list("practicalSteps", min_items=3),
        schema.string(
            "affirmation",
            required=False,
            default="I trust the wisdom that is already within me.",
        ),
    ),
)

TEMPLATE = PromptTemplate(
    name=NAME,
    system=(
        "You are a premium spiritual advisor and life coach with expertise in "
        "astrology, psychology, wellness and spiritual guidance. Give "
        "comprehensive, personalized advice tailored to the person's situation."
    ),
    user=(
        "Question: {question}\nComplexity: {complexity}\n\nGive detailed, "
        "actionable advice for this {complexity} question: the core advice, "
        "spiritual insights, at least {steps} practical steps and a closing "
        "affirmation."
    ),
    temperature=0.7,
    max_output_tokens=2048,
)

POOL = ContentPool(
    NAME,
    {
        "advice": (
            "The stars align to bring you clarity. Your question holds the seed "
            "of its own answer; look within and trust the cosmic guidance flowing "
            "through you.",
            "The universe is guiding you. Trust your inner wisdom and take "
            "inspired action.",
        ),
        "insights": (
            "Every challenge carries a lesson your soul chose to learn.",
            "Clarity comes when the mind is quiet, not when it is busy searching.",
            "What you resist persists; what you accept can transform.",
            "Your intuition speaks first and softest. Make room to hear it.",
            "Growth often feels like discomfort before it feels like freedom.",
        ),
        "steps": (
            "Write the question down and list every option you can see",
            "Sit in silent meditation for ten minutes each morning this week",
            "Talk it through with one person you trust completely",
            "Notice which option brings your body ease rather than tension",
            "Take one small, reversible step toward that option",
            "Review how you feel after seven days and adjust",
            "Keep a short evening journal of signs and coincidences",
        ),
        "affirmations": (
            "I trust the wisdom that is already within me.",
            "Every step I take is guided and supported.",
            "I release fear and choose clarity.",
        ),
    },
)


def _recipe(request: ConsultationRequest, sampler: Sampler, now: datetime) -> dict[str, Any]:
    return {
        "advice": sampler.pick("advice"),
        "spiritualInsights": sampler.pick_many("insights", 2),
        "practicalSteps": sampler.pick_many("steps", COMPLEXITY_STEPS[request.complexity]),
        "affirmation": sampler.pick("affirmations"),
    }


def _bind(request: ConsultationRequest, now: datetime) -> dict[str, Any]:
    return {
        "question": request.question.strip(),
        "complexity": request.complexity,
        "steps": COMPLEXITY_STEPS[request.complexity],
    }


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
