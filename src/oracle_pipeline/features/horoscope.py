"""Three-day horoscope readings (yesterday, today, tomorrow) for a sign."""

from __future__ import annotations

import dataclasses
from datetime import datetime, timedelta
from typing import Any

from oracle_pipeline.core import schema
from oracle_pipeline.core.exceptions import SchemaMismatchError
from oracle_pipeline.fallback import ContentPool, Sampler
from oracle_pipeline.orchestrator import Feature
from oracle_pipeline.prompts import PromptTemplate

from .common import date_text
from .zodiac import SIGN_NAMES, get_sign

NAME = "horoscope"

DAYS = (("yesterday", -1), ("today", 0), ("tomorrow", 1))


@dataclasses.dataclass(frozen=True, slots=True)
class HoroscopeRequest:
    """Reading request; ``sign`` is normalized to its display name."""

    sign: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "sign", get_sign(self.sign).name)


READING_FIELDS = (
    schema.string("date"),
    schema.enum("day", tuple(d for d, _ in DAYS)),
    schema.string("prediction"),
    schema.string("luckyColor"),
    schema.integer("luckyNumber", 1, 99),
    schema.string("mood"),
    schema.string("advice"),
    schema.string(
        "love", required=False, default="Lead with kindness and honest words."
    ),
    schema.string(
        "career", required=False, default="Steady effort today builds lasting momentum."
    ),
    schema.string(
        "money", required=False, default="Review your spending before committing."
    ),
    schema.string(
        "health", required=False, default="Rest and hydration restore your balance."
    ),
)


def _covers_three_days(value: dict[str, Any]) -> None:
    days = [reading["day"] for reading in value["readings"]]
    expected = [day for day, _ in DAYS]
    if days != expected:
        raise SchemaMismatchError(
            f"expected days {expected}, got {days}", path="$.readings"
        )


CONTRACT = schema.SchemaContract(
    NAME,
    (
        schema.string("sign"),
        schema.object_list("readings", READING_FIELDS, min_items=3),
        schema.string("compatibility"),
        schema.string("weeklyOverview"),
    ),
    checks=(_covers_three_days,),
)

TEMPLATE = PromptTemplate(
    name=NAME,
    system=(
        "You are a master astrologer with deep knowledge of Western astrology, "
        "planetary movements, and celestial influences. Generate fresh, unique "
        "horoscope readings that incorporate current planetary transits and "
        "cosmic energies. Never repeat the same predictions."
    ),
    user=(
        "Generate a fresh horoscope reading for {sign} for {yesterday}, {today}, "
        "and {tomorrow}. Include daily predictions, lucky colors, lucky numbers "
        "(1-99), mood forecasts, practical advice, love, career, money and health "
        "notes, a compatible zodiac sign, and a weekly overview."
    ),
    temperature=0.9,
)

POOL = ContentPool(
    NAME,
    {
        "predictions": (
            "The cosmic energies align to bring unexpected opportunities your way",
            "Your intuition is heightened, trust your inner wisdom today",
            "A significant breakthrough awaits in your personal growth journey",
            "The universe conspires to manifest your deepest desires",
            "New connections and meaningful relationships are on the horizon",
            "Your creative energy is at its peak, express yourself freely",
            "Financial abundance flows toward you through unexpected channels",
            "Healing energy surrounds you, embrace transformation",
            "Your leadership qualities shine brightly in group settings",
            "Deep spiritual insights emerge through quiet contemplation",
        ),
        "colors": (
            "Cosmic Purple",
            "Golden Yellow",
            "Emerald Green",
            "Ocean Blue",
            "Rose Pink",
            "Silver White",
            "Ruby Red",
            "Sapphire Blue",
        ),
        "moods": (
            "Inspired",
            "Confident",
            "Peaceful",
            "Energetic",
            "Reflective",
            "Optimistic",
            "Balanced",
            "Empowered",
        ),
        "advice": (
            "Trust the process and remain open to new possibilities",
            "Focus on gratitude and positive energy will multiply",
            "Take time for self-care and inner reflection",
            "Embrace change as a pathway to growth",
            "Connect with nature to ground your energy",
            "Practice mindfulness in all your interactions",
            "Follow your heart's true calling",
            "Seek balance between action and rest",
        ),
        "love": (
            "Open conversations deepen the bonds that matter most",
            "A warm gesture rekindles an old connection",
            "Let your guard down and allow others to support you",
        ),
        "career": (
            "Your ideas find a receptive audience at work",
            "Patience with a slow project pays off soon",
            "Collaboration brings better results than going alone",
        ),
        "money": (
            "A careful budget review reveals hidden savings",
            "Avoid impulsive purchases and trust long-term plans",
            "An overlooked opportunity improves your finances",
        ),
        "health": (
            "Gentle movement and fresh air lift your energy",
            "Prioritize sleep to restore body and mind",
            "Mindful breathing eases lingering tension",
        ),
        "weekly": (
            "This week brings powerful cosmic shifts for {sign}. The planetary "
            "alignments support your personal evolution and spiritual growth. "
            "Trust in the divine timing of the universe.",
        ),
    },
)


def _recipe(request: HoroscopeRequest, sampler: Sampler, now: datetime) -> dict[str, Any]:
    readings = []
    # Each day is sampled independently
    for day, offset in DAYS:
        readings.append(
            {
                "date": (now + timedelta(days=offset)).date().isoformat(),
                "day": day,
                "prediction": sampler.pick("predictions"),
                "luckyColor": sampler.pick("colors"),
                "luckyNumber": sampler.integer(1, 99),
                "mood": sampler.pick("moods"),
                "advice": sampler.pick("advice"),
                "love": sampler.pick("love"),
                "career": sampler.pick("career"),
                "money": sampler.pick("money"),
                "health": sampler.pick("health"),
            }
        )
    return {
        "sign": request.sign,
        "readings": readings,
        "compatibility": sampler.rng.choice(SIGN_NAMES),
        "weeklyOverview": sampler.pick("weekly").format(sign=request.sign),
    }


def _bind(request: HoroscopeRequest, now: datetime) -> dict[str, Any]:
    return {
        "sign": request.sign,
        "yesterday": date_text(now - timedelta(days=1)),
        "today": date_text(now),
        "tomorrow": date_text(now + timedelta(days=1)),
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
    cache_key=lambda request: request.sign,
)
