"""Vedic birth chart (kundli) analysis."""

from __future__ import annotations

import dataclasses
from datetime import datetime
from typing import Any

from oracle_pipeline.core import schema
from oracle_pipeline.core.types import _require
from oracle_pipeline.fallback import ContentPool, Sampler
from oracle_pipeline.orchestrator import Feature
from oracle_pipeline.prompts import PromptTemplate

from .numerology import parse_birth_date

NAME = "kundli"

PLANETS = ("sun", "moon", "mars", "mercury", "jupiter", "venus", "saturn", "rahu", "ketu")
PREDICTION_AREAS = ("career", "marriage", "health", "finance", "education")
RASHIS = (
    "Mesha",
    "Vrishabha",
    "Mithuna",
    "Karka",
    "Simha",
    "Kanya",
    "Tula",
    "Vrishchika",
    "Dhanu",
    "Makara",
    "Kumbha",
    "Meena",
)
HOUSE_THEMES = (
    "Self, personality and physical body",
    "Wealth, family and speech",
    "Courage, siblings and communication",
    "Home, mother and inner peace",
    "Children, creativity and intellect",
    "Health, service and overcoming obstacles",
    "Marriage and partnerships",
    "Longevity, transformation and hidden matters",
    "Fortune, dharma and higher learning",
    "Career, status and public life",
    "Gains, friendships and aspirations",
    "Spirituality, expenses and liberation",
)


def _ordinal(n: int) -> str:
    suffix = "th" if 11 <= n % 100 <= 13 else {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


@dataclasses.dataclass(frozen=True, slots=True)
class KundliRequest:
    """Birth details; ``birth_date`` is DD/MM/YYYY and ``birth_time`` HH:MM."""

    name: str
    birth_date: str
    birth_time: str
    birth_place: str

    def __post_init__(self) -> None:
        _require(
            condition=isinstance(self.name, str) and self.name.strip() != "",
            message="must be a non-empty str",
            field_name="name",
        )
        parse_birth_date(self.birth_date)
        try:
            datetime.strptime(self.birth_time.strip(), "%H:%M")
        except (AttributeError, ValueError) as e:
            raise ValueError(f"birth_time must be HH:MM, got {self.birth_time!r}") from e
        _require(
            condition=isinstance(self.birth_place, str) and self.birth_place.strip() != "",
            message="must be a non-empty str",
            field_name="birth_place",
        )


CONTRACT = schema.SchemaContract(
    NAME,
    (
        schema.obj(
            "basicInfo",
            (
                schema.string("name"),
                schema.string("birthDate"),
                schema.string("birthTime"),
                schema.string("birthPlace"),
            ),
        ),
        schema.obj("planetaryPositions", tuple(schema.string(p) for p in PLANETS)),
        schema.string_map("houses", min_items=12),
        schema.obj(
            "doshas",
            (
                schema.boolean("manglik"),
                schema.boolean("kalSarp"),
                schema.boolean("pitruDosh"),
                schema.string("description"),
            ),
        ),
        schema.obj("predictions", tuple(schema.string(a) for a in PREDICTION_AREAS)),
        schema.string_list("remedies", min_items=2),
        schema.string_list("gemstones"),
        schema.string_list("favorableDays"),
        schema.string_list("unfavorableDays"),
    ),
)

TEMPLATE = PromptTemplate(
    name=NAME,
    system=(
        "You are a learned Vedic astrologer (jyotishi). Prepare clear, respectful "
        "kundli analyses based on sidereal astrology."
    ),
    user=(
        "Prepare a kundli for {name}, born on {birth_date} at {birth_time} in "
        "{birth_place}. Give the planetary positions of the nine grahas, a short "
        "reading for each of the twelve houses keyed by house number, the manglik, "
        "kaal sarp and pitru doshas with a description, predictions for career, "
        "marriage, health, finance and education, remedies, gemstones, and "
        "favorable and unfavorable weekdays."
    ),
    temperature=0.7,
    max_output_tokens=4096,
)

POOL = ContentPool(
    NAME,
    {
        "career": (
            "Steady rise through disciplined work, with recognition after age 30.",
            "Success in teaching, advisory or creative fields.",
            "Business ventures flourish when started on auspicious muhurats.",
        ),
        "marriage": (
            "A harmonious marriage with an understanding partner.",
            "Marriage brings stability after initial delays.",
            "A supportive partner who shares spiritual interests.",
        ),
        "health": (
            "Generally good health; take care of digestion.",
            "Strong constitution; manage stress through yoga.",
            "Pay attention to sleep and joint health.",
        ),
        "finance": (
            "Wealth accumulates gradually through savings and property.",
            "Gains through partnerships and foreign connections.",
            "Financial stability improves during Jupiter periods.",
        ),
        "education": (
            "Strong aptitude for higher learning and research.",
            "Success in technical or analytical studies.",
            "Interest in philosophy and spiritual texts.",
        ),
        "remedies": (
            "Chant the Hanuman Chalisa on Tuesdays",
            "Offer water to the Sun at sunrise",
            "Donate food to the needy on Saturdays",
            "Recite the Gayatri Mantra 108 times daily",
            "Light a sesame oil lamp for Shani Dev",
            "Feed cows on Thursdays",
        ),
        "gemstones": (
            "Yellow Sapphire (Pukhraj)",
            "Red Coral (Moonga)",
            "Emerald (Panna)",
            "Pearl (Moti)",
            "Ruby (Manik)",
            "Blue Sapphire (Neelam)",
        ),
        "weekdays": (
            "Sunday",
            "Monday",
            "Tuesday",
            "Wednesday",
            "Thursday",
            "Friday",
            "Saturday",
        ),
        "rashis": RASHIS,
    },
)


def _dosha_description(manglik: bool, kal_sarp: bool, pitru: bool) -> str:
    present = [
        label
        for label, flag in (
            ("Manglik Dosha", manglik),
            ("Kaal Sarp Dosha", kal_sarp),
            ("Pitru Dosha", pitru),
        )
        if flag
    ]
    if not present:
        return "No major doshas are present in this chart."
    return (
        f"{' and '.join(present)} {'is' if len(present) == 1 else 'are'} present. "
        "Regular remedies and prayer will soften their influence."
    )


def _recipe(request: KundliRequest, sampler: Sampler, now: datetime) -> dict[str, Any]:
    positions = {
        planet: f"{sampler.pick('rashis')} in the {_ordinal(sampler.integer(1, 12))} house"
        for planet in PLANETS
    }
    manglik, kal_sarp, pitru = (sampler.chance(0.3) for _ in range(3))
    days = sampler.pick_many("weekdays", 5)
    return {
        "basicInfo": {
            "name": request.name.strip(),
            "birthDate": request.birth_date,
            "birthTime": request.birth_time,
            "birthPlace": request.birth_place.strip(),
        },
        "planetaryPositions": positions,
        "houses": {
            str(n): theme for n, theme in enumerate(HOUSE_THEMES, start=1)
        },
        "doshas": {
            "manglik": manglik,
            "kalSarp": kal_sarp,
            "pitruDosh": pitru,
            "description": _dosha_description(manglik, kal_sarp, pitru),
        },
        "predictions": {area: sampler.pick(area) for area in PREDICTION_AREAS},
        "remedies": sampler.pick_many("remedies", 3),
        "gemstones": sampler.pick_many("gemstones", 2),
        "favorableDays": days[:3],
        "unfavorableDays": days[3:],
    }


def _bind(request: KundliRequest, now: datetime) -> dict[str, Any]:
    return {
        "name": request.name.strip(),
        "birth_date": request.birth_date,
        "birth_time": request.birth_time,
        "birth_place": request.birth_place.strip(),
    }


FEATURE = Feature(
    name=NAME,
    contract=CONTRACT,
    template=TEMPLATE,
    pool=POOL,
    recipe=_recipe,
    bind=_bind,
    retries=1,
    count_fallback_usage=True,
)
