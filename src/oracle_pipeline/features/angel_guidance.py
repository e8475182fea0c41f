"""Angel guidance: stones, colors, numbers and a subliminal video."""

from __future__ import annotations

import dataclasses
from datetime import datetime
from typing import Any

from oracle_pipeline.core import schema
from oracle_pipeline.core.types import _require
from oracle_pipeline.fallback import ContentPool, Sampler
from oracle_pipeline.media import watch_url
from oracle_pipeline.orchestrator import Feature, MediaSlot
from oracle_pipeline.prompts import PromptTemplate

from .common import finalize_video, video_fields, video_query
from .numerology import LIFE_PATH_MEANINGS, life_path_number, parse_birth_date
from .video_therapy import curated_ids
from .zodiac import get_sign

NAME = "angel_guidance"


@dataclasses.dataclass(frozen=True, slots=True)
class AngelGuidanceRequest:
    """Guidance request.

    ``birth_date`` is DD/MM/YYYY. When ``life_path_number`` is omitted it is
    computed from the birth date.
    """

    birth_date: str
    zodiac_sign: str
    problem: str
    birth_time: str = ""
    life_path_number: int | None = None

    def __post_init__(self) -> None:
        parse_birth_date(self.birth_date)
        object.__setattr__(self, "zodiac_sign", get_sign(self.zodiac_sign).name)
        _require(
            condition=isinstance(self.problem, str) and self.problem.strip() != "",
            message="must be a non-empty str",
            field_name="problem",
        )
        if self.life_path_number is None:
            object.__setattr__(self, "life_path_number", life_path_number(self.birth_date))
        _require(
            condition=self.life_path_number in LIFE_PATH_MEANINGS,
            message=f"must be 1-9, 11, 22 or 33, got {self.life_path_number!r}",
            field_name="life_path_number",
        )


CONTRACT = schema.SchemaContract(
    NAME,
    (
        schema.string_list("stones", min_items=3),
        schema.string("luckyColor"),
        schema.integer("luckyNumber", 1, 99),
        schema.string("mantra"),
        schema.string("message"),
        schema.integer("lifePathNumber", 1, 33),
        schema.string("lifePathMeaning"),
        schema.obj("subliminalVideo", video_fields()),
    ),
)

TEMPLATE = PromptTemplate(
    name=NAME,
    system=(
        "You are a compassionate spiritual guide versed in angel numbers, "
        "crystal healing, numerology and Western astrology. Offer gentle, "
        "uplifting and practical guidance."
    ),
    user=(
        "Birth date: {birth_date}. Birth time: {birth_time}. Zodiac sign: "
        "{zodiac_sign}. Life path number: {life_path_number}. Problem: {problem}. "
        "Recommend healing stones, a lucky color, a lucky number (1-99), a mantra, "
        "a message from the angels, the meaning of the life path number, and one "
        "subliminal YouTube video with a real URL."
    ),
    temperature=0.8,
)

POOL = ContentPool(
    NAME,
    {
        "stones": (
            "Amethyst",
            "Rose Quartz",
            "Clear Quartz",
            "Citrine",
            "Tiger's Eye",
            "Black Tourmaline",
            "Moonstone",
            "Lapis Lazuli",
            "Selenite",
            "Green Aventurine",
        ),
        "colors": (
            "Angelic White",
            "Celestial Blue",
            "Divine Gold",
            "Lavender",
            "Soft Pink",
            "Emerald Green",
        ),
        "mantras": (
            "Om Shanti Shanti Shanti",
            "I am guided, protected and loved",
            "Om Mani Padme Hum",
            "I release what no longer serves me",
            "Divine light flows through me",
        ),
        "messages": (
            "Your angels surround you with love, {sign}. The challenge you face is "
            "preparing you for a beautiful new chapter.",
            "Dear {sign}, the angels ask you to release your worries. Every step you "
            "take is divinely guided.",
            "The angels remind you, {sign}, that you are never alone. Ask for help "
            "and signs will appear.",
            "{sign}, your prayers have been heard. Stay patient, the answer is "
            "already on its way.",
        ),
        "videos": (
            {
                "title": "Subliminal Healing Messages - Positive Affirmations",
                "type": "subliminal",
                "description": "Powerful subliminal messages for emotional healing",
            },
            {
                "title": "Angelic Healing Music - 444Hz Guardian Angel Frequency",
                "type": "frequency",
                "description": "Soothing tones to connect with angelic guidance",
            },
            {
                "title": "Law of Attraction Subliminal - Abundance & Self-Love",
                "type": "subliminal",
                "description": "Reprogram your subconscious for abundance and self-worth",
            },
        ),
    },
)


def _recipe(request: AngelGuidanceRequest, sampler: Sampler, now: datetime) -> dict[str, Any]:
    video = dict(sampler.pick("videos"))
    video["duration"] = "30:00"
    video["url"] = watch_url(sampler.rng.choice(curated_ids("healing")))
    return {
        "stones": sampler.pick_many("stones", 3),
        "luckyColor": sampler.pick("colors"),
        "luckyNumber": sampler.integer(1, 99),
        "mantra": sampler.pick("mantras"),
        "message": sampler.pick("messages").format(sign=request.zodiac_sign),
        "lifePathNumber": request.life_path_number,
        "lifePathMeaning": LIFE_PATH_MEANINGS[request.life_path_number],
        "subliminalVideo": video,
    }


def _bind(request: AngelGuidanceRequest, now: datetime) -> dict[str, Any]:
    return {
        "birth_date": request.birth_date,
        "birth_time": request.birth_time or "unknown",
        "zodiac_sign": request.zodiac_sign,
        "life_path_number": request.life_path_number,
        "problem": request.problem.strip(),
    }


def _media(value: Any) -> list[MediaSlot]:
    return [
        MediaSlot(
            ("subliminalVideo", "videoId"),
            video_query(value["subliminalVideo"], category="subliminal affirmations"),
        )
    ]


def _finalize(value: Any, now: datetime) -> Any:
    finalize_video(value["subliminalVideo"])
    return value


FEATURE = Feature(
    name=NAME,
    contract=CONTRACT,
    template=TEMPLATE,
    pool=POOL,
    recipe=_recipe,
    bind=_bind,
    media=_media,
    finalize=_finalize,
    retries=1,
    count_fallback_usage=True,
)
