"""Puja recommendations with procedures and instructional videos."""

from __future__ import annotations

import dataclasses
from datetime import datetime
from typing import Any

from oracle_pipeline.core import schema
from oracle_pipeline.core.types import MediaQuery, _require
from oracle_pipeline.fallback import ContentPool, Sampler
from oracle_pipeline.media import extract_video_id
from oracle_pipeline.orchestrator import Feature, MediaSlot
from oracle_pipeline.prompts import PromptTemplate

from .common import finalize_video, video_fields

NAME = "puja"


@dataclasses.dataclass(frozen=True, slots=True)
class PujaRequest:
    puja_type: str
    deity: str
    description: str
    occasion: str = ""
    location: str = ""
    participants: int = 1
    budget: str = ""
    special_requirements: str = ""

    def __post_init__(self) -> None:
        for name in ("puja_type", "deity", "description"):
            value = getattr(self, name)
            _require(
                condition=isinstance(value, str) and value.strip() != "",
                message="must be a non-empty str",
                field_name=name,
            )
        _require(
            condition=isinstance(self.participants, int) and self.participants >= 1,
            message="must be an int >= 1",
            field_name="participants",
        )


CONTRACT = schema.SchemaContract(
    NAME,
    (
        schema.string("pujaName"),
        schema.string("description"),
        schema.string("duration"),
        schema.string("deity"),
        schema.string("auspiciousTime"),
        schema.string_list("benefits"),
        schema.string_list("essentialItems", min_items=3),
        schema.string_list("procedures", min_items=3),
        schema.object_list("videos", video_fields(typed=False)),
    ),
)

TEMPLATE = PromptTemplate(
    name=NAME,
    system=(
        "You are a knowledgeable Hindu priest (pandit) who guides devotees "
        "through authentic puja rituals with clear, respectful instructions."
    ),
    user=(
        "Recommend a {puja_type} puja for {deity}. Occasion: {occasion}. "
        "Location: {location}. Participants: {participants}. Budget: {budget}. "
        "Special requirements: {special_requirements}. Details: {description}. "
        "Give the puja name, description, duration, deity, auspicious time, "
        "benefits, essential items, step-by-step procedures and 2-3 YouTube "
        "videos with real URLs."
    ),
    temperature=0.7,
)

POOL = ContentPool(
    NAME,
    {
        "names": (
            "{deity} {puja_type} Puja",
            "Shubh {puja_type} Puja for {deity}",
        ),
        "descriptions": (
            "A traditional {puja_type} puja offered to {deity} to invite blessings, "
            "peace and prosperity into the home.",
            "A sacred ritual honoring {deity}, performed with devotion to remove "
            "obstacles and purify the surroundings.",
        ),
        "durations": ("1-2 hours", "2-3 hours", "About 90 minutes"),
        "times": (
            "Brahma Muhurta (4:00 AM - 6:00 AM)",
            "Morning after sunrise (6:00 AM - 9:00 AM)",
            "Pradosh Kaal (evening twilight)",
            "Abhijit Muhurta (around midday)",
        ),
        "benefits": (
            "Brings peace and harmony to the family",
            "Removes obstacles and negative energies",
            "Attracts prosperity and abundance",
            "Strengthens devotion and inner calm",
            "Blesses new beginnings",
        ),
        "items": (
            "Fresh flowers and garlands",
            "Incense sticks and dhoop",
            "Ghee lamp (diya)",
            "Kumkum, haldi and chandan",
            "Fruits and sweets for prasad",
            "Coconut",
            "Betel leaves and supari",
            "Ganga jal",
        ),
        "procedures": (
            (
                "Purify the space and yourself with Ganga jal",
                "Light the diya and incense to begin",
                "Invoke Lord Ganesha for an obstacle-free puja",
                "Perform sankalpa, stating your intention",
                "Offer flowers, kumkum and prasad to {deity}",
                "Chant the mantras of {deity}",
                "Perform aarti and distribute prasad",
            ),
            (
                "Clean the altar and place the image of {deity}",
                "Perform achamana and sankalpa",
                "Offer the shodashopachara (sixteen offerings)",
                "Recite the stotra or katha of {deity}",
                "Conclude with aarti and pushpanjali",
            ),
        ),
        "videos": (
            {
                "title": "{deity} Puja Vidhi - Step by Step at Home",
                "description": "Complete home puja procedure with mantras",
            },
            {
                "title": "{deity} Aarti and Mantras",
                "description": "Devotional aarti and mantras for daily worship",
            },
            {
                "title": "{puja_type} Puja Samagri and Preparation",
                "description": "What to prepare before the puja begins",
            },
        ),
    },
)


def _recipe(request: PujaRequest, sampler: Sampler, now: datetime) -> dict[str, Any]:
    names = {"deity": request.deity.strip(), "puja_type": request.puja_type.strip()}
    videos = [
        {
            "title": video["title"].format(**names),
            "description": video["description"],
            "duration": "15:00",
        }
        for video in sampler.pick_many("videos", 2)
    ]
    return {
        "pujaName": sampler.pick("names").format(**names),
        "description": sampler.pick("descriptions").format(**names),
        "duration": sampler.pick("durations"),
        "deity": names["deity"],
        "auspiciousTime": sampler.pick("times"),
        "benefits": sampler.pick_many("benefits", 3),
        "essentialItems": sampler.pick_many("items", 6),
        "procedures": [step.format(**names) for step in sampler.pick("procedures")],
        "videos": videos,
    }


def _bind(request: PujaRequest, now: datetime) -> dict[str, Any]:
    def _text(value: str) -> str:
        return value.strip() or "not specified"

    return {
        "puja_type": request.puja_type.strip(),
        "deity": request.deity.strip(),
        "occasion": _text(request.occasion),
        "location": _text(request.location),
        "participants": request.participants,
        "budget": _text(request.budget),
        "special_requirements": _text(request.special_requirements),
        "description": request.description.strip(),
    }


def _media(value: Any) -> list[MediaSlot]:
    deity = value["deity"]
    return [
        MediaSlot(
            ("videos", i, "videoId"),
            MediaQuery(
                video["title"],
                category=f"{deity} puja vidhi",
                descriptor="hindi",
                candidate_id=extract_video_id(video.get("url")),
            ),
        )
        for i, video in enumerate(value["videos"])
    ]


def _finalize(value: Any, now: datetime) -> Any:
    for video in value["videos"]:
        finalize_video(video)
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
