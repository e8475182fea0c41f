"""Healing video recommendations for an emotion and a problem."""

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

NAME = "video_therapy"


@dataclasses.dataclass(frozen=True, slots=True)
class VideoTherapyRequest:
    emotion: str
    problem: str

    def __post_init__(self) -> None:
        _require(
            condition=isinstance(self.emotion, str) and self.emotion.strip() != "",
            message="must be a non-empty str",
            field_name="emotion",
        )
        _require(
            condition=isinstance(self.problem, str) and self.problem.strip() != "",
            message="must be a non-empty str",
            field_name="problem",
        )


CONTRACT = schema.SchemaContract(NAME, video_fields(), root="array", min_items=1)

TEMPLATE = PromptTemplate(
    name=NAME,
    system=(
        "You are an expert in wellness, meditation, sound therapy, and healing "
        "frequencies. Recommend YouTube videos (subliminal videos, binaural beats, "
        "solfeggio frequencies, therapeutic sounds) based on the user's emotions "
        "and problems. For each, give a real, working YouTube URL, a title, a "
        "description, a type (subliminal/binaural/meditation/frequency) and a "
        "duration."
    ),
    user=(
        "I'm feeling {emotion} and dealing with: {problem}. Please recommend 3-4 "
        "YouTube videos that could help."
    ),
    temperature=0.7,
)

# Curated, known-good ids per emotion; still verified before use
CURATED_VIDEO_IDS: dict[str, tuple[str, ...]] = {
    "stress": ("YuQBl27UK_s", "M5QY2_8704o", "inpok4MKVLM", "1ZYbU82GVz4"),
    "anxiety": ("T0VrMVl0h-Y", "aEqlQvczMJQ", "ZToicYcHIOU", "jPpUNAFHgxM"),
    "depression": ("WHPEKLQID4U", "lFcSrYw-ARY", "ENNKEa8JgqU", "UfcAVejslrU"),
    "insomnia": ("M5QY2_8704o", "YuQBl27UK_s", "jPpUNAFHgxM", "T0VrMVl0h-Y"),
    "focus": ("WPni755-Krg", "jPpUNAFHgxM", "ZToicYcHIOU", "aEqlQvczMJQ"),
    "healing": ("YuQBl27UK_s", "WHPEKLQID4U", "ENNKEa8JgqU", "UfcAVejslrU"),
    "chakra": ("lFcSrYw-ARY", "WHPEKLQID4U", "YuQBl27UK_s", "ENNKEa8JgqU"),
    "meditation": ("inpok4MKVLM", "jPpUNAFHgxM", "T0VrMVl0h-Y", "ZToicYcHIOU"),
}

EMOTION_ALIASES = {
    "stressed": "stress",
    "angry": "stress",
    "anxious": "anxiety",
    "worried": "anxiety",
    "sad": "depression",
    "depressed": "depression",
    "lonely": "healing",
    "sleepless": "insomnia",
    "confused": "focus",
    "excited": "focus",
    "peaceful": "meditation",
}


def curated_ids(emotion: str) -> tuple[str, ...]:
    key = emotion.strip().lower()
    key = EMOTION_ALIASES.get(key, key)
    return CURATED_VIDEO_IDS.get(key, CURATED_VIDEO_IDS["healing"])


POOL = ContentPool(
    NAME,
    {
        "videos": (
            {
                "title": "528Hz Healing Frequency - DNA Repair & Positive Transformation",
                "type": "frequency",
                "description": "The miracle tone of transformation and DNA repair",
            },
            {
                "title": "Deep Theta Binaural Beats - Meditation & Healing",
                "type": "binaural",
                "description": "Theta waves for deep meditation and subconscious healing",
            },
            {
                "title": "Subliminal Healing Messages - Positive Affirmations",
                "type": "subliminal",
                "description": "Powerful subliminal messages for emotional healing",
            },
            {
                "title": "Nature Sounds Meditation - Forest Rain & Thunder",
                "type": "meditation",
                "description": "Calming nature sounds for deep relaxation",
            },
            {
                "title": "396Hz Solfeggio - Release Fear and Guilt",
                "type": "frequency",
                "description": "Liberating tone to dissolve fear and emotional blockages",
            },
            {
                "title": "Alpha Wave Binaural Beats - Calm Focus",
                "type": "binaural",
                "description": "Alpha waves for relaxed, clear concentration",
            },
        ),
        "durations": ("30:00", "45:00", "1:00:00"),
    },
)


def _recipe(request: VideoTherapyRequest, sampler: Sampler, now: datetime) -> list[Any]:
    ids = curated_ids(request.emotion)
    videos = []
    for index, video in enumerate(sampler.pick_many("videos", 4)):
        videos.append(
            {
                **video,
                "duration": sampler.pick("durations"),
                "url": watch_url(ids[index % len(ids)]),
            }
        )
    return videos


def _bind(request: VideoTherapyRequest, now: datetime) -> dict[str, Any]:
    return {"emotion": request.emotion.strip(), "problem": request.problem.strip()}


def _media(value: Any) -> list[MediaSlot]:
    return [MediaSlot((i, "videoId"), video_query(item)) for i, item in enumerate(value)]


def _finalize(value: Any, now: datetime) -> Any:
    for item in value:
        finalize_video(item)
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
    count_fallback_usage=False,
)
