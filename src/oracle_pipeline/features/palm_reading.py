"""Palm reading from a photo of the user's hand."""

from __future__ import annotations

import dataclasses
from datetime import datetime
import hashlib
from typing import Any

from oracle_pipeline.core import schema
from oracle_pipeline.core.types import InlineImage
from oracle_pipeline.fallback import ContentPool, Sampler
from oracle_pipeline.orchestrator import Feature
from oracle_pipeline.prompts import PromptTemplate

NAME = "palm_reading"

LINES = ("lifeLine", "heartLine", "headLine", "fateLine")
MOUNTS = ("venus", "jupiter", "saturn", "apollo", "mercury", "mars", "moon")
PREDICTION_AREAS = ("health", "career", "love", "wealth")


@dataclasses.dataclass(frozen=True, slots=True, repr=False)
class PalmReadingRequest:
    image_data: bytes
    mime_type: str = "image/jpeg"

    def __post_init__(self) -> None:
        InlineImage(self.image_data, self.mime_type)

    @property
    def image(self) -> InlineImage:
        return InlineImage(self.image_data, self.mime_type)

    def __repr__(self) -> str:
        # Stable and short; also seeds reproducible fallback content
        digest = hashlib.sha256(self.image_data).hexdigest()[:16]
        return f"PalmReadingRequest(sha256={digest}, mime_type={self.mime_type!r})"


CONTRACT = schema.SchemaContract(
    NAME,
    (
        schema.obj("palmLines", tuple(schema.string(n) for n in LINES)),
        schema.obj("mounts", tuple(schema.string(n) for n in MOUNTS)),
        schema.string("fingerAnalysis"),
        schema.string("overallReading"),
        schema.obj("predictions", tuple(schema.string(n) for n in PREDICTION_AREAS)),
        schema.string_list("recommendations", min_items=3),
    ),
)

TEMPLATE = PromptTemplate(
    name=NAME,
    system=(
        "You are an experienced palmist trained in Western and Vedic palmistry. "
        "Read the palm in the photo with warmth and nuance."
    ),
    user=(
        "Analyze this palm. Describe the life, heart, head and fate lines, the "
        "seven mounts, the fingers, an overall reading, predictions for health, "
        "career, love and wealth, and practical recommendations."
    ),
    temperature=0.7,
    vision=True,
)

POOL = ContentPool(
    NAME,
    {
        "lifeLine": (
            "A long, well-defined life line shows strong vitality and resilience.",
            "A gently curving life line reflects a warm, energetic nature.",
            "A deep life line speaks of steady health and an adventurous spirit.",
        ),
        "heartLine": (
            "A curved heart line reveals an expressive, affectionate heart.",
            "A long heart line points to loyalty and emotional depth.",
            "A clear heart line suggests balanced, sincere relationships.",
        ),
        "headLine": (
            "A straight head line indicates practical, analytical thinking.",
            "A sloping head line shows imagination and creative intelligence.",
            "A long head line reflects focus and clarity of thought.",
        ),
        "fateLine": (
            "A visible fate line suggests a clear sense of purpose in your career.",
            "A fate line rising from the moon mount shows support from others.",
            "A faint fate line points to a self-made, flexible path.",
        ),
        "mount": (
            "Well developed, showing strong {quality}.",
            "Moderately raised, indicating balanced {quality}.",
            "Softly defined, suggesting quiet {quality}.",
        ),
        "fingers": (
            "Long, slender fingers reveal patience and attention to detail.",
            "A strong thumb shows willpower and determination.",
            "Balanced finger lengths indicate harmony between logic and intuition.",
        ),
        "overall": (
            "Your palm describes a resilient, intuitive person entering a period "
            "of growth and steady progress.",
            "Your hand shows a caring nature and a creative mind, ready to take "
            "on new responsibilities.",
            "The lines reveal a determined soul whose efforts are about to bear fruit.",
        ),
        "health": (
            "Good overall vitality; keep a steady sleep routine.",
            "Strong constitution; manage stress with regular breathing practice.",
        ),
        "career": (
            "Recognition comes through consistent, patient effort.",
            "A new opportunity aligns with your natural talents.",
        ),
        "love": (
            "Deep, lasting bonds form through honest communication.",
            "A meaningful connection grows stronger this year.",
        ),
        "wealth": (
            "Gradual financial growth through disciplined saving.",
            "Unexpected gains arrive through creative work.",
        ),
        "recommendations": (
            "Meditate for ten minutes each morning",
            "Wear or carry a citrine for confidence",
            "Keep a gratitude journal",
            "Practice pranayama before important decisions",
            "Spend time near water to calm the mind",
            "Chant a mantra of your choice on Thursdays",
        ),
    },
)

_MOUNT_QUALITIES = {
    "venus": "love and vitality",
    "jupiter": "ambition and leadership",
    "saturn": "wisdom and responsibility",
    "apollo": "creativity and success",
    "mercury": "communication and business sense",
    "mars": "courage and drive",
    "moon": "imagination and intuition",
}


def _recipe(request: PalmReadingRequest, sampler: Sampler, now: datetime) -> dict[str, Any]:
    return {
        "palmLines": {line: sampler.pick(line) for line in LINES},
        "mounts": {
            mount: sampler.pick("mount").format(quality=_MOUNT_QUALITIES[mount])
            for mount in MOUNTS
        },
        "fingerAnalysis": sampler.pick("fingers"),
        "overallReading": sampler.pick("overall"),
        "predictions": {area: sampler.pick(area) for area in PREDICTION_AREAS},
        "recommendations": sampler.pick_many("recommendations", 4),
    }


def _bind(request: PalmReadingRequest, now: datetime) -> dict[str, Any]:
    return {}


FEATURE = Feature(
    name=NAME,
    contract=CONTRACT,
    template=TEMPLATE,
    pool=POOL,
    recipe=_recipe,
    bind=_bind,
    image=lambda request: request.image,
    retries=1,
    count_fallback_usage=True,
)
