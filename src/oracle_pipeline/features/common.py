"""Helpers shared by features that embed videos."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date
from typing import Any

from oracle_pipeline.core import schema
from oracle_pipeline.core.schema import Field
from oracle_pipeline.core.types import MediaQuery
from oracle_pipeline.media import extract_video_id, search_url, thumbnail_url, watch_url

VIDEO_TYPES = ("subliminal", "binaural", "meditation", "frequency")

VIDEO_TYPE_LABELS = {
    "subliminal": "subliminal affirmations",
    "binaural": "binaural beats",
    "meditation": "guided meditation",
    "frequency": "solfeggio frequency",
}

# Static asset shipped with the UI bundle
PLACEHOLDER_THUMBNAIL = "/assets/video-placeholder.jpg"


def video_fields(*, typed: bool = True) -> tuple[Field, ...]:
    """Contract fields for an embedded video item."""
    fields: list[Field] = [
        schema.string("title"),
        schema.string("description"),
    ]
    if typed:
        fields.append(schema.enum("type", VIDEO_TYPES, fallback="meditation"))
    fields += [
        schema.string("duration", required=False, default="30:00"),
        schema.string("url", required=False, default=""),
        schema.media_id("videoId"),
        schema.string("thumbnail", required=False, default=""),
    ]
    return tuple(fields)


def video_query(
    item: dict[str, Any], *, category: str | None = None, descriptor: str = "30 minutes"
) -> MediaQuery:
    """Media query for a video item, proposing any id found in its url."""
    if category is None:
        category = VIDEO_TYPE_LABELS.get(item.get("type", ""), "healing music")
    return MediaQuery(
        title=item["title"],
        category=category,
        descriptor=descriptor,
        candidate_id=extract_video_id(item.get("url")),
    )


def finalize_video(item: dict[str, Any]) -> None:
    """Derive url and thumbnail from the verified id, in place."""
    video_id = item.get("videoId")
    if video_id:
        item["url"] = watch_url(video_id)
        item["thumbnail"] = thumbnail_url(video_id)
    else:
        item["url"] = search_url(item["title"])
        item["thumbnail"] = PLACEHOLDER_THUMBNAIL


def date_text(day: date) -> str:
    """Render a date as e.g. ``Mon Oct 19 2026``."""
    return day.strftime("%a %b %d %Y")


def listing(values: Iterable[str], empty: str = "none") -> str:
    items = [v.strip() for v in values if v and v.strip()]
    return ", ".join(items) if items else empty
