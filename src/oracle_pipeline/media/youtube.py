"""YouTube Data API v3 search client on ``httpx``."""

from __future__ import annotations

import logging
import re
from typing import Any
from urllib.parse import quote_plus

import httpx

from oracle_pipeline.core.exceptions import (
    MediaAuthError,
    MediaError,
    MediaNotFoundError,
    MediaQuotaExceededError,
)

log = logging.getLogger(__name__)

YOUTUBE_API_BASE = "https://www.googleapis.com/youtube/v3"

_QUOTA_REASONS = frozenset({"quotaExceeded", "dailyLimitExceeded", "rateLimitExceeded"})
_AUTH_REASONS = frozenset(
    {"keyInvalid", "forbidden", "accessNotConfigured", "ipRefererBlocked", "keyExpired"}
)

_VIDEO_ID = re.compile(r"^[A-Za-z0-9_-]{11}$")
_URL_ID_PATTERNS = (
    re.compile(r"[?&]v=([A-Za-z0-9_-]{11})"),
    re.compile(r"youtu\.be/([A-Za-z0-9_-]{11})"),
    re.compile(r"/embed/([A-Za-z0-9_-]{11})"),
)


def extract_video_id(url: str | None) -> str | None:
    """Pull an 11-character video id out of a watch, short, or embed URL."""
    if not url:
        return None
    text = url.strip()
    if _VIDEO_ID.match(text):
        return text
    for pattern in _URL_ID_PATTERNS:
        if match := pattern.search(text):
            return match.group(1)
    return None


def watch_url(video_id: str) -> str:
    return f"https://www.youtube.com/watch?v={video_id}"


def thumbnail_url(video_id: str) -> str:
    return f"https://img.youtube.com/vi/{video_id}/maxresdefault.jpg"


def search_url(query: str) -> str:
    return f"https://www.youtube.com/results?search_query={quote_plus(query)}"


class YouTubeSearchClient:
    """Search for embeddable videos and verify their playback status.

    The underlying ``httpx.AsyncClient`` is created once and must be released
    with `aclose()`. An injected client is used as-is and left open.
    """

    def __init__(
        self,
        api_key: str,
        *,
        http_client: httpx.AsyncClient | None = None,
        timeout_seconds: float = 10.0,
        base_url: str = YOUTUBE_API_BASE,
    ) -> None:
        if not api_key:
            raise ValueError("YouTubeSearchClient requires an api_key")
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=timeout_seconds)

    async def search(self, query: str) -> str | None:
        data = await self._get(
            "search",
            {
                "part": "snippet",
                "q": query,
                "type": "video",
                "videoEmbeddable": "true",
                "videoDuration": "medium",
                "safeSearch": "strict",
                "relevanceLanguage": "en",
                "maxResults": "1",
            },
        )
        items = data.get("items") or []
        if not items:
            raise MediaNotFoundError(f"No search results for {query!r}")
        video_id = (items[0].get("id") or {}).get("videoId")
        return video_id or None

    async def is_embeddable(self, video_id: str) -> bool:
        data = await self._get("videos", {"part": "status", "id": video_id})
        items = data.get("items") or []
        if not items:
            raise MediaNotFoundError(f"Video {video_id} does not exist")
        status = items[0].get("status") or {}
        return status.get("embeddable") is True and status.get("privacyStatus") == "public"

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    # --- Internal helpers ---

    async def _get(self, endpoint: str, params: dict[str, str]) -> dict[str, Any]:
        url = f"{self._base_url}/{endpoint}"
        try:
            response = await self._http.get(url, params={**params, "key": self._api_key})
        except httpx.TimeoutException as e:
            raise MediaError(f"YouTube request timed out: {endpoint}") from e
        except httpx.HTTPError as e:
            raise MediaError(f"YouTube request failed: {endpoint}: {e}") from e

        if response.status_code >= 400:
            raise _classify_error(response)
        try:
            data = response.json()
        except ValueError as e:
            raise MediaError(f"YouTube returned invalid JSON for {endpoint}") from e
        if not isinstance(data, dict):
            raise MediaError(f"YouTube returned unexpected payload for {endpoint}")
        return data


def _classify_error(response: httpx.Response) -> MediaError:
    reasons: set[str] = set()
    message = response.reason_phrase or "error"
    try:
        error = response.json().get("error") or {}
    except (ValueError, AttributeError):
        error = {}
    if isinstance(error, dict):
        message = error.get("message") or message
        for item in error.get("errors") or ():
            if isinstance(item, dict) and item.get("reason"):
                reasons.add(str(item["reason"]))

    status = response.status_code
    detail = f"HTTP {status}: {message}"
    if reasons & _QUOTA_REASONS or status == 429:
        return MediaQuotaExceededError(detail)
    if status == 401 or reasons & _AUTH_REASONS:
        return MediaAuthError(detail)
    if status == 404:
        return MediaNotFoundError(detail)
    if status == 403:
        return MediaAuthError(detail)
    return MediaError(detail)
