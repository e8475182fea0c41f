"""Media resolution: search, embeddability verification, broadened retry."""

from .resolver import (
    BroadenFn,
    MediaResolver,
    MediaSearchClient,
    NullSearchClient,
    default_broaden,
)
from .youtube import (
    YouTubeSearchClient,
    extract_video_id,
    search_url,
    thumbnail_url,
    watch_url,
)

__all__ = [
    "BroadenFn",
    "MediaResolver",
    "MediaSearchClient",
    "NullSearchClient",
    "YouTubeSearchClient",
    "default_broaden",
    "extract_video_id",
    "search_url",
    "thumbnail_url",
    "watch_url",
]
