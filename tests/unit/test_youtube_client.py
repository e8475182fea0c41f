import httpx
import pytest

from oracle_pipeline.core.exceptions import (
    MediaAuthError,
    MediaError,
    MediaNotFoundError,
    MediaQuotaExceededError,
)
from oracle_pipeline.media import (
    YouTubeSearchClient,
    extract_video_id,
    search_url,
    thumbnail_url,
    watch_url,
)

pytestmark = pytest.mark.unit


def _client(handler):
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return YouTubeSearchClient("yt-key", http_client=http), http


def _error(status, reason, message="error"):
    def handler(request):
        return httpx.Response(
            status,
            json={"error": {"code": status, "message": message, "errors": [{"reason": reason}]}},
        )

    return handler


@pytest.mark.parametrize(
    "url, expected",
    [
        ("https://www.youtube.com/watch?v=YuQBl27UK_s", "YuQBl27UK_s"),
        ("https://www.youtube.com/watch?feature=share&v=YuQBl27UK_s", "YuQBl27UK_s"),
        ("https://youtu.be/YuQBl27UK_s", "YuQBl27UK_s"),
        ("https://www.youtube.com/embed/YuQBl27UK_s", "YuQBl27UK_s"),
        ("YuQBl27UK_s", "YuQBl27UK_s"),
        ("https://www.youtube.com/results?search_query=calm", None),
        ("", None),
        (None, None),
    ],
)
def test_extract_video_id(url, expected):
    assert extract_video_id(url) == expected


def test_url_helpers():
    assert watch_url("YuQBl27UK_s") == "https://www.youtube.com/watch?v=YuQBl27UK_s"
    assert thumbnail_url("YuQBl27UK_s").endswith("/vi/YuQBl27UK_s/maxresdefault.jpg")
    assert search_url("Om Namah Shivaya") == (
        "https://www.youtube.com/results?search_query=Om+Namah+Shivaya"
    )


@pytest.mark.asyncio
async def test_search_requests_embeddable_safe_videos():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"items": [{"id": {"videoId": "YuQBl27UK_s"}}]})

    client, _ = _client(handler)

    assert await client.search("528Hz healing") == "YuQBl27UK_s"
    params = seen[0].url.params
    assert seen[0].url.path.endswith("/search")
    assert params["q"] == "528Hz healing"
    assert params["type"] == "video"
    assert params["videoEmbeddable"] == "true"
    assert params["safeSearch"] == "strict"
    assert params["maxResults"] == "1"
    assert params["key"] == "yt-key"


@pytest.mark.asyncio
async def test_search_without_items_is_not_found():
    client, _ = _client(lambda request: httpx.Response(200, json={"items": []}))

    with pytest.raises(MediaNotFoundError):
        await client.search("nothing")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "status, expected",
    [
        ({"embeddable": True, "privacyStatus": "public"}, True),
        ({"embeddable": False, "privacyStatus": "public"}, False),
        ({"embeddable": True, "privacyStatus": "private"}, False),
        ({}, False),
    ],
)
async def test_is_embeddable_checks_status(status, expected):
    def handler(request):
        assert request.url.path.endswith("/videos")
        assert request.url.params["id"] == "YuQBl27UK_s"
        return httpx.Response(200, json={"items": [{"status": status}]})

    client, _ = _client(handler)

    assert await client.is_embeddable("YuQBl27UK_s") is expected


@pytest.mark.asyncio
async def test_is_embeddable_for_unknown_video_is_not_found():
    client, _ = _client(lambda request: httpx.Response(200, json={"items": []}))

    with pytest.raises(MediaNotFoundError):
        await client.is_embeddable("deleted0000")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "handler, expected",
    [
        (_error(403, "quotaExceeded"), MediaQuotaExceededError),
        (_error(429, "rateLimitExceeded"), MediaQuotaExceededError),
        (_error(400, "keyInvalid"), MediaAuthError),
        (_error(401, "unauthorized"), MediaAuthError),
        (_error(403, "somethingElse"), MediaAuthError),
        (_error(404, "notFound"), MediaNotFoundError),
    ],
)
async def test_http_errors_are_classified(handler, expected):
    client, _ = _client(handler)

    with pytest.raises(expected):
        await client.search("q")


@pytest.mark.asyncio
async def test_server_errors_are_transport_failures():
    client, _ = _client(lambda request: httpx.Response(500, text="boom"))

    with pytest.raises(MediaError) as excinfo:
        await client.search("q")

    assert excinfo.value.kind == "transport"


@pytest.mark.asyncio
async def test_connection_errors_are_transport_failures():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    client, _ = _client(handler)

    with pytest.raises(MediaError, match="failed"):
        await client.search("q")


@pytest.mark.asyncio
async def test_timeouts_are_transport_failures():
    def handler(request):
        raise httpx.ReadTimeout("slow", request=request)

    client, _ = _client(handler)

    with pytest.raises(MediaError, match="timed out"):
        await client.search("q")


@pytest.mark.asyncio
async def test_invalid_json_is_a_transport_failure():
    client, _ = _client(lambda request: httpx.Response(200, text="<html>"))

    with pytest.raises(MediaError, match="invalid JSON"):
        await client.search("q")


@pytest.mark.asyncio
async def test_aclose_leaves_injected_clients_open():
    client, http = _client(lambda request: httpx.Response(200, json={}))

    await client.aclose()

    assert http.is_closed is False
    await http.aclose()


@pytest.mark.asyncio
async def test_aclose_closes_owned_client():
    client = YouTubeSearchClient("yt-key")

    await client.aclose()

    assert client._http.is_closed


def test_api_key_is_required():
    with pytest.raises(ValueError, match="api_key"):
        YouTubeSearchClient("")
