import pytest

from oracle_pipeline.core.exceptions import (
    MediaAuthError,
    MediaError,
    MediaNotFoundError,
    MediaQuotaExceededError,
)
from oracle_pipeline.core.types import MediaQuery
from oracle_pipeline.media import MediaResolver, NullSearchClient, default_broaden
from oracle_pipeline.telemetry import SimpleReporter, TelemetryContext
from tests.fakes import FakeSearchClient

pytestmark = pytest.mark.unit

THETA = MediaQuery("Deep Theta", category="binaural beats", descriptor="30 minutes")


def test_default_broaden_keeps_category_and_descriptor():
    assert default_broaden(THETA) == "binaural beats 30 minutes"
    assert default_broaden(MediaQuery("calm music")) is None


@pytest.mark.asyncio
async def test_specific_hit_is_verified_before_use():
    client = FakeSearchClient(
        results={"Deep Theta binaural beats": "AAAAAAAAAAA"}, embeddable={"AAAAAAAAAAA"}
    )

    candidate = await MediaResolver(client).resolve_one(THETA)

    assert candidate.resolved_id == "AAAAAAAAAAA"
    assert candidate.verified is True
    assert client.verifications == ["AAAAAAAAAAA"]


@pytest.mark.asyncio
async def test_unembeddable_hit_triggers_one_broadened_search():
    client = FakeSearchClient(
        results={
            "Deep Theta binaural beats": "PRIVATE0000",
            "binaural beats 30 minutes": "BBBBBBBBBBB",
        },
        embeddable={"BBBBBBBBBBB"},
    )

    candidate = await MediaResolver(client).resolve_one(THETA)

    assert candidate.resolved_id == "BBBBBBBBBBB"
    assert client.searches == ["Deep Theta binaural beats", "binaural beats 30 minutes"]


@pytest.mark.asyncio
async def test_not_found_also_broadens():
    client = FakeSearchClient(
        results={"binaural beats 30 minutes": "BBBBBBBBBBB"},
        embeddable={"BBBBBBBBBBB"},
        errors={"Deep Theta binaural beats": MediaNotFoundError("no results")},
    )

    candidate = await MediaResolver(client).resolve_one(THETA)

    assert candidate.resolved_id == "BBBBBBBBBBB"


@pytest.mark.asyncio
async def test_nothing_verifies_yields_null_candidate():
    client = FakeSearchClient()

    candidate = await MediaResolver(client).resolve_one(THETA)

    assert candidate.resolved_id is None
    assert candidate.verified is False
    assert candidate.query == "Deep Theta binaural beats"
    assert len(client.searches) == 2


@pytest.mark.asyncio
async def test_broadening_is_skipped_when_it_would_repeat_the_query():
    client = FakeSearchClient()

    await MediaResolver(client).resolve_one("calm music")

    assert client.searches == ["calm music"]


@pytest.mark.asyncio
async def test_custom_broaden_function_is_used():
    client = FakeSearchClient()

    await MediaResolver(client).resolve_one(THETA, broaden=lambda q: "puja vidhi")

    assert client.searches == ["Deep Theta binaural beats", "puja vidhi"]


@pytest.mark.asyncio
async def test_verified_candidate_id_skips_search():
    client = FakeSearchClient(embeddable={"CCCCCCCCCCC"})
    query = MediaQuery("Deep Theta", candidate_id="CCCCCCCCCCC")

    candidate = await MediaResolver(client).resolve_one(query)

    assert candidate.resolved_id == "CCCCCCCCCCC"
    assert client.searches == []


@pytest.mark.asyncio
async def test_unverified_candidate_id_is_never_returned():
    client = FakeSearchClient(
        results={"Deep Theta": "AAAAAAAAAAA"}, embeddable={"AAAAAAAAAAA"}
    )
    query = MediaQuery("Deep Theta", candidate_id="MADEUP00000")

    candidate = await MediaResolver(client).resolve_one(query)

    assert candidate.resolved_id == "AAAAAAAAAAA"
    assert client.verifications == ["MADEUP00000", "AAAAAAAAAAA"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error", [MediaQuotaExceededError("quota"), MediaAuthError("bad key")]
)
async def test_quota_and_auth_errors_stop_further_attempts(error):
    client = FakeSearchClient(errors={"Deep Theta binaural beats": error})

    candidate = await MediaResolver(client).resolve_one(THETA)

    assert candidate.resolved_id is None
    assert client.searches == ["Deep Theta binaural beats"]


@pytest.mark.asyncio
async def test_failures_are_counted_by_kind():
    reporter = SimpleReporter()
    client = FakeSearchClient(errors={"Deep Theta binaural beats": MediaError("reset")})
    resolver = MediaResolver(client, telemetry=TelemetryContext(reporter, enabled=True))

    await resolver.resolve_one(THETA)

    failures = [
        meta["kind"]
        for scope, entries in reporter.metrics.items()
        if scope.endswith("media.failure")
        for _value, meta in entries
    ]
    assert failures == ["transport"]


# --- Fan-out ---


@pytest.mark.asyncio
async def test_resolve_many_isolates_failures_and_preserves_order():
    client = FakeSearchClient(
        results={"q1": "AAAAAAAAAAA", "q3": "CCCCCCCCCCC"},
        embeddable={"AAAAAAAAAAA", "CCCCCCCCCCC"},
        errors={"q2": MediaError("connection reset")},
        delays={"q1": 0.03, "q3": 0.0},
    )

    candidates = await MediaResolver(client).resolve_many(["q1", "q2", "q3"])

    assert [c.query for c in candidates] == ["q1", "q2", "q3"]
    assert [c.resolved_id for c in candidates] == ["AAAAAAAAAAA", None, "CCCCCCCCCCC"]


@pytest.mark.asyncio
async def test_resolve_many_contains_unexpected_exceptions():
    client = FakeSearchClient(
        results={"q1": "AAAAAAAAAAA"},
        embeddable={"AAAAAAAAAAA"},
        errors={"q2": RuntimeError("bug in client")},
    )

    candidates = await MediaResolver(client).resolve_many(["q1", "q2"])

    assert [c.resolved_id for c in candidates] == ["AAAAAAAAAAA", None]


@pytest.mark.asyncio
async def test_resolve_many_bounds_concurrency():
    queries = [f"q{i}" for i in range(6)]
    client = FakeSearchClient(delays={q: 0.01 for q in queries})

    await MediaResolver(client, concurrency=2).resolve_many(queries)

    assert client.max_in_flight <= 2
    assert sorted(client.searches) == queries


@pytest.mark.asyncio
async def test_resolve_many_of_nothing_is_empty():
    assert await MediaResolver(NullSearchClient()).resolve_many([]) == []


def test_concurrency_must_be_positive():
    with pytest.raises(ValueError, match="concurrency"):
        MediaResolver(NullSearchClient(), concurrency=0)
