import json

import pytest

from oracle_pipeline.core import schema
from oracle_pipeline.core.exceptions import ParseFailureKind
from oracle_pipeline.core.schema import SchemaContract
from oracle_pipeline.features.horoscope import CONTRACT as HOROSCOPE
from oracle_pipeline.validation import ResponseValidator, strip_code_fences
from tests.fakes import horoscope_payload

pytestmark = pytest.mark.unit

ITEMS = SchemaContract(
    "items",
    (
        schema.string("title"),
        schema.enum("type", ("binaural", "meditation"), fallback="meditation"),
        schema.integer("count", 1, 10),
        schema.number("score", 0, 1, required=False, default=0.5),
        schema.boolean("active", required=False, default=False),
        schema.string_list("tags", required=False, default=[]),
        schema.string_map("notes", min_items=0, required=False, default={}),
        schema.media_id(),
    ),
    root="array",
    min_items=1,
)


def _item(**overrides):
    item = {"title": "Deep Theta", "type": "binaural", "count": 3}
    item.update(overrides)
    return item


# --- Fence stripping ---


@pytest.mark.parametrize(
    "raw",
    [
        '```json\n{"a": 1}\n```',
        '```\n{"a": 1}\n```',
        '  {"a": 1}  ',
        'Here you go:\n```json\n{"a": 1}\n```\nEnjoy!',
    ],
)
def test_strip_code_fences_recovers_the_json_body(raw):
    assert strip_code_fences(raw) == '{"a": 1}'


def test_fenced_payload_validates():
    raw = f"```json\n{horoscope_payload()}\n```"

    result = ResponseValidator(HOROSCOPE).validate(raw)

    assert result.ok
    assert result.value["sign"] == "Leo"


# --- Failure classification ---


def test_malformed_json_is_classified():
    result = ResponseValidator(HOROSCOPE).validate("{'sign': 'Leo',")

    assert not result.ok
    assert result.reason is ParseFailureKind.MALFORMED_JSON


def test_missing_required_field_is_a_schema_mismatch_with_path():
    payload = json.loads(horoscope_payload())
    del payload["readings"][1]["prediction"]

    result = ResponseValidator(HOROSCOPE).validate(json.dumps(payload))

    assert not result.ok
    assert result.reason is ParseFailureKind.SCHEMA_MISMATCH
    assert result.error.path == "$.readings[1].prediction"


def test_too_few_array_items_is_a_schema_mismatch():
    payload = json.loads(horoscope_payload())
    payload["readings"] = payload["readings"][:2]

    result = ResponseValidator(HOROSCOPE).validate(json.dumps(payload))

    assert result.reason is ParseFailureKind.SCHEMA_MISMATCH


@pytest.mark.parametrize(
    "days",
    [
        ["today", "today", "today"],
        ["tomorrow", "today", "yesterday"],
        ["yesterday", "today", "tomorrow", "tomorrow"],
    ],
)
def test_horoscope_readings_must_cover_yesterday_today_tomorrow(days):
    payload = json.loads(horoscope_payload())
    template = payload["readings"][0]
    payload["readings"] = [dict(template, day=day) for day in days]

    result = ResponseValidator(HOROSCOPE).validate(json.dumps(payload))

    assert result.reason is ParseFailureKind.SCHEMA_MISMATCH
    assert result.error.path == "$.readings"


def test_contract_checks_run_after_the_field_walk():
    seen = []
    contract = SchemaContract(
        "checked", (schema.string("a"),), checks=(lambda value: seen.append(value),)
    )

    result = ResponseValidator(contract).check({"a": "x", "extra": 1})

    assert result.ok
    assert seen == [{"a": "x"}]


def test_object_where_array_expected_is_rejected():
    result = ResponseValidator(ITEMS).validate(json.dumps(_item()))

    assert result.reason is ParseFailureKind.SCHEMA_MISMATCH
    assert "expected array" in str(result.error)


def test_blank_strings_are_rejected():
    result = ResponseValidator(ITEMS).validate(json.dumps([_item(title="   ")]))

    assert result.reason is ParseFailureKind.SCHEMA_MISMATCH


# --- Coercion ---


@pytest.mark.parametrize("raw, expected", [("7", 7), (" 7 ", 7), ("7.0", 7), (7.0, 7)])
def test_numeric_strings_coerce_to_integers(raw, expected):
    result = ResponseValidator(ITEMS).check([_item(count=raw)])

    assert result.ok
    assert result.value[0]["count"] == expected
    assert isinstance(result.value[0]["count"], int)


@pytest.mark.parametrize("raw", ["seven", "3.5", True, 0, 11, [3]])
def test_invalid_integers_are_rejected(raw):
    result = ResponseValidator(ITEMS).check([_item(count=raw)])

    assert result.reason is ParseFailureKind.SCHEMA_MISMATCH


def test_non_finite_numbers_are_rejected():
    result = ResponseValidator(ITEMS).validate('[{"title": "x", "type": "binaural", "count": NaN}]')

    assert result.reason is ParseFailureKind.SCHEMA_MISMATCH


def test_integers_too_large_for_a_float_are_rejected():
    result = ResponseValidator(HOROSCOPE).validate(horoscope_payload(lucky_number=10**400))

    assert not result.ok
    assert result.reason is ParseFailureKind.SCHEMA_MISMATCH


@pytest.mark.parametrize(
    "raw",
    [
        horoscope_payload(lucky_number="N").replace('"N"', "9" * 5000),
        "[" * 100_000,
    ],
    ids=["digit-limit", "deep-nesting"],
)
def test_undecodable_json_is_classified_as_malformed(raw):
    result = ResponseValidator(HOROSCOPE).validate(raw)

    assert not result.ok
    assert result.reason is ParseFailureKind.MALFORMED_JSON


def test_enum_matches_case_insensitively_and_falls_back():
    result = ResponseValidator(ITEMS).check(
        [_item(type="Binaural"), _item(type="chanting")]
    )

    assert [item["type"] for item in result.value] == ["binaural", "meditation"]


def test_defaults_fill_missing_optional_fields_and_unknown_keys_drop():
    result = ResponseValidator(ITEMS).check([_item(extra="ignored")])

    item = result.value[0]
    assert item["score"] == 0.5
    assert item["active"] is False
    assert item["tags"] == []
    assert item["notes"] == {}
    assert "extra" not in item


def test_default_containers_are_not_shared_between_payloads():
    validator = ResponseValidator(ITEMS)

    first = validator.check([_item()]).value
    first[0]["tags"].append("mutated")
    second = validator.check([_item()]).value

    assert second[0]["tags"] == []


def test_model_supplied_media_ids_are_discarded():
    result = ResponseValidator(ITEMS).check([_item(videoId="dQw4w9WgXcQ")])

    assert result.value[0]["videoId"] is None


def test_preserve_media_keeps_resolved_ids():
    validator = ResponseValidator(ITEMS, preserve_media=True)

    result = validator.check([_item(videoId="dQw4w9WgXcQ"), _item()])

    assert [item["videoId"] for item in result.value] == ["dQw4w9WgXcQ", None]


def test_validation_is_idempotent():
    validator = ResponseValidator(HOROSCOPE)
    first = validator.validate(horoscope_payload(lucky_number="7"))

    second = validator.validate(json.dumps(first.value))

    assert first.ok and second.ok
    assert second.value == first.value
