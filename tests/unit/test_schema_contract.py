import json

import pytest

from oracle_pipeline.core import schema
from oracle_pipeline.core.exceptions import ConfigurationError
from oracle_pipeline.core.schema import FieldKind, SchemaContract

pytestmark = pytest.mark.unit


def test_media_id_fields_are_forced_optional_with_null_default():
    field = schema.media_id()

    assert field.kind is FieldKind.MEDIA_ID
    assert field.required is False
    assert field.default is None


def test_optional_field_without_default_is_rejected():
    with pytest.raises(ConfigurationError, match="must declare a default"):
        schema.string("mood", required=False)


def test_enum_requires_choices_and_a_valid_fallback():
    with pytest.raises(ConfigurationError, match="no choices"):
        schema.enum("type", ())
    with pytest.raises(ConfigurationError, match="not one of its choices"):
        schema.enum("type", ("a", "b"), fallback="c")


def test_nested_fields_must_declare_children():
    with pytest.raises(ConfigurationError, match="has no fields"):
        schema.obj("palmLines", ())


def test_duplicate_field_names_are_rejected():
    with pytest.raises(ConfigurationError, match="Duplicate field names"):
        SchemaContract("dup", (schema.string("a"), schema.string("a")))


def test_inverted_numeric_bounds_are_rejected():
    with pytest.raises(ConfigurationError, match="minimum > maximum"):
        schema.integer("luckyNumber", 99, 1)


def test_root_must_be_object_or_array():
    with pytest.raises(ConfigurationError, match="root must be"):
        SchemaContract("bad", (schema.string("a"),), root="tuple")  # type: ignore[arg-type]


def test_contract_without_fields_is_rejected():
    with pytest.raises(ConfigurationError, match="declares no fields"):
        SchemaContract("empty", ())


def test_default_table_addresses_nested_and_array_fields():
    contract = SchemaContract(
        "horoscope",
        (
            schema.string("sign"),
            schema.object_list(
                "readings",
                (
                    schema.string("prediction"),
                    schema.string("mood", required=False, default="Calm"),
                ),
                min_items=3,
            ),
            schema.obj(
                "yoga",
                (schema.string("pranayama", required=False, default="Breathe"),),
            ),
        ),
    )

    assert contract.default_table() == {
        "readings[].mood": "Calm",
        "yoga.pranayama": "Breathe",
    }


def test_default_table_for_array_root_uses_item_prefix():
    contract = SchemaContract(
        "videos",
        (
            schema.string("title"),
            schema.string("duration", required=False, default="30:00"),
            schema.media_id(),
        ),
        root="array",
    )

    assert contract.default_table() == {
        "[].duration": "30:00",
        "[].videoId": None,
    }


def test_describe_renders_json_shape_without_media_slots():
    contract = SchemaContract(
        "videos",
        (
            schema.string("title"),
            schema.enum("type", ("binaural", "meditation")),
            schema.integer("luckyNumber", 1, 99),
            schema.media_id(),
        ),
        root="array",
    )

    shape = json.loads(contract.describe())

    assert shape == [
        {
            "title": "string",
            "type": "one of: binaural | meditation",
            "luckyNumber": "integer 1-99",
        }
    ]
