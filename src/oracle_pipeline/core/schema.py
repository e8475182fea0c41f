"""Declarative schema contracts for model-authored JSON payloads.

A `SchemaContract` lists the fields a feature expects back from the model,
each with a semantic kind and a required flag. Contracts are pure data: the
`ResponseValidator` walks them, the `PromptBuilder` renders them into the
prompt, and the fallback synthesizer is checked against them.

Example:
    ```python
    HOROSCOPE = SchemaContract(
        "horoscope",
        fields=(
            string("sign"),
            object_list("readings", (string("date"), integer("luckyNumber", 1, 99)), min_items=3),
        ),
    )
    ```
"""

from __future__ import annotations

import dataclasses
from enum import Enum
import json
import typing

from oracle_pipeline.core.exceptions import ConfigurationError


class _Missing:
    __slots__ = ()

    def __repr__(self) -> str:
        return "MISSING"


MISSING: typing.Any = _Missing()


class FieldKind(str, Enum):
    """Semantic type of a contract field."""

    STRING = "string"
    ENUM = "enum"
    INTEGER = "integer"
    NUMBER = "number"
    BOOLEAN = "boolean"
    STRING_ARRAY = "string_array"
    STRING_MAP = "string_map"
    OBJECT = "object"
    OBJECT_ARRAY = "object_array"
    MEDIA_ID = "media_id"  # filled by the media resolver, never by the model


_NESTED = (FieldKind.OBJECT, FieldKind.OBJECT_ARRAY)
_NUMERIC = (FieldKind.INTEGER, FieldKind.NUMBER)


@dataclasses.dataclass(frozen=True, slots=True)
class Field:
    """A single named slot in a contract."""

    name: str
    kind: FieldKind
    required: bool = True
    default: typing.Any = MISSING
    choices: tuple[str, ...] = ()
    fallback_choice: str | None = None
    minimum: float | None = None
    maximum: float | None = None
    min_items: int = 0
    fields: tuple[Field, ...] = ()

    def __post_init__(self) -> None:
        if not self.name or not isinstance(self.name, str):
            raise ConfigurationError("Field name must be a non-empty str")
        if self.kind is FieldKind.MEDIA_ID:
            # Media slots are resolved later; the model never has to supply them.
            object.__setattr__(self, "required", False)
            object.__setattr__(self, "default", None)
        if not self.required and self.default is MISSING:
            raise ConfigurationError(
                f"Optional field '{self.name}' must declare a default"
            )
        if self.kind is FieldKind.ENUM:
            if not self.choices:
                raise ConfigurationError(f"Enum field '{self.name}' has no choices")
            if self.fallback_choice is not None and (
                self.fallback_choice not in self.choices
            ):
                raise ConfigurationError(
                    f"Enum field '{self.name}' fallback {self.fallback_choice!r} "
                    "is not one of its choices"
                )
        if self.kind in _NESTED:
            if not self.fields:
                raise ConfigurationError(f"Nested field '{self.name}' has no fields")
            _ensure_unique(self.fields, self.name)
        if (
            self.kind in _NUMERIC
            and self.minimum is not None
            and self.maximum is not None
            and self.minimum > self.maximum
        ):
            raise ConfigurationError(f"Field '{self.name}' has minimum > maximum")
        if self.min_items < 0:
            raise ConfigurationError(f"Field '{self.name}' has negative min_items")


def _ensure_unique(fields: tuple[Field, ...], owner: str) -> None:
    names = [f.name for f in fields]
    duplicates = sorted({n for n in names if names.count(n) > 1})
    if duplicates:
        raise ConfigurationError(
            f"Duplicate field names in '{owner}': {', '.join(duplicates)}"
        )


# --- Field constructors ---


def string(name: str, *, required: bool = True, default: typing.Any = MISSING) -> Field:
    return Field(name, FieldKind.STRING, required=required, default=default)


def enum(
    name: str,
    choices: tuple[str, ...],
    *,
    fallback: str | None = None,
    required: bool = True,
    default: typing.Any = MISSING,
) -> Field:
    return Field(
        name,
        FieldKind.ENUM,
        required=required,
        default=default,
        choices=tuple(choices),
        fallback_choice=fallback,
    )


def integer(
    name: str,
    minimum: int | None = None,
    maximum: int | None = None,
    *,
    required: bool = True,
    default: typing.Any = MISSING,
) -> Field:
    return Field(
        name,
        FieldKind.INTEGER,
        required=required,
        default=default,
        minimum=minimum,
        maximum=maximum,
    )


def number(
    name: str,
    minimum: float | None = None,
    maximum: float | None = None,
    *,
    required: bool = True,
    default: typing.Any = MISSING,
) -> Field:
    return Field(
        name,
        FieldKind.NUMBER,
        required=required,
        default=default,
        minimum=minimum,
        maximum=maximum,
    )


def boolean(name: str, *, required: bool = True, default: typing.Any = MISSING) -> Field:
    return Field(name, FieldKind.BOOLEAN, required=required, default=default)


def string_list(
    name: str,
    *,
    min_items: int = 1,
    required: bool = True,
    default: typing.Any = MISSING,
) -> Field:
    return Field(
        name,
        FieldKind.STRING_ARRAY,
        required=required,
        default=default,
        min_items=min_items,
    )


def string_map(
    name: str,
    *,
    min_items: int = 1,
    required: bool = True,
    default: typing.Any = MISSING,
) -> Field:
    return Field(
        name,
        FieldKind.STRING_MAP,
        required=required,
        default=default,
        min_items=min_items,
    )


def obj(
    name: str,
    fields: tuple[Field, ...],
    *,
    required: bool = True,
    default: typing.Any = MISSING,
) -> Field:
    return Field(
        name, FieldKind.OBJECT, required=required, default=default, fields=fields
    )


def object_list(
    name: str,
    fields: tuple[Field, ...],
    *,
    min_items: int = 1,
    required: bool = True,
    default: typing.Any = MISSING,
) -> Field:
    return Field(
        name,
        FieldKind.OBJECT_ARRAY,
        required=required,
        default=default,
        fields=fields,
        min_items=min_items,
    )


def media_id(name: str = "videoId") -> Field:
    return Field(name, FieldKind.MEDIA_ID, required=False)


# --- Contract ---


@dataclasses.dataclass(frozen=True, slots=True)
class SchemaContract:
    """Expected JSON shape for one feature.

    Attributes:
        name: Feature name the contract belongs to.
        fields: Top-level fields (or item fields when `root="array"`).
        root: "object" for a JSON object payload, "array" for a list of objects.
        min_items: Minimum list length when `root="array"`.
        checks: Cross-field rules run on the typed payload after the walk.
            Each raises `SchemaMismatchError` when the payload breaks it.
    """

    name: str
    fields: tuple[Field, ...]
    root: typing.Literal["object", "array"] = "object"
    min_items: int = 0
    checks: tuple[typing.Callable[[typing.Any], None], ...] = ()

    def __post_init__(self) -> None:
        if self.root not in ("object", "array"):
            raise ConfigurationError(
                f"Contract '{self.name}' root must be 'object' or 'array'"
            )
        if not self.fields:
            raise ConfigurationError(f"Contract '{self.name}' declares no fields")
        _ensure_unique(self.fields, self.name)

    def default_table(self) -> dict[str, typing.Any]:
        """Return `{dotted.path: default}` for every optional field.

        Array items are addressed with a `[]` suffix, e.g. `readings[].mood`.
        """
        table: dict[str, typing.Any] = {}
        prefix = "[]" if self.root == "array" else ""
        _collect_defaults(self.fields, prefix, table)
        return table

    def describe(self) -> str:
        """Render the expected shape as an indented JSON-like example."""
        shape = _describe_fields(self.fields)
        if self.root == "array":
            rendered: typing.Any = [shape]
        else:
            rendered = shape
        return json.dumps(rendered, indent=2, ensure_ascii=False)


def _collect_defaults(
    fields: tuple[Field, ...], prefix: str, table: dict[str, typing.Any]
) -> None:
    for f in fields:
        path = f"{prefix}.{f.name}" if prefix else f.name
        if not f.required:
            table[path] = f.default
        if f.kind is FieldKind.OBJECT:
            _collect_defaults(f.fields, path, table)
        elif f.kind is FieldKind.OBJECT_ARRAY:
            _collect_defaults(f.fields, f"{path}[]", table)


def _describe_field(f: Field) -> typing.Any:
    match f.kind:
        case FieldKind.STRING:
            return "string"
        case FieldKind.ENUM:
            return "one of: " + " | ".join(f.choices)
        case FieldKind.INTEGER | FieldKind.NUMBER:
            label = f.kind.value
            if f.minimum is not None and f.maximum is not None:
                return f"{label} {f.minimum:g}-{f.maximum:g}"
            return label
        case FieldKind.BOOLEAN:
            return "true | false"
        case FieldKind.STRING_ARRAY:
            return ["string"]
        case FieldKind.STRING_MAP:
            return {"<key>": "string"}
        case FieldKind.OBJECT:
            return _describe_fields(f.fields)
        case FieldKind.OBJECT_ARRAY:
            return [_describe_fields(f.fields)]
    raise ConfigurationError(f"Cannot describe field kind {f.kind!r}")


def _describe_fields(fields: tuple[Field, ...]) -> dict[str, typing.Any]:
    return {
        f.name: _describe_field(f) for f in fields if f.kind is not FieldKind.MEDIA_ID
    }
