"""Parse and validate model-authored JSON against a `SchemaContract`.

Validation is all-or-nothing per payload: a missing required field or a shape
mismatch anywhere rejects the whole response, because partially filled
creative content is worse than a clean fallback. Optional fields are filled
from the contract's defaults, unknown keys are dropped, and media slots are
reset to `None` so only the media resolver can populate them.
"""

from __future__ import annotations

import json
import logging
import math
import re
from typing import Any

from oracle_pipeline.core.exceptions import (
    MalformedJsonError,
    ParseError,
    SchemaMismatchError,
)
from oracle_pipeline.core.schema import Field, FieldKind, SchemaContract
from oracle_pipeline.core.types import Failure, ParsedResult, Success

log = logging.getLogger(__name__)

_OPENING_FENCE = re.compile(r"^```[A-Za-z0-9_-]*[ \t]*\r?\n?")
_CLOSING_FENCE = re.compile(r"\r?\n?```\s*$")
_EMBEDDED_FENCE = re.compile(r"```[A-Za-z0-9_-]*[ \t]*\r?\n(.*?)\r?\n?```", re.DOTALL)
_NUMERIC = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")


def strip_code_fences(text: str) -> str:
    """Remove a surrounding Markdown code fence and trim whitespace.

    Handles ```` ```json ... ``` ```` as well as bare ```` ``` ```` fences. When
    the model wraps a fenced block in prose, the first fenced block is used.
    Text without fences is only trimmed.
    """
    stripped = text.strip()
    if stripped.startswith("```"):
        stripped = _OPENING_FENCE.sub("", stripped, count=1)
        stripped = _CLOSING_FENCE.sub("", stripped, count=1)
    elif match := _EMBEDDED_FENCE.search(stripped):
        stripped = match.group(1)
    return stripped.strip()


class ResponseValidator:
    """Turn raw model text into a `ParsedResult` for one contract."""

    def __init__(self, contract: SchemaContract, *, preserve_media: bool = False) -> None:
        self.contract = contract
        # Final checks keep resolver-filled media ids; model payloads never do
        self.preserve_media = preserve_media

    def validate(self, raw_text: str) -> ParsedResult:
        """Strip fences, parse JSON, and check the payload against the contract.

        Returns:
            `Success` with the typed, defaulted payload, or `Failure` carrying a
            `MalformedJsonError` or `SchemaMismatchError`.
        """
        body = strip_code_fences(raw_text)
        try:
            decoded = json.loads(body)
        except json.JSONDecodeError as e:
            log.debug("Malformed JSON for contract '%s': %s", self.contract.name, e)
            return Failure(MalformedJsonError(f"Invalid JSON: {e.msg} at pos {e.pos}"))
        except (ValueError, RecursionError) as e:
            # Digit limits and pathological nesting surface outside JSONDecodeError
            log.debug("Undecodable JSON for contract '%s': %s", self.contract.name, e)
            return Failure(MalformedJsonError(f"Invalid JSON: {type(e).__name__}"))
        return self.check(decoded)

    def check(self, value: Any) -> ParsedResult:
        """Validate an already-decoded payload."""
        try:
            if self.contract.root == "array":
                typed: Any = self._object_array(
                    value, self.contract.fields, self.contract.min_items, "$"
                )
            else:
                typed = self._object(value, self.contract.fields, "$")
            for rule in self.contract.checks:
                rule(typed)
        except ParseError as e:
            log.debug("Schema mismatch for contract '%s': %s", self.contract.name, e)
            return Failure(e)
        return Success(typed)

    # --- Walkers ---

    def _object(self, value: Any, fields: tuple[Field, ...], path: str) -> dict[str, Any]:
        if not isinstance(value, dict):
            raise SchemaMismatchError(
                f"expected object, got {_type_name(value)}", path=path
            )
        out: dict[str, Any] = {}
        for f in fields:
            field_path = f"{path}.{f.name}"
            if f.kind is FieldKind.MEDIA_ID:
                out[f.name] = self._media_id(value.get(f.name), field_path)
                continue
            raw = value.get(f.name)
            if raw is None:
                if f.required:
                    raise SchemaMismatchError("required field missing", path=field_path)
                out[f.name] = _copy_default(f.default)
                continue
            out[f.name] = self._field(raw, f, field_path)
        return out

    def _media_id(self, raw: Any, path: str) -> str | None:
        if not self.preserve_media or raw is None:
            return None
        return _string(raw, path)

    def _object_array(
        self, value: Any, fields: tuple[Field, ...], min_items: int, path: str
    ) -> list[dict[str, Any]]:
        if not isinstance(value, list):
            raise SchemaMismatchError(
                f"expected array, got {_type_name(value)}", path=path
            )
        if len(value) < min_items:
            raise SchemaMismatchError(
                f"expected at least {min_items} items, got {len(value)}", path=path
            )
        return [
            self._object(item, fields, f"{path}[{i}]") for i, item in enumerate(value)
        ]

    def _field(self, raw: Any, f: Field, path: str) -> Any:  # noqa: PLR0911
        match f.kind:
            case FieldKind.STRING:
                return _string(raw, path)
            case FieldKind.ENUM:
                return _enum(raw, f, path)
            case FieldKind.INTEGER | FieldKind.NUMBER:
                return _number(raw, f, path)
            case FieldKind.BOOLEAN:
                if not isinstance(raw, bool):
                    raise SchemaMismatchError(
                        f"expected boolean, got {_type_name(raw)}", path=path
                    )
                return raw
            case FieldKind.STRING_ARRAY:
                if not isinstance(raw, list):
                    raise SchemaMismatchError(
                        f"expected array, got {_type_name(raw)}", path=path
                    )
                items = [_string(item, f"{path}[{i}]") for i, item in enumerate(raw)]
                if len(items) < f.min_items:
                    raise SchemaMismatchError(
                        f"expected at least {f.min_items} items, got {len(items)}",
                        path=path,
                    )
                return items
            case FieldKind.STRING_MAP:
                if not isinstance(raw, dict):
                    raise SchemaMismatchError(
                        f"expected object, got {_type_name(raw)}", path=path
                    )
                mapping = {
                    str(k): _string(v, f"{path}.{k}") for k, v in raw.items()
                }
                if len(mapping) < f.min_items:
                    raise SchemaMismatchError(
                        f"expected at least {f.min_items} entries, got {len(mapping)}",
                        path=path,
                    )
                return mapping
            case FieldKind.OBJECT:
                return self._object(raw, f.fields, path)
            case FieldKind.OBJECT_ARRAY:
                return self._object_array(raw, f.fields, f.min_items, path)
        raise SchemaMismatchError(f"unsupported field kind {f.kind!r}", path=path)


# --- Leaf coercions ---


def _type_name(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, dict):
        return "object"
    if isinstance(value, list):
        return "array"
    if isinstance(value, int | float):
        return "number"
    return type(value).__name__


def _copy_default(default: Any) -> Any:
    # Defaults are shared across calls; hand out fresh containers
    if isinstance(default, list):
        return list(default)
    if isinstance(default, dict):
        return dict(default)
    return default


def _string(raw: Any, path: str) -> str:
    if not isinstance(raw, str):
        raise SchemaMismatchError(f"expected string, got {_type_name(raw)}", path=path)
    text = raw.strip()
    if not text:
        raise SchemaMismatchError("expected non-empty string", path=path)
    return text


def _enum(raw: Any, f: Field, path: str) -> str:
    text = _string(raw, path)
    lowered = text.lower()
    for choice in f.choices:
        if choice.lower() == lowered:
            return choice
    if f.fallback_choice is not None:
        return f.fallback_choice
    raise SchemaMismatchError(
        f"{text!r} is not one of {', '.join(f.choices)}", path=path
    )


def _number(raw: Any, f: Field, path: str) -> int | float:
    if isinstance(raw, bool):
        raise SchemaMismatchError("expected number, got boolean", path=path)
    if isinstance(raw, str):
        text = raw.strip()
        if not _NUMERIC.match(text):
            raise SchemaMismatchError(f"{raw!r} is not numeric", path=path)
        value: int | float = float(text)
    elif isinstance(raw, int | float):
        value = raw
    else:
        raise SchemaMismatchError(f"expected number, got {_type_name(raw)}", path=path)

    try:
        finite = math.isfinite(value)
    except OverflowError:
        finite = False
    if not finite:
        raise SchemaMismatchError(f"{raw!r} is not a finite number", path=path)

    if f.kind is FieldKind.INTEGER:
        if isinstance(value, float):
            if not value.is_integer():
                raise SchemaMismatchError(f"{raw!r} is not an integer", path=path)
            value = int(value)
    else:
        value = float(value)

    if f.minimum is not None and value < f.minimum:
        raise SchemaMismatchError(f"{value} is below minimum {f.minimum}", path=path)
    if f.maximum is not None and value > f.maximum:
        raise SchemaMismatchError(f"{value} is above maximum {f.maximum}", path=path)
    return value
