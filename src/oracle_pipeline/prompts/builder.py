"""Prompt assembly for feature requests.

This module implements the pure function that turns a `PromptTemplate` and the
fields bound from a request into a `BuiltPrompt`. It enforces the binding
invariant: every placeholder in the template must be satisfied, otherwise a
`TemplateBindingError` is raised. That error is a caller defect and is never
routed to fallback content.
"""

from __future__ import annotations

from collections.abc import Mapping
import dataclasses
import logging
import string
from typing import TYPE_CHECKING, Any

from oracle_pipeline.core.exceptions import TemplateBindingError
from oracle_pipeline.core.types import BuiltPrompt, GenerationOptions, InlineImage

if TYPE_CHECKING:
    from oracle_pipeline.config import FrozenConfig
    from oracle_pipeline.core.schema import SchemaContract

log = logging.getLogger(__name__)

_FORMATTER = string.Formatter()

JSON_INSTRUCTION = "Respond ONLY with valid JSON shaped like:"


@dataclasses.dataclass(frozen=True, slots=True)
class PromptTemplate:
    """System and user message templates for one feature.

    Placeholders use `str.format` syntax (`{sign}`); literal braces must be
    doubled. Unset generation parameters fall back to configuration defaults.
    """

    name: str
    system: str
    user: str
    temperature: float | None = None
    model: str | None = None
    max_output_tokens: int | None = None
    vision: bool = False
    include_schema: bool = True

    def placeholders(self) -> tuple[str, ...]:
        """Distinct placeholder names in order of first appearance."""
        seen: dict[str, None] = {}
        for text in (self.system, self.user):
            for name in _placeholder_names(text, self.name):
                seen.setdefault(name, None)
        return tuple(seen)


def _placeholder_names(text: str, template_name: str) -> list[str]:
    names = []
    try:
        parsed = list(_FORMATTER.parse(text))
    except ValueError as e:
        raise TemplateBindingError(template_name, (f"malformed template: {e}",)) from e
    for _literal, field_name, _spec, _conversion in parsed:
        if field_name is None:
            continue
        root = field_name.split(".", 1)[0].split("[", 1)[0]
        if root == "" or root.isdigit():
            raise TemplateBindingError(
                template_name, (f"positional placeholder {{{field_name}}}",)
            )
        names.append(root)
    return names


class PromptBuilder:
    """Bind request fields into templates using configuration defaults."""

    def __init__(self, config: FrozenConfig) -> None:
        self._config = config

    def build(
        self,
        template: PromptTemplate,
        fields: Mapping[str, Any],
        *,
        contract: SchemaContract | None = None,
        image: InlineImage | None = None,
    ) -> BuiltPrompt:
        """Render a template into a `BuiltPrompt`.

        Args:
            template: Feature template.
            fields: Values for every placeholder in the template.
            contract: When given and the template includes the schema, the
                expected JSON shape is appended to the user message.
            image: Inline image for vision templates.

        Raises:
            TemplateBindingError: If placeholders are missing or positional,
                or a vision template has no image.
        """
        missing = tuple(n for n in template.placeholders() if n not in fields)
        if missing:
            raise TemplateBindingError(template.name, missing)
        if template.vision and image is None:
            raise TemplateBindingError(template.name, ("image",))

        try:
            system_message = template.system.format_map(fields)
            user_message = template.user.format_map(fields)
        except (AttributeError, IndexError, KeyError) as e:
            raise TemplateBindingError(template.name, (str(e),)) from e

        if template.include_schema and contract is not None:
            user_message = (
                f"{user_message.rstrip()}\n\n{JSON_INSTRUCTION}\n{contract.describe()}"
            )

        default_model = (
            self._config.vision_model if template.vision else self._config.model
        )
        options = GenerationOptions(
            model=template.model or default_model,
            temperature=(
                template.temperature
                if template.temperature is not None
                else self._config.temperature
            ),
            max_output_tokens=(
                template.max_output_tokens or self._config.max_output_tokens
            ),
            image=image if template.vision else None,
        )
        log.debug(
            "Built prompt '%s' for model %s (temperature=%s)",
            template.name,
            options.model,
            options.temperature,
        )
        return BuiltPrompt(system_message, user_message, options)
