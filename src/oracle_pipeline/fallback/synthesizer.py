"""Local, schema-valid content synthesis for when the model path fails.

Each feature ships a `ContentPool` of pre-written variants and a recipe that
assembles a payload from it. The synthesizer never touches the network. Its
output is checked against the feature's contract, so a broken recipe shows up
as an `InvariantViolationError` rather than as a half-filled screen.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
import dataclasses
from datetime import datetime
import logging
import random
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from oracle_pipeline.core.exceptions import ConfigurationError, InvariantViolationError
from oracle_pipeline.validation import ResponseValidator

if TYPE_CHECKING:
    from oracle_pipeline.core.schema import SchemaContract
    from oracle_pipeline.core.types import JSONPayload

log = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True, slots=True)
class ContentPool:
    """Named slots of pre-written content variants for one feature."""

    feature: str
    slots: Mapping[str, Sequence[Any]]

    def __post_init__(self) -> None:
        if not self.slots:
            raise ConfigurationError(f"Content pool for '{self.feature}' is empty")
        frozen: dict[str, tuple[Any, ...]] = {}
        for name, variants in self.slots.items():
            values = tuple(variants)
            if not values:
                raise ConfigurationError(
                    f"Content pool for '{self.feature}' has empty slot '{name}'"
                )
            frozen[name] = values
        object.__setattr__(self, "slots", MappingProxyType(frozen))

    def variants(self, slot: str) -> tuple[Any, ...]:
        try:
            return self.slots[slot]  # type: ignore[return-value]
        except KeyError as e:
            raise ConfigurationError(
                f"Content pool for '{self.feature}' has no slot '{slot}'"
            ) from e


class Sampler:
    """Random selection over a `ContentPool`."""

    def __init__(self, rng: random.Random, pool: ContentPool) -> None:
        self.rng = rng
        self.pool = pool

    def pick(self, slot: str) -> Any:
        return self.rng.choice(self.pool.variants(slot))

    def pick_many(self, slot: str, k: int) -> list[Any]:
        """Pick up to ``k`` distinct variants, capped at the slot size."""
        variants = self.pool.variants(slot)
        return self.rng.sample(variants, min(k, len(variants)))

    def integer(self, low: int, high: int) -> int:
        return self.rng.randint(low, high)

    def chance(self, probability: float) -> bool:
        return self.rng.random() < probability


type Recipe = Callable[[Any, Sampler, datetime], JSONPayload]


class FallbackSynthesizer:
    """Produce a complete payload for a contract from its content pool."""

    def __init__(
        self, contract: SchemaContract, pool: ContentPool, recipe: Recipe
    ) -> None:
        self.contract = contract
        self.pool = pool
        self.recipe = recipe
        self._validator = ResponseValidator(contract)

    def synthesize(
        self, request: Any, *, now: datetime, seed: int | str | None = None
    ) -> JSONPayload:
        """Build a payload for ``request``.

        With a seed, the same (seed, contract, request) always yields the same
        payload. Without one, true randomness is used.

        Raises:
            InvariantViolationError: If the recipe output breaks the contract.
        """
        if seed is None:
            rng = random.Random()
        else:
            rng = random.Random(f"{seed}:{self.contract.name}:{request!r}")
        payload = self.recipe(request, Sampler(rng, self.pool), now)

        checked = self._validator.check(payload)
        if not checked.ok:
            raise InvariantViolationError(
                f"Fallback for '{self.contract.name}' violates its contract: "
                f"{checked.error}",
                stage_name="fallback",
            )
        log.debug("Synthesized fallback for '%s'", self.contract.name)
        return checked.value
