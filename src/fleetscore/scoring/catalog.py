# fleetscore/scoring/catalog.py

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Protocol, Tuple

from fleetscore.data.schemas.signal_definition import (
    Direction,
    SignalDefinitionDTO,
)
from fleetscore.errors import CatalogError

logger = logging.getLogger(__name__)


class SignalDefinitionSource(Protocol):
    def load_definitions(self) -> List[SignalDefinitionDTO]: ...


class SignalCatalog:
    """
    The ordered, validated signal definitions of one run.

    Immutable once built. `sum_weights` is computed exactly once, from the
    included Number signals that have a High or Low direction.
    """

    def __init__(self, definitions: Iterable[SignalDefinitionDTO]):
        kept: List[SignalDefinitionDTO] = []
        seen: Dict[str, SignalDefinitionDTO] = {}

        for definition in definitions:
            if not definition.name or not definition.name.strip():
                continue
            if definition.name in seen:
                raise CatalogError(f"Signal '{definition.name}' is defined twice")
            self._validate(definition)
            seen[definition.name] = definition
            kept.append(definition)

        self._definitions: Tuple[SignalDefinitionDTO, ...] = tuple(kept)
        self._by_name = seen
        self._sum_weights = sum(d.weight for d in kept if d.is_scored)

        if self._sum_weights <= 0:
            raise CatalogError(
                "The included directional Number signals carry no weight; "
                "no account can be scored."
            )

        logger.info("Using %d signals (sum of weights %.4g)", len(kept), self._sum_weights)

    @classmethod
    def load(cls, source: SignalDefinitionSource) -> "SignalCatalog":
        return cls(source.load_definitions())

    @staticmethod
    def _validate(d: SignalDefinitionDTO) -> None:
        if d.weight < 0:
            raise CatalogError(f"Signal '{d.name}' has a negative weight ({d.weight})")
        if d.is_number and d.direction in (Direction.HIGH, Direction.LOW):
            if d.min_value is None or d.max_value is None:
                raise CatalogError(f"Signal '{d.name}' needs both min and max for direction {d.direction.value}")
            if d.min_value >= d.max_value:
                raise CatalogError(
                    f"Signal '{d.name}': min ({d.min_value}) must be below max ({d.max_value})"
                )

    @property
    def definitions(self) -> Tuple[SignalDefinitionDTO, ...]:
        return self._definitions

    @property
    def included(self) -> Tuple[SignalDefinitionDTO, ...]:
        return tuple(d for d in self._definitions if d.include_in_report)

    @property
    def names(self) -> List[str]:
        return [d.name for d in self._definitions]

    @property
    def sum_weights(self) -> float:
        return self._sum_weights

    def get(self, name: str) -> Optional[SignalDefinitionDTO]:
        return self._by_name.get(name)

    def __len__(self) -> int:
        return len(self._definitions)

    def __iter__(self):
        return iter(self._definitions)
