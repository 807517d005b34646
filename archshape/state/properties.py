"""
Property slots and per-cell-type state definition.

A cell type declares up to four discrete property slots. The values of a slot
are read through a PropertySource capability; the host owns the slots and the
core never mutates them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Protocol, Sequence, runtime_checkable

from archshape import log
from archshape.exceptions import (
    CombinationLimitExceeded,
    StateDefinitionError,
    TooManyProperties,
)
from archshape.settings import get_settings
from archshape.state.configuration import Configuration

MAX_PROPERTIES = 4
MAX_COMBINATIONS = 16


@dataclass(frozen=True)
class PropertySlot:
    """Named discrete axis with an ordered, non-empty set of values."""

    name: str
    values: tuple

    def __post_init__(self):
        values = tuple(self.values)
        if not values:
            raise ValueError(f"Property slot '{self.name}' has no values")
        if len(set(values)) != len(values):
            raise ValueError(f"Property slot '{self.name}' has duplicate values")
        object.__setattr__(self, "values", values)

    def __len__(self) -> int:
        return len(self.values)


@runtime_checkable
class PropertySource(Protocol):
    """Read-only access to host-managed property slots."""

    def slots(self) -> Sequence[PropertySlot]:
        ...

    def values_of(self, slot: PropertySlot) -> Sequence[Any]:
        ...


class StaticPropertySource:
    """PropertySource over a fixed list of slots."""

    def __init__(self, slots: Sequence[PropertySlot] = ()):
        self._slots = tuple(slots)

    def slots(self) -> Sequence[PropertySlot]:
        return self._slots

    def values_of(self, slot: PropertySlot) -> Sequence[Any]:
        return slot.values


class StateDefinition:
    """
    Property slots of one cell type and its interned configurations.

    Lifecycle: define_property() calls, then freeze(). Validation happens once
    in freeze(); definition errors are fatal for the cell type.
    """

    def __init__(self, owner: str, source: Optional[PropertySource] = None):
        self.owner = owner
        self._source = source
        self._slots: list[PropertySlot] = []
        self._values: list[tuple] = []
        self._by_values: Optional[dict[tuple, Configuration]] = None
        self._ordered: tuple[Configuration, ...] = ()

    # --- Definition ---

    @property
    def slots(self) -> tuple[PropertySlot, ...]:
        return tuple(self._slots)

    @property
    def is_frozen(self) -> bool:
        return self._by_values is not None

    def define_property(self, slot: PropertySlot) -> None:
        debug_state = get_settings().debug_state
        if debug_state:
            log.info(f"StateDefinition.define_property: {slot} to {self.owner}")
        if self.is_frozen:
            raise StateDefinitionError(
                f"Cell type {self.owner} is already frozen, cannot add '{slot.name}'"
            )
        if len(self._slots) >= MAX_PROPERTIES:
            raise TooManyProperties(f"Cell type {self.owner} has too many properties")
        if any(s.name == slot.name for s in self._slots):
            raise StateDefinitionError(
                f"Cell type {self.owner} already has a property named '{slot.name}'"
            )
        values = tuple(self._source.values_of(slot)) if self._source is not None else slot.values
        if not values:
            raise StateDefinitionError(f"Property '{slot.name}' of {self.owner} has no values")
        self._slots.append(slot)
        self._values.append(values)
        if debug_state:
            log.info(
                f"StateDefinition.define_property: {self.owner} now has {len(self._slots)} properties"
            )

    def define_from_source(self, source: PropertySource) -> None:
        """Declare every slot the source exposes, in order."""
        for slot in source.slots():
            self.define_property(slot)

    @property
    def combination_count(self) -> int:
        n = 1
        for values in self._values:
            n *= len(values)
        return n

    def validate_combination_limit(self) -> int:
        n = self.combination_count
        if get_settings().debug_state:
            self.dump_properties()
        if n > MAX_COMBINATIONS:
            raise CombinationLimitExceeded(
                f"Cell type {self.owner} has {n} combinations of property values "
                f"({MAX_COMBINATIONS} allowed)"
            )
        return n

    def dump_properties(self) -> None:
        log.info(f"StateDefinition: Properties of {self.owner}:")
        for i, slot in enumerate(self._slots):
            log.info(f"{i}: {slot.name}")
            for j, value in enumerate(self._values[i]):
                log.info(f"   {j}: {value!r}")

    def freeze(self) -> None:
        """Validate and intern every configuration."""
        if self.is_frozen:
            return
        count = self.validate_combination_limit()
        by_values: dict[tuple, Configuration] = {}
        ordered = []
        for meta in range(count):
            values = self._values_for_meta(meta)
            config = Configuration(self, values, meta)
            by_values[values] = config
            ordered.append(config)
        self._ordered = tuple(ordered)
        self._by_values = by_values

    # --- Lookup ---

    def slot_index(self, slot: PropertySlot | str) -> int:
        name = slot.name if isinstance(slot, PropertySlot) else slot
        for i, s in enumerate(self._slots):
            if s.name == name:
                return i
        raise ValueError(f"Cell type {self.owner} has no property '{name}'")

    def values_of(self, slot: PropertySlot | str) -> tuple:
        return self._values[self.slot_index(slot)]

    def _require_frozen(self) -> dict[tuple, Configuration]:
        if self._by_values is None:
            raise StateDefinitionError(f"Cell type {self.owner} is not frozen yet")
        return self._by_values

    @property
    def configurations(self) -> tuple[Configuration, ...]:
        self._require_frozen()
        return self._ordered

    @property
    def default(self) -> Configuration:
        return self._require_frozen()[tuple(values[0] for values in self._values)]

    def configuration_for_values(self, values: tuple) -> Configuration:
        table = self._require_frozen()
        config = table.get(tuple(values))
        if config is None:
            raise ValueError(f"Cell type {self.owner} has no configuration {values!r}")
        return config

    def configuration_for(self, values: Mapping[str, Any]) -> Configuration:
        """Configuration from slot-name → value; omitted slots take their first value."""
        unknown = set(values) - {s.name for s in self._slots}
        if unknown:
            raise ValueError(f"Cell type {self.owner} has no properties {sorted(unknown)}")
        return self.configuration_for_values(
            tuple(values.get(slot.name, slot_values[0])
                  for slot, slot_values in zip(self._slots, self._values))
        )

    def configuration(self, **values: Any) -> Configuration:
        return self.configuration_for(values)

    def from_meta(self, meta: int) -> Configuration:
        self._require_frozen()
        if not 0 <= meta < len(self._ordered):
            raise ValueError(f"Meta {meta} out of range for cell type {self.owner}")
        return self._ordered[meta]

    def _values_for_meta(self, meta: int) -> tuple:
        # Mixed radix, first slot least significant
        result = []
        for values in self._values:
            meta, index = divmod(meta, len(values))
            result.append(values[index])
        return tuple(result)
