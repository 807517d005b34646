"""Configuration: one interned combination of property values of a cell type."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from archshape.state.properties import PropertySlot, StateDefinition


class Configuration:
    """
    Immutable tuple of property values, one per declared slot.

    Instances are created only by StateDefinition.freeze() and are interned:
    equal value tuples of one cell type are the same object, so equality and
    hashing are by identity.
    """

    __slots__ = ("_definition", "_values", "_meta")

    def __init__(self, definition: "StateDefinition", values: tuple, meta: int):
        self._definition = definition
        self._values = values
        self._meta = meta

    @property
    def definition(self) -> "StateDefinition":
        return self._definition

    @property
    def values(self) -> tuple:
        return self._values

    @property
    def meta(self) -> int:
        """Packed index in [0, 16)."""
        return self._meta

    def get(self, slot: "PropertySlot | str") -> Any:
        return self._values[self._definition.slot_index(slot)]

    def __getitem__(self, slot: "PropertySlot | str") -> Any:
        return self.get(slot)

    def with_value(self, slot: "PropertySlot | str", value: Any) -> "Configuration":
        """The interned configuration that differs from this one in one slot."""
        index = self._definition.slot_index(slot)
        values = list(self._values)
        values[index] = value
        return self._definition.configuration_for_values(tuple(values))

    def as_dict(self) -> dict[str, Any]:
        return {slot.name: value for slot, value in zip(self._definition.slots, self._values)}

    def __repr__(self) -> str:
        items = ", ".join(f"{k}={v!r}" for k, v in self.as_dict().items())
        return f"Configuration({self._definition.owner}: {items})"
