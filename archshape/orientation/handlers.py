"""
Orientation handlers.

A handler declares the property slots it needs, picks the initial
configuration when a cell is placed, and maps a configuration to the
local-to-global transform of the cell. Every variant is a pair of pure
functions; the variant is chosen once, when the cell type is constructed.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional, Protocol

import numpy as np

from archshape.geombase import HORIZONTALS, AffineTransform3, Direction, cell_turn
from archshape.state import Configuration, PropertySlot

FACING = PropertySlot("facing", ("north", "east", "south", "west"))
HALF = PropertySlot("half", ("bottom", "top"))
AXIS = PropertySlot("axis", ("y", "x", "z"))


class PropertyRegistrar(Protocol):
    def define_property(self, slot: PropertySlot) -> None:
        ...


class OrientationHandler(ABC):
    """Placement → configuration and configuration → transform."""

    kind: str = ""

    @abstractmethod
    def define_properties(self, registrar: PropertyRegistrar) -> None:
        """Declare the property slots this handler needs."""

    @abstractmethod
    def resolve_placement(
        self,
        facing: Direction,
        hit_point,
        base: Configuration,
        placer: Any = None,
    ) -> Configuration:
        """
        Initial configuration of a newly placed cell.

        Args:
            facing: Direction the placer is looking.
            hit_point: Hit offset within the face, each axis in [-0.5, 0.5].
            base: Default configuration of the cell type.
            placer: Opaque placing entity.
        """

    @abstractmethod
    def transform_for(self, configuration: Configuration, origin) -> AffineTransform3:
        """Local-to-global transform of a cell whose local frame sits at origin."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


def _clamped_hit(hit_point) -> np.ndarray:
    return np.clip(np.asarray(hit_point, dtype=float).reshape(3), -0.5, 0.5)


def _horizontal_facing(facing: Direction, hit_point) -> Optional[Direction]:
    """
    Horizontal facing for placement.

    A vertical facing is resolved from the dominant x/z component of the hit
    offset; a centred hit gives None.
    """
    if facing.is_horizontal:
        return facing
    hx, _, hz = _clamped_hit(hit_point)
    if abs(hx) > abs(hz):
        return Direction.EAST if hx > 0 else Direction.WEST
    if abs(hz) > abs(hx):
        return Direction.SOUTH if hz > 0 else Direction.NORTH
    return None


class FixedOrientation(OrientationHandler):
    """Cells that are never rotated."""

    kind = "fixed"

    def define_properties(self, registrar: PropertyRegistrar) -> None:
        pass

    def resolve_placement(self, facing, hit_point, base, placer=None) -> Configuration:
        return base

    def transform_for(self, configuration: Configuration, origin) -> AffineTransform3:
        return AffineTransform3.from_translation(origin)


class FacingDependent(OrientationHandler):
    """
    Four horizontal facings. Meshes are authored facing north; every further
    value of the facing slot is one more clockwise quarter turn seen from above.
    """

    kind = "facing"

    def __init__(self, slot: PropertySlot = FACING):
        if len(slot.values) != len(HORIZONTALS):
            raise ValueError(f"Facing slot '{slot.name}' needs {len(HORIZONTALS)} values")
        self.slot = slot

    def define_properties(self, registrar: PropertyRegistrar) -> None:
        registrar.define_property(self.slot)

    def resolve_placement(self, facing, hit_point, base, placer=None) -> Configuration:
        horizontal = _horizontal_facing(facing, hit_point)
        if horizontal is None:
            return base
        return base.with_value(self.slot, self.slot.values[HORIZONTALS.index(horizontal)])

    def turns(self, configuration: Configuration) -> int:
        return self.slot.values.index(configuration.get(self.slot))

    def transform_for(self, configuration: Configuration, origin) -> AffineTransform3:
        # Clockwise from above is a negative rotation about +Y
        turn = cell_turn("y", -self.turns(configuration))
        return AffineTransform3.from_translation(origin) * turn


class FacingAndHalf(FacingDependent):
    """Facing plus a bottom/top half; top cells are flipped upside down."""

    kind = "facing_half"

    def __init__(self, slot: PropertySlot = FACING, half: PropertySlot = HALF):
        super().__init__(slot)
        self.half = half

    def define_properties(self, registrar: PropertyRegistrar) -> None:
        registrar.define_property(self.slot)
        registrar.define_property(self.half)

    def resolve_placement(self, facing, hit_point, base, placer=None) -> Configuration:
        config = super().resolve_placement(facing, hit_point, base, placer)
        if facing is Direction.UP:
            upper = True
        elif facing is Direction.DOWN:
            upper = False
        else:
            upper = _clamped_hit(hit_point)[1] > 0
        bottom, top = self.half.values
        return config.with_value(self.half, top if upper else bottom)

    def transform_for(self, configuration: Configuration, origin) -> AffineTransform3:
        transform = super().transform_for(configuration, origin)
        if configuration.get(self.half) == self.half.values[1]:
            # Half turn about the facing axis (z for north) keeps the facing
            transform = transform * cell_turn("z", 2)
        return transform


class AxisOrientation(OrientationHandler):
    """Pillar-like cells aligned with the axis of the clicked face."""

    kind = "axis"

    _TURNS = {
        "y": None,
        "x": ("z", -1),
        "z": ("x", 1),
    }

    def __init__(self, slot: PropertySlot = AXIS):
        self.slot = slot

    def define_properties(self, registrar: PropertyRegistrar) -> None:
        registrar.define_property(self.slot)

    def resolve_placement(self, facing, hit_point, base, placer=None) -> Configuration:
        return base.with_value(self.slot, facing.axis)

    def transform_for(self, configuration: Configuration, origin) -> AffineTransform3:
        transform = AffineTransform3.from_translation(origin)
        turn = self._TURNS[configuration.get(self.slot)]
        if turn is not None:
            transform = transform * cell_turn(*turn)
        return transform


FIXED = FixedOrientation()

_HANDLERS: Dict[str, Callable[[], OrientationHandler]] = {
    FixedOrientation.kind: lambda: FIXED,
    FacingDependent.kind: FacingDependent,
    FacingAndHalf.kind: FacingAndHalf,
    AxisOrientation.kind: AxisOrientation,
}


def register_orientation(kind: str, factory: Callable[[], OrientationHandler]) -> None:
    """Make a new handler variant available by kind."""
    _HANDLERS[kind] = factory


def orientation_handler(kind: "str | OrientationHandler | None") -> OrientationHandler:
    """Resolve a handler instance from a kind name; None gives FIXED."""
    if kind is None:
        return FIXED
    if isinstance(kind, OrientationHandler):
        return kind
    try:
        factory = _HANDLERS[kind]
    except KeyError:
        raise ValueError(
            f"Unknown orientation kind '{kind}', expected one of {sorted(_HANDLERS)}"
        ) from None
    return factory()
