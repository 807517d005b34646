"""
CellType: a placeable kind of cell with a shape model and an orientation.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional

from archshape import log
from archshape.geombase import AffineTransform3, Direction
from archshape.orientation import OrientationHandler, orientation_handler
from archshape.state import Configuration, PropertySlot, PropertySource, StateDefinition

from .model_spec import ModelSpec
from .placement import PlacementContext


class CellType:
    """
    A kind of cell.

    Construction declares the orientation slots, then the extra slots, then
    whatever a subclass adds in define_properties(), and freezes the
    configuration set. Definition errors propagate out of the constructor.

    Args:
        name: Unique cell type name.
        orientation: Orientation kind ("fixed", "facing", "facing_half",
            "axis") or a handler instance.
        slots: Extra property slots after the orientation ones.
        model: Model drawn for every configuration unless overridden.
        property_source: Read-only capability giving the values of each slot.
    """

    def __init__(
        self,
        name: str,
        orientation: "str | OrientationHandler | None" = None,
        slots: Iterable[PropertySlot] = (),
        model: Optional[ModelSpec] = None,
        property_source: Optional[PropertySource] = None,
    ):
        self._name = name
        self._orientation = orientation_handler(orientation)
        self._state = StateDefinition(name, property_source)
        self._orientation.define_properties(self._state)
        for slot in slots:
            self._state.define_property(slot)
        self.define_properties(self._state)
        self._state.freeze()

        self._model = model if model is not None else ModelSpec("cube")
        self._overrides: dict[Configuration, ModelSpec] = {}

    def define_properties(self, definition: StateDefinition) -> None:
        """Hook for subclasses declaring additional slots."""

    @property
    def name(self) -> str:
        return self._name

    @property
    def orientation(self) -> OrientationHandler:
        return self._orientation

    @property
    def state(self) -> StateDefinition:
        return self._state

    @property
    def default_configuration(self) -> Configuration:
        return self._state.default

    def configuration(self, **values: Any) -> Configuration:
        return self._state.configuration(**values)

    # --- Placement ---

    def resolve_placement(self, facing: Direction, hit_point=(0.0, 0.0, 0.0), placer: Any = None) -> Configuration:
        return self._orientation.resolve_placement(
            facing, hit_point, self.default_configuration, placer
        )

    def place(self, context: PlacementContext) -> Configuration:
        return self.resolve_placement(context.facing, context.hit_point, context.placer)

    # --- Model ---

    def model_spec(self, configuration: Optional[Configuration] = None) -> ModelSpec:
        if configuration is not None:
            override = self._overrides.get(configuration)
            if override is not None:
                return override
        return self._model

    def set_model(
        self,
        mesh_name: str,
        *texture_names: str,
        origin=(0.0, 0.0, 0.0),
        configuration: Optional[Configuration] = None,
    ) -> ModelSpec:
        """
        Replace the model of the cell type, or of one configuration.

        Shapes cached before the change are not invalidated here.
        """
        spec = ModelSpec(mesh_name, origin, texture_names)
        if configuration is None:
            self._model = spec
        else:
            if configuration.definition is not self._state:
                raise ValueError(f"{configuration!r} does not belong to cell type {self._name}")
            self._overrides[configuration] = spec
        log.debug(f"[CellType] {self._name}: model {spec.mesh_name}")
        return spec

    # --- Transforms ---

    def local_transform(self, configuration: Configuration) -> AffineTransform3:
        """Transform of the model inside a cell at the grid origin."""
        return self._orientation.transform_for(configuration, self.model_spec(configuration).local_origin)

    def global_transform(self, configuration: Configuration, position) -> AffineTransform3:
        return AffineTransform3.from_translation(position) * self.local_transform(configuration)

    def item_transformation(self) -> AffineTransform3:
        """Transform used to draw the cell as an inventory item: default configuration at the origin."""
        return self.local_transform(self.default_configuration)

    def __repr__(self) -> str:
        return f"CellType({self._name!r}, {self._orientation.kind})"
