"""
Render targets and custom renderers.

A custom renderer draws a cell into a RenderTarget. BakedRenderTarget is the
sink that turns the drawn polygons into a RenderFragment of baked quads.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional, Protocol, runtime_checkable

from archshape.geombase import AffineTransform3, Direction
from archshape.render.quad import BakedQuad

if TYPE_CHECKING:
    from archshape.cells import CellType
    from archshape.models import ModelRegistry
    from archshape.state import Configuration


@runtime_checkable
class RenderTarget(Protocol):
    def add_polygon(self, positions, uvs, normal, tint_index: int) -> None:
        """Add one convex polygon of 3 or 4 vertices in cell-local space."""
        ...


class RenderFragment:
    """Baked quads of one render pass, grouped by cull face (None = general quads)."""

    def __init__(self, quads_by_face: dict[Optional[Direction], list[BakedQuad]], sprite: Any = None):
        self._quads = {face: tuple(quads) for face, quads in quads_by_face.items()}
        self.sprite = sprite

    def quads(self, part: Optional[Direction] = None) -> list[BakedQuad]:
        return list(self._quads.get(part, ()))

    def all_quads(self) -> list[BakedQuad]:
        return [quad for quads in self._quads.values() for quad in quads]

    def __len__(self) -> int:
        return sum(len(quads) for quads in self._quads.values())

    def __repr__(self) -> str:
        return f"RenderFragment(quads={len(self)})"


class BakedRenderTarget:
    """Collects drawn polygons as baked quads for the cell at position."""

    def __init__(self, position, sprite: Any):
        self.position = tuple(int(c) for c in position)
        self.sprite = sprite
        self._quads: dict[Optional[Direction], list[BakedQuad]] = {}

    def add_polygon(self, positions, uvs, normal, tint_index: int = 0) -> None:
        quad = BakedQuad.from_polygon(positions, uvs, normal, tint_index, self.sprite)
        self._quads.setdefault(quad.cull_face, []).append(quad)

    def fragment(self) -> RenderFragment:
        return RenderFragment(self._quads, self.sprite)


@runtime_checkable
class CustomRenderer(Protocol):
    def render_cell(
        self,
        cell_type: "CellType",
        configuration: "Configuration",
        target: RenderTarget,
        transform: AffineTransform3,
        primary: bool,
        secondary: bool,
    ) -> None:
        ...


class ModelRenderer:
    """
    Draws the mesh model of a cell.

    The primary pass draws faces with texture index 0, the secondary pass
    draws all other faces.
    """

    def __init__(self, registry: Optional["ModelRegistry"] = None):
        if registry is None:
            from archshape.models import default_registry
            registry = default_registry()
        self._registry = registry

    def render_cell(self, cell_type, configuration, target, transform, primary=True, secondary=True) -> None:
        model = self._registry.get(cell_type.model_spec(configuration).mesh_name)
        model.render(
            target,
            transform,
            lambda face: (primary and face.texture == 0) or (secondary and face.texture != 0),
        )
