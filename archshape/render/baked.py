"""
Baked geometry: up to two render fragments composed into one renderable unit.
"""

from __future__ import annotations

from typing import Any, Callable, Optional

from archshape import log
from archshape.render.quad import BakedQuad
from archshape.render.target import BakedRenderTarget, CustomRenderer, RenderFragment

PartPredicate = Callable[[Any], bool]

MAX_FRAGMENTS = 2


def always(part: Any) -> bool:
    return True


class BakedGeometry:
    """
    Composite of (predicate, fragment) pairs.

    A quad query is answered by the first fragment whose predicate accepts
    the part; if none does, the answer is an empty list.
    """

    ambient_occlusion = True
    is_3d = True
    is_builtin_renderer = False

    def __init__(self, entries: tuple[tuple[PartPredicate, RenderFragment], ...] = ()):
        self._entries = tuple(entries)

    @property
    def fragments(self) -> tuple[RenderFragment, ...]:
        return tuple(fragment for _, fragment in self._entries)

    @property
    def particle_sprite(self) -> Any:
        """Sprite of the first fragment, used for break particles."""
        if not self._entries:
            return None
        return self._entries[0][1].sprite

    def quads(self, part: Any = None) -> list[BakedQuad]:
        for predicate, fragment in self._entries:
            if predicate(part):
                return fragment.quads(part)
        return []

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"BakedGeometry(fragments={len(self._entries)})"


class BakedGeometryBuilder:
    def __init__(self):
        self._entries: list[tuple[PartPredicate, RenderFragment]] = []

    def add(self, fragment: RenderFragment, predicate: PartPredicate = always) -> "BakedGeometryBuilder":
        if len(self._entries) >= MAX_FRAGMENTS:
            raise ValueError(f"BakedGeometry holds at most {MAX_FRAGMENTS} fragments")
        self._entries.append((predicate, fragment))
        return self

    def build(self) -> BakedGeometry:
        return BakedGeometry(tuple(self._entries))


def bake_cell(
    renderer: CustomRenderer,
    cell_type,
    configuration,
    position,
    sprite_for: Callable[[Any, bool], Optional[Any]],
) -> BakedGeometry:
    """
    Render a cell in two passes and compose the result.

    Args:
        renderer: Custom renderer of the cell type.
        cell_type: Cell type being drawn.
        configuration: Configuration of the cell.
        position: Integer grid position, passed to the render targets.
        sprite_for: (position, primary) -> sprite, or None to skip that pass.
    """
    transform = cell_type.local_transform(configuration)
    builder = BakedGeometryBuilder()

    for primary in (True, False):
        sprite = sprite_for(position, primary)
        if sprite is None:
            continue
        target = BakedRenderTarget(position, sprite)
        renderer.render_cell(cell_type, configuration, target, transform, primary, not primary)
        builder.add(target.fragment())

    geometry = builder.build()
    if log.is_debug_enabled():
        log.debug(f"[bake_cell] {cell_type.name} at {tuple(position)}: {len(geometry)} fragments")
    return geometry
