from .baked import MAX_FRAGMENTS, BakedGeometry, BakedGeometryBuilder, always, bake_cell
from .quad import BakedQuad
from .target import (
    BakedRenderTarget,
    CustomRenderer,
    ModelRenderer,
    RenderFragment,
    RenderTarget,
)

__all__ = [
    "MAX_FRAGMENTS",
    "BakedGeometry",
    "BakedGeometryBuilder",
    "BakedQuad",
    "BakedRenderTarget",
    "CustomRenderer",
    "ModelRenderer",
    "RenderFragment",
    "RenderTarget",
    "always",
    "bake_cell",
]
