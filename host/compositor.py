"""
Compositor
Flattens the visible layers of a MemoryDocument into a Pillow image

Supports normal "over" blending, layer masks, solid fills, folders (composited
as isolated groups) and clipping masks. Blend modes and opacity are not
modelled.
"""

from typing import List, Optional

import numpy as np
from PIL import Image

from core.data_structures import LayerKind

from .document import LayerRecord, MemoryDocument


def _layer_premultiplied(document: MemoryDocument, record: LayerRecord) -> np.ndarray:
    """Return the layer content as premultiplied float RGBA (0..1)."""
    shape = (document.height, document.width, 4)
    if record.kind == LayerKind.FOLDER:
        layer = _composite_stack(document, record.child_ids)
    elif record.kind == LayerKind.FILL and record.fill_color is not None:
        layer = np.ones(shape, dtype=np.float32)
        layer[..., :3] = np.array(record.fill_color.as_tuple(), dtype=np.float32) / 255.0
    elif record.pixels is not None:
        straight = record.pixels.astype(np.float32) / 255.0
        layer = straight.copy()
        layer[..., :3] *= straight[..., 3:4]
    else:
        layer = np.zeros(shape, dtype=np.float32)

    if record.has_mask:
        layer = layer * (record.mask.astype(np.float32) / 255.0)[..., None]
    return layer


def _composite_stack(document: MemoryDocument, stack: List[int]) -> np.ndarray:
    canvas = np.zeros((document.height, document.width, 4), dtype=np.float32)
    base_alpha: Optional[np.ndarray] = None

    # Bottom of the stack first
    for layer_id in reversed(stack):
        record = document.get(layer_id)
        if record.clipped:
            if base_alpha is None or not record.visible:
                continue
            layer = _layer_premultiplied(document, record) * base_alpha[..., None]
        else:
            if not record.visible:
                base_alpha = None
                continue
            layer = _layer_premultiplied(document, record)
            base_alpha = layer[..., 3].copy()

        canvas = layer + canvas * (1.0 - layer[..., 3:4])
    return canvas


def composite(document: MemoryDocument) -> Image.Image:
    """Render the document's visible content to an RGBA image."""
    premultiplied = _composite_stack(document, document.root_ids)
    alpha = premultiplied[..., 3:4]
    rgb = np.divide(
        premultiplied[..., :3], alpha,
        out=np.zeros_like(premultiplied[..., :3]), where=alpha > 0,
    )
    straight = np.concatenate([rgb, alpha], axis=2)
    data = np.clip(np.round(straight * 255.0), 0, 255).astype(np.uint8)
    return Image.fromarray(data)
