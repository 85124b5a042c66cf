"""
Memory Document
Arena-backed layered document used by the in-memory host

Layers live in a flat table keyed by id. Folders hold ordered child id lists
(index 0 is the topmost layer) and every layer keeps its parent id, so the
tree never contains object cycles.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

import numpy as np

from core.data_structures import LayerKind, LayerNode, RGBColor
from core.errors import HostError, LayerNotFoundError

Rect = Tuple[int, int, int, int]  # x, y, width, height


@dataclass
class LayerRecord:
    """Mutable storage for one layer"""
    layer_id: int
    name: str
    kind: LayerKind
    visible: bool = True
    parent_id: Optional[int] = None
    child_ids: List[int] = field(default_factory=list)
    fill_color: Optional[RGBColor] = None
    pixels: Optional[np.ndarray] = None  # H x W x 4, uint8
    mask: Optional[np.ndarray] = None  # H x W, uint8
    mask_enabled: bool = False
    clipped: bool = False

    @property
    def has_mask(self) -> bool:
        return self.mask is not None and self.mask_enabled

    def to_node(self) -> LayerNode:
        return LayerNode(
            layer_id=self.layer_id,
            name=self.name,
            kind=self.kind,
            visible=self.visible,
            has_mask=self.has_mask,
            child_ids=tuple(self.child_ids),
            parent_id=self.parent_id,
        )


class MemoryDocument:
    """A layered document held entirely in memory."""

    def __init__(self, width: int = 64, height: int = 64, name: str = "Untitled",
                 icc_profile: Optional[bytes] = None):
        if width <= 0 or height <= 0:
            raise ValueError(f"Invalid canvas size: {width}x{height}")
        self.width = width
        self.height = height
        self.name = name
        self.icc_profile = icc_profile
        self.layers: Dict[int, LayerRecord] = {}
        self.root_ids: List[int] = []
        self._next_id = 1

    # ------------------------------------------------------------------ #
    # Lookup
    # ------------------------------------------------------------------ #
    def get(self, layer_id: int) -> LayerRecord:
        record = self.layers.get(layer_id)
        if record is None:
            raise LayerNotFoundError(layer_id)
        return record

    def __contains__(self, layer_id: int) -> bool:
        return layer_id in self.layers

    def siblings(self, layer_id: int) -> List[int]:
        """Return the (live) child list that contains the layer."""
        record = self.get(layer_id)
        if record.parent_id is None:
            return self.root_ids
        return self.get(record.parent_id).child_ids

    def walk(self, ids: Optional[Sequence[int]] = None) -> Iterator[LayerRecord]:
        for layer_id in list(self.root_ids if ids is None else ids):
            record = self.get(layer_id)
            yield record
            if record.child_ids:
                yield from self.walk(record.child_ids)

    def find(self, name: str) -> LayerRecord:
        """Return the first layer with the given name, in pre-order."""
        for record in self.walk():
            if record.name == name:
                return record
        raise KeyError(name)

    def layer_below(self, layer_id: int) -> Optional[LayerRecord]:
        stack = self.siblings(layer_id)
        index = stack.index(layer_id)
        if index + 1 < len(stack):
            return self.get(stack[index + 1])
        return None

    def is_descendant(self, layer_id: int, ancestor_id: int) -> bool:
        parent_id = self.get(layer_id).parent_id
        while parent_id is not None:
            if parent_id == ancestor_id:
                return True
            parent_id = self.get(parent_id).parent_id
        return False

    # ------------------------------------------------------------------ #
    # Construction
    # ------------------------------------------------------------------ #
    def _allocate_id(self) -> int:
        layer_id = self._next_id
        self._next_id += 1
        return layer_id

    def add_layer(self, name: str, kind: LayerKind = LayerKind.PIXEL,
                  parent_id: Optional[int] = None, index: Optional[int] = None,
                  **attributes) -> LayerRecord:
        """
        Create a layer and insert it into the tree

        Args:
            name: Layer name
            kind: Layer type
            parent_id: Folder to insert into (None for the top level)
            index: Position in the stack (None appends at the bottom)
            **attributes: Extra LayerRecord fields

        Returns:
            The new layer record
        """
        if parent_id is not None and self.get(parent_id).kind != LayerKind.FOLDER:
            raise HostError(f"Layer {parent_id} is not a folder")
        record = LayerRecord(layer_id=self._allocate_id(), name=name, kind=kind, **attributes)
        self.layers[record.layer_id] = record
        self.insert(record.layer_id, parent_id, index)
        return record

    def add_folder(self, name: str, parent_id: Optional[int] = None, **attributes) -> LayerRecord:
        return self.add_layer(name, LayerKind.FOLDER, parent_id=parent_id, **attributes)

    def add_pixel_layer(self, name: str, color: Tuple[int, int, int] = (0, 0, 0),
                        rect: Optional[Rect] = None, parent_id: Optional[int] = None,
                        **attributes) -> LayerRecord:
        """Add a pixel layer painted with a solid color inside rect (whole canvas by default)."""
        pixels = np.zeros((self.height, self.width, 4), dtype=np.uint8)
        x, y, w, h = rect or (0, 0, self.width, self.height)
        pixels[y:y + h, x:x + w, :3] = color
        pixels[y:y + h, x:x + w, 3] = 255
        return self.add_layer(name, LayerKind.PIXEL, parent_id=parent_id, pixels=pixels, **attributes)

    def add_fill_layer(self, name: str, color: RGBColor, parent_id: Optional[int] = None,
                       **attributes) -> LayerRecord:
        return self.add_layer(name, LayerKind.FILL, parent_id=parent_id, fill_color=color, **attributes)

    def set_rect_mask(self, layer_id: int, rect: Rect, enabled: bool = True):
        """Give a layer a mask revealing only rect."""
        mask = np.zeros((self.height, self.width), dtype=np.uint8)
        x, y, w, h = rect
        mask[y:y + h, x:x + w] = 255
        record = self.get(layer_id)
        record.mask = mask
        record.mask_enabled = enabled

    # ------------------------------------------------------------------ #
    # Structure edits
    # ------------------------------------------------------------------ #
    def insert(self, layer_id: int, parent_id: Optional[int], index: Optional[int] = None):
        record = self.get(layer_id)
        stack = self.root_ids if parent_id is None else self.get(parent_id).child_ids
        if index is None or index >= len(stack):
            stack.append(layer_id)
        else:
            stack.insert(max(0, index), layer_id)
        record.parent_id = parent_id

    def detach(self, layer_id: int):
        self.siblings(layer_id).remove(layer_id)
        self.get(layer_id).parent_id = None

    def remove(self, layer_id: int):
        """Delete a layer and everything below it."""
        record = self.get(layer_id)
        for child_id in list(record.child_ids):
            self.remove(child_id)
        self.siblings(layer_id).remove(layer_id)
        del self.layers[layer_id]

    def clone(self, layer_id: int, parent_id: Optional[int], index: Optional[int]) -> LayerRecord:
        """Deep-copy a layer (and its children) under new ids."""
        source = self.get(layer_id)
        record = copy.deepcopy(source)
        record.layer_id = self._allocate_id()
        record.child_ids = []
        self.layers[record.layer_id] = record
        self.insert(record.layer_id, parent_id, index)
        for child_id in source.child_ids:
            self.clone(child_id, record.layer_id, None)
        return record
