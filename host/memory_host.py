"""
Memory Host
DocumentHost implementation backed by a MemoryDocument

Used by the command line, the GUI and the tests. Every primitive raises
HostError (or a subclass) on failure so the pipelines can treat this host
like any other.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator, List, Optional

from PIL import Image

from core.data_structures import ExportOptions, LayerKind, LayerNode, RGBColor
from core.errors import HostError, NoDocumentError
from core.host_interface import DocumentHost
from utils.color_sampling import mean_visible_color

from .compositor import composite
from .document import MemoryDocument
from .image_writer import write_image


class MemoryHost(DocumentHost):
    """Host holding at most one open MemoryDocument."""

    def __init__(self, document: Optional[MemoryDocument] = None):
        self._document = document
        self._lock = threading.RLock()
        self._modal_depth = 0
        self.command_history: List[str] = []

    # ------------------------------------------------------------------ #
    # Document management
    # ------------------------------------------------------------------ #
    @property
    def document(self) -> MemoryDocument:
        if self._document is None:
            raise NoDocumentError("No document is open.")
        return self._document

    def open_document(self, document: MemoryDocument):
        self._document = document

    def close_document(self):
        self._document = None

    def has_document(self) -> bool:
        return self._document is not None

    # ------------------------------------------------------------------ #
    # Reads
    # ------------------------------------------------------------------ #
    def root_ids(self) -> List[int]:
        return list(self.document.root_ids)

    def get_layer(self, layer_id: int) -> LayerNode:
        return self.document.get(layer_id).to_node()

    # ------------------------------------------------------------------ #
    # Mutations
    # ------------------------------------------------------------------ #
    def set_visible(self, layer_id: int, visible: bool) -> None:
        self.document.get(layer_id).visible = bool(visible)

    def set_mask_enabled(self, layer_id: int, enabled: bool) -> None:
        record = self.document.get(layer_id)
        if record.mask is None:
            if enabled:
                raise HostError(f"Layer \"{record.name}\" has no mask")
            return
        record.mask_enabled = bool(enabled)

    def set_name(self, layer_id: int, name: str) -> None:
        self.document.get(layer_id).name = name

    def create_fill_layer(self, color: RGBColor) -> int:
        record = self.document.add_fill_layer("Color Fill", color, index=0)
        return record.layer_id

    def delete_layer(self, layer_id: int) -> None:
        self.document.remove(layer_id)

    def duplicate_layer(self, layer_id: int, new_name: str = "") -> int:
        document = self.document
        source = document.get(layer_id)
        index = document.siblings(layer_id).index(layer_id)
        record = document.clone(layer_id, source.parent_id, index)
        record.name = new_name or f"{source.name} copy"
        return record.layer_id

    def move_below(self, layer_id: int, reference_id: int) -> None:
        document = self.document
        if layer_id == reference_id:
            raise HostError("Cannot move a layer relative to itself")
        reference = document.get(reference_id)
        document.get(layer_id)
        if document.is_descendant(reference_id, layer_id):
            raise HostError("Cannot move a folder into itself")
        document.detach(layer_id)
        stack = document.siblings(reference_id)
        document.insert(layer_id, reference.parent_id, stack.index(reference_id) + 1)

    def copy_mask(self, source_id: int, target_id: int) -> None:
        document = self.document
        source = document.get(source_id)
        target = document.get(target_id)
        if source.mask is None:
            raise HostError(f"Layer \"{source.name}\" has no mask")
        target.mask = source.mask.copy()
        target.mask_enabled = source.mask_enabled

    def create_clipping_mask(self, layer_id: int) -> None:
        document = self.document
        record = document.get(layer_id)
        if document.layer_below(layer_id) is None:
            raise HostError(f"No layer below \"{record.name}\" to clip to")
        record.clipped = True

    # ------------------------------------------------------------------ #
    # Sampling / rendering
    # ------------------------------------------------------------------ #
    def sample_color(self, layer_id: int) -> RGBColor:
        record = self.document.get(layer_id)
        if record.kind == LayerKind.FILL and record.fill_color is not None:
            return record.fill_color
        if record.pixels is None:
            raise HostError(f"Layer \"{record.name}\" has no pixels to sample")
        mean = mean_visible_color(record.pixels, record.mask if record.has_mask else None)
        if mean is None:
            raise HostError(f"Layer \"{record.name}\" has no visible pixels")
        return RGBColor(*mean)

    def render(self) -> Image.Image:
        return composite(self.document)

    def export_image(self, path: str, options: ExportOptions) -> None:
        document = self.document
        try:
            write_image(self.render(), path, options, document.icc_profile)
        except (OSError, ValueError) as exc:
            raise HostError(f"Could not write {path}: {exc}") from exc

    # ------------------------------------------------------------------ #
    # Transactions
    # ------------------------------------------------------------------ #
    @contextmanager
    def modal(self, command_name: str) -> Iterator[None]:
        with self._lock:
            if self._modal_depth == 0:
                self.command_history.append(command_name)
            self._modal_depth += 1
            try:
                yield
            finally:
                self._modal_depth -= 1
