"""
Host Interface
Abstract document host consumed by the pipelines

Every primitive either succeeds or raises HostError (or a subclass). Mutations
are expected to run inside ``modal()``, which batches them into a single
user-visible operation, the same way a host's modal execution scope would.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import List

from .data_structures import ExportOptions, LayerNode, RGBColor


class DocumentHost(ABC):
    """Capability interface over the active layered document."""

    # ------------------------------------------------------------------ #
    # Tree reads
    # ------------------------------------------------------------------ #
    @abstractmethod
    def has_document(self) -> bool:
        """Return True if a document is open."""

    @abstractmethod
    def root_ids(self) -> List[int]:
        """Return the top-level layer ids, topmost first."""

    @abstractmethod
    def get_layer(self, layer_id: int) -> LayerNode:
        """Return a read-only view of a layer. Raises LayerNotFoundError."""

    # ------------------------------------------------------------------ #
    # Mutations
    # ------------------------------------------------------------------ #
    @abstractmethod
    def set_visible(self, layer_id: int, visible: bool) -> None:
        ...

    @abstractmethod
    def set_mask_enabled(self, layer_id: int, enabled: bool) -> None:
        """Enable or disable the layer's user mask.

        Disabling on a layer without a mask is a no-op; enabling one raises
        HostError.
        """

    @abstractmethod
    def set_name(self, layer_id: int, name: str) -> None:
        ...

    @abstractmethod
    def create_fill_layer(self, color: RGBColor) -> int:
        """Create a solid color fill layer and return its id."""

    @abstractmethod
    def delete_layer(self, layer_id: int) -> None:
        ...

    @abstractmethod
    def duplicate_layer(self, layer_id: int, new_name: str = "") -> int:
        ...

    @abstractmethod
    def move_below(self, layer_id: int, reference_id: int) -> None:
        """Move a layer directly beneath the reference layer."""

    @abstractmethod
    def copy_mask(self, source_id: int, target_id: int) -> None:
        """Duplicate the source layer's mask onto the target layer."""

    @abstractmethod
    def create_clipping_mask(self, layer_id: int) -> None:
        """Clip the layer to the layer stacked directly beneath it."""

    # ------------------------------------------------------------------ #
    # Sampling / rendering
    # ------------------------------------------------------------------ #
    @abstractmethod
    def sample_color(self, layer_id: int) -> RGBColor:
        """Return a representative color of the layer's content."""

    @abstractmethod
    def export_image(self, path: str, options: ExportOptions) -> None:
        """Render the currently visible content to a file."""

    # ------------------------------------------------------------------ #
    # Transactions
    # ------------------------------------------------------------------ #
    @abstractmethod
    def modal(self, command_name: str) -> AbstractContextManager:
        """Return a context manager scoping one batch of mutations."""
