"""
Mask Conversion
Replaces one masked layer with a solid fill layer carrying the same mask
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Set

from utils.session_log import SessionLog

from .data_structures import DEFAULT_FILL_COLOR, ConversionRecord, LayerNode, RGBColor
from .errors import HostError
from .host_interface import DocumentHost
from .state_snapshot import StateSnapshot

FILL_SUFFIX = "_fill"


@dataclass
class ConversionSession:
    """State handed between the phases of one conversion run."""
    processed_ids: Set[int] = field(default_factory=set)
    layers_to_delete: List[int] = field(default_factory=list)
    fill_layers_to_clip: List[int] = field(default_factory=list)
    records: List[ConversionRecord] = field(default_factory=list)
    folder_mask_snapshot: Optional[StateSnapshot] = None

    def reset_registries(self):
        self.processed_ids.clear()
        self.layers_to_delete.clear()
        self.fill_layers_to_clip.clear()
        self.records.clear()


class MaskConversionWorker:
    """Converts a single masked leaf layer."""

    def __init__(self, host: DocumentHost, log: SessionLog):
        self.host = host
        self.log = log

    def sample_color(self, layer: LayerNode) -> RGBColor:
        """Sample the layer color, falling back to neutral gray on failure."""
        try:
            with self.host.modal("Sample Layer Color"):
                color = self.host.sample_color(layer.layer_id)
        except HostError as exc:
            self.log.warning(
                f"Could not sample color from \"{layer.name}\" ({exc}); using {DEFAULT_FILL_COLOR}"
            )
            return DEFAULT_FILL_COLOR
        self.log.info(f"Sampled color from \"{layer.name}\": {color}")
        return color

    def convert(self, layer: LayerNode, session: ConversionSession) -> Optional[ConversionRecord]:
        """
        Build the fill replacement for a masked layer

        Args:
            layer: Masked leaf layer to convert
            session: Current conversion session; receives the registries

        Returns:
            The conversion record, or None if the layer was skipped
        """
        if layer.layer_id in session.processed_ids:
            return None
        session.processed_ids.add(layer.layer_id)

        color = self.sample_color(layer)

        try:
            with self.host.modal("Create Solid Fill Layer"):
                fill_id = self.host.create_fill_layer(color)
        except HostError as exc:
            self.log.error(f"Failed to create solid fill layer for \"{layer.name}\": {exc}")
            return None
        self.log.info(f"Created solid fill layer ({color})")

        fill_name = f"{layer.name}{FILL_SUFFIX}"
        try:
            with self.host.modal("Prepare Fill Layer"):
                self.host.set_name(fill_id, fill_name)
                self.host.move_below(fill_id, layer.layer_id)
                self.host.copy_mask(layer.layer_id, fill_id)
        except HostError as exc:
            self.log.error(f"Failed to prepare fill layer for \"{layer.name}\": {exc}")
            self._discard_fill(fill_id, fill_name)
            return None

        self.log.info(f"Moved \"{fill_name}\" below \"{layer.name}\" and duplicated its mask")
        record = ConversionRecord(
            original_id=layer.layer_id,
            fill_id=fill_id,
            original_name=layer.name,
            color=color,
        )
        session.layers_to_delete.append(layer.layer_id)
        session.fill_layers_to_clip.append(fill_id)
        session.records.append(record)
        return record

    def _discard_fill(self, fill_id: int, fill_name: str):
        try:
            with self.host.modal("Remove Layer"):
                self.host.delete_layer(fill_id)
        except HostError as exc:
            self.log.warning(f"Could not remove incomplete fill layer \"{fill_name}\": {exc}")
