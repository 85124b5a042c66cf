"""
State Snapshot
Capture named layer attributes before mutating and restore them afterwards
"""

from __future__ import annotations

from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from utils.session_log import SessionLog

from .data_structures import SnapshotEntry
from .errors import HostError
from .host_interface import DocumentHost

VISIBLE = "visible"
MASK_ENABLED = "mask_enabled"

_Reader = Callable[[DocumentHost, int], object]
_Writer = Callable[[DocumentHost, int, object], None]

# attribute name -> (reader, writer)
_ATTRIBUTES: Dict[str, Tuple[_Reader, _Writer]] = {
    VISIBLE: (
        lambda host, layer_id: host.get_layer(layer_id).visible,
        lambda host, layer_id, value: host.set_visible(layer_id, bool(value)),
    ),
    MASK_ENABLED: (
        lambda host, layer_id: host.get_layer(layer_id).has_mask,
        lambda host, layer_id, value: host.set_mask_enabled(layer_id, bool(value)),
    ),
}


class StateSnapshot:
    """Immutable, ordered record of attribute values for a set of layers."""

    def __init__(self, entries: Sequence[SnapshotEntry], attributes: Sequence[str]):
        self._entries: Tuple[SnapshotEntry, ...] = tuple(entries)
        self._attributes: Tuple[str, ...] = tuple(attributes)

    @classmethod
    def capture(
        cls,
        host: DocumentHost,
        layer_ids: Iterable[int],
        attributes: Sequence[str] = (VISIBLE,),
    ) -> "StateSnapshot":
        """
        Read the attributes of each layer now

        Args:
            host: Document host to read from
            layer_ids: Layers to capture, in the order they should be restored
            attributes: Attribute names (``visible``, ``mask_enabled``)

        Returns:
            A snapshot independent of the live tree

        Raises:
            ValueError: for an unknown attribute name
            HostError: if a layer cannot be read at capture time
        """
        unknown = [name for name in attributes if name not in _ATTRIBUTES]
        if unknown:
            raise ValueError(f"Unknown snapshot attribute(s): {', '.join(unknown)}")

        entries: List[SnapshotEntry] = []
        for layer_id in layer_ids:
            node = host.get_layer(layer_id)
            values = tuple(
                (name, _ATTRIBUTES[name][0](host, layer_id)) for name in attributes
            )
            entries.append(SnapshotEntry(layer_id=layer_id, values=values, name=node.name))
        return cls(entries, attributes)

    @property
    def entries(self) -> Tuple[SnapshotEntry, ...]:
        return self._entries

    @property
    def attributes(self) -> Tuple[str, ...]:
        return self._attributes

    def __len__(self) -> int:
        return len(self._entries)

    def value(self, layer_id: int, attribute: str):
        for entry in self._entries:
            if entry.layer_id == layer_id:
                return entry.as_dict()[attribute]
        raise KeyError(layer_id)

    def restore(self, host: DocumentHost, log: Optional[SessionLog] = None) -> int:
        """
        Write every captured value back

        A failing entry (layer deleted, attribute no longer applicable) is
        logged and skipped; the remaining entries are still restored. Calling
        this twice leaves the document in the same state as calling it once.

        Returns:
            Number of attribute writes that failed
        """
        failures = 0
        for entry in self._entries:
            for name, value in entry.values:
                writer = _ATTRIBUTES[name][1]
                try:
                    writer(host, entry.layer_id, value)
                except HostError as exc:
                    failures += 1
                    if log:
                        log.warning(
                            f"Could not restore {name} of \"{entry.name}\": {exc}"
                        )
        return failures


def capture_visibility(host: DocumentHost, layer_ids: Iterable[int]) -> StateSnapshot:
    return StateSnapshot.capture(host, layer_ids, (VISIBLE,))
