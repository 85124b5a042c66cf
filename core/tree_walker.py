"""
Tree Walker
Pre-order flattening of the host layer tree

Traversal reads the tree as it is at call time. Callers that mutate the
document must traverse first and work from the returned list, or traverse
again afterwards; nodes reached after a mutation are not guaranteed to
reflect it.
"""

from typing import Iterator, List, Optional, Sequence

from .data_structures import LayerNode
from .errors import LayerNotFoundError
from .host_interface import DocumentHost


def iter_layers(host: DocumentHost, root_ids: Optional[Sequence[int]] = None) -> Iterator[LayerNode]:
    """
    Yield every layer depth-first, parents before children

    Args:
        host: Document host to read from
        root_ids: Ids to start from (defaults to the document's top level)

    Yields:
        LayerNode views in pre-order, siblings in stacking order
    """
    ids = list(host.root_ids() if root_ids is None else root_ids)
    for layer_id in ids:
        try:
            node = host.get_layer(layer_id)
        except LayerNotFoundError:
            continue
        yield node
        if node.is_folder and node.child_ids:
            yield from iter_layers(host, node.child_ids)


def flatten_all(host: DocumentHost, root_ids: Optional[Sequence[int]] = None) -> List[LayerNode]:
    """Return every layer, folders included, in pre-order."""
    return list(iter_layers(host, root_ids))


def flatten_folders(host: DocumentHost, root_ids: Optional[Sequence[int]] = None) -> List[LayerNode]:
    """Return every folder, nested ones included, in pre-order."""
    return [node for node in iter_layers(host, root_ids) if node.is_folder]


def flatten_leaves(host: DocumentHost, root_ids: Optional[Sequence[int]] = None) -> List[LayerNode]:
    """Return every non-folder layer in pre-order."""
    return [node for node in iter_layers(host, root_ids) if not node.is_folder]


def descendant_ids(host: DocumentHost, layer_id: int) -> List[int]:
    """Return the ids below a folder (not including the folder itself)."""
    node = host.get_layer(layer_id)
    return [child.layer_id for child in iter_layers(host, node.child_ids)]


def ancestor_ids(host: DocumentHost, layer_id: int) -> List[int]:
    """Return the parent chain of a layer, nearest parent first."""
    ancestors: List[int] = []
    parent_id = host.get_layer(layer_id).parent_id
    while parent_id is not None:
        ancestors.append(parent_id)
        parent_id = host.get_layer(parent_id).parent_id
    return ancestors
