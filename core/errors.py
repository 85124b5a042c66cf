"""
Errors
Exception types raised by hosts and pipelines
"""


class LayerToolsError(Exception):
    """Base class for all errors raised by this package"""


class HostError(LayerToolsError):
    """A host primitive failed (layer gone, write error, unsupported call...)"""


class NoDocumentError(HostError):
    """No document is open in the host"""


class LayerNotFoundError(HostError):
    """The referenced layer no longer exists"""

    def __init__(self, layer_id: int):
        super().__init__(f"Layer {layer_id} not found")
        self.layer_id = layer_id


class OperationCancelled(LayerToolsError):
    """Raised at a checkpoint after cancellation was requested"""
