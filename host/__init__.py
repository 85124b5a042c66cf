"""
Host module for Layer Batch Tools
In-memory layered document, compositor, and the DocumentHost built on them
"""

from .document import MemoryDocument, LayerRecord, Rect
from .memory_host import MemoryHost
from .document_io import DocumentFormatError, load_document, save_document

__all__ = [
    'MemoryDocument',
    'LayerRecord',
    'Rect',
    'MemoryHost',
    'DocumentFormatError',
    'load_document',
    'save_document',
]
