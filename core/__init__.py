"""
Core module for Layer Batch Tools
Contains data structures, tree traversal, and the conversion/export pipelines
"""

from .data_structures import (
    LayerKind,
    LayerNode,
    RGBColor,
    ExportOptions,
    ExportReport,
    SessionResult,
    SessionStatus,
)
from .errors import LayerToolsError, HostError, NoDocumentError, LayerNotFoundError, OperationCancelled
from .host_interface import DocumentHost
from .cancellation import CancellationToken
from .state_snapshot import StateSnapshot
from .conversion_pipeline import ConversionPipeline
from .folder_export import FolderExportEngine
from .layer_tools import LayerToolsService

__all__ = [
    'LayerKind',
    'LayerNode',
    'RGBColor',
    'ExportOptions',
    'ExportReport',
    'SessionResult',
    'SessionStatus',
    'LayerToolsError',
    'HostError',
    'NoDocumentError',
    'LayerNotFoundError',
    'OperationCancelled',
    'DocumentHost',
    'CancellationToken',
    'StateSnapshot',
    'ConversionPipeline',
    'FolderExportEngine',
    'LayerToolsService',
]
