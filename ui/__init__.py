"""
UI module for Layer Batch Tools
Contains all Qt widgets and UI components
"""

from .log_widget import LogWidget
from .workers import ConversionWorker, ExportWorker
from .main_window import LayerToolsWindow

__all__ = [
    'LogWidget',
    'ConversionWorker',
    'ExportWorker',
    'LayerToolsWindow',
]
