"""
Utils module for Layer Batch Tools
Contains session logging, JSON loading, color sampling, and settings
"""

from .file_loader import load_json_document, save_json_document
from .session_log import SessionLog, emit_progress
from .color_sampling import mean_visible_color

__all__ = [
    'load_json_document',
    'save_json_document',
    'SessionLog',
    'emit_progress',
    'mean_visible_color',
]
