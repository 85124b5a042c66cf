"""
Settings Manager
Handles application settings persistence
"""

from typing import Optional

from PyQt6.QtCore import QSettings

from core.data_structures import ExportOptions


class SettingsManager:
    """Manages application settings"""

    def __init__(self, settings: Optional[QSettings] = None):
        self.settings = settings or QSettings('LayerBatchTools', 'Settings')

    def get_last_document(self) -> str:
        """Get the last opened document"""
        return self.settings.value('last_document', '', type=str)

    def set_last_document(self, filename: str):
        """Save the last opened document"""
        self.settings.setValue('last_document', filename)

    def get_window_geometry(self):
        """Get saved window geometry"""
        return self.settings.value('window_geometry')

    def set_window_geometry(self, geometry):
        """Save window geometry"""
        self.settings.setValue('window_geometry', geometry)

    # Export defaults

    def load_export_options(self) -> ExportOptions:
        """Build ExportOptions from the stored defaults, ignoring invalid values."""
        defaults = ExportOptions()
        fmt = self.settings.value('export/format', defaults.format, type=str)
        quality = self.settings.value('export/quality', defaults.quality, type=int)
        include_icc = self.settings.value(
            'export/include_icc_profile', defaults.include_icc_profile, type=bool
        )
        directory = self.settings.value('export/last_directory', '', type=str) or None
        try:
            return ExportOptions(
                format=fmt,
                quality=quality,
                include_icc_profile=include_icc,
                directory=directory,
            )
        except ValueError as e:
            print(f"Ignoring invalid export settings: {e}")
            return defaults

    def save_export_options(self, options: ExportOptions):
        """Persist export defaults"""
        self.settings.setValue('export/format', options.format)
        self.settings.setValue('export/quality', options.quality)
        self.settings.setValue('export/include_icc_profile', options.include_icc_profile)
        self.settings.setValue('export/last_directory', options.directory or '')
        self.settings.sync()
