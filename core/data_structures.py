"""
Data structures for Layer Batch Tools
Defines the core data types shared by the pipelines and the hosts
"""

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple


class LayerKind(str, Enum):
    """Type tag of a layer in the host document"""
    FOLDER = "folder"
    PIXEL = "pixel"
    FILL = "fill"
    OTHER = "other"


@dataclass(frozen=True)
class LayerNode:
    """Read-only view of one layer, as returned by the host.

    Children are stored as identifiers (index 0 is the topmost layer), so a
    node never holds references to other nodes.
    """
    layer_id: int
    name: str
    kind: LayerKind
    visible: bool = True
    has_mask: bool = False
    child_ids: Tuple[int, ...] = ()
    parent_id: Optional[int] = None

    @property
    def is_folder(self) -> bool:
        return self.kind == LayerKind.FOLDER


@dataclass(frozen=True)
class RGBColor:
    """8-bit RGB color"""
    r: int
    g: int
    b: int

    def __post_init__(self):
        for channel in (self.r, self.g, self.b):
            if not 0 <= int(channel) <= 255:
                raise ValueError(f"Color channel out of range: {channel}")

    def as_tuple(self) -> Tuple[int, int, int]:
        return (self.r, self.g, self.b)

    def __str__(self) -> str:
        return f"RGB({self.r}, {self.g}, {self.b})"


# Used when a layer's color cannot be sampled
DEFAULT_FILL_COLOR = RGBColor(127, 127, 127)


@dataclass(frozen=True)
class SnapshotEntry:
    """Attribute values of one layer at capture time"""
    layer_id: int
    values: Tuple[Tuple[str, Any], ...]
    name: str = ""

    def as_dict(self) -> Dict[str, Any]:
        return dict(self.values)


@dataclass(frozen=True)
class MaskStateRecord:
    """Mask and visibility of a folder, captured before pre-processing"""
    layer_id: int
    name: str
    has_mask: bool
    visible: bool


@dataclass(frozen=True)
class ConversionRecord:
    """One masked layer replaced by a solid fill layer"""
    original_id: int
    fill_id: int
    original_name: str
    color: RGBColor


class SessionStatus(str, Enum):
    """Terminal outcome of one pipeline invocation"""
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"
    NO_DOCUMENT = "no_document"
    NO_TARGETS = "no_targets"


@dataclass(frozen=True)
class SessionResult:
    """Outcome reported through the completion callback"""
    status: SessionStatus
    message: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.status == SessionStatus.COMPLETED


# Format identifier -> Pillow format name
SUPPORTED_EXPORT_FORMATS: Dict[str, str] = {
    "PNG": "PNG",
    "JPG": "JPEG",
    "JPEG": "JPEG",
    "WEBP": "WEBP",
    "TIFF": "TIFF",
    "BMP": "BMP",
}


@dataclass(frozen=True)
class ExportOptions:
    """Options for the folder export

    Attributes:
        format: Output codec identifier (see SUPPORTED_EXPORT_FORMATS)
        quality: Compression/quality hint, 0-100
        include_icc_profile: Embed the document color profile when possible
        directory: Pre-selected output directory, or None to ask
    """
    format: str = "PNG"
    quality: int = 100
    include_icc_profile: bool = True
    directory: Optional[str] = None

    def __post_init__(self):
        normalized = str(self.format).upper()
        if normalized not in SUPPORTED_EXPORT_FORMATS:
            raise ValueError(f"Unsupported export format: {self.format}")
        object.__setattr__(self, "format", normalized)
        if isinstance(self.quality, bool) or not isinstance(self.quality, int):
            raise ValueError(f"Quality must be an integer, got {self.quality!r}")
        if not 0 <= self.quality <= 100:
            raise ValueError(f"Quality must be within 0-100, got {self.quality}")

    @property
    def extension(self) -> str:
        return self.format.lower()

    @property
    def pillow_format(self) -> str:
        return SUPPORTED_EXPORT_FORMATS[self.format]

    def merged(self, overrides: Optional[Mapping[str, Any]] = None) -> "ExportOptions":
        """Return a copy with the given keys replaced."""
        if not overrides:
            return self
        known = {f.name for f in fields(self)}
        unknown = set(overrides) - known
        if unknown:
            raise ValueError(f"Unknown export option(s): {', '.join(sorted(unknown))}")
        values = {f.name: getattr(self, f.name) for f in fields(self)}
        values.update(overrides)
        return ExportOptions(**values)


@dataclass
class ExportReport:
    """Files written and folders that failed during one export session"""
    exported_paths: List[str] = field(default_factory=list)
    failed_folders: List[str] = field(default_factory=list)

    @property
    def attempted(self) -> int:
        return len(self.exported_paths) + len(self.failed_folders)
