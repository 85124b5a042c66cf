"""
Shared fixtures: small in-memory documents and hosts
"""

import pytest

from host.document import MemoryDocument
from host.memory_host import MemoryHost


class Recorder:
    """Collects log lines, progress increments and completion calls."""

    def __init__(self):
        self.lines = []
        self.increments = []
        self.completions = []

    def log(self, message, level="INFO"):
        self.lines.append((level, message))

    def progress(self, increment):
        self.increments.append(increment)

    def complete(self, success, message):
        self.completions.append((success, message))

    def messages(self, level=None):
        return [message for lvl, message in self.lines if level is None or lvl == level]


@pytest.fixture
def recorder():
    return Recorder()


def build_masked_document() -> MemoryDocument:
    """
    Layout (topmost first)::

        Icons/            folder, mask enabled
          star            red, masked
          base            green
        badge             blue, masked
        Background        white
    """
    document = MemoryDocument(8, 8, name="masked")
    icons = document.add_folder("Icons")
    document.set_rect_mask(icons.layer_id, (0, 0, 8, 8))
    star = document.add_pixel_layer("star", (255, 0, 0), parent_id=icons.layer_id)
    document.set_rect_mask(star.layer_id, (0, 0, 4, 4))
    document.add_pixel_layer("base", (0, 255, 0), parent_id=icons.layer_id)
    badge = document.add_pixel_layer("badge", (0, 0, 255), rect=(4, 4, 4, 4))
    document.set_rect_mask(badge.layer_id, (4, 4, 2, 2))
    document.add_pixel_layer("Background", (255, 255, 255))
    return document


def build_folder_document() -> MemoryDocument:
    """
    Layout (topmost first)::

        A/B/              folder
          red             full canvas red
          Inner/          folder, hidden
            dot           black
        Icons?/           folder
          blue            full canvas blue
        Background        white
    """
    document = MemoryDocument(4, 4, name="folders")
    ab = document.add_folder("A/B")
    document.add_pixel_layer("red", (255, 0, 0), parent_id=ab.layer_id)
    inner = document.add_folder("Inner", parent_id=ab.layer_id, visible=False)
    document.add_pixel_layer("dot", (0, 0, 0), rect=(0, 0, 1, 1), parent_id=inner.layer_id)
    icons = document.add_folder("Icons?")
    document.add_pixel_layer("blue", (0, 0, 255), parent_id=icons.layer_id)
    document.add_pixel_layer("Background", (255, 255, 255))
    return document


@pytest.fixture
def masked_document():
    return build_masked_document()


@pytest.fixture
def masked_host(masked_document):
    return MemoryHost(masked_document)


@pytest.fixture
def folder_document():
    return build_folder_document()


@pytest.fixture
def folder_host(folder_document):
    return MemoryHost(folder_document)
