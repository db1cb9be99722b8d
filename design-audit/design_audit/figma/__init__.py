"""
Figma Integration

URL parsing, frame extraction and image export against the Figma REST API.
"""

from .exporter import FigmaExporter
from .frames import extract_document_frames, extract_frames
from .urls import parse_figma_url

__all__ = [
    "FigmaExporter",
    "extract_document_frames",
    "extract_frames",
    "parse_figma_url",
]
