"""
Frame Extraction

Walks a Figma document tree and collects exportable top-level
containers. Only direct children of a page (CANVAS) are collected;
anything nested inside a frame is never a frame of its own here.
"""

import logging
from typing import Optional, Union

from ..models import DesignNode, FrameDescriptor

logger = logging.getLogger(__name__)

PAGE_TYPE = "CANVAS"
EXPORTABLE_TYPES = frozenset({"FRAME", "COMPONENT", "COMPONENT_SET", "SECTION"})


def extract_frames(node: Union[DesignNode, dict]) -> list[FrameDescriptor]:
    """
    Collect exportable frames under ``node`` in document order.

    A page contributes its direct exportable children; any other node
    recurses into all of its children.
    """
    if isinstance(node, dict):
        node = DesignNode.model_validate(node)

    if node.type == PAGE_TYPE:
        return [
            FrameDescriptor(id=child.id, name=child.name)
            for child in node.children
            if child.type in EXPORTABLE_TYPES
        ]

    frames: list[FrameDescriptor] = []
    for child in node.children:
        frames.extend(extract_frames(child))
    return frames


def extract_document_frames(
    document: Union[DesignNode, dict],
    node_id: Optional[str] = None
) -> list[FrameDescriptor]:
    """
    Extract frames from every page of a document, page by page.

    Args:
        document: The DOCUMENT root returned by the files endpoint
        node_id: Optional pinned node from the share URL. A pinned page
                 narrows the result to that page; a pinned top-level frame
                 narrows it to that frame. Unknown pins are ignored.

    Returns:
        Frame descriptors in page order
    """
    if isinstance(document, dict):
        document = DesignNode.model_validate(document)

    pages = document.children
    pinned_pages = [page for page in pages if page.id == node_id] if node_id else []
    if pinned_pages:
        pages = pinned_pages

    frames: list[FrameDescriptor] = []
    for page in pages:
        frames.extend(extract_frames(page))

    if node_id and not pinned_pages:
        pinned_frames = [frame for frame in frames if frame.id == node_id]
        if pinned_frames:
            return pinned_frames
        logger.warning("Pinned node %s is not a page or top-level frame; using whole file", node_id)

    return frames
