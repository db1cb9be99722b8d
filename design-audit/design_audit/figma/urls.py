"""Figma share-URL parsing."""

import re
from urllib.parse import parse_qs, urlparse

from ..errors import InvalidInputError
from ..models import FigmaFileHandle

# https://www.figma.com/file/FILEKEY/Title?node-id=1-2
# https://www.figma.com/design/FILEKEY/Title?node-id=1%3A2
FIGMA_URL_PATTERN = re.compile(r"figma\.com/(?:file|design)/([a-zA-Z0-9]+)")


def parse_figma_url(url: str) -> FigmaFileHandle:
    """
    Parse a Figma file or design link into a file handle.

    Raises:
        InvalidInputError: If the URL is empty or not a Figma file link
    """
    if not url or not url.strip():
        raise InvalidInputError("figmaUrl is required")

    match = FIGMA_URL_PATTERN.search(url)
    if not match:
        raise InvalidInputError(
            "Invalid Figma URL. Please provide a valid Figma file or design link."
        )

    node_ids = parse_qs(urlparse(url.strip()).query).get("node-id")
    node_id = node_ids[0].replace("-", ":") if node_ids and node_ids[0] else None
    return FigmaFileHandle(file_key=match.group(1), node_id=node_id)
