"""
Figma Export Pipeline

Fetches a file's node tree, extracts top-level frames, and resolves a
rendered PNG URL for each of them.

Export strategy: one request for all capped frames; if that fails for
any reason other than rate limiting, fall back to small batches with a
pause between them. A rate limit at any export step aborts with
RateLimitError. A failed batch is skipped and its frames are dropped.
"""

import asyncio
import logging
from typing import Optional
from urllib.parse import quote

import requests

from ..errors import (
    AccessDeniedError,
    ConfigurationError,
    ExportFailedError,
    NoFramesError,
    RateLimitError,
    UpstreamError,
)
from ..http_client import RATE_LIMITED, BackoffPolicy, RetryClient, SleepFn, parse_retry_after
from ..models import Config, FigmaExtraction, FigmaFileHandle, FrameDescriptor
from .frames import extract_document_frames

logger = logging.getLogger(__name__)

RATE_LIMIT_MESSAGE = "Figma rate limit reached. Please wait a minute and try again."


class FigmaExporter:
    """
    Orchestrates file fetch, frame extraction and image export.

    Steps run strictly in sequence: the file fetch completes before
    extraction, and extraction before any export request.

    Example:
        exporter = FigmaExporter(config)
        extraction = await exporter.export_frames(parse_figma_url(url))
        print(f"Extracted {extraction.exported_frames} of {extraction.total_frames}")
    """

    def __init__(
        self,
        config: Config,
        client: Optional[RetryClient] = None,
        sleep: SleepFn = asyncio.sleep
    ):
        """
        Initialize exporter.

        Args:
            config: Configuration with Figma token, cap and pacing settings
            client: Retry client (built from config when omitted)
            sleep: Awaitable used for pacing delays

        Raises:
            ConfigurationError: If no Figma access token is configured
        """
        if not config.has_figma():
            raise ConfigurationError(
                "FIGMA_ACCESS_TOKEN is not configured. Please add your Figma token."
            )
        self.config = config
        self.client = client or RetryClient(
            policy=BackoffPolicy(base_delay=config.figma_backoff_base),
            max_retries=config.figma_max_retries,
            sleep=sleep,
        )
        self._sleep = sleep
        self._headers = {"X-Figma-Token": config.figma_access_token}

    async def export_frames(self, handle: FigmaFileHandle) -> FigmaExtraction:
        """
        Run the full extraction for one file.

        Args:
            handle: Parsed Figma file reference

        Returns:
            FigmaExtraction with frames in document order, capped, each with
            a resolved image URL

        Raises:
            ConfigurationError: Token rejected by Figma
            AccessDeniedError: Token has no access to the file
            RateLimitError: Figma kept rate limiting us
            UpstreamError: Any other Figma failure
            NoFramesError: The file has no exportable frames
            ExportFailedError: No frame rendered to an image
        """
        logger.info("Fetching Figma file: %s", handle.file_key)
        file_data = await self._fetch_file(handle.file_key)
        file_name = file_data.get("name") or "Untitled"

        document = file_data.get("document") or {"id": "0:0", "type": "DOCUMENT"}
        all_frames = extract_document_frames(document, handle.node_id)
        if not all_frames:
            raise NoFramesError("No frames found in this Figma file.")

        frames_to_export = all_frames[:self.config.figma_max_frames]
        if len(all_frames) > len(frames_to_export):
            logger.info(
                "Capping export at %d of %d frames", len(frames_to_export), len(all_frames)
            )

        await self._sleep(self.config.figma_export_delay)
        images, warnings = await self._export_images(handle.file_key, frames_to_export)

        frames = [
            frame.model_copy(update={"image_url": images[frame.id]})
            for frame in frames_to_export
            if _is_image_url(images.get(frame.id))
        ]
        if not frames:
            raise ExportFailedError(
                "No valid frames could be exported. Try a different Figma file."
            )

        dropped = len(frames_to_export) - len(frames)
        if dropped:
            warnings.append(f"{dropped} of {len(frames_to_export)} frames could not be exported")
            logger.warning("Dropped %d frames without a rendered image", dropped)

        logger.info("Extracted %d frames from \"%s\"", len(frames), file_name)
        return FigmaExtraction(
            file_name=file_name,
            file_key=handle.file_key,
            frames=frames,
            total_frames=len(all_frames),
            exported_frames=len(frames),
            warnings=warnings,
        )

    async def _fetch_file(self, file_key: str) -> dict:
        url = f"{self.config.figma_api_base}/files/{file_key}?depth={self.config.figma_file_depth}"
        response = await self.client.fetch_with_retry(url, self._headers)

        if not response.ok:
            logger.error("Figma API error: %s %s", response.status_code, response.text[:500])
            if response.status_code == 401:
                raise ConfigurationError(
                    "Figma rejected the access token. Check FIGMA_ACCESS_TOKEN."
                )
            if response.status_code == 403:
                raise AccessDeniedError(
                    "Access denied. Make sure your Figma token has access to this file."
                )
            if response.status_code == RATE_LIMITED:
                raise RateLimitError(RATE_LIMIT_MESSAGE, retry_after=parse_retry_after(response))
            raise UpstreamError(f"Figma API error: {response.status_code}")

        return response.json()

    async def _export_images(
        self,
        file_key: str,
        frames: list[FrameDescriptor]
    ) -> tuple[dict, list[str]]:
        """
        Resolve image URLs, single request first, batches as fallback.

        Returns:
            (node id -> image URL, partial-result warnings)
        """
        logger.info("Exporting %d frames as images", len(frames))
        response = await self._request_images(file_key, [frame.id for frame in frames])
        if response.status_code == RATE_LIMITED:
            raise RateLimitError(RATE_LIMIT_MESSAGE, retry_after=parse_retry_after(response))

        images = _images_from(response)
        if images is not None:
            return images, []

        batch_size = self.config.figma_batch_size
        logger.info("Single export request failed, trying batches of %d", batch_size)
        images = {}
        warnings = []
        for start in range(0, len(frames), batch_size):
            if start > 0:
                await self._sleep(self.config.figma_batch_delay)

            batch = frames[start:start + batch_size]
            response = await self._request_images(file_key, [frame.id for frame in batch])
            if response.status_code == RATE_LIMITED:
                raise RateLimitError(RATE_LIMIT_MESSAGE, retry_after=parse_retry_after(response))

            batch_images = _images_from(response)
            if batch_images is None:
                logger.error("Export batch %d failed: %s", start // batch_size + 1, response.status_code)
                warnings.append(
                    f"Export batch {start // batch_size + 1} failed ({response.status_code}); "
                    f"{len(batch)} frames skipped"
                )
                continue
            images.update(batch_images)

        return images, warnings

    async def _request_images(self, file_key: str, node_ids: list[str]) -> requests.Response:
        ids = quote(",".join(node_ids), safe="")
        url = (
            f"{self.config.figma_api_base}/images/{file_key}"
            f"?ids={ids}&format=png&scale={self.config.figma_export_scale:g}"
        )
        return await self.client.fetch_with_retry(url, self._headers)


def _images_from(response: requests.Response) -> Optional[dict]:
    """Image map of a successful export response, None on failure"""
    if not response.ok:
        return None
    try:
        data = response.json()
    except ValueError:
        return None
    if data.get("err"):
        logger.error("Figma export error: %s", data["err"])
        return None
    return data.get("images") or {}


def _is_image_url(value) -> bool:
    return isinstance(value, str) and value.startswith("http")
