"""
Design Audit Service

Boundary between the core and its callers (CLI, web front end).
Every call returns either a success payload or ``{"error": ...}``;
no exception escapes to the caller.
"""

import logging
from typing import Callable, Optional, Union

from .auditor import ScreenAuditor
from .dispatcher import ScreenCallback, run_multi_screen_audit
from .errors import DesignAuditError
from .figma import FigmaExporter, parse_figma_url
from .models import AuditConfig, Config, FrameDescriptor, ImageInput
from .providers import VisionProvider, get_provider

logger = logging.getLogger(__name__)


def _unexpected(e: Exception) -> dict:
    return {"error": f"Unexpected error: {e}" if str(e) else "Unknown error", "status": 500}


class DesignAuditService:
    """
    Wires configuration, Figma export, auditor and dispatcher together.

    Collaborators are built lazily from config so that a missing
    credential surfaces as an error payload on the call that needs it.

    Example:
        service = DesignAuditService(load_config())
        extraction = await service.extract_figma_frames(url)
        if "error" not in extraction:
            await service.audit_multi_screen(
                extraction["frames"], "solo", AuditConfig(), on_complete
            )
    """

    def __init__(
        self,
        config: Config,
        provider: Optional[VisionProvider] = None,
        exporter: Optional[FigmaExporter] = None,
        auditor: Optional[ScreenAuditor] = None
    ):
        self.config = config
        self._provider = provider
        self._exporter = exporter
        self._auditor = auditor

    @property
    def exporter(self) -> FigmaExporter:
        if self._exporter is None:
            self._exporter = FigmaExporter(self.config)
        return self._exporter

    @property
    def auditor(self) -> ScreenAuditor:
        if self._auditor is None:
            provider = self._provider or get_provider(self.config.vision_provider, self.config)
            self._auditor = ScreenAuditor(provider)
        return self._auditor

    async def extract_figma_frames(self, figma_url: str) -> dict:
        """
        Extract and export frames from a Figma link.

        Returns:
            {fileName, fileKey, frames, totalFrames, exportedFrames, warnings}
            or {error, status[, retryAfter]}
        """
        try:
            handle = parse_figma_url(figma_url)
            extraction = await self.exporter.export_frames(handle)
        except DesignAuditError as e:
            return e.to_payload()
        except Exception as e:
            logger.exception("fetch-figma-frames error")
            return _unexpected(e)
        return extraction.to_wire()

    async def audit_design(
        self,
        image: Optional[ImageInput],
        persona_id: str,
        config: Optional[AuditConfig] = None
    ) -> dict:
        """
        Audit one screenshot.

        Returns:
            AuditResult payload or {error, status}
        """
        try:
            result = await self.auditor.audit(image, persona_id, config)
        except DesignAuditError as e:
            return e.to_payload()
        except Exception as e:
            logger.exception("audit-design error")
            return _unexpected(e)
        return result.to_wire()

    async def audit_functionality(
        self,
        image: Optional[ImageInput],
        screen_name: Optional[str] = None
    ) -> dict:
        """
        Rate the functionality of one screenshot.

        Returns:
            FunctionalityResult payload or {error, status}
        """
        try:
            result = await self.auditor.audit_functionality(image, screen_name)
        except DesignAuditError as e:
            return e.to_payload()
        except Exception as e:
            logger.exception("audit-functionality error")
            return _unexpected(e)
        return result.to_wire()

    async def audit_multi_screen(
        self,
        frames: list[Union[FrameDescriptor, dict]],
        persona_id: str,
        config: Optional[AuditConfig],
        on_complete: ScreenCallback,
        on_error: Optional[Callable[[dict], None]] = None
    ) -> None:
        """
        Audit many screens concurrently; results arrive via ``on_complete``.

        Frames may be FrameDescriptor objects or wire dicts as returned by
        ``extract_figma_frames``. Setup failures (bad frames, missing
        credentials) are reported once through ``on_error`` when given,
        otherwise logged.
        """
        try:
            descriptors = [
                frame if isinstance(frame, FrameDescriptor) else FrameDescriptor.model_validate(frame)
                for frame in frames
            ]
            auditor = self.auditor
        except DesignAuditError as e:
            self._report(e.to_payload(), on_error)
            return
        except Exception as e:
            logger.exception("audit-multi-screen setup error")
            self._report(_unexpected(e), on_error)
            return

        await run_multi_screen_audit(
            descriptors,
            persona_id,
            config,
            on_complete,
            auditor=auditor,
            concurrency=self.config.audit_concurrency
        )

    def _report(self, payload: dict, on_error: Optional[Callable[[dict], None]]) -> None:
        logger.error("Multi-screen audit not started: %s", payload["error"])
        if on_error is not None:
            on_error(payload)
