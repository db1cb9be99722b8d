"""
Single-Screen Auditor

Sends one screenshot plus persona configuration to the vision model and
returns a structured AuditResult. Model output that can't be recovered
into a valid result becomes a neutral fallback, never an exception.
"""

import logging
from typing import Optional

import requests
from pydantic import ValidationError

from .errors import ImageExpiredError, InvalidInputError
from .http_client import RetryClient
from .models import AuditConfig, AuditResult, FunctionalityResult, ImageInput
from .prompts import (
    FUNCTIONALITY_USER_TEXT,
    audit_user_text,
    build_audit_prompt,
    build_functionality_prompt,
)
from .providers.base import VisionProvider
from .rules import get_persona
from .sanitizer import parse_model_json

logger = logging.getLogger(__name__)

EXPIRED_IMAGE_MESSAGE = (
    "Design image is no longer accessible. Figma image URLs may have expired. "
    "Please re-extract the frames."
)
SCHEMA_MISMATCH_SUMMARY = (
    "The AI response had no usable overall score or category list. Please try again."
)


class ScreenAuditor:
    """
    Audits one screen per call.

    Per-call flow:
        Requested -> (Sent | InvalidInput)
        Sent      -> (Success | RateLimited | PaymentRequired | UpstreamError)
        Success   -> (Parsed | FallbackReturned)

    Example:
        auditor = ScreenAuditor(get_provider("gateway", config))
        result = await auditor.audit(
            ImageInput(url=frame.image_url),
            "a11y",
            AuditConfig(fidelity="mvp", screen_name=frame.name)
        )
    """

    def __init__(
        self,
        provider: VisionProvider,
        client: Optional[RetryClient] = None,
        check_image_urls: bool = True
    ):
        """
        Initialize auditor.

        Args:
            provider: Configured vision provider
            client: HTTP client for the image reachability check
            check_image_urls: HEAD-check remote images before sending them
        """
        self.provider = provider
        self.client = client or RetryClient(max_retries=0, timeout=10.0)
        self.check_image_urls = check_image_urls

    async def audit(
        self,
        image: Optional[ImageInput],
        persona_id: str,
        config: Optional[AuditConfig] = None
    ) -> AuditResult:
        """
        Run the design audit for one screenshot.

        Args:
            image: Inline or remote screenshot
            persona_id: Persona profile to apply (unknown ids use the default)
            config: Fidelity, purpose and optional screen name

        Returns:
            Parsed AuditResult, or AuditResult.fallback() when the model
            output can't be recovered

        Raises:
            InvalidInputError: Missing image or persona id
            ImageExpiredError: Remote image no longer resolves
            RateLimitError, QuotaError, UpstreamError: Provider failures
        """
        if image is None:
            raise InvalidInputError("Either imageBase64 or imageUrl is required")
        if not persona_id:
            raise InvalidInputError("personaId is required")

        config = config or AuditConfig()
        await self._ensure_reachable(image)

        persona = get_persona(persona_id)
        if persona.id != persona_id:
            logger.info("Unknown persona %r, using %r", persona_id, persona.id)

        content = await self.provider.complete(
            build_audit_prompt(persona, config),
            audit_user_text(config),
            image
        )

        data = parse_model_json(content)
        if data is None:
            return AuditResult.fallback()
        try:
            return AuditResult.model_validate(data)
        except ValidationError as e:
            logger.error("Model response did not match the audit schema: %s", e)
            return AuditResult.fallback(SCHEMA_MISMATCH_SUMMARY)

    async def audit_functionality(
        self,
        image: Optional[ImageInput],
        screen_name: Optional[str] = None
    ) -> FunctionalityResult:
        """
        Rate whether the screen lets users accomplish their goal.

        Returns:
            FunctionalityResult, or a neutral "mixed" fallback
        """
        if image is None:
            raise InvalidInputError("Either imageBase64 or imageUrl is required")
        await self._ensure_reachable(image)

        content = await self.provider.complete(
            build_functionality_prompt(screen_name),
            FUNCTIONALITY_USER_TEXT,
            image
        )

        data = parse_model_json(content)
        if data is None:
            return FunctionalityResult.fallback()
        try:
            return FunctionalityResult.model_validate(data)
        except ValidationError as e:
            logger.error("Model response did not match the functionality schema: %s", e)
            return FunctionalityResult.fallback()

    async def _ensure_reachable(self, image: ImageInput) -> None:
        """
        HEAD-check a remote image.

        A non-2xx answer means the URL expired; a network failure of the
        check itself is only logged since the model may still fetch it.
        """
        if not image.is_remote or not self.check_image_urls:
            return
        try:
            response = await self.client.head(image.url)
        except requests.RequestException as e:
            logger.warning("Image URL check failed: %s", e)
            return
        if not response.ok:
            logger.error("Image URL not accessible: %s", response.status_code)
            raise ImageExpiredError(EXPIRED_IMAGE_MESSAGE)
