"""
Anthropic Claude Vision Provider

Implements vision completion using Claude's vision capabilities.
Supports Claude 3+ models with vision understanding.
"""

import logging

import anthropic

from ..errors import UpstreamError
from ..models import ImageInput
from .base import FAILURE_MESSAGE, VisionProvider, error_for_status

logger = logging.getLogger(__name__)


class AnthropicProvider(VisionProvider):
    """
    Vision provider using Anthropic's Claude models.

    Example:
        provider = AnthropicProvider(api_key="sk-ant-...")
        text = await provider.complete(system_prompt, user_text, image)
    """

    def __init__(
        self,
        api_key: str,
        model: str = "claude-sonnet-4-20250514",
        max_tokens: int = 4096
    ):
        """
        Initialize Anthropic provider.

        Args:
            api_key: Anthropic API key (get from https://console.anthropic.com/)
            model: Claude model to use; must be vision-capable (Claude 3+)
            max_tokens: Response token budget
        """
        self.client = anthropic.AsyncAnthropic(api_key=api_key, max_retries=0)
        self.model = model
        self.max_tokens = max_tokens
        self._api_key = api_key

    @property
    def name(self) -> str:
        """Provider name for identification"""
        return "anthropic"

    def is_available(self) -> bool:
        """
        Check if Anthropic provider is configured.

        Returns:
            True if API key is set, False otherwise
        """
        return self._api_key is not None and len(self._api_key) > 0

    async def complete(
        self,
        system_prompt: str,
        user_text: str,
        image: ImageInput
    ) -> str:
        try:
            response = await self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                system=system_prompt,
                messages=[{
                    "role": "user",
                    "content": [
                        self._image_block(image),
                        {"type": "text", "text": user_text},
                    ],
                }],
            )
        except anthropic.APIStatusError as e:
            logger.error("Anthropic API error: %s %s", e.status_code, e.message)
            raise error_for_status(e.status_code) from e
        except anthropic.APIError as e:
            logger.error("Anthropic request failed: %s", e)
            raise UpstreamError(FAILURE_MESSAGE) from e

        return "".join(
            block.text for block in response.content if getattr(block, "type", None) == "text"
        )

    def _image_block(self, image: ImageInput) -> dict:
        """
        Build the image content block.

        Remote images are passed by URL; inline images as base64.
        """
        if image.is_remote:
            return {"type": "image", "source": {"type": "url", "url": image.url}}
        return {
            "type": "image",
            "source": {
                "type": "base64",
                "media_type": image.media_type,
                "data": image.base64,
            },
        }
