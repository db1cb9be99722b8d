"""
Chat-Completion Gateway Provider

Implements vision completion against any OpenAI-compatible
chat-completions endpoint (OpenAI itself, OpenRouter, hosted AI
gateways) through the openai SDK.
"""

import logging
from typing import Optional

import openai

from ..errors import UpstreamError
from ..models import ImageInput
from .base import FAILURE_MESSAGE, VisionProvider, error_for_status

logger = logging.getLogger(__name__)


class GatewayProvider(VisionProvider):
    """
    Vision provider using an OpenAI-compatible gateway.

    The image is sent as an ``image_url`` content part, either as a
    base64 data URL or as the remote URL itself.

    Example:
        provider = GatewayProvider(api_key="...", base_url="https://gateway/v1")
        text = await provider.complete(system_prompt, user_text, image)
    """

    def __init__(
        self,
        api_key: str,
        model: str = "google/gemini-2.5-flash",
        base_url: Optional[str] = None
    ):
        """
        Initialize gateway provider.

        Args:
            api_key: Gateway API key
            model: Vision-capable model routed by the gateway
            base_url: Gateway root (defaults to api.openai.com)
        """
        # SDK retries are off: a 429 must reach the caller as-is
        self.client = openai.AsyncOpenAI(api_key=api_key, base_url=base_url, max_retries=0)
        self.model = model
        self._api_key = api_key

    @property
    def name(self) -> str:
        """Provider name for identification"""
        return "gateway"

    def is_available(self) -> bool:
        """
        Check if gateway provider is configured.

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
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {
                        "role": "user",
                        "content": [
                            {"type": "text", "text": user_text},
                            {"type": "image_url", "image_url": {"url": image.as_url()}},
                        ],
                    },
                ],
            )
        except openai.APIStatusError as e:
            logger.error("AI gateway error: %s %s", e.status_code, e.message)
            raise error_for_status(e.status_code) from e
        except openai.APIError as e:
            logger.error("AI gateway request failed: %s", e)
            raise UpstreamError(FAILURE_MESSAGE) from e

        if not response.choices:
            return ""
        return response.choices[0].message.content or ""
