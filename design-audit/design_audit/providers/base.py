"""
Base Vision Provider Interface

Abstract base class defining the contract for vision model providers.
All providers must implement this interface for consistent behavior.
"""

from abc import ABC, abstractmethod

from ..errors import QuotaError, RateLimitError, UpstreamError
from ..models import ImageInput

RATE_LIMIT_MESSAGE = "Rate limit exceeded. Please try again in a moment."
QUOTA_MESSAGE = "AI credits exhausted. Please add funds to your AI provider account."
FAILURE_MESSAGE = "AI analysis failed"


def error_for_status(status_code: int) -> Exception:
    """
    Translate a provider status code into a typed error.

    429 and 402 keep their meaning (retry later vs. billing action);
    everything else collapses to a generic analysis failure.
    """
    if status_code == 429:
        return RateLimitError(RATE_LIMIT_MESSAGE)
    if status_code == 402:
        return QuotaError(QUOTA_MESSAGE)
    return UpstreamError(FAILURE_MESSAGE)


class VisionProvider(ABC):
    """
    Abstract base class for vision model providers.

    Providers only transport a prompt and an image to a model and
    return its raw text; parsing and fallbacks live in the auditor.

    Subclasses must implement:
    - complete(): Send prompt + image, return the model's text
    - is_available(): Check if provider is configured and ready
    - name: Property returning provider name
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """
        Provider name for logging and identification.

        Returns:
            Provider name (e.g., "gateway", "anthropic")
        """
        pass

    @abstractmethod
    async def complete(
        self,
        system_prompt: str,
        user_text: str,
        image: ImageInput
    ) -> str:
        """
        Run one vision completion.

        Args:
            system_prompt: Instructions, rules and output format
            user_text: The user turn sent alongside the image
            image: Inline (base64) or remote (URL) image

        Returns:
            Raw model text (may be empty)

        Raises:
            RateLimitError: Provider answered 429
            QuotaError: Provider answered 402
            UpstreamError: Any other failure, including connection errors
        """
        pass

    @abstractmethod
    def is_available(self) -> bool:
        """
        Check if provider is configured and ready to use.

        Returns:
            True if provider can be used, False otherwise
        """
        pass
