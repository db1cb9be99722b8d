"""
Vision Provider Implementations

Pluggable vision model providers following a common interface.
Supports an OpenAI-compatible chat-completion gateway and Anthropic Claude.
"""

from ..errors import ConfigurationError
from ..models import Config
from .base import VisionProvider
from .anthropic import AnthropicProvider
from .gateway import GatewayProvider

__all__ = [
    "VisionProvider",
    "AnthropicProvider",
    "GatewayProvider",
    "get_provider",
]


def get_provider(provider_name: str, config: Config) -> VisionProvider:
    """
    Factory function to get configured vision provider.

    Args:
        provider_name: One of "gateway" or "anthropic"
        config: Configuration object with API keys

    Returns:
        Configured vision provider instance

    Raises:
        ConfigurationError: If provider name is unknown or not configured

    Example:
        provider = get_provider("gateway", config)
        text = await provider.complete(system_prompt, user_text, image)
    """
    if provider_name == "gateway":
        if not config.has_gateway():
            raise ConfigurationError(
                "VISION_API_KEY is not configured. "
                "Set VISION_API_KEY in .env file"
            )
        return GatewayProvider(
            api_key=config.vision_api_key,
            model=config.vision_model,
            base_url=config.vision_base_url
        )

    elif provider_name == "anthropic":
        if not config.has_anthropic():
            raise ConfigurationError(
                "Anthropic API key not configured. "
                "Set ANTHROPIC_API_KEY in .env file"
            )
        return AnthropicProvider(
            api_key=config.anthropic_api_key,
            model=config.anthropic_model
        )

    else:
        raise ConfigurationError(
            f"Unknown provider: {provider_name}. "
            f"Choose from: gateway, anthropic"
        )
