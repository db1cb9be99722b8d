"""
Configuration Management

Loads configuration from .env files and provides typed config objects.
Handles API keys, Figma pacing settings, and default values.
"""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .models import Config

# Config field -> environment variable
ENV_VARS = {
    "figma_access_token": "FIGMA_ACCESS_TOKEN",
    "figma_api_base": "FIGMA_API_BASE",
    "figma_max_frames": "FIGMA_MAX_FRAMES",
    "figma_file_depth": "FIGMA_FILE_DEPTH",
    "figma_export_scale": "FIGMA_EXPORT_SCALE",
    "figma_batch_size": "FIGMA_BATCH_SIZE",
    "figma_batch_delay": "FIGMA_BATCH_DELAY",
    "figma_export_delay": "FIGMA_EXPORT_DELAY",
    "figma_max_retries": "FIGMA_MAX_RETRIES",
    "figma_backoff_base": "FIGMA_BACKOFF_BASE",
    "vision_provider": "VISION_PROVIDER",
    "vision_api_key": "VISION_API_KEY",
    "vision_base_url": "VISION_BASE_URL",
    "vision_model": "VISION_MODEL",
    "anthropic_api_key": "ANTHROPIC_API_KEY",
    "anthropic_model": "ANTHROPIC_MODEL",
    "audit_concurrency": "AUDIT_CONCURRENCY",
}


def load_config(env_file: Optional[Path] = None) -> Config:
    """
    Load configuration from .env file and environment variables.

    Searches for .env file in:
    1. Provided env_file path
    2. Current directory
    3. User's home directory

    Environment variables override .env file values. Unset or empty
    variables keep the Config defaults.

    Args:
        env_file: Optional path to .env file

    Returns:
        Config object with all settings

    Raises:
        pydantic.ValidationError: If a variable holds an invalid value

    Example:
        config = load_config()
        if config.has_figma():
            exporter = FigmaExporter(config)
    """
    # Load .env file
    if env_file and env_file.exists():
        load_dotenv(env_file)
    elif Path(".env").exists():
        load_dotenv(".env")
    elif (Path.home() / ".env").exists():
        load_dotenv(Path.home() / ".env")

    # Build config from environment
    values = {}
    for field, var in ENV_VARS.items():
        value = os.getenv(var)
        if value is not None and value.strip():
            values[field] = value.strip()

    return Config(**values)
