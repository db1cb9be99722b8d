"""
Model Response Sanitizer

Recovers a JSON object from free-form model text. Models are told to
answer with bare JSON but often wrap it in markdown fences, add prose
around it, or leave trailing commas.

Each stage is a pure ``str -> dict | None`` function; stages run in
order and the first success wins. Nothing here raises.
"""

import json
import logging
import re
from enum import Enum
from typing import Callable, Optional

logger = logging.getLogger(__name__)

FENCE_PATTERN = re.compile(r"```(?:json)?\n?", re.IGNORECASE)
TRAILING_COMMA_PATTERN = re.compile(r",\s*([\]}])")


class ParseStage(str, Enum):
    DIRECT = "direct"
    FENCE_STRIPPED = "fence_stripped"
    BRACE_EXTRACTED = "brace_extracted"
    TRAILING_COMMA_FIXED = "trailing_comma_fixed"


def _loads_object(text: str) -> Optional[dict]:
    try:
        data = json.loads(text)
    except (TypeError, ValueError):
        return None
    return data if isinstance(data, dict) else None


def _strip_fences(text: str) -> str:
    return FENCE_PATTERN.sub("", text).strip()


def _brace_slice(text: str) -> Optional[str]:
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        return None
    return text[start:end + 1]


def parse_direct(text: str) -> Optional[dict]:
    return _loads_object(text.strip())


def parse_fence_stripped(text: str) -> Optional[dict]:
    return _loads_object(_strip_fences(text))


def parse_brace_extracted(text: str) -> Optional[dict]:
    candidate = _brace_slice(_strip_fences(text))
    return _loads_object(candidate) if candidate else None


def parse_trailing_comma_fixed(text: str) -> Optional[dict]:
    cleaned = _strip_fences(text)
    candidate = _brace_slice(cleaned) or cleaned
    return _loads_object(TRAILING_COMMA_PATTERN.sub(r"\1", candidate))


PARSE_CHAIN: tuple[tuple[ParseStage, Callable[[str], Optional[dict]]], ...] = (
    (ParseStage.DIRECT, parse_direct),
    (ParseStage.FENCE_STRIPPED, parse_fence_stripped),
    (ParseStage.BRACE_EXTRACTED, parse_brace_extracted),
    (ParseStage.TRAILING_COMMA_FIXED, parse_trailing_comma_fixed),
)


def parse_model_json_tagged(text: Optional[str]) -> tuple[Optional[ParseStage], Optional[dict]]:
    """
    Run the recovery chain and report which stage succeeded.

    Returns:
        (stage, object) on success, (None, None) when every stage failed
    """
    if not text or not isinstance(text, str):
        return None, None

    for stage, parse in PARSE_CHAIN:
        data = parse(text)
        if data is not None:
            if stage is not ParseStage.DIRECT:
                logger.debug("Recovered model JSON via %s", stage.value)
            return stage, data

    logger.error("Failed to parse model response after all attempts. Content length: %d", len(text))
    return None, None


def parse_model_json(text: Optional[str]) -> Optional[dict]:
    """Recover a JSON object from model text, None if impossible"""
    return parse_model_json_tagged(text)[1]
