"""Shared pytest fixtures and fakes."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, Callable
from urllib.parse import parse_qs, unquote, urlparse

import pytest


PROJECT_DIR = Path(__file__).resolve().parents[1]
if str(PROJECT_DIR) not in sys.path:
    sys.path.insert(0, str(PROJECT_DIR))


class FakeResponse:
    """Just enough of requests.Response for the core."""

    def __init__(self, status_code: int = 200, payload: Any = None, headers: dict | None = None) -> None:
        self.status_code = status_code
        self._payload = payload if payload is not None else {}
        self.headers = headers or {}

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 400

    @property
    def text(self) -> str:
        return json.dumps(self._payload)

    def json(self) -> Any:
        return self._payload


class FakeSession:
    """Routes GET/HEAD calls to a handler and records them."""

    def __init__(self, handler: Callable[[str], FakeResponse]) -> None:
        self.handler = handler
        self.calls: list[str] = []
        self.head_calls: list[str] = []

    def get(self, url: str, headers: dict | None = None, timeout: float | None = None) -> FakeResponse:
        self.calls.append(url)
        return self.handler(url)

    def head(self, url: str, allow_redirects: bool = True, timeout: float | None = None) -> FakeResponse:
        self.head_calls.append(url)
        return self.handler(url)


class RecordingSleep:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def node(node_id: str, node_type: str, name: str | None = None, children: list | None = None) -> dict:
    return {"id": node_id, "name": name or node_id, "type": node_type, "children": children or []}


def figma_file(pages: list[dict], name: str = "Checkout Flow") -> dict:
    return {"name": name, "document": node("0:0", "DOCUMENT", "Document", pages)}


def page_with_frames(page_id: str, count: int, start: int = 1) -> dict:
    return node(
        page_id,
        "CANVAS",
        f"Page {page_id}",
        [node(f"{page_id}-{i}", "FRAME", f"Screen {page_id}-{i}") for i in range(start, start + count)],
    )


def requested_ids(url: str) -> list[str]:
    ids = parse_qs(urlparse(url).query).get("ids", [""])[0]
    return unquote(ids).split(",")


def images_for(url: str) -> dict:
    return {node_id: f"https://figma-alpha-api.s3.amazonaws.com/images/{node_id}.png" for node_id in requested_ids(url)}


class FakeProvider:
    """VisionProvider stand-in returning canned text or raising."""

    name = "fake"

    def __init__(self, response: str | Callable[..., Any] = "") -> None:
        self.response = response
        self.calls: list[dict] = []

    def is_available(self) -> bool:
        return True

    async def complete(self, system_prompt: str, user_text: str, image) -> str:
        self.calls.append({"system_prompt": system_prompt, "user_text": user_text, "image": image})
        if callable(self.response):
            outcome = self.response(system_prompt, user_text, image)
            if hasattr(outcome, "__await__"):
                outcome = await outcome
            return outcome
        return self.response


AUDIT_PAYLOAD = {
    "overallScore": 72,
    "summary": "Solid layout with a few contrast problems.",
    "riskLevel": "Medium",
    "categories": [
        {
            "name": "Accessibility",
            "score": 58,
            "icon": "♿",
            "issues": [
                {
                    "id": "ACC-01",
                    "ruleId": "A1",
                    "principle": "Contrast",
                    "title": "Low contrast body text",
                    "description": "Grey text on white falls below 4.5:1.",
                    "severity": "critical",
                    "category": "Accessibility",
                    "suggestion": "Darken body text to #4A4A4A.",
                    "x": 40,
                    "y": 62,
                }
            ],
        },
        {"name": "Visual Hierarchy", "score": 81, "icon": "👁", "issues": []},
    ],
}


@pytest.fixture
def audit_payload() -> dict:
    return json.loads(json.dumps(AUDIT_PAYLOAD))


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def config():
    from design_audit.models import Config

    return Config(
        figma_access_token="figd_test-token",
        vision_api_key="test-key",
        figma_export_delay=0,
        figma_batch_delay=0,
    )
