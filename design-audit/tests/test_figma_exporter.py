"""Tests for the Figma file fetch and image export pipeline."""

from __future__ import annotations

import asyncio

import pytest

from conftest import FakeResponse, FakeSession, figma_file, images_for, page_with_frames, requested_ids
from design_audit.errors import (
    AccessDeniedError,
    ConfigurationError,
    ExportFailedError,
    NoFramesError,
    RateLimitError,
    UpstreamError,
)
from design_audit.figma import FigmaExporter
from design_audit.http_client import RetryClient
from design_audit.models import Config, FigmaFileHandle


HANDLE = FigmaFileHandle(file_key="AbC123")


def _exporter(config: Config, handler, sleep) -> tuple[FigmaExporter, FakeSession]:
    session = FakeSession(handler)
    client = RetryClient(session=session, max_retries=config.figma_max_retries, sleep=sleep)
    return FigmaExporter(config, client=client, sleep=sleep), session


def _image_calls(session: FakeSession) -> list[str]:
    return [url for url in session.calls if "/images/" in url]


def _serve(file_payload: dict, images_handler=None):
    def handler(url: str) -> FakeResponse:
        if "/files/" in url:
            return FakeResponse(200, file_payload)
        if images_handler is not None:
            return images_handler(url)
        return FakeResponse(200, {"err": None, "images": images_for(url)})
    return handler


def test_caps_export_and_reports_total(config, recording_sleep) -> None:
    config = config.model_copy(update={"figma_max_frames": 8})
    document = figma_file([page_with_frames("1:0", 12), page_with_frames("2:0", 8)])
    exporter, session = _exporter(config, _serve(document), recording_sleep)

    extraction = asyncio.run(exporter.export_frames(HANDLE))

    assert extraction.total_frames == 20
    assert extraction.exported_frames == 8
    assert len(extraction.frames) == 8
    assert [frame.id for frame in extraction.frames] == [f"1:0-{i}" for i in range(1, 9)]
    assert extraction.file_name == "Checkout Flow"
    assert extraction.warnings == []
    assert all(frame.image_url.startswith("https://") for frame in extraction.frames)
    image_calls = _image_calls(session)
    assert len(image_calls) == 1
    assert len(requested_ids(image_calls[0])) == 8


def test_file_request_uses_depth_and_token(config, recording_sleep) -> None:
    exporter, session = _exporter(config, _serve(figma_file([page_with_frames("1:0", 1)])), recording_sleep)

    asyncio.run(exporter.export_frames(HANDLE))

    assert session.calls[0] == "https://api.figma.com/v1/files/AbC123?depth=2"
    assert exporter._headers == {"X-Figma-Token": "figd_test-token"}
    assert "format=png" in session.calls[1]
    assert "scale=1" in session.calls[1]


def test_pacing_delay_before_export(config, recording_sleep) -> None:
    config = config.model_copy(update={"figma_export_delay": 1.0})
    exporter, _ = _exporter(config, _serve(figma_file([page_with_frames("1:0", 2)])), recording_sleep)

    asyncio.run(exporter.export_frames(HANDLE))

    assert recording_sleep.delays == [1.0]


def test_falls_back_to_batches_and_skips_failed_batch(config, recording_sleep) -> None:
    config = config.model_copy(update={"figma_batch_size": 3, "figma_batch_delay": 2.0})
    calls = {"images": 0}

    def images(url: str) -> FakeResponse:
        calls["images"] += 1
        if calls["images"] == 1:
            return FakeResponse(500, {"err": "Render timeout"})
        if calls["images"] == 3:
            return FakeResponse(500, {"err": "Render timeout"})
        return FakeResponse(200, {"err": None, "images": images_for(url)})

    document = figma_file([page_with_frames("1:0", 7)])
    exporter, session = _exporter(config, _serve(document, images), recording_sleep)

    extraction = asyncio.run(exporter.export_frames(HANDLE))

    batch_calls = _image_calls(session)[1:]
    assert [len(requested_ids(url)) for url in batch_calls] == [3, 3, 1]
    assert [frame.id for frame in extraction.frames] == ["1:0-1", "1:0-2", "1:0-3", "1:0-7"]
    assert extraction.total_frames == 7
    assert extraction.exported_frames == 4
    assert extraction.warnings == [
        "Export batch 2 failed (500); 3 frames skipped",
        "3 of 7 frames could not be exported",
    ]
    assert recording_sleep.delays == [0, 2.0, 2.0]


def test_error_field_in_ok_response_triggers_batches(config, recording_sleep) -> None:
    calls = {"images": 0}

    def images(url: str) -> FakeResponse:
        calls["images"] += 1
        if calls["images"] == 1:
            return FakeResponse(200, {"err": "Too many nodes", "images": {}})
        return FakeResponse(200, {"err": None, "images": images_for(url)})

    exporter, session = _exporter(config, _serve(figma_file([page_with_frames("1:0", 4)]), images), recording_sleep)

    extraction = asyncio.run(exporter.export_frames(HANDLE))

    assert extraction.exported_frames == 4
    assert len(_image_calls(session)) == 3


def test_null_images_are_dropped_with_warning(config, recording_sleep) -> None:
    def images(url: str) -> FakeResponse:
        rendered = images_for(url)
        rendered["1:0-2"] = None
        return FakeResponse(200, {"err": None, "images": rendered})

    exporter, _ = _exporter(config, _serve(figma_file([page_with_frames("1:0", 3)]), images), recording_sleep)

    extraction = asyncio.run(exporter.export_frames(HANDLE))

    assert [frame.id for frame in extraction.frames] == ["1:0-1", "1:0-3"]
    assert extraction.warnings == ["1 of 3 frames could not be exported"]


def test_no_image_rendered_raises(config, recording_sleep) -> None:
    def images(url: str) -> FakeResponse:
        return FakeResponse(200, {"err": None, "images": {node_id: None for node_id in requested_ids(url)}})

    exporter, _ = _exporter(config, _serve(figma_file([page_with_frames("1:0", 3)]), images), recording_sleep)

    with pytest.raises(ExportFailedError) as exc_info:
        asyncio.run(exporter.export_frames(HANDLE))

    assert exc_info.value.status_code == 502


def test_rate_limited_export_aborts(config, recording_sleep) -> None:
    config = config.model_copy(update={"figma_max_retries": 2})

    def images(url: str) -> FakeResponse:
        return FakeResponse(429, headers={"Retry-After": "30"})

    exporter, session = _exporter(config, _serve(figma_file([page_with_frames("1:0", 3)]), images), recording_sleep)

    with pytest.raises(RateLimitError) as exc_info:
        asyncio.run(exporter.export_frames(HANDLE))

    assert exc_info.value.retry_after == 30.0
    assert exc_info.value.to_payload()["status"] == 429
    assert len(_image_calls(session)) == 3


def test_rate_limited_batch_aborts(config, recording_sleep) -> None:
    config = config.model_copy(update={"figma_max_retries": 0})
    calls = {"images": 0}

    def images(url: str) -> FakeResponse:
        calls["images"] += 1
        if calls["images"] == 1:
            return FakeResponse(500)
        if calls["images"] == 3:
            return FakeResponse(429)
        return FakeResponse(200, {"err": None, "images": images_for(url)})

    exporter, _ = _exporter(config, _serve(figma_file([page_with_frames("1:0", 9)]), images), recording_sleep)

    with pytest.raises(RateLimitError):
        asyncio.run(exporter.export_frames(HANDLE))


@pytest.mark.parametrize(
    "status, error",
    [
        (401, ConfigurationError),
        (403, AccessDeniedError),
        (404, UpstreamError),
        (500, UpstreamError),
    ],
)
def test_file_fetch_failures(status: int, error: type, config, recording_sleep) -> None:
    exporter, session = _exporter(config, lambda url: FakeResponse(status), recording_sleep)

    with pytest.raises(error):
        asyncio.run(exporter.export_frames(HANDLE))

    assert len(session.calls) == 1


def test_file_fetch_rate_limited_after_retries(config, recording_sleep) -> None:
    exporter, session = _exporter(config, lambda url: FakeResponse(429), recording_sleep)

    with pytest.raises(RateLimitError):
        asyncio.run(exporter.export_frames(HANDLE))

    assert len(session.calls) == 5
    assert recording_sleep.delays == [3.0, 6.0, 12.0, 24.0]


def test_upstream_error_message_includes_status(config, recording_sleep) -> None:
    exporter, _ = _exporter(config, lambda url: FakeResponse(500), recording_sleep)

    with pytest.raises(UpstreamError, match="Figma API error: 500"):
        asyncio.run(exporter.export_frames(HANDLE))


def test_file_without_frames(config, recording_sleep) -> None:
    empty = figma_file([{"id": "1:0", "name": "Page", "type": "CANVAS", "children": [
        {"id": "1:1", "name": "Label", "type": "TEXT"},
    ]}])
    exporter, session = _exporter(config, _serve(empty), recording_sleep)

    with pytest.raises(NoFramesError, match="No frames found"):
        asyncio.run(exporter.export_frames(HANDLE))

    assert _image_calls(session) == []


def test_pinned_node_narrows_export(config, recording_sleep) -> None:
    document = figma_file([page_with_frames("1:0", 3), page_with_frames("2:0", 2)])
    exporter, _ = _exporter(config, _serve(document), recording_sleep)

    extraction = asyncio.run(exporter.export_frames(FigmaFileHandle(file_key="AbC123", node_id="2:0")))

    assert [frame.id for frame in extraction.frames] == ["2:0-1", "2:0-2"]
    assert extraction.total_frames == 2


def test_missing_token_is_rejected() -> None:
    with pytest.raises(ConfigurationError, match="FIGMA_ACCESS_TOKEN"):
        FigmaExporter(Config())


def test_extraction_wire_shape(config, recording_sleep) -> None:
    exporter, _ = _exporter(config, _serve(figma_file([page_with_frames("1:0", 1)])), recording_sleep)

    wire = asyncio.run(exporter.export_frames(HANDLE)).to_wire()

    assert set(wire) == {"fileName", "fileKey", "frames", "totalFrames", "exportedFrames", "warnings"}
    assert set(wire["frames"][0]) == {"id", "name", "nodeId", "imageUrl"}
