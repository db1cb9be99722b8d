"""Tests for recovering JSON objects from model text."""

from __future__ import annotations

import json

import pytest

from design_audit.sanitizer import (
    ParseStage,
    parse_brace_extracted,
    parse_direct,
    parse_fence_stripped,
    parse_model_json,
    parse_model_json_tagged,
    parse_trailing_comma_fixed,
)


def test_fenced_json_with_trailing_prose() -> None:
    text = '```json\n{"overallScore": 80, "summary": "Clean"}\n```\nLet me know if you need more detail.'

    stage, data = parse_model_json_tagged(text)

    assert data["overallScore"] == 80
    assert stage is ParseStage.BRACE_EXTRACTED


def test_trailing_comma_recovered_by_last_stage() -> None:
    stage, data = parse_model_json_tagged('{"a":1,}')

    assert data == {"a": 1}
    assert stage is ParseStage.TRAILING_COMMA_FIXED


def test_clean_json_parses_directly() -> None:
    stage, data = parse_model_json_tagged('  {"overallScore": 64}\n')

    assert stage is ParseStage.DIRECT
    assert data == {"overallScore": 64}


def test_fence_only_wrapper() -> None:
    stage, data = parse_model_json_tagged('```JSON\n{"verdict": "good"}\n```')

    assert stage is ParseStage.FENCE_STRIPPED
    assert data == {"verdict": "good"}


def test_prose_around_object() -> None:
    text = 'Here is my analysis:\n{"overallScore": 55, "categories": []}\nHope this helps!'

    assert parse_model_json(text) == {"overallScore": 55, "categories": []}


def test_nested_trailing_commas_inside_prose() -> None:
    text = 'Result: {"categories": [{"name": "Layout", "issues": [],},], "overallScore": 70,} done'

    assert parse_model_json(text) == {"categories": [{"name": "Layout", "issues": []}], "overallScore": 70}


@pytest.mark.parametrize("text", ["", None, "I could not analyze this image.", "{not json at all}", "} backwards {"])
def test_unrecoverable_text(text) -> None:
    assert parse_model_json_tagged(text) == (None, None)


def test_top_level_array_is_not_an_object() -> None:
    assert parse_model_json('[{"a": 1}]') == {"a": 1}
    assert parse_direct('[1, 2]') is None
    assert parse_model_json("[1, 2]") is None


def test_recovery_is_idempotent() -> None:
    text = '```json\n{"overallScore": 91, "riskLevel": "Low",}\n```'

    first = parse_model_json(text)
    second = parse_model_json(json.dumps(first))

    assert first == second == {"overallScore": 91, "riskLevel": "Low"}


def test_stages_are_pure_and_independent() -> None:
    fenced = '```\n{"x": 1}\n```'

    assert parse_direct(fenced) is None
    assert parse_fence_stripped(fenced) == {"x": 1}
    assert parse_brace_extracted("noise {\"x\": 1} noise") == {"x": 1}
    assert parse_trailing_comma_fixed('{"x": [1, 2,],}') == {"x": [1, 2]}
