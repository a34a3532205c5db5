from __future__ import annotations

import json

import pytest

from shoewall_core.contracts import validate_detection
from shoewall_core.errors import ParseError
from shoewall_core.parsing import parse_model_json, patch_detection_payload


def test_parses_plain_json():
    assert parse_model_json('{"a": 1}') == {"a": 1}


def test_recovers_object_wrapped_in_prose_and_fences():
    embedded = '{"request_id": "r", "candidates": [{"raw_label": "x {y}"}]}'
    text = f"Sure! Here is the result:\n```json\n{embedded}\n```\nLet me know."
    assert parse_model_json(text) == json.loads(embedded)


@pytest.mark.parametrize("text", ["", None, "no json here", "} backwards {", "{not: valid}"])
def test_unrecoverable_text_raises_parse_error(text):
    with pytest.raises(ParseError):
        parse_model_json(text)


def test_multiple_fragments_are_not_recovered():
    with pytest.raises(ParseError):
        parse_model_json('first {"a": 1} then {"b": 2}')


def test_patch_injects_missing_bbox_without_mutating_input():
    raw = {"candidates": [{"raw_label": "a"}, {"raw_label": "b", "bbox": {"x": 0, "y": 0, "w": 1, "h": 1}}]}
    patched = patch_detection_payload(raw)

    assert patched["candidates"][0]["bbox"] is None
    assert patched["candidates"][1]["bbox"] == {"x": 0, "y": 0, "w": 1, "h": 1}
    assert "bbox" not in raw["candidates"][0]


@pytest.mark.parametrize("raw", [None, [], "text", {"candidates": "nope"}, {"other": 1}])
def test_patch_passes_unexpected_shapes_through(raw):
    assert patch_detection_payload(raw) == raw


def test_patched_payload_with_missing_bbox_validates_as_null():
    payload = {
        "request_id": "r-1",
        "candidates": [{"raw_label": "Nike Pegasus 40", "brand": "Nike", "model": "Pegasus 40", "confidence": 0.8}],
        "image_quality": {"lighting": "good", "blur": "none", "occlusion": "none"},
        "errors": [],
    }
    result = validate_detection(patch_detection_payload(payload))
    assert result.candidates[0].bbox is None
    assert result.candidates[0].notes is None


@pytest.mark.parametrize(
    "text",
    [
        "[" * 100000 + "]" * 100000,
        '{"a": ' * 100000 + "1" + "}" * 100000,
    ],
)
def test_deeply_nested_text_raises_parse_error(text):
    with pytest.raises(ParseError):
        parse_model_json(text)
