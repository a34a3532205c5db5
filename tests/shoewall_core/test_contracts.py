from __future__ import annotations

import copy

import pytest
from pydantic import ValidationError

from shoewall_core.contracts import VisionResult, validate_detection, validate_ranking
from shoewall_core.errors import SchemaInvalid


def _detection(**overrides):
    payload = {
        "request_id": "req-1",
        "candidates": [
            {
                "raw_label": "Brooks Ghost 15",
                "brand": "Brooks",
                "model": "Ghost 15",
                "confidence": 0.7,
                "bbox": {"x": 0.1, "y": 0.1, "w": 0.2, "h": 0.2},
                "notes": None,
            }
        ],
        "image_quality": {"lighting": "ok", "blur": "mild", "occlusion": "some"},
        "errors": [],
    }
    payload.update(overrides)
    return payload


def _ranking(**overrides):
    payload = {
        "request_id": "req-1",
        "profile_used": {"arch_type": "normal", "usage": "road", "weekly_mileage": 20},
        "ranked": [
            {
                "model": "Brooks Ghost 15",
                "match_score": 90,
                "why": ["Matches road usage"],
                "specs": {"terrain": "road", "stability": "neutral", "drop_mm": 12, "weight_g": 286, "cushion": "medium"},
                "tradeoffs": [],
                "confidence": 0.65,
            }
        ],
        "avoid": [],
        "fallback_needed": False,
        "errors": [],
    }
    payload.update(overrides)
    return payload


def test_valid_detection_payload():
    result = validate_detection(_detection())
    assert isinstance(result, VisionResult)
    assert result.candidates[0].catalog_key == "Brooks Ghost 15"


def test_unknown_keys_are_ignored():
    payload = _detection(extra_field="x")
    payload["candidates"][0]["color"] = "blue"
    assert validate_detection(payload).request_id == "req-1"


def test_bbox_key_is_required():
    payload = _detection()
    del payload["candidates"][0]["bbox"]
    with pytest.raises(SchemaInvalid) as exc:
        validate_detection(payload)
    assert any("bbox" in v for v in exc.value.violations)


def test_every_violation_is_reported():
    payload = _detection()
    payload["candidates"][0]["confidence"] = 1.5
    payload["image_quality"]["lighting"] = "dim"
    payload["candidates"][0]["bbox"]["x"] = -0.1

    with pytest.raises(SchemaInvalid) as exc:
        validate_detection(payload)

    joined = " | ".join(exc.value.violations)
    assert len(exc.value.violations) >= 3
    assert "candidates.0.confidence" in joined
    assert "image_quality.lighting" in joined
    assert "candidates.0.bbox.x" in joined


def test_numeric_strings_are_rejected():
    payload = _detection()
    payload["candidates"][0]["confidence"] = "0.7"
    with pytest.raises(SchemaInvalid):
        validate_detection(payload)


def test_integer_confidence_is_a_number():
    payload = _detection()
    payload["candidates"][0]["confidence"] = 1
    assert validate_detection(payload).candidates[0].confidence == 1.0


def test_candidate_limit_follows_max_candidates():
    payload = _detection()
    payload["candidates"] = payload["candidates"] * 3

    assert len(validate_detection(copy.deepcopy(payload), max_candidates=3).candidates) == 3
    with pytest.raises(SchemaInvalid) as exc:
        validate_detection(payload, max_candidates=2)
    assert "at most 2" in str(exc.value)


def test_non_object_payload_is_rejected():
    with pytest.raises(SchemaInvalid):
        validate_detection(["not", "an", "object"])


def test_vision_result_is_frozen():
    result = validate_detection(_detection())
    with pytest.raises(ValidationError):
        result.request_id = "other"


def test_valid_ranking_payload():
    result = validate_ranking(_ranking())
    assert result.ranked[0].match_score == 90
    assert result.fallback_needed is False


@pytest.mark.parametrize(
    "mutate",
    [
        lambda p: p["ranked"][0].update(match_score=101),
        lambda p: p["ranked"][0].update(why=[]),
        lambda p: p["ranked"][0].update(why=["w"] * 7),
        lambda p: p["ranked"][0].update(tradeoffs=["t"] * 7),
        lambda p: p.update(ranked=p["ranked"] * 6),
        lambda p: p.update(avoid=[{"model": "m", "reason": "r", "confidence": 0.1}] * 6),
        lambda p: p["profile_used"].update(weekly_mileage=-1),
        lambda p: p["profile_used"].update(usage="hiking"),
        lambda p: p.update(fallback_needed="false"),
        lambda p: p["ranked"][0]["specs"].update(drop_mm="10"),
    ],
)
def test_ranking_constraints_reject_whole_payload(mutate):
    payload = _ranking()
    mutate(payload)
    with pytest.raises(SchemaInvalid) as exc:
        validate_ranking(payload)
    assert exc.value.schema == "ranking"
