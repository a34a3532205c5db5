from __future__ import annotations

import json
from typing import Any

from .errors import ParseError

# Deeply nested input exhausts the decoder's recursion limit instead of failing to decode.
_DECODE_ERRORS = (json.JSONDecodeError, RecursionError)


def parse_model_json(text: str | None) -> Any:
    """Recover the JSON object from a model response.

    Tries the whole text first, then the slice from the first ``{`` to the last ``}``
    (models like to wrap JSON in prose or markdown fences). Anything else is a ParseError.
    """
    raw = text or ""
    try:
        return json.loads(raw)
    except _DECODE_ERRORS:
        pass

    start = raw.find("{")
    end = raw.rfind("}")
    if start == -1 or end <= start:
        raise ParseError("Model output is not valid JSON")
    try:
        return json.loads(raw[start : end + 1])
    except _DECODE_ERRORS as exc:
        raise ParseError("Model output is not valid JSON") from exc


def patch_detection_payload(raw: Any) -> Any:
    """Give every candidate an explicit ``bbox`` key so the strict schema accepts omissions.

    Returns a patched copy; shapes that are not a dict with a candidate list pass through
    untouched and are left for validation to reject.
    """
    if not isinstance(raw, dict):
        return raw
    candidates = raw.get("candidates")
    if not isinstance(candidates, list):
        return raw

    patched: list[Any] = []
    for cand in candidates:
        if isinstance(cand, dict) and "bbox" not in cand:
            cand = {**cand, "bbox": None}
        patched.append(cand)
    return {**raw, "candidates": patched}
