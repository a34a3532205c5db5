from __future__ import annotations

import json
from typing import Any

DETECTION_SYSTEM_PROMPT = (
    "You identify running shoe models on retail shoe walls and answer with a single JSON object."
)


def _detection_example(request_id: str) -> dict[str, Any]:
    return {
        "request_id": request_id,
        "candidates": [
            {
                "raw_label": "Nike Pegasus 40",
                "brand": "Nike",
                "model": "Pegasus 40",
                "confidence": 0.0,
                "bbox": {"x": 0.1, "y": 0.2, "w": 0.2, "h": 0.15},
                "notes": None,
            }
        ],
        "image_quality": {
            "lighting": "good|ok|bad",
            "blur": "none|mild|high",
            "occlusion": "none|some|heavy",
        },
        "errors": [],
    }


def detection_instruction(request_id: str, max_candidates: int) -> str:
    example = json.dumps(_detection_example(request_id), indent=2)
    return (
        "Analyze this image of a retail running shoe wall.\n\n"
        "TASK:\n"
        f"- Identify up to {max_candidates} distinct running shoe models visible.\n"
        "- Prefer popular running shoe lines.\n"
        "- If unsure about the exact version (e.g. Pegasus 40 vs 41), make a best guess and lower confidence.\n"
        "- For each candidate, return a normalized bbox around one visible instance.\n\n"
        "OUTPUT:\n"
        "Return STRICT JSON ONLY in this format:\n\n"
        f"{example}\n\n"
        "RULES:\n"
        "- confidence is between 0 and 1\n"
        "- bbox coordinates are normalized: x,y are top-left and w,h are width/height in [0,1]\n"
        "- prefer an approximate bbox over null; use null only when the shoe cannot be localized\n"
        "- brand and model are null when the label cannot be mapped to a known shoe\n"
        "- No markdown, no commentary, JSON only"
    )


def build_detection_messages(request_id: str, max_candidates: int, image_url: str) -> list[dict[str, Any]]:
    """Chat messages for one detection call; ``image_url`` is usually a base64 data URL."""
    return [
        {"role": "system", "content": DETECTION_SYSTEM_PROMPT},
        {
            "role": "user",
            "content": [
                {"type": "text", "text": detection_instruction(request_id, max_candidates)},
                {"type": "image_url", "image_url": {"url": image_url, "detail": "high"}},
            ],
        },
    ]
