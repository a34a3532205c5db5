from __future__ import annotations

import logging
import uuid

from .config import PipelineConfig
from .contracts import BBox, ErrorEntry, ImageQuality, VisionCandidate, VisionResult, validate_detection
from .errors import (
    VISION_PARSE_ERROR,
    VISION_PARTIAL_BBOX,
    VISION_SCHEMA_INVALID,
    VISION_UPSTREAM_ERROR,
    ParseError,
    SchemaInvalid,
    UpstreamError,
)
from .geometry import normalize_bbox
from .parsing import parse_model_json, patch_detection_payload
from .prompts import build_detection_messages
from .upstream import ChatCompletionClient, OpenAIChatClient, image_data_url

logger = logging.getLogger(__name__)

DEGRADED_IMAGE_QUALITY = ImageQuality(lighting="ok", blur="mild", occlusion="some")

_MOCK_CANDIDATES = (
    VisionCandidate(
        raw_label="Nike Pegasus 40",
        brand="Nike",
        model="Pegasus 40",
        confidence=0.78,
        bbox=BBox(x=0.08, y=0.22, w=0.22, h=0.18),
    ),
    VisionCandidate(
        raw_label="Brooks Ghost 15",
        brand="Brooks",
        model="Ghost 15",
        confidence=0.74,
        bbox=BBox(x=0.36, y=0.28, w=0.2, h=0.16),
    ),
    VisionCandidate(
        raw_label="Hoka Clifton 9",
        brand="Hoka",
        model="Clifton 9",
        confidence=0.69,
        bbox=BBox(x=0.62, y=0.31, w=0.24, h=0.19),
    ),
)


def mock_vision_result(request_id: str, max_candidates: int) -> VisionResult:
    """Fixed detection used offline and in tests."""
    return VisionResult(
        request_id=request_id,
        candidates=list(_MOCK_CANDIDATES[:max_candidates]),
        image_quality=DEGRADED_IMAGE_QUALITY,
        errors=[],
    )


def degraded_vision_result(request_id: str, code: str, message: str) -> VisionResult:
    return VisionResult(
        request_id=request_id,
        candidates=[],
        image_quality=DEGRADED_IMAGE_QUALITY,
        errors=[ErrorEntry(code=code, message=message)],
    )


def normalize_vision_result(result: VisionResult) -> VisionResult:
    """Repair every bbox and add the partial-bbox advisory; returns a new result."""
    candidates = [cand.model_copy(update={"bbox": normalize_bbox(cand.bbox)}) for cand in result.candidates]
    errors = list(result.errors)
    missing = sum(1 for cand in candidates if cand.bbox is None)
    if missing:
        errors.append(
            ErrorEntry(
                code=VISION_PARTIAL_BBOX,
                message=f"{missing} candidate(s) missing bbox due to ambiguity or occlusion.",
            )
        )
    return result.model_copy(update={"candidates": candidates, "errors": errors})


class VisionStage:
    """Detection call plus parse, patch, validate and normalize.

    ``run`` never raises: every failure comes back as a result with no candidates and a
    single error entry, which downstream treats as "vision failed".
    """

    def __init__(self, config: PipelineConfig, client: ChatCompletionClient | None = None) -> None:
        self.config = config
        if client is None and not config.mock_vision and config.has_credentials:
            client = OpenAIChatClient.from_config(config)
        self.client = client

    @property
    def is_mock(self) -> bool:
        return self.config.mock_vision or self.client is None

    async def run(self, image_bytes: bytes, mime_type: str) -> VisionResult:
        request_id = str(uuid.uuid4())

        client = self.client
        if self.config.mock_vision or client is None:
            logger.info("vision_mock request_id=%s", request_id)
            return normalize_vision_result(mock_vision_result(request_id, self.config.max_candidates))

        messages = build_detection_messages(
            request_id=request_id,
            max_candidates=self.config.max_candidates,
            image_url=image_data_url(image_bytes, mime_type),
        )

        try:
            raw_text = await client.complete(messages)
        except UpstreamError as exc:
            status = exc.status if exc.status is not None else "unknown"
            logger.warning("vision_upstream_error request_id=%s status=%s", request_id, status)
            return degraded_vision_result(request_id, VISION_UPSTREAM_ERROR, f"OpenAI failed ({status}): {exc}")
        except Exception as exc:
            logger.exception("vision_upstream_error request_id=%s", request_id)
            return degraded_vision_result(request_id, VISION_UPSTREAM_ERROR, f"OpenAI failed (unknown): {exc}")

        try:
            payload = patch_detection_payload(parse_model_json(raw_text))
        except ParseError as exc:
            logger.warning("vision_parse_error request_id=%s", request_id)
            return degraded_vision_result(request_id, VISION_PARSE_ERROR, str(exc))

        try:
            validated = validate_detection(payload, max_candidates=self.config.max_candidates)
        except SchemaInvalid as exc:
            logger.warning("vision_schema_invalid request_id=%s violations=%d", request_id, len(exc.violations))
            return degraded_vision_result(request_id, VISION_SCHEMA_INVALID, str(exc))

        result = normalize_vision_result(validated.model_copy(update={"request_id": request_id}))
        logger.info(
            "vision_done request_id=%s candidates=%d errors=%d",
            request_id,
            len(result.candidates),
            len(result.errors),
        )
        return result
