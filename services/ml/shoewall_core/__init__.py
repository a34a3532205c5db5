"""Shared detection, ranking and overlay components for ShoeWall services."""

from .config import PipelineConfig, clamp_max_candidates
from .contracts import (
    BBox,
    ErrorEntry,
    RecommendationsResult,
    ShoeSpec,
    UserProfile,
    VisionCandidate,
    VisionResult,
    validate_detection,
    validate_ranking,
)
from .errors import ParseError, RenderError, SchemaInvalid, UpstreamError
from .geometry import normalize_bbox
from .overlay import BBoxSummary, render_overlay, summarize_bboxes
from .parsing import parse_model_json, patch_detection_payload
from .ranking import RankingStage
from .vision import VisionStage

__all__ = [
    "BBox",
    "BBoxSummary",
    "ErrorEntry",
    "ParseError",
    "PipelineConfig",
    "RankingStage",
    "RecommendationsResult",
    "RenderError",
    "SchemaInvalid",
    "ShoeSpec",
    "UpstreamError",
    "UserProfile",
    "VisionCandidate",
    "VisionResult",
    "VisionStage",
    "clamp_max_candidates",
    "normalize_bbox",
    "parse_model_json",
    "patch_detection_payload",
    "render_overlay",
    "summarize_bboxes",
    "validate_detection",
    "validate_ranking",
]
