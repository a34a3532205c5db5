"""Strict contracts for the two model-produced payloads and their building blocks.

Every model is frozen: results are never mutated after construction, normalization
builds new values with ``model_copy``. Numbers and booleans are validated strictly so a
model emitting ``"0.7"`` or ``"true"`` is rejected rather than silently coerced.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, ValidationInfo, field_validator

from .config import DEFAULT_MAX_CANDIDATES
from .errors import SchemaInvalid

ArchType = Literal["flat", "normal", "high", "unknown"]
Usage = Literal["road", "trail", "treadmill", "casual", "racing"]
Terrain = Literal["road", "trail", "treadmill", "casual", "racing", "mixed"]
Stability = Literal["neutral", "stable", "motion_control"]
Cushion = Literal["low", "medium", "high"]

UnitFloat = Annotated[float, Field(ge=0.0, le=1.0, strict=True)]
Score = Annotated[float, Field(ge=0.0, le=100.0, strict=True)]
NonNegativeInt = Annotated[int, Field(ge=0, strict=True)]
StrictInt = Annotated[int, Field(strict=True)]
StrictBool = Annotated[bool, Field(strict=True)]

MAX_RANKED = 5
MAX_AVOID = 5
MAX_REASONS = 6


class _Contract(BaseModel):
    model_config = ConfigDict(frozen=True)


class BBox(_Contract):
    x: UnitFloat
    y: UnitFloat
    w: UnitFloat
    h: UnitFloat


class VisionCandidate(_Contract):
    raw_label: str
    brand: str | None
    model: str | None
    confidence: UnitFloat
    bbox: BBox | None
    notes: str | None = None

    @property
    def catalog_key(self) -> str | None:
        """``"{brand} {model}"`` when both are known, the catalog lookup key."""
        if self.brand and self.model:
            return f"{self.brand} {self.model}"
        return None


class ImageQuality(_Contract):
    lighting: Literal["good", "ok", "bad"]
    blur: Literal["none", "mild", "high"]
    occlusion: Literal["none", "some", "heavy"]


class ErrorEntry(_Contract):
    code: str
    message: str


class VisionResult(_Contract):
    request_id: str
    candidates: list[VisionCandidate]
    image_quality: ImageQuality
    errors: list[ErrorEntry]

    @field_validator("candidates")
    @classmethod
    def _limit_candidates(cls, value: list[VisionCandidate], info: ValidationInfo) -> list[VisionCandidate]:
        # The cap depends on run configuration and applies only via validate_detection.
        if not info.context or "max_candidates" not in info.context:
            return value
        limit = info.context["max_candidates"]
        if len(value) > limit:
            raise ValueError(f"List should have at most {limit} items after validation, not {len(value)}")
        return value


class UserProfile(_Contract):
    arch_type: ArchType
    usage: Usage
    weekly_mileage: NonNegativeInt


class ShoeSpec(_Contract):
    model_config = ConfigDict(frozen=True, from_attributes=True)

    brand: str
    model: str
    terrain: Terrain
    stability: Stability
    cushion: Cushion
    drop_mm: StrictInt | None = None
    weight_g: StrictInt | None = None

    @property
    def catalog_key(self) -> str:
        return f"{self.brand} {self.model}"


class RecommendationSpecs(_Contract):
    terrain: str | None
    stability: str | None
    drop_mm: StrictInt | None
    weight_g: StrictInt | None
    cushion: str | None

    @classmethod
    def from_shoe(cls, shoe: ShoeSpec | None) -> "RecommendationSpecs":
        if shoe is None:
            return cls(terrain=None, stability=None, drop_mm=None, weight_g=None, cushion=None)
        return cls(
            terrain=shoe.terrain,
            stability=shoe.stability,
            drop_mm=shoe.drop_mm,
            weight_g=shoe.weight_g,
            cushion=shoe.cushion,
        )


class RankedRecommendation(_Contract):
    model: str
    match_score: Score
    why: list[str] = Field(min_length=1, max_length=MAX_REASONS)
    specs: RecommendationSpecs
    tradeoffs: list[str] = Field(max_length=MAX_REASONS)
    confidence: UnitFloat


class AvoidEntry(_Contract):
    model: str
    reason: str
    confidence: UnitFloat


class RecommendationsResult(_Contract):
    request_id: str
    profile_used: UserProfile
    ranked: list[RankedRecommendation] = Field(max_length=MAX_RANKED)
    avoid: list[AvoidEntry] = Field(max_length=MAX_AVOID)
    fallback_needed: StrictBool
    errors: list[ErrorEntry]


def validate_detection(payload: Any, max_candidates: int = DEFAULT_MAX_CANDIDATES) -> VisionResult:
    """Validate a parsed detection payload; raises ``SchemaInvalid`` listing every violation."""
    try:
        return VisionResult.model_validate(payload, context={"max_candidates": max_candidates})
    except ValidationError as exc:
        raise SchemaInvalid("detection", _violations(exc)) from exc


def validate_ranking(payload: Any) -> RecommendationsResult:
    """Validate a ranking payload; raises ``SchemaInvalid`` listing every violation."""
    try:
        return RecommendationsResult.model_validate(payload)
    except ValidationError as exc:
        raise SchemaInvalid("ranking", _violations(exc)) from exc


def _violations(exc: ValidationError) -> list[str]:
    out: list[str] = []
    for err in exc.errors(include_url=False):
        loc = ".".join(str(part) for part in err["loc"]) or "<root>"
        out.append(f"{loc}: {err['msg']}")
    return out
