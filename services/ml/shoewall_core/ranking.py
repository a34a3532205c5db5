from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from .config import PipelineConfig
from .contracts import (
    ErrorEntry,
    RecommendationsResult,
    RecommendationSpecs,
    ShoeSpec,
    UserProfile,
    VisionCandidate,
    validate_ranking,
)
from .errors import (
    MOCK_RANK_SCHEMA_INVALID,
    RANKING_NO_MAPPED_CANDIDATES,
    RANKING_NOT_ENABLED,
    VISION_UNAVAILABLE,
    SchemaInvalid,
)
from .upstream import ChatCompletionClient, OpenAIChatClient

logger = logging.getLogger(__name__)

MOCK_MAX_RANKED = 3
HIGH_MILEAGE_THRESHOLD = 30

_MOCK_BASE_SCORE = 90.0
_MOCK_SCORE_STEP = 8.0
_MOCK_CONFIDENCE = 0.65


def _mock_tradeoffs(profile: UserProfile, spec: ShoeSpec | None) -> list[str]:
    if spec is None:
        return ["Not in catalog; specs unavailable"]

    out: list[str] = []
    if spec.terrain not in (profile.usage, "mixed"):
        out.append(f"Built for {spec.terrain}, not {profile.usage}")
    if profile.arch_type == "flat" and spec.stability == "neutral":
        out.append("Neutral platform offers little support for flat arches")
    if profile.arch_type == "high" and spec.stability == "motion_control":
        out.append("Motion control may feel rigid for high arches")
    if profile.weekly_mileage >= HIGH_MILEAGE_THRESHOLD and spec.cushion == "low":
        out.append("Low cushion for high weekly mileage")
    return out


def _mock_reasons(profile: UserProfile, spec: ShoeSpec | None) -> list[str]:
    why = [f"Matches {profile.usage} usage", f"Heuristic match for {profile.arch_type} arch"]
    if spec is not None:
        why.append(f"{spec.cushion.capitalize()} cushion, {spec.stability} stability")
    return why


class RankingStage:
    """Ranks detected candidates against a runner profile.

    ``run`` never raises and every result it returns has passed the ranking schema,
    including its own mock output.
    """

    def __init__(self, config: PipelineConfig, client: ChatCompletionClient | None = None) -> None:
        self.config = config
        if client is None and not config.mock_ranking and config.has_credentials:
            client = OpenAIChatClient.from_config(config)
        self.client = client

    @property
    def is_mock(self) -> bool:
        return self.config.mock_ranking or self.client is None

    async def run(
        self,
        request_id: str,
        profile: UserProfile,
        candidates: Sequence[VisionCandidate],
        catalog_by_name: Mapping[str, ShoeSpec],
        vision_failed: bool,
    ) -> RecommendationsResult:
        if vision_failed:
            logger.info("ranking_fallback request_id=%s reason=%s", request_id, VISION_UNAVAILABLE)
            return self._fallback(
                request_id,
                profile,
                VISION_UNAVAILABLE,
                "Automatic shoe detection unavailable. Use manual search.",
            )

        if self.is_mock:
            return self._mock(request_id, profile, candidates, catalog_by_name)

        # Live ranking is not wired up yet; keep the validated fallback shape.
        logger.info("ranking_fallback request_id=%s reason=%s", request_id, RANKING_NOT_ENABLED)
        return self._fallback(request_id, profile, RANKING_NOT_ENABLED, "Real ranking not enabled yet.")

    def _mock(
        self,
        request_id: str,
        profile: UserProfile,
        candidates: Sequence[VisionCandidate],
        catalog_by_name: Mapping[str, ShoeSpec],
    ) -> RecommendationsResult:
        ranked: list[dict[str, Any]] = []
        seen: set[str] = set()
        for cand in candidates:
            key = cand.catalog_key
            if key is None or key in seen:
                continue
            seen.add(key)
            spec = catalog_by_name.get(key)
            ranked.append(
                {
                    "model": key,
                    "match_score": _MOCK_BASE_SCORE - _MOCK_SCORE_STEP * len(ranked),
                    "why": _mock_reasons(profile, spec),
                    "specs": RecommendationSpecs.from_shoe(spec).model_dump(),
                    "tradeoffs": _mock_tradeoffs(profile, spec),
                    "confidence": _MOCK_CONFIDENCE,
                }
            )
            if len(ranked) == MOCK_MAX_RANKED:
                break

        errors: list[dict[str, str]] = []
        if not ranked:
            errors.append(
                {
                    "code": RANKING_NO_MAPPED_CANDIDATES,
                    "message": "No detected candidate could be mapped to a brand and model.",
                }
            )

        payload = {
            "request_id": request_id,
            "profile_used": profile.model_dump(),
            "ranked": ranked,
            "avoid": [],
            "fallback_needed": not ranked,
            "errors": errors,
        }
        try:
            result = validate_ranking(payload)
        except SchemaInvalid as exc:
            logger.warning("ranking_mock_schema_invalid request_id=%s violations=%d", request_id, len(exc.violations))
            return self._fallback(request_id, profile, MOCK_RANK_SCHEMA_INVALID, str(exc))

        logger.info("ranking_mock request_id=%s ranked=%d", request_id, len(result.ranked))
        return result

    @staticmethod
    def _fallback(request_id: str, profile: UserProfile, code: str, message: str) -> RecommendationsResult:
        return RecommendationsResult(
            request_id=request_id,
            profile_used=profile,
            ranked=[],
            avoid=[],
            fallback_needed=True,
            errors=[ErrorEntry(code=code, message=message)],
        )
