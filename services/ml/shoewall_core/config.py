from __future__ import annotations

import math
from dataclasses import dataclass

DEFAULT_MAX_CANDIDATES = 8
MAX_CANDIDATES_FLOOR = 1
MAX_CANDIDATES_CEILING = 20


def clamp_max_candidates(value: object) -> int:
    """Coerce a raw N_max setting; unparseable values fall back to the default."""
    try:
        parsed = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return DEFAULT_MAX_CANDIDATES
    if not math.isfinite(parsed):
        return DEFAULT_MAX_CANDIDATES
    return max(MAX_CANDIDATES_FLOOR, min(MAX_CANDIDATES_CEILING, math.floor(parsed)))


@dataclass(frozen=True, slots=True)
class PipelineConfig:
    mock_vision: bool = True
    mock_ranking: bool = True
    max_candidates: int = DEFAULT_MAX_CANDIDATES
    openai_api_key: str | None = None
    openai_model: str = "gpt-4o-mini"
    openai_base_url: str = "https://api.openai.com/v1"
    openai_timeout_sec: float = 60.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "max_candidates", clamp_max_candidates(self.max_candidates))

    @property
    def has_credentials(self) -> bool:
        return bool((self.openai_api_key or "").strip())
