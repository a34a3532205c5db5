from __future__ import annotations

VISION_PARTIAL_BBOX = "VISION_PARTIAL_BBOX"
VISION_PARSE_ERROR = "VISION_PARSE_ERROR"
VISION_SCHEMA_INVALID = "VISION_SCHEMA_INVALID"
VISION_UPSTREAM_ERROR = "VISION_UPSTREAM_ERROR"
VISION_UNAVAILABLE = "VISION_UNAVAILABLE"
RANKING_NO_MAPPED_CANDIDATES = "RANKING_NO_MAPPED_CANDIDATES"
MOCK_RANK_SCHEMA_INVALID = "MOCK_RANK_SCHEMA_INVALID"
RANKING_NOT_ENABLED = "RANKING_NOT_ENABLED"


class ParseError(ValueError):
    """Raised when no JSON object can be recovered from a model response."""


class SchemaInvalid(ValueError):
    """Raised when a payload fails the detection or ranking schema.

    Carries every violated constraint, not just the first one.
    """

    def __init__(self, schema: str, violations: list[str]) -> None:
        self.schema = schema
        self.violations = list(violations)
        super().__init__(f"{schema} schema invalid: " + "; ".join(self.violations))


class UpstreamError(RuntimeError):
    """Raised when the model call itself fails (transport, auth, rate limit)."""

    def __init__(self, message: str, status: int | None = None) -> None:
        self.status = status
        super().__init__(message)


class RenderError(RuntimeError):
    """Raised when the overlay source image cannot be read."""
