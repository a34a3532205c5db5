from __future__ import annotations

from .contracts import BBox

MIN_EXTENT = 0.01


def clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


def normalize_bbox(bbox: BBox | None) -> BBox | None:
    """Repair a model box into the unit square.

    ``None`` means the shoe could not be localized and passes through unchanged.
    The origin is held at most ``1 - MIN_EXTENT`` so the minimum extent still fits.
    """
    if bbox is None:
        return None

    x = min(clamp01(bbox.x), 1.0 - MIN_EXTENT)
    y = min(clamp01(bbox.y), 1.0 - MIN_EXTENT)
    w = max(MIN_EXTENT, min(clamp01(bbox.w), 1.0 - x))
    h = max(MIN_EXTENT, min(clamp01(bbox.h), 1.0 - y))
    return BBox(x=x, y=y, w=w, h=h)
