"""Debug overlay: boxes, confidence chips and a panel for candidates without a bbox."""

from __future__ import annotations

import io
import math
from collections.abc import Sequence
from dataclasses import dataclass

from PIL import Image, ImageDraw, ImageFont, UnidentifiedImageError

from .contracts import VisionCandidate
from .errors import RenderError

PALETTE = (
    "#f43f5e",
    "#10b981",
    "#3b82f6",
    "#f59e0b",
    "#8b5cf6",
    "#14b8a6",
    "#ef4444",
    "#22c55e",
)
MAX_LISTED_UNLOCALIZED = 8

LABEL_PAD_X = 8
LABEL_PAD_Y = 5
LABEL_TEXT_COLOR = "#111111"
CHIP_ALPHA = round(255 * 0.9)

PANEL_ORIGIN = (10, 10)
PANEL_FILL = "#111111"
PANEL_ALPHA = round(255 * 0.72)
PANEL_TEXT_COLOR = "#f8fafc"


@dataclass(frozen=True, slots=True)
class BBoxSummary:
    total_candidates: int
    localized_candidates: int
    missing_bbox: int


def summarize_bboxes(candidates: Sequence[VisionCandidate]) -> BBoxSummary:
    localized = sum(1 for cand in candidates if cand.bbox is not None)
    return BBoxSummary(
        total_candidates=len(candidates),
        localized_candidates=localized,
        missing_bbox=len(candidates) - localized,
    )


def candidate_label(candidate: VisionCandidate) -> str:
    name = candidate.catalog_key or candidate.raw_label
    return f"{name} ({round(candidate.confidence * 100)}%)"


def _rgba(hex_color: str, alpha: int = 255) -> tuple[int, int, int, int]:
    value = hex_color.lstrip("#")
    return int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16), alpha


def _font(size: int) -> ImageFont.ImageFont | ImageFont.FreeTypeFont:
    return ImageFont.load_default(size=size)


def _open_image(image_bytes: bytes) -> Image.Image:
    try:
        image = Image.open(io.BytesIO(image_bytes))
        image.load()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as exc:
        raise RenderError("Unable to read image dimensions for overlay rendering") from exc
    if not image.width or not image.height:
        raise RenderError("Unable to read image dimensions for overlay rendering")
    return image


def read_image_size(image_bytes: bytes) -> tuple[int, int]:
    image = _open_image(image_bytes)
    return image.width, image.height


def render_overlay(image_bytes: bytes, candidates: Sequence[VisionCandidate]) -> bytes:
    """Draw detection results onto the image and return PNG bytes of the same size.

    Raises ``RenderError`` when the source cannot be decoded; there is no degraded output.
    """
    source = _open_image(image_bytes)
    keep_alpha = source.mode in ("RGBA", "LA") or "transparency" in source.info
    base = source.convert("RGBA")
    width, height = base.size

    min_side = min(width, height)
    stroke = max(2, round(min_side * 0.004))
    font_size = max(13, round(min_side * 0.028))
    font = _font(font_size)

    layer = Image.new("RGBA", base.size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(layer)
    unlocalized: list[str] = []

    for idx, cand in enumerate(candidates):
        label = candidate_label(cand)
        if cand.bbox is None:
            unlocalized.append(label)
            continue
        color = PALETTE[idx % len(PALETTE)]

        x = min(round(cand.bbox.x * width), max(0, width - 1))
        y = min(round(cand.bbox.y * height), max(0, height - 1))
        box_w = min(max(1, round(cand.bbox.w * width)), width - x)
        box_h = min(max(1, round(cand.bbox.h * height)), height - y)
        draw.rectangle((x, y, x + box_w - 1, y + box_h - 1), outline=_rgba(color), width=stroke)

        label_w = max(1, min(width - 4, math.ceil(draw.textlength(label, font=font)) + LABEL_PAD_X * 2))
        label_h = font_size + LABEL_PAD_Y * 2
        label_x = x
        label_y = y - label_h - 4
        if label_x + label_w > width - 2:
            label_x = max(2, width - label_w - 2)
        if label_y < 2:
            label_y = min(height - label_h - 2, y + 4)

        draw.rounded_rectangle(
            (label_x, label_y, label_x + label_w, label_y + label_h),
            radius=4,
            fill=_rgba(color, CHIP_ALPHA),
        )
        draw.text(
            (label_x + LABEL_PAD_X, label_y + LABEL_PAD_Y),
            label,
            font=font,
            fill=_rgba(LABEL_TEXT_COLOR),
        )

    if unlocalized:
        _draw_unlocalized_panel(draw, unlocalized, width, font_size)

    out = Image.alpha_composite(base, layer)
    if not keep_alpha:
        out = out.convert("RGB")
    buf = io.BytesIO()
    out.save(buf, format="PNG", optimize=True)
    return buf.getvalue()


def _draw_unlocalized_panel(draw: ImageDraw.ImageDraw, labels: list[str], width: int, font_size: int) -> None:
    list_size = max(12, round(font_size * 0.9))
    list_font = _font(list_size)
    row_h = list_size + 4

    visible = labels[:MAX_LISTED_UNLOCALIZED]
    lines = [f"No bbox ({len(labels)})", *visible]
    if len(labels) > len(visible):
        lines.append(f"+{len(labels) - len(visible)} more")

    max_line_w = max(math.ceil(draw.textlength(line, font=list_font)) for line in lines)
    panel_x, panel_y = PANEL_ORIGIN
    panel_w = max(1, min(width - 20, max_line_w + 20))
    panel_h = len(lines) * row_h + 12
    draw.rounded_rectangle(
        (panel_x, panel_y, panel_x + panel_w, panel_y + panel_h),
        radius=6,
        fill=_rgba(PANEL_FILL, PANEL_ALPHA),
    )
    for idx, line in enumerate(lines):
        draw.text(
            (panel_x + 10, panel_y + 6 + idx * row_h),
            line,
            font=list_font,
            fill=_rgba(PANEL_TEXT_COLOR),
        )
