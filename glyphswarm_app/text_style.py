from __future__ import annotations

"""
Text-style helpers shared by the mapper and the compositor.

  * parse_color(): CSS-like color strings -> QColor,
  * build_qfont(): QFont with an explicit pixel size,
  * build_text_path(): glyph path positioned like a 2D canvas would place
    text for a given alignment and baseline.
"""

import re
from typing import Tuple

from PyQt6.QtCore import QPointF
from PyQt6.QtGui import QColor, QFont, QFontMetricsF, QPainterPath

from .config import ParticleTextConfig

# Generic CSS families -> Qt style hints.
_GENERIC_FAMILIES = {
    "serif": QFont.StyleHint.Serif,
    "sans-serif": QFont.StyleHint.SansSerif,
    "monospace": QFont.StyleHint.Monospace,
    "cursive": QFont.StyleHint.Cursive,
    "fantasy": QFont.StyleHint.Fantasy,
}

_RGB_RE = re.compile(r"^rgba?\(\s*([^)]*)\)$", re.IGNORECASE)


# ---------------------------------------------------------------------------
# Colors
# ---------------------------------------------------------------------------


def _parse_channel(token: str) -> int:
    token = token.strip()
    if token.endswith("%"):
        value = float(token[:-1]) * 2.55
    else:
        value = float(token)
    return int(max(0, min(255, round(value))))


def _parse_alpha(token: str) -> float:
    token = token.strip()
    if token.endswith("%"):
        value = float(token[:-1]) / 100.0
    else:
        value = float(token)
    return max(0.0, min(1.0, value))


def parse_color(value: object, default: str = "#000000") -> QColor:
    """
    Return a QColor for *value*, falling back to *default* when invalid.

    Accepts everything QColor understands (hex, SVG color names) plus the
    CSS functional forms rgb(r, g, b) and rgba(r, g, b, a).
    """
    text = str(value or "").strip()
    match = _RGB_RE.match(text)
    if match:
        parts = [p for p in re.split(r"[,\s/]+", match.group(1).strip()) if p]
        try:
            if len(parts) in (3, 4):
                r, g, b = (_parse_channel(p) for p in parts[:3])
                color = QColor(r, g, b)
                if len(parts) == 4:
                    color.setAlphaF(_parse_alpha(parts[3]))
                return color
        except ValueError:
            pass
    elif text:
        color = QColor(text)
        if color.isValid():
            return color

    if str(default) != text:
        return parse_color(default, "#000000")
    return QColor(0, 0, 0)


def premultiplied_bgra(color: QColor) -> Tuple[int, int, int, int]:
    """
    Return *color* as premultiplied (B, G, R, A) bytes, the in-memory order
    of QImage.Format_ARGB32_Premultiplied on little-endian machines.
    """
    a = color.alpha()
    return (
        (color.blue() * a + 127) // 255,
        (color.green() * a + 127) // 255,
        (color.red() * a + 127) // 255,
        a,
    )


# ---------------------------------------------------------------------------
# Fonts and text layout
# ---------------------------------------------------------------------------


def build_qfont(config: ParticleTextConfig) -> QFont:
    """
    Build a QFont from the config.

    The size is applied with setPixelSize() so the glyph height does not
    depend on the DPI of the paint device.
    """
    px = max(1, int(round(config.font_size)))
    family = (config.font_family or "").strip()
    # "Fira Code, monospace" -> first family is requested, last generic is the hint.
    candidates = [f.strip().strip("'\"") for f in family.split(",") if f.strip()]

    font = QFont()
    hint = None
    for name in candidates:
        if name.lower() in _GENERIC_FAMILIES:
            hint = _GENERIC_FAMILIES[name.lower()]
    concrete = [n for n in candidates if n.lower() not in _GENERIC_FAMILIES]
    if concrete:
        font.setFamilies(concrete)
    if hint is not None:
        font.setStyleHint(hint)
        if not concrete:
            # Let Qt resolve the generic family from the hint.
            font.setFamily(font.defaultFamily())
    font.setPixelSize(px)
    return font


def text_origin(
    config: ParticleTextConfig,
    metrics: QFontMetricsF,
    x: float,
    y: float,
) -> Tuple[float, float]:
    """
    Return the (left, baseline) point at which QPainterPath.addText() must
    place config.message so that (x, y) is the anchor for the configured
    text_align / text_baseline (left-to-right text).
    """
    advance = metrics.horizontalAdvance(config.message)
    align = config.text_align
    if align in ("left", "start"):
        left = x
    elif align in ("right", "end"):
        left = x - advance
    else:
        left = x - 0.5 * advance

    ascent = metrics.ascent()
    descent = metrics.descent()
    baseline = config.text_baseline
    if baseline == "top":
        base_y = y + ascent
    elif baseline == "hanging":
        base_y = y + 0.8 * ascent
    elif baseline == "middle":
        base_y = y + 0.5 * (ascent - descent)
    elif baseline in ("ideographic", "bottom"):
        base_y = y - descent
    else:
        base_y = y
    return left, base_y


def build_text_path(config: ParticleTextConfig) -> QPainterPath:
    """Return the glyph path of config.message anchored at the surface center."""
    path = QPainterPath()
    if not config.message:
        return path

    font = build_qfont(config)
    metrics = QFontMetricsF(font)
    cx, cy = config.center
    left, base_y = text_origin(config, metrics, cx, cy)
    path.addText(QPointF(left, base_y), font, config.message)
    return path
