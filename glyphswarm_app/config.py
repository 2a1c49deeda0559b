from __future__ import annotations

"""
Configuration for the particle text engine.

This module centralizes:
  * the EngineParameter schema describing every option (label, range,
    choices, default), in the same shape the host uses to build controls,
  * the immutable ParticleTextConfig value the engine works with,
  * config_from_dict(), which turns a wire payload (camelCase keys) or a
    plain dict (snake_case keys) into a fully clamped configuration.

Parsing never raises: unreadable or out-of-range values fall back to the
default or are clamped into the documented range.
"""

from dataclasses import dataclass, fields, replace
from typing import Any, Dict, List, Mapping, Optional, Tuple


DRAW_TYPES = ["stroke", "fill"]
TEXT_ALIGNS = ["center", "left", "right", "start", "end"]
TEXT_BASELINES = ["middle", "top", "hanging", "alphabetic", "ideographic", "bottom"]

DEFAULT_MESSAGE = "NO MESSAGE"

# Largest surface side accepted, in pixels (about the usual 2D canvas limit).
MAX_SURFACE_SIZE = 16384


@dataclass
class EngineParameter:
    """
    Description of a single configurable engine option.

    For numeric parameters (type == "int" or "float"), `minimum` and
    `maximum` are hard bounds: coerce() clamps into them.
    """
    name: str
    label: str
    type: str  # "int", "float", "bool", "enum", "string", "color"
    default: Any
    wire_key: str = ""
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    choices: Optional[List[Any]] = None
    step: Optional[float] = None
    description: str = ""

    def coerce(self, value: Any) -> Any:
        """Return *value* parsed and clamped for this parameter."""
        if value is None:
            return self.default

        if self.type == "int":
            try:
                # Truncate toward zero, like an integer cast of a float.
                out: Any = int(float(value))
            except Exception:
                return self.default
            return int(self._clamp(out))

        if self.type == "float":
            try:
                out = float(value)
            except Exception:
                return self.default
            if out != out:  # NaN
                return self.default
            return float(self._clamp(out))

        if self.type == "bool":
            if isinstance(value, str):
                return value.strip().lower() != "false"
            return bool(value)

        if self.type == "enum":
            text = str(value).strip().lower()
            return text if self.choices and text in self.choices else self.default

        return str(value)

    def _clamp(self, value: float) -> float:
        if self.minimum is not None and value < self.minimum:
            value = self.minimum
        if self.maximum is not None and value > self.maximum:
            value = self.maximum
        return value


def engine_parameters() -> Dict[str, EngineParameter]:
    """
    Return the parameter schema for the engine, keyed by field name.

    Defaults match the embeddable widget that normally feeds the engine.
    """
    return {
        "width": EngineParameter(
            name="width",
            label="Width (px)",
            type="int",
            default=300,
            wire_key="width",
            minimum=1,
            maximum=MAX_SURFACE_SIZE,
            description="Surface width in pixels.",
        ),
        "height": EngineParameter(
            name="height",
            label="Height (px)",
            type="int",
            default=150,
            wire_key="height",
            minimum=1,
            maximum=MAX_SURFACE_SIZE,
            description="Surface height in pixels.",
        ),
        "message": EngineParameter(
            name="message",
            label="Message",
            type="string",
            default=DEFAULT_MESSAGE,
            wire_key="message",
            description="Text rendered as particles.",
        ),
        "draw_type": EngineParameter(
            name="draw_type",
            label="Draw type",
            type="enum",
            default="stroke",
            wire_key="drawType",
            choices=list(DRAW_TYPES),
            description="Sample the glyph outline ('stroke') or the filled glyphs ('fill').",
        ),
        "background_color": EngineParameter(
            name="background_color",
            label="Background color",
            type="color",
            default="rgb(5, 15, 20)",
            wire_key="backgroundColor",
            description="Color filled behind the particles every frame.",
        ),
        "font_color": EngineParameter(
            name="font_color",
            label="Particle color",
            type="color",
            default="rgb(60, 200, 255)",
            wire_key="fontColor",
            description="Color of each particle.",
        ),
        "font_family": EngineParameter(
            name="font_family",
            label="Font family",
            type="string",
            default="monospace",
            wire_key="fontFamily",
            description="Font family, or a generic family such as 'monospace' or 'serif'.",
        ),
        "font_size": EngineParameter(
            name="font_size",
            label="Font size (px)",
            type="float",
            default=40.0,
            wire_key="fontSize",
            minimum=1.0,
            maximum=2000.0,
            step=1.0,
            description="Font size in pixels.",
        ),
        "text_align": EngineParameter(
            name="text_align",
            label="Text align",
            type="enum",
            default="center",
            wire_key="textAlign",
            choices=list(TEXT_ALIGNS),
            description="Horizontal alignment of the message around the surface center.",
        ),
        "text_baseline": EngineParameter(
            name="text_baseline",
            label="Text baseline",
            type="enum",
            default="middle",
            wire_key="textBaseline",
            choices=list(TEXT_BASELINES),
            description="Vertical alignment of the message around the surface center.",
        ),
        "density": EngineParameter(
            name="density",
            label="Density",
            type="int",
            default=3,
            wire_key="density",
            minimum=1,
            maximum=4,
            step=1,
            description="Fraction of lit text pixels that become particles (4 = every pixel).",
        ),
        "glow": EngineParameter(
            name="glow",
            label="Glow",
            type="bool",
            default=True,
            wire_key="glow",
            description="Composite a blurred, brightened halo under the sharp particles.",
        ),
        "p_lerp_amt": EngineParameter(
            name="p_lerp_amt",
            label="Position smoothing",
            type="float",
            default=0.25,
            wire_key="pLerpAmt",
            minimum=0.05,
            maximum=1.0,
            step=0.05,
            description="Lerp amount applied to the position update.",
        ),
        "v_lerp_amt": EngineParameter(
            name="v_lerp_amt",
            label="Velocity smoothing",
            type="float",
            default=0.1,
            wire_key="vLerpAmt",
            minimum=0.05,
            maximum=1.0,
            step=0.05,
            description="Lerp amount applied to the velocity update.",
        ),
        "m_lerp_amt": EngineParameter(
            name="m_lerp_amt",
            label="Pointer smoothing",
            type="float",
            default=0.5,
            wire_key="mLerpAmt",
            minimum=0.05,
            maximum=1.0,
            step=0.05,
            description="Lerp amount used to move the repel target toward the pointer or center.",
        ),
        "repel_threshold": EngineParameter(
            name="repel_threshold",
            label="Repel threshold",
            type="float",
            default=50.0,
            wire_key="repelThreshold",
            minimum=20.0,
            maximum=200.0,
            step=1.0,
            description="Strength of the push applied by the repel target.",
        ),
    }


# ---------------------------------------------------------------------------
# Immutable configuration
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ParticleTextConfig:
    """
    Engine configuration for one session.

    Instances are never mutated: a resize produces a new config through
    with_size().
    """

    width: int = 300
    height: int = 150
    message: str = DEFAULT_MESSAGE
    draw_type: str = "stroke"
    background_color: str = "rgb(5, 15, 20)"
    font_color: str = "rgb(60, 200, 255)"
    font_family: str = "monospace"
    font_size: float = 40.0
    text_align: str = "center"
    text_baseline: str = "middle"
    density: int = 3
    glow: bool = True
    p_lerp_amt: float = 0.25
    v_lerp_amt: float = 0.1
    m_lerp_amt: float = 0.5
    repel_threshold: float = 50.0

    @property
    def pixel_density(self) -> int:
        """Byte-index step used when sampling the text mask (0 keeps every pixel)."""
        return (4 - self.density) * 4

    @property
    def font_style(self) -> str:
        return f"{self.font_size:g}px {self.font_family}"

    @property
    def center(self) -> Tuple[float, float]:
        return 0.5 * self.width, 0.5 * self.height

    def with_size(self, width: Any, height: Any) -> "ParticleTextConfig":
        """
        Return a copy of this config with new (clamped) dimensions.

        A dimension that cannot be parsed keeps its current value.
        """
        params = engine_parameters()
        return replace(
            self,
            width=replace(params["width"], default=self.width).coerce(width),
            height=replace(params["height"], default=self.height).coerce(height),
        )

    def to_wire(self) -> Dict[str, Any]:
        """Return the config as a camelCase payload (the inverse of config_from_dict)."""
        params = engine_parameters()
        return {params[f.name].wire_key: getattr(self, f.name) for f in fields(self)}


def config_from_dict(data: Optional[Mapping[str, Any]] = None) -> ParticleTextConfig:
    """
    Build a ParticleTextConfig from *data*.

    Both wire keys ("pLerpAmt") and field names ("p_lerp_amt") are accepted;
    the wire key wins when both are present. Missing keys use the defaults.
    """
    data = data or {}
    values: Dict[str, Any] = {}
    for name, param in engine_parameters().items():
        if param.wire_key in data:
            raw = data[param.wire_key]
        elif name in data:
            raw = data[name]
        else:
            continue
        values[name] = param.coerce(raw)
    return ParticleTextConfig(**values)
