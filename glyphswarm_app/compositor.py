from __future__ import annotations

"""
Double-buffered particle renderer.

Every frame:
  1. the working buffer (a premultiplied BGRA NumPy array owned by the
     compositor) is cleared and each in-bounds particle is painted as a
     single pixel in the particle color,
  2. the display surface is cleared and filled with the background color,
  3. the working buffer is drawn onto the display, either once (plain), or
     twice for the neon look: first blurred + brightened with normal
     blending, then sharp with additive ("lighter") blending so the bright
     cores stay crisp over the soft halo.

All painter state (composition mode) lives inside a save()/restore() pair so
nothing leaks into the next frame.
"""

import cv2
import numpy as np
from PyQt6.QtGui import QPainter

from .config import ParticleTextConfig
from .particle_store import ParticleStore
from .surface import RenderSurface, array_to_qimage
from .text_style import parse_color, premultiplied_bgra

# Neon pass: Gaussian sigma in pixels, and brightness multiplier.
GLOW_BLUR_PX = 8.0
GLOW_BRIGHTNESS = 2.0


def glow_pass(buffer: np.ndarray, blur_px: float = GLOW_BLUR_PX, brightness: float = GLOW_BRIGHTNESS) -> np.ndarray:
    """
    Return a blurred, brightened copy of a premultiplied BGRA buffer.

    Blurring premultiplied data keeps color and coverage consistent; the
    brightened color channels are clamped to alpha so the result stays a
    valid premultiplied image.
    """
    if blur_px > 0.0:
        blurred = cv2.GaussianBlur(buffer, (0, 0), sigmaX=float(blur_px), sigmaY=float(blur_px))
    else:
        blurred = buffer.copy()

    out = blurred.astype(np.float32)
    alpha = out[..., 3:4]
    out[..., :3] = np.minimum(out[..., :3] * float(brightness), alpha)
    return np.clip(out, 0, 255).astype(np.uint8)


class Compositor:
    """Owns the working buffer and composites it onto a RenderSurface."""

    def __init__(self, width: int = 1, height: int = 1) -> None:
        self._buffer = np.zeros((1, 1, 4), dtype=np.uint8)
        self.resize(width, height)

    # ------------------------------------------------------------------
    # Working buffer
    # ------------------------------------------------------------------
    @property
    def buffer(self) -> np.ndarray:
        return self._buffer

    @property
    def width(self) -> int:
        return int(self._buffer.shape[1])

    @property
    def height(self) -> int:
        return int(self._buffer.shape[0])

    def resize(self, width: int, height: int) -> None:
        """Reallocate the working buffer; its content is not preserved."""
        width = max(1, int(width))
        height = max(1, int(height))
        self._buffer = np.zeros((height, width, 4), dtype=np.uint8)

    def clear_buffer(self) -> None:
        self._buffer.fill(0)

    def paint_particles(self, store: ParticleStore, config: ParticleTextConfig) -> int:
        """
        Paint a one-pixel mark for each particle inside the buffer.

        Positions are floored to pixel coordinates. Out-of-bounds and
        non-finite particles are skipped. Returns the number of particles
        painted.
        """
        if store.count == 0:
            return 0

        x = store.column("x")
        y = store.column("y")
        h, w = self._buffer.shape[:2]
        with np.errstate(invalid="ignore"):
            inside = (x >= 0) & (x < w) & (y >= 0) & (y < h)
        if not inside.any():
            return 0

        px = np.floor(x[inside]).astype(np.intp)
        py = np.floor(y[inside]).astype(np.intp)
        color = premultiplied_bgra(parse_color(config.font_color, "rgb(60, 200, 255)"))
        self._buffer[py, px] = color
        return int(px.size)

    # ------------------------------------------------------------------
    # Display
    # ------------------------------------------------------------------
    def composite(self, surface: RenderSurface, config: ParticleTextConfig) -> None:
        """Fill the background and draw the working buffer onto *surface*."""
        background = parse_color(config.background_color, "rgb(5, 15, 20)")
        sharp = array_to_qimage(self._buffer)

        painter = QPainter(surface.image)
        try:
            painter.save()
            painter.fillRect(0, 0, surface.width, surface.height, background)

            if config.glow:
                halo = array_to_qimage(glow_pass(self._buffer))
                painter.drawImage(0, 0, halo)
                # Additive blend brightens where the sharp cores overlap the halo.
                painter.setCompositionMode(QPainter.CompositionMode.CompositionMode_Plus)

            painter.drawImage(0, 0, sharp)
            painter.restore()
        finally:
            painter.end()

    def render_frame(
        self,
        store: ParticleStore,
        surface: RenderSurface,
        config: ParticleTextConfig,
    ) -> int:
        """Clear both buffers, paint the particles, then composite. Returns the painted count."""
        self.clear_buffer()
        surface.clear()
        n = self.paint_particles(store, config)
        self.composite(surface, config)
        return n
