from __future__ import annotations

"""
Text rasterizer / particle mapper.

The message is drawn once into an offscreen ARGB32 image (stroked outline or
filled glyphs), the alpha channel is read back with NumPy, and every lit
pixel that passes the density filter becomes one particle resting at its
origin. Scan order is row-major, so the result is deterministic for a given
surface size, font and message.
"""

import numpy as np
from PyQt6.QtCore import Qt
from PyQt6.QtGui import QBrush, QColor, QImage, QPainter, QPen

from .config import ParticleTextConfig
from .particle_store import ParticleStore
from .text_style import build_text_path


def rasterize_message(config: ParticleTextConfig) -> np.ndarray:
    """
    Draw config.message centered on a width x height transparent image and
    return its alpha channel as a (height, width) uint8 array.

    The drawing color is irrelevant: only alpha is inspected.
    """
    w = int(config.width)
    h = int(config.height)

    img = QImage(w, h, QImage.Format.Format_ARGB32_Premultiplied)
    img.fill(0)

    path = build_text_path(config)
    if not path.isEmpty():
        painter = QPainter(img)
        try:
            painter.setRenderHint(QPainter.RenderHint.Antialiasing, True)
            if config.draw_type == "fill":
                painter.fillPath(path, QBrush(QColor(255, 255, 255)))
            else:
                # 1 px pen: the default line width of a 2D canvas.
                pen = QPen(QColor(255, 255, 255))
                pen.setWidthF(1.0)
                pen.setJoinStyle(Qt.PenJoinStyle.MiterJoin)
                painter.strokePath(path, pen)
        finally:
            painter.end()

    # Read back the pixel data; rows may be padded to bytesPerLine.
    ptr = img.bits()
    ptr.setsize(img.sizeInBytes())
    bpl = img.bytesPerLine()
    raw = np.frombuffer(ptr, dtype=np.uint8).reshape((h, bpl))
    # Format_ARGB32_Premultiplied is B, G, R, A in memory.
    alpha = raw[:, 3::4][:, :w]
    return alpha.copy()


def sample_alpha_mask(alpha: np.ndarray, pixel_density: int) -> np.ndarray:
    """
    Return the (N, 2) float32 array of (x, y) seeds sampled from *alpha*.

    Pixel k (row-major, byte index i = 4 * k in an RGBA buffer) is kept when
    its alpha is non-zero and i % pixel_density == 0. A pixel_density of 0
    keeps every lit pixel.
    """
    alpha = np.asarray(alpha)
    if alpha.ndim != 2:
        raise ValueError(f"alpha mask must be 2D, got shape {alpha.shape}")
    h, w = alpha.shape

    flat = alpha.reshape(-1)
    keep = flat != 0
    step = int(pixel_density)
    if step > 0:
        byte_index = np.arange(flat.size, dtype=np.int64) * 4
        keep &= (byte_index % step) == 0

    k = np.flatnonzero(keep)
    seeds = np.empty((k.size, 2), dtype=np.float32)
    if k.size:
        seeds[:, 0] = k % w
        seeds[:, 1] = k // w
    return seeds


def seeds_to_store(seeds: np.ndarray) -> ParticleStore:
    """Build a ParticleStore with every particle at rest on its seed."""
    seeds = np.asarray(seeds, dtype=np.float32).reshape((-1, 2))
    store = ParticleStore.allocate(seeds.shape[0])
    if store.count:
        records = store.records
        records[:, 0:2] = seeds  # x, y
        # vx, vy stay zero
        records[:, 4:6] = seeds  # bx, by
    return store


def map_particles(config: ParticleTextConfig) -> ParticleStore:
    """Rasterize config.message and return the freshly derived particle population."""
    alpha = rasterize_message(config)
    return seeds_to_store(sample_alpha_mask(alpha, config.pixel_density))
