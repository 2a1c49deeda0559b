from __future__ import annotations

"""
Display surface and QImage <-> NumPy helpers.

The host creates a RenderSurface, hands it to the engine once, and reads the
finished frames from `surface.image` (e.g. to blit it in a widget's
paintEvent or to save it during a headless capture).
"""

from typing import Optional

import numpy as np
from PyQt6.QtGui import QImage, QPainter

SURFACE_FORMAT = QImage.Format.Format_ARGB32_Premultiplied


def qimage_to_array(image: QImage) -> np.ndarray:
    """
    Return a (height, width, 4) uint8 copy of a 32-bit QImage.

    For SURFACE_FORMAT the channel order is B, G, R, A (premultiplied).
    """
    if image.format() != SURFACE_FORMAT:
        image = image.convertToFormat(SURFACE_FORMAT)
    w = image.width()
    h = image.height()
    ptr = image.bits()
    ptr.setsize(image.sizeInBytes())
    raw = np.frombuffer(ptr, np.uint8).reshape((h, image.bytesPerLine()))
    # IMPORTANT: copy the data so we don't depend on QImage's lifetime
    return raw[:, : 4 * w].reshape((h, w, 4)).copy()


def array_to_qimage(arr: np.ndarray) -> QImage:
    """Convert a (height, width, 4) premultiplied BGRA uint8 array to a QImage."""
    arr = np.ascontiguousarray(arr, dtype=np.uint8)
    h, w, _ = arr.shape
    image = QImage(arr.data, w, h, 4 * w, SURFACE_FORMAT)
    return image.copy()


class RenderSurface:
    """
    Visible output image.

    The engine draws into it but does not own it: it only resizes it when the
    host reports new dimensions.
    """

    def __init__(self, width: int = 1, height: int = 1) -> None:
        self._image = QImage(max(1, int(width)), max(1, int(height)), SURFACE_FORMAT)
        self._image.fill(0)

    @property
    def image(self) -> QImage:
        return self._image

    @property
    def width(self) -> int:
        return self._image.width()

    @property
    def height(self) -> int:
        return self._image.height()

    def resize(self, width: int, height: int) -> None:
        """
        Reallocate the image at the new size.

        The previous content is copied at (0, 0) so the last frame stays
        visible until the next one is drawn.
        """
        width = max(1, int(width))
        height = max(1, int(height))
        if width == self.width and height == self.height:
            return
        old = self._image
        new = QImage(width, height, SURFACE_FORMAT)
        new.fill(0)
        painter = QPainter(new)
        try:
            painter.drawImage(0, 0, old)
        finally:
            painter.end()
        self._image = new

    def clear(self) -> None:
        self._image.fill(0)

    def to_array(self) -> np.ndarray:
        """Return the current pixels as a (height, width, 4) BGRA copy."""
        return qimage_to_array(self._image)

    def save(self, path: str, fmt: Optional[str] = None) -> bool:
        return self._image.save(str(path), fmt)
