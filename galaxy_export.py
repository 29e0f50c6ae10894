"""
galaxy_export.py
================
Serialization adapters for a generated ``Galaxy``.

  • to_pixel_sequence / rasterize / write_image – one pixel per star on a
    black canvas; alpha from luminosity, or a random gray per star
  • to_text_lines / write_text                  – line-oriented star dump in
    the "simple" or "extended" layout
  • write_csv                                   – full tabular dump via pandas

Display space flips and offsets generation space: a star at ``(x, y)`` lands
on pixel ``(cx - x, cy - y)`` where ``(cx, cy)`` is the canvas centre.

Text layouts
------------
simple::

    12, -40 Core
    ...

extended::

    9997
    12, -40 0.482113 0
    ...
"""

from __future__ import annotations

from typing import List, Optional, Tuple

import numpy as np
from PIL import Image

from galaxygen import (
    COLOR_MODES,
    TEXT_FORMATS,
    Galaxy,
    GalaxyConfigError,
    GalaxyExportError,
    NumpyRandomSource,
    RandomSource,
)


RGBA = Tuple[int, int, int, int]
Pixel = Tuple[int, int, RGBA]

BACKGROUND: RGBA = (0, 0, 0, 255)
GRAY_RANGE = (100, 255)


# ---------------------------------------------------------------------------
# Pixels
# ---------------------------------------------------------------------------

def display_centre(galaxy: Galaxy) -> Tuple[int, int]:
    return (galaxy.width // 2, galaxy.height // 2)


def to_pixel_sequence(
    galaxy: Galaxy,
    centre: Optional[Tuple[int, int]] = None,
    color_mode: str = "luminosity",
    rng: Optional[RandomSource] = None,
) -> List[Pixel]:
    """Map every star to ``(x, y, (r, g, b, a))`` in display space.

    Parameters
    ----------
    galaxy     : the galaxy to draw
    centre     : display-space centre; defaults to the middle of the canvas
    color_mode : ``"luminosity"`` – white, alpha ``int(255 * luminosity)``
                 (255 for stars without a luminosity);
                 ``"random_gray"`` – opaque gray drawn per star from
                 ``[100, 255]`` at export time
    rng        : source for ``"random_gray"``; an unseeded one if omitted

    Returns
    -------
    List of pixels in star order.  Coordinates are truncated toward zero and
    may fall outside the canvas.
    """
    if color_mode not in COLOR_MODES:
        raise GalaxyConfigError(
            f"color_mode must be one of {COLOR_MODES} (got {color_mode!r})"
        )
    cx, cy = centre if centre is not None else display_centre(galaxy)
    if color_mode == "random_gray" and rng is None:
        rng = NumpyRandomSource(integral=True)

    pixels: List[Pixel] = []
    for star in galaxy.stars:
        px = int(cx - star.x)
        py = int(cy - star.y)
        if color_mode == "luminosity":
            alpha = 255 if star.luminosity is None else int(255 * star.luminosity)
            color = (255, 255, 255, alpha)
        else:
            val = rng.next_int(*GRAY_RANGE)
            color = (val, val, val, 255)
        pixels.append((px, py, color))
    return pixels


def rasterize(
    galaxy: Galaxy,
    centre: Optional[Tuple[int, int]] = None,
    color_mode: str = "luminosity",
    rng: Optional[RandomSource] = None,
) -> np.ndarray:
    """Draw the galaxy into a ``(height, width, 4)`` uint8 RGBA buffer.

    Background is opaque black.  Pixels are written, not blended, so a later
    star replaces an earlier one at the same coordinate.  Off-canvas stars
    are skipped.
    """
    buf = np.empty((galaxy.height, galaxy.width, 4), dtype=np.uint8)
    buf[:, :] = BACKGROUND
    for x, y, color in to_pixel_sequence(galaxy, centre, color_mode, rng):
        if 0 <= x < galaxy.width and 0 <= y < galaxy.height:
            buf[y, x] = color
    return buf


def write_image(
    galaxy: Galaxy,
    path: str,
    centre: Optional[Tuple[int, int]] = None,
    color_mode: str = "luminosity",
    rng: Optional[RandomSource] = None,
) -> str:
    """Rasterize and save as an image file (format from the extension)."""
    buf = rasterize(galaxy, centre, color_mode, rng)
    try:
        Image.fromarray(buf, "RGBA").save(path)
    except (OSError, ValueError) as exc:
        raise GalaxyExportError(path, exc) from exc
    return path


# ---------------------------------------------------------------------------
# Text
# ---------------------------------------------------------------------------

def to_text_lines(galaxy: Galaxy, text_format: str = "extended") -> List[str]:
    """One line per star, without line terminators.

    ``"simple"``   – ``"<x>, <y> <SectorName>"``
    ``"extended"`` – a first line holding the star count, then
                     ``"<x>, <y> <luminosity> <sectorIndex>"``
    """
    if text_format not in TEXT_FORMATS:
        raise GalaxyConfigError(
            f"text_format must be one of {TEXT_FORMATS} (got {text_format!r})"
        )
    if text_format == "simple":
        return [f"{int(s.x)}, {int(s.y)} {s.sector.label}" for s in galaxy.stars]

    lines = [str(galaxy.stars_count)]
    for s in galaxy.stars:
        lum = 0.0 if s.luminosity is None else s.luminosity
        lines.append(f"{int(s.x)}, {int(s.y)} {lum:f} {int(s.sector)}")
    return lines


def write_text(galaxy: Galaxy, path: str, text_format: str = "extended") -> str:
    lines = to_text_lines(galaxy, text_format)
    try:
        with open(path, "w", encoding="utf-8", newline="\n") as f:
            for line in lines:
                f.write(line + "\n")
    except OSError as exc:
        raise GalaxyExportError(path, exc) from exc
    return path


# ---------------------------------------------------------------------------
# CSV
# ---------------------------------------------------------------------------

def write_csv(galaxy: Galaxy, path: str) -> str:
    """Write ``galaxy.to_frame()`` as CSV (read back by plot_debug.py)."""
    try:
        galaxy.to_frame().to_csv(path, index=False)
    except (OSError, ValueError) as exc:
        raise GalaxyExportError(path, exc) from exc
    return path
