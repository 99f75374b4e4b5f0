"""Render parameters and the pixel -> complex plane mapping."""

from __future__ import annotations

from dataclasses import dataclass

from juliaweb.kernel import DEFAULT_ESCAPE_RADIUS, DEFAULT_MAX_ITER

@dataclass(frozen=True)
class RenderParameters:
    """A validated request: plane bounds, Julia constant, image size and iteration limits."""

    min_x: float
    max_x: float
    min_y: float
    max_y: float
    c: complex
    width: int
    height: int
    max_iter: int = DEFAULT_MAX_ITER
    escape_radius: float = DEFAULT_ESCAPE_RADIUS

def pixel_to_complex(px: int, py: int, width: int, height: int, params: RenderParameters) -> complex:
    """
    Map pixel (px, py) onto the plane. The divisor is the pixel count, so (0, 0) lands on
    (min_x, min_y) and the last pixel stays short of (max_x, max_y).
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"pixel_to_complex needs positive dimensions, got {width}x{height}")
    re = params.min_x + (params.max_x - params.min_x) * px / width
    im = params.min_y + (params.max_y - params.min_y) * py / height
    return complex(re, im)
