"""
Color mapping for base points.

Hue follows longitude around the y axis, lightness follows latitude, so
nearby base points (and therefore nearby fibers) get similar colors and
the two poles are the lightest and darkest.
"""

import colorsys
import math
from dataclasses import dataclass
from typing import Tuple

from .coords import PointLike, as_sphere_point

SATURATION = 0.7


@dataclass(frozen=True)
class Color:
    """HSL color, all components in [0, 1]."""
    hue: float
    saturation: float
    lightness: float

    @property
    def rgb(self) -> Tuple[float, float, float]:
        return colorsys.hls_to_rgb(self.hue % 1.0, self.lightness, self.saturation)

    def rgba(self, alpha: float = 1.0) -> Tuple[float, float, float, float]:
        r, g, b = self.rgb
        return (r, g, b, alpha)

    def rgba8(self, alpha: float = 1.0) -> Tuple[int, int, int, int]:
        """RGBA as 0-255 integers (trimesh visual colors)."""
        return tuple(int(round(c * 255)) for c in self.rgba(alpha))

    @property
    def hex(self) -> str:
        r, g, b = (int(round(c * 255)) for c in self.rgb)
        return f"#{r:02x}{g:02x}{b:02x}"


def point_to_color(point: PointLike) -> Color:
    """
    Color of a base point on S².

    hue = atan2(x, z) / 2π + 0.5, lightness = 0.15 y + 0.5, and the final
    hue is shifted by twice the lightness so latitude also rotates the hue.
    """
    x, y, z = as_sphere_point(point)

    hue = math.atan2(x, z) / (2 * math.pi) + 0.5
    lightness = 0.15 * y + 0.5

    return Color((hue + 2 * lightness) % 1.0, SATURATION, lightness)


def index_to_color(i: int, i_max: int) -> Color:
    """Color for the i-th of i_max surfaces; hues span half the wheel."""
    return Color(i / i_max / 2, 0.5, 0.5)
