"""
Island shape predicates.

A shape decides, for a point of the map, whether it lies inside the
landmass. The engine calls it once per corner as
``shape(point, map_size, seed) -> bool``; any callable with that
signature can be used in place of the classes below.
"""

import math
from typing import Callable, Sequence, Tuple

import numpy as np

from .alea_prng import AleaPRNG

ShapePredicate = Callable[[Tuple[float, float], Tuple[float, float], int], bool]


class IslandShape:
    """Base shape: the whole rectangle is land."""

    def is_inside(self, point, map_size, seed: int = 0) -> bool:
        return True

    def __call__(self, point, map_size, seed: int = 0) -> bool:
        return self.is_inside(point, map_size, seed)


class BorderMarginShape(IslandShape):
    """Land everywhere except within ``margin`` of the rectangle sides."""

    def __init__(self, margin: float):
        if margin < 0:
            raise ValueError(f"margin must be non-negative, got {margin}")
        self.margin = margin

    def is_inside(self, point, map_size, seed: int = 0) -> bool:
        x, y = point
        w, h = map_size
        return (self.margin < x < w - self.margin and
                self.margin < y < h - self.margin)


class RadialShape(IslandShape):
    """
    Island whose coastline radius is a sum of seeded sine/cosine overtones.

    The radius around the map center is
    ``base + sum(a_k cos(k th) + b_k sin(k th))``, all measured as a fraction
    of the half-size of the map, so the shape scales with the rectangle.
    """

    def __init__(self, base_radius: float = 0.7, roughness: float = 0.2, overtones: int = 6):
        """
        Args:
            base_radius: Mean coastline radius, fraction of the half map size
            roughness: Total amplitude shared by the overtones
            overtones: Number of harmonics
        """
        if not 0 < base_radius <= 1:
            raise ValueError(f"base_radius must be in (0, 1], got {base_radius}")
        self.base_radius = base_radius
        self.roughness = roughness
        self.overtones = overtones
        self._cache = {}

    def _harmonics(self, seed) -> Sequence[Tuple[float, float]]:
        if seed not in self._cache:
            prng = AleaPRNG([seed, "radial-shape"])
            harmonics = []
            amplitude = self.roughness / max(self.overtones, 1)
            for _ in range(self.overtones):
                theta = prng.uniform(-math.pi, math.pi)
                scale = amplitude * prng.random()
                harmonics.append((scale * math.cos(theta), scale * math.sin(theta)))
            self._cache[seed] = harmonics
        return self._cache[seed]

    def is_inside(self, point, map_size, seed: int = 0) -> bool:
        w, h = map_size
        # Normalize to [-1, 1] around the map center
        nx = (point[0] - w / 2) / (w / 2)
        ny = (point[1] - h / 2) / (h / 2)
        r = math.sqrt(nx * nx + ny * ny)
        th = math.atan2(ny, nx)

        radius = self.base_radius
        for mul, (even, odd) in enumerate(self._harmonics(seed), start=1):
            freq = th * mul
            radius += even * math.cos(freq) + odd * math.sin(freq)

        return r < radius


class MaskShape(IslandShape):
    """
    Landmass given by a boolean mask stretched over the map.

    ``mask[row, col]`` is True for land; row 0 maps to y = 0.
    """

    def __init__(self, mask):
        mask = np.asarray(mask, dtype=bool)
        if mask.ndim != 2 or mask.size == 0:
            raise ValueError("mask must be a non-empty 2D array")
        self.mask = mask

    def is_inside(self, point, map_size, seed: int = 0) -> bool:
        rows, cols = self.mask.shape
        w, h = map_size
        col = min(int(point[0] / w * cols), cols - 1)
        row = min(int(point[1] / h * rows), rows - 1)
        if col < 0 or row < 0:
            return False
        return bool(self.mask[row, col])


SHAPES = {
    "square": IslandShape,
    "radial": RadialShape,
}


def get_shape(name: str) -> IslandShape:
    """Instantiate a named shape with its default parameters."""
    try:
        return SHAPES[name]()
    except KeyError:
        raise ValueError(f"Unknown island shape '{name}', expected one of {sorted(SHAPES)}") from None
