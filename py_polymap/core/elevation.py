"""
Elevation solver.

Corner elevation is the number of land edges on the cheapest path to the
coastline. Edges that touch a lake cost nothing, so lakes come out flat.
The relaxation also records, for each corner, the neighbor it was reached
from; following these downslope pointers always leads to the coast.
"""

import math
from collections import deque
from typing import Callable, Optional, Sequence

import numpy as np
import structlog

from .alea_prng import AleaPRNG
from .graph import PolygonGraph

logger = structlog.get_logger()

ElevationCurve = Callable[[float], float]

# Ocean cells never rise above this, so no ocean sits higher than the coast
MAX_OCEAN_ELEVATION = -0.01


def linear_curve(t: float) -> float:
    """Identity remapping."""
    return t


class PiecewiseCurve:
    """
    Monotonic curve through control points on [0, 1].

    Values between control points are linearly interpolated; inputs outside
    the first/last key are clamped to the end values.
    """

    def __init__(self, xs: Sequence[float], ys: Sequence[float]):
        xs = np.asarray(xs, dtype=np.float64)
        ys = np.asarray(ys, dtype=np.float64)
        if xs.shape != ys.shape or xs.ndim != 1 or len(xs) < 2:
            raise ValueError("PiecewiseCurve needs two equally long 1D key sequences")
        if np.any(np.diff(xs) <= 0):
            raise ValueError("Curve keys must be strictly increasing")
        if np.any(np.diff(ys) < 0):
            raise ValueError("Curve values must be non-decreasing")
        self.xs = xs
        self.ys = ys

    def __call__(self, t: float) -> float:
        return float(np.interp(t, self.xs, self.ys))


class ElevationSolver:
    """Computes corner and cell elevations for a classified graph."""

    def __init__(self, graph: PolygonGraph, prng: AleaPRNG,
                 curve: Optional[ElevationCurve] = None):
        """
        Args:
            graph: PolygonGraph with corner types assigned
            prng: Stream used to rotate each corner's edge traversal order
            curve: Monotonic remapping of normalized elevation, identity by default
        """
        self.graph = graph
        self.prng = prng
        self.curve = curve or linear_curve

        self.min_elevation = 1.0
        self.max_elevation = 1.0

    def assign_corner_elevations(self):
        """
        Relax elevations outward from the coast and record downslope pointers.

        Coast corners start at 0 and everything else at infinity. Improvements
        across lake edges go to the front of the queue so a lake shore
        settles before anything else continues from it.
        """
        graph = self.graph
        corners = graph.corners
        queue = deque()

        for corner in corners:
            corner.downslope_corner = None
            corner.downslope_edge = None
            if corner.is_coast:
                corner.elevation = 0.0
                queue.append(corner.index)
            else:
                corner.elevation = math.inf

        self.min_elevation = 1.0
        self.max_elevation = 1.0

        while queue:
            current = corners[queue.popleft()]
            edges = current.connected_edges
            count = len(edges)
            if count == 0:
                continue
            offset = self.prng.randrange(count)

            for i in range(count):
                edge = graph.edges[edges[(i + offset) % count]]
                neighbor = corners[edge.other_corner(current.index)]
                lake_edge = graph.is_lake_edge(edge)
                new_elevation = current.elevation + (0 if lake_edge else 1)

                if new_elevation < neighbor.elevation:
                    neighbor.elevation = new_elevation
                    neighbor.downslope_corner = current.index
                    neighbor.downslope_edge = edge.index

                    if neighbor.is_ocean and new_elevation > self.min_elevation:
                        self.min_elevation = new_elevation
                    if not neighbor.is_ocean and new_elevation > self.max_elevation:
                        self.max_elevation = new_elevation

                    if lake_edge:
                        queue.appendleft(neighbor.index)
                    else:
                        queue.append(neighbor.index)

        logger.debug("Elevation relaxation converged",
                     max_land_distance=self.max_elevation,
                     max_ocean_distance=self.min_elevation)

    def normalize_corner_elevations(self):
        """Map land to [0, 1] and ocean to [-1, 0] through the curve."""
        for corner in self.graph.corners:
            if corner.is_ocean:
                ratio = min(max(corner.elevation / self.min_elevation, 0.0), 1.0)
                corner.elevation = -self.curve(ratio)
            else:
                ratio = min(max(corner.elevation / self.max_elevation, 0.0), 1.0)
                corner.elevation = self.curve(ratio)

    def assign_cell_elevations(self):
        """Set each cell to the mean elevation of its corners."""
        corners = self.graph.corners

        for cell in self.graph.cells:
            if cell.cell_corners:
                cell.elevation = sum(corners[c].elevation for c in cell.cell_corners) / len(cell.cell_corners)
            else:
                cell.elevation = 0.0

            if cell.is_ocean and cell.elevation > MAX_OCEAN_ELEVATION:
                cell.elevation = MAX_OCEAN_ELEVATION

    def assign_elevations(self):
        """Run the full elevation stage."""
        self.assign_corner_elevations()
        self.normalize_corner_elevations()
        self.assign_cell_elevations()

        logger.info("Elevations assigned",
                    corners=len(self.graph.corners),
                    max_land_distance=self.max_elevation,
                    max_ocean_distance=self.min_elevation)
