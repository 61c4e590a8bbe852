"""Point sampling and Voronoi subdivision for the polygon map."""

import numpy as np
from scipy.spatial import Voronoi
from typing import List, NamedTuple, Optional, Tuple
import structlog

from ..utils.random import POINTS_STREAM, make_stream

logger = structlog.get_logger()

Point = Tuple[float, float]

# Distance under which a clipped endpoint is snapped onto the rectangle side
SNAP_EPSILON = 1e-9


class Bounds(NamedTuple):
    """Working rectangle [0, width] x [0, height]."""
    width: float
    height: float


class VoronoiEdgeRecord(NamedTuple):
    """One Voronoi ridge between two sites.

    ``clipped`` holds the two endpoints of the ridge clipped to the working
    rectangle, or None when no part of the ridge lies inside it.
    """
    site_a: Point
    site_b: Point
    clipped: Optional[Tuple[Point, Point]]


class Subdivision(NamedTuple):
    """Relaxed sites plus the edge records of their Voronoi diagram.

    ``bounds`` is the rectangle the edges were clipped to, when known.
    """
    sites: List[Point]
    edges: List[VoronoiEdgeRecord]
    bounds: Optional[Bounds] = None


def sample_points(count: int, width: float, height: float, seed) -> np.ndarray:
    """
    Generate uniformly random points in the working rectangle.

    Args:
        count: Number of points
        width: Rectangle width
        height: Rectangle height
        seed: Map seed; points come from the seed's "points" stream

    Returns:
        Array of [x, y] point coordinates, shape (count, 2)
    """
    prng = make_stream(seed, POINTS_STREAM)

    points = np.empty((count, 2), dtype=np.float64)
    for i in range(count):
        points[i, 0] = prng.uniform(0, width)
        points[i, 1] = prng.uniform(0, height)

    return points


def mirror_points(points: np.ndarray, bounds: Bounds) -> np.ndarray:
    """
    Reflect the points across the four sides of the rectangle.

    With the reflections added, the Voronoi region of every original point
    is finite and equals its region clipped to the rectangle.

    Returns:
        Array of original points followed by the four reflected copies
    """
    w, h = bounds
    x = points[:, 0]
    y = points[:, 1]

    left = np.column_stack([-x, y])
    right = np.column_stack([2 * w - x, y])
    top = np.column_stack([x, -y])
    bottom = np.column_stack([x, 2 * h - y])

    return np.vstack([points, left, right, top, bottom])


def compute_polygon_centroid(vertices: np.ndarray) -> np.ndarray:
    """Compute the centroid of a polygon.

    Args:
        vertices: Array of [x, y] vertex coordinates, in boundary order

    Returns:
        [x, y] centroid coordinates
    """
    if len(vertices) < 3:
        return np.mean(vertices, axis=0)

    # Shoelace formula
    n = len(vertices)
    area = 0.0
    cx = 0.0
    cy = 0.0

    for i in range(n):
        j = (i + 1) % n
        a = vertices[i][0] * vertices[j][1] - vertices[j][0] * vertices[i][1]
        area += a
        cx += (vertices[i][0] + vertices[j][0]) * a
        cy += (vertices[i][1] + vertices[j][1]) * a

    if abs(area) < 1e-12:
        return np.mean(vertices, axis=0)

    area *= 0.5
    cx /= (6.0 * area)
    cy /= (6.0 * area)

    return np.array([cx, cy])


def relax_points(points: np.ndarray, bounds: Bounds, n_iterations: int) -> np.ndarray:
    """Apply Lloyd's relaxation to even out the point distribution.

    Moves each point to the centroid of its (rectangle-clipped) Voronoi cell.

    Args:
        points: Points to relax
        bounds: Working rectangle
        n_iterations: Number of relaxation iterations

    Returns:
        Relaxed point coordinates
    """
    points = points.copy()
    n_points = len(points)

    for iteration in range(n_iterations):
        vor = Voronoi(mirror_points(points, bounds))

        for i in range(n_points):
            region_idx = vor.point_region[i]
            if region_idx == -1:
                continue

            region_vertices = vor.regions[region_idx]
            if -1 in region_vertices or len(region_vertices) < 3:
                continue

            centroid = compute_polygon_centroid(vor.vertices[region_vertices])

            points[i][0] = np.clip(centroid[0], 0, bounds.width)
            points[i][1] = np.clip(centroid[1], 0, bounds.height)

        logger.debug("Relaxation iteration complete", iteration=iteration + 1)

    return points


def _snap(value: float, limit: float) -> float:
    if abs(value) <= SNAP_EPSILON:
        return 0.0
    if abs(value - limit) <= SNAP_EPSILON:
        return float(limit)
    return float(value)


def clip_segment(p0: Point, p1: Point, bounds: Bounds) -> Optional[Tuple[Point, Point]]:
    """
    Clip a segment to the working rectangle (Liang-Barsky).

    Endpoints within SNAP_EPSILON of a side are snapped onto it, so that
    border corners compare equal to the bound coordinates.

    Returns:
        The clipped (start, end) pair, or None if the segment misses the rectangle
    """
    x0, y0 = p0
    dx = p1[0] - x0
    dy = p1[1] - y0
    w, h = bounds

    t0, t1 = 0.0, 1.0
    for p, q in ((-dx, x0 + SNAP_EPSILON), (dx, w - x0 + SNAP_EPSILON),
                 (-dy, y0 + SNAP_EPSILON), (dy, h - y0 + SNAP_EPSILON)):
        if p == 0:
            if q < 0:
                return None
            continue
        r = q / p
        if p < 0:
            if r > t1:
                return None
            t0 = max(t0, r)
        else:
            if r < t0:
                return None
            t1 = min(t1, r)

    start = (
        _snap(min(max(x0 + t0 * dx, 0.0), w), w),
        _snap(min(max(y0 + t0 * dy, 0.0), h), h),
    )
    end = (
        _snap(min(max(x0 + t1 * dx, 0.0), w), w),
        _snap(min(max(y0 + t1 * dy, 0.0), h), h),
    )
    return start, end


def subdivide(points: np.ndarray, bounds: Bounds, relaxation_iterations: int = 0) -> Subdivision:
    """
    Compute the relaxed Voronoi diagram of the points inside the rectangle.

    Args:
        points: Array of [x, y] site coordinates
        bounds: Working rectangle
        relaxation_iterations: Lloyd relaxation passes applied before the final diagram

    Returns:
        Subdivision with the relaxed sites and one edge record per ridge
        between two sites
    """
    points = np.asarray(points, dtype=np.float64)
    n_points = len(points)

    if n_points < 2:
        sites = [(float(x), float(y)) for x, y in points]
        return Subdivision(sites=sites, edges=[], bounds=bounds)

    if relaxation_iterations > 0:
        points = relax_points(points, bounds, relaxation_iterations)

    sites = [(float(x), float(y)) for x, y in points]

    vor = Voronoi(mirror_points(points, bounds))

    edges = []
    for (i, j), ridge in zip(vor.ridge_points, vor.ridge_vertices):
        # Ridges against a reflected site lie on the rectangle sides
        if i >= n_points or j >= n_points:
            continue

        if -1 in ridge:
            clipped = None
        else:
            a, b = ridge
            clipped = clip_segment(tuple(vor.vertices[a]), tuple(vor.vertices[b]), bounds)

        edges.append(VoronoiEdgeRecord(site_a=sites[i], site_b=sites[j], clipped=clipped))

    logger.info("Voronoi subdivision calculated",
                sites=n_points, vertices=len(vor.vertices), edges=len(edges),
                relaxation=relaxation_iterations)

    return Subdivision(sites=sites, edges=edges, bounds=bounds)
