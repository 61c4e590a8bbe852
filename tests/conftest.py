"""Shared fixtures: small hand-made polygon graphs with known geometry."""

import math

import numpy as np
import pytest

from py_polymap.core.features import Features
from py_polymap.core.graph import build_graph
from py_polymap.core.islands import IslandDetector, IslandOptions
from py_polymap.core.map_generator import MapConfig, PolygonMapGenerator
from py_polymap.core.shapes import BorderMarginShape
from py_polymap.core.voronoi_graph import Bounds, VoronoiEdgeRecord, subdivide


def make_grid_graph(n):
    """
    Tile [0, n] x [0, n] with unit square cells.

    Cell (i, j) has index ``j * n + i`` and its site at (i + 0.5, j + 0.5).
    Corners sit on the integer lattice; the four rectangle corners are not
    part of any edge.
    """
    sites = [(i + 0.5, j + 0.5) for j in range(n) for i in range(n)]
    records = []
    for j in range(n):
        for i in range(n):
            site = (i + 0.5, j + 0.5)
            if i + 1 < n:
                records.append(VoronoiEdgeRecord(
                    site, (i + 1.5, j + 0.5),
                    ((float(i + 1), float(j)), (float(i + 1), float(j + 1)))))
            if j + 1 < n:
                records.append(VoronoiEdgeRecord(
                    site, (i + 0.5, j + 1.5),
                    ((float(i), float(j + 1)), (float(i + 1), float(j + 1)))))
    return build_graph(sites, records, Bounds(float(n), float(n)))


def lake_shape(point, map_size, seed=0):
    """Land everywhere except the four corners of the central cell of a 7x7 grid."""
    return point not in {(3.0, 3.0), (4.0, 3.0), (3.0, 4.0), (4.0, 4.0)}


@pytest.fixture
def grid_graph():
    """Fresh 7x7 grid graph."""
    return make_grid_graph(7)


@pytest.fixture
def lake_grid():
    """
    7x7 grid with water, ocean and islands classified.

    The outer ring is ocean, the next ring is coast and the central cell
    plus its four side neighbors form a lake.
    """
    graph = make_grid_graph(7)
    features = Features(graph, lake_shape)
    features.assign_water()
    features.assign_ocean_coast_and_land()
    IslandDetector(graph).detect_islands()
    features.assign_corner_types()
    return graph


@pytest.fixture
def grid_factory():
    """make_grid_graph, for tests that need a grid of another size or several grids."""
    return make_grid_graph


def ring_points():
    """A center site at (1, 1) plus five sites on a circle of radius 0.7 around it."""
    points = [(1.0, 1.0)]
    for k in range(5):
        angle = math.radians(90 + 72 * k)
        points.append((1.0 + 0.7 * math.cos(angle), 1.0 + 0.7 * math.sin(angle)))
    return np.array(points)


@pytest.fixture
def ring_generator():
    """Generator for the six site ring layout; land stays 0.1 away from the sides."""
    return PolygonMapGenerator(
        config=MapConfig(polygon_count=6, width=2.0, height=2.0, relaxation=0),
        shape=BorderMarginShape(0.1),
        island_options=IslandOptions(min_island_size=1),
    )


@pytest.fixture
def ring_map(ring_generator):
    """
    Map of the ring layout.

    Every ring cell reaches the rectangle sides, so the ring is ocean and
    the center cell (index 0) is the only land.
    """
    subdivision = subdivide(ring_points(), Bounds(2.0, 2.0))
    return ring_generator.generate_from_subdivision(subdivision, seed=7).map
