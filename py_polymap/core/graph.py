"""
Polygon graph: cells, corners and edges of the Voronoi/Delaunay dual.

Every entity lives in one of the three arenas of a PolygonGraph and refers
to the others by integer index, never by object reference:

- Cell (Voronoi region / Delaunay vertex): one per site
- Corner (Voronoi vertex): one per distinct clipped edge endpoint
- Edge: one Voronoi edge (v0, v1) and its dual Delaunay edge (d0, d1)
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

import numpy as np
import structlog

from .biomes import BiomeType
from .errors import GraphDataError
from .voronoi_graph import Bounds, Point, Subdivision, VoronoiEdgeRecord

logger = structlog.get_logger()


def _add_unique(items: List[int], value: int) -> None:
    if value not in items:
        items.append(value)


@dataclass
class Cell:
    """A polygon of the map, centered on its generating site."""

    index: int
    position: Point
    biome: BiomeType = BiomeType.UNDEFINED

    neighbor_cells: List[int] = field(default_factory=list)
    border_edges: List[int] = field(default_factory=list)
    cell_corners: List[int] = field(default_factory=list)

    is_water: bool = False
    is_ocean: bool = False
    is_coast: bool = False
    is_border: bool = False
    island_id: int = -1

    elevation: float = 0.0
    moisture: float = 0.0

    @property
    def is_lake(self) -> bool:
        """Water that the ocean flood fill did not reach."""
        return self.is_water and not self.is_ocean


@dataclass
class Corner:
    """A polygon vertex, shared by the cells that meet there."""

    index: int
    position: Point
    is_border: bool = False

    neighbor_corners: List[int] = field(default_factory=list)
    connected_edges: List[int] = field(default_factory=list)
    touching_cells: List[int] = field(default_factory=list)

    is_water: bool = False
    is_ocean: bool = False
    is_coast: bool = False

    elevation: float = 0.0
    downslope_corner: Optional[int] = None
    downslope_edge: Optional[int] = None


@dataclass
class Edge:
    """Voronoi edge between corners v0/v1, dual to the Delaunay edge d0/d1."""

    index: int
    v0: int
    v1: int
    d0: int
    d1: int
    water_volume: int = 0

    def other_corner(self, corner: int) -> int:
        """Corner at the opposite end of this edge."""
        return self.v1 if self.v0 == corner else self.v0


@dataclass
class PolygonGraph:
    """The three entity arenas plus the working rectangle they live in."""

    bounds: Bounds
    cells: List[Cell] = field(default_factory=list)
    corners: List[Corner] = field(default_factory=list)
    edges: List[Edge] = field(default_factory=list)

    def is_lake_edge(self, edge: Edge) -> bool:
        """True if either cell of the edge is a lake."""
        return self.cells[edge.d0].is_lake or self.cells[edge.d1].is_lake

    def cell_array(self, name: str, dtype=None) -> np.ndarray:
        """Collect one scalar cell attribute into an array indexed by cell."""
        return np.array([getattr(c, name) for c in self.cells], dtype=dtype)

    def corner_array(self, name: str, dtype=None) -> np.ndarray:
        """Collect one scalar corner attribute into an array indexed by corner."""
        return np.array([getattr(c, name) for c in self.corners], dtype=dtype)

    def edge_array(self, name: str, dtype=None) -> np.ndarray:
        """Collect one scalar edge attribute into an array indexed by edge."""
        return np.array([getattr(e, name) for e in self.edges], dtype=dtype)


def is_border_position(position: Point, bounds: Bounds) -> bool:
    """True if the position lies exactly on a side of the rectangle."""
    x, y = position
    return x == 0 or x == bounds.width or y == 0 or y == bounds.height


def build_graph(sites: Iterable[Point], edge_records: Iterable[VoronoiEdgeRecord],
                bounds: Bounds) -> PolygonGraph:
    """
    Build the doubly linked dual graph from raw Voronoi edge records.

    Args:
        sites: Generating sites, in index order; duplicates collapse into one cell
        edge_records: One record per Voronoi ridge
        bounds: Working rectangle

    Returns:
        PolygonGraph with full adjacency

    Raises:
        GraphDataError: if a record references a site that is not in ``sites``
    """
    graph = PolygonGraph(bounds=bounds)

    cell_by_site: Dict[Point, int] = {}
    for site in sites:
        key = (float(site[0]), float(site[1]))
        if key in cell_by_site:
            continue
        cell_by_site[key] = len(graph.cells)
        graph.cells.append(Cell(index=len(graph.cells), position=key))

    # Records that survive clipping; zero-length edges have no distinct corners
    surviving: List[Tuple[VoronoiEdgeRecord, Point, Point]] = []
    corner_by_position: Dict[Point, int] = {}
    skipped = 0

    for record in edge_records:
        if record.clipped is None:
            skipped += 1
            continue

        start = (float(record.clipped[0][0]), float(record.clipped[0][1]))
        end = (float(record.clipped[1][0]), float(record.clipped[1][1]))
        if start == end:
            skipped += 1
            continue

        for position in (start, end):
            if position not in corner_by_position:
                corner_by_position[position] = len(graph.corners)
                graph.corners.append(Corner(
                    index=len(graph.corners),
                    position=position,
                    is_border=is_border_position(position, bounds),
                ))

        surviving.append((record, start, end))

    def lookup_cell(site: Point) -> int:
        key = (float(site[0]), float(site[1]))
        try:
            return cell_by_site[key]
        except KeyError:
            raise GraphDataError(f"Edge references unknown site {key}") from None

    def lookup_corner(position: Point) -> int:
        try:
            return corner_by_position[position]
        except KeyError:
            raise GraphDataError(f"No corner at position {position}") from None

    for record, start, end in surviving:
        d0 = lookup_cell(record.site_a)
        d1 = lookup_cell(record.site_b)
        if d0 == d1:
            raise GraphDataError(f"Edge separates site {record.site_a} from itself")

        edge = Edge(
            index=len(graph.edges),
            v0=lookup_corner(start),
            v1=lookup_corner(end),
            d0=d0,
            d1=d1,
        )
        graph.edges.append(edge)

        c0, c1 = graph.cells[edge.d0], graph.cells[edge.d1]
        k0, k1 = graph.corners[edge.v0], graph.corners[edge.v1]

        c0.border_edges.append(edge.index)
        c1.border_edges.append(edge.index)
        k0.connected_edges.append(edge.index)
        k1.connected_edges.append(edge.index)

        _add_unique(c0.neighbor_cells, c1.index)
        _add_unique(c1.neighbor_cells, c0.index)

        _add_unique(k0.neighbor_corners, k1.index)
        _add_unique(k1.neighbor_corners, k0.index)

        for cell in (c0, c1):
            _add_unique(cell.cell_corners, k0.index)
            _add_unique(cell.cell_corners, k1.index)

        for corner in (k0, k1):
            _add_unique(corner.touching_cells, c0.index)
            _add_unique(corner.touching_cells, c1.index)

    logger.info("Polygon graph built",
                cells=len(graph.cells), corners=len(graph.corners),
                edges=len(graph.edges), skipped_edges=skipped)

    return graph


def build_graph_from_subdivision(subdivision: Subdivision, bounds: Bounds) -> PolygonGraph:
    """Convenience wrapper around build_graph for a Subdivision."""
    return build_graph(subdivision.sites, subdivision.edges, bounds)
