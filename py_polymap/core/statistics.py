"""Summary statistics of a generated polygon map, for consumers and the API."""

from dataclasses import dataclass
from typing import Dict, List, Tuple

import numpy as np

from .biomes import BIOME_NAMES, BiomeType
from .map_generator import PolygonMap


@dataclass
class BiomeShare:
    biome: BiomeType
    cell_count: int
    percentage: float

    @property
    def name(self) -> str:
        return BIOME_NAMES[self.biome]


@dataclass
class RiverSummary:
    id: int
    spring: int
    mouth: int
    length: int  # Edges along the river
    mouth_volume: int  # Water volume on the last edge
    spring_elevation: float


@dataclass
class MapSummary:
    total_cells: int
    land_cells: int
    water_cells: int
    ocean_cells: int
    lake_cells: int
    coast_cells: int
    corners: int
    edges: int
    island_sizes: List[int]
    discarded_islands: int
    rivers: List[RiverSummary]
    river_edges: int
    biome_distribution: List[BiomeShare]
    elevation_range: Tuple[float, float]
    moisture_range: Tuple[float, float]


def biome_distribution(polygon_map: PolygonMap) -> List[BiomeShare]:
    """Cells per biome, most common first."""
    biomes = polygon_map.graph.cell_array("biome", dtype=np.int64)
    total = len(biomes)
    if total == 0:
        return []

    ids, counts = np.unique(biomes, return_counts=True)
    shares = [
        BiomeShare(biome=BiomeType(int(b)), cell_count=int(n), percentage=round(100.0 * n / total, 2))
        for b, n in zip(ids, counts)
    ]
    shares.sort(key=lambda s: (-s.cell_count, s.biome))
    return shares


def summarize_rivers(polygon_map: PolygonMap) -> List[RiverSummary]:
    edges = polygon_map.edges
    corners = polygon_map.corners
    return [
        RiverSummary(
            id=river.id,
            spring=river.spring,
            mouth=river.mouth,
            length=river.length,
            mouth_volume=edges[river.edges[-1]].water_volume if river.edges else 0,
            spring_elevation=corners[river.spring].elevation,
        )
        for river in polygon_map.rivers
    ]


def _value_range(values: np.ndarray) -> Tuple[float, float]:
    if values.size == 0:
        return (0.0, 0.0)
    return (float(values.min()), float(values.max()))


def summarize_map(polygon_map: PolygonMap) -> MapSummary:
    """Collect counts and ranges of a finished map."""
    graph = polygon_map.graph
    is_water = graph.cell_array("is_water", dtype=bool)
    is_ocean = graph.cell_array("is_ocean", dtype=bool)
    is_coast = graph.cell_array("is_coast", dtype=bool)
    water_volume = graph.edge_array("water_volume", dtype=np.int64)

    return MapSummary(
        total_cells=len(graph.cells),
        land_cells=int(np.sum(~is_water)),
        water_cells=int(np.sum(is_water)),
        ocean_cells=int(np.sum(is_ocean)),
        lake_cells=int(np.sum(is_water & ~is_ocean)),
        coast_cells=int(np.sum(is_coast)),
        corners=len(graph.corners),
        edges=len(graph.edges),
        island_sizes=[island.size for island in polygon_map.islands],
        discarded_islands=len(polygon_map.discarded_islands),
        rivers=summarize_rivers(polygon_map),
        river_edges=int(np.sum(water_volume > 0)),
        biome_distribution=biome_distribution(polygon_map),
        elevation_range=_value_range(graph.cell_array("elevation", dtype=np.float64)),
        moisture_range=_value_range(graph.cell_array("moisture", dtype=np.float64)),
    )


def biome_counts(polygon_map: PolygonMap) -> Dict[str, int]:
    """Biome display name -> cell count."""
    return {share.name: share.cell_count for share in biome_distribution(polygon_map)}
