"""Island detection: connected components of land cells."""

from collections import deque
from dataclasses import dataclass
from typing import List, Optional

import structlog

from .graph import PolygonGraph

logger = structlog.get_logger()


@dataclass
class IslandOptions:
    """Island filtering options."""
    single_island: bool = False  # Keep only the largest island
    min_island_size: int = 0  # Islands with fewer cells become ocean

    def __post_init__(self):
        if self.min_island_size < 0:
            raise ValueError(f"min_island_size must be non-negative, got {self.min_island_size}")


@dataclass
class Island:
    """A connected group of land cells."""
    id: int
    cells: List[int]  # Cell indices in discovery order

    @property
    def size(self) -> int:
        return len(self.cells)


class IslandDetector:
    """Partitions non-ocean cells into islands and drops the small ones."""

    def __init__(self, graph: PolygonGraph, options: Optional[IslandOptions] = None):
        self.graph = graph
        self.options = options or IslandOptions()
        self.islands: List[Island] = []
        self.discarded: List[Island] = []

    def detect_islands(self) -> List[Island]:
        """
        Flood fill land cells into islands, then discard islands below the
        minimum size by turning their cells into ocean.

        Returns:
            Surviving islands, ids renumbered to match their list position
        """
        cells = self.graph.cells
        found: List[Island] = []

        for cell in cells:
            cell.island_id = -1

        for cell in cells:
            if cell.is_ocean or cell.island_id >= 0:
                continue

            island = Island(id=len(found), cells=[cell.index])
            cell.island_id = island.id
            queue = deque([cell.index])

            while queue:
                current = cells[queue.popleft()]
                for neighbor_id in current.neighbor_cells:
                    neighbor = cells[neighbor_id]
                    if not neighbor.is_ocean and neighbor.island_id < 0:
                        neighbor.island_id = island.id
                        island.cells.append(neighbor_id)
                        queue.append(neighbor_id)

            found.append(island)

        min_size = self.options.min_island_size
        largest = None
        if self.options.single_island:
            for island in found:
                # Strictly greater: the first island found wins ties
                if largest is None or island.size > largest.size:
                    largest = island
            min_size = largest.size if largest is not None else 0

        self.islands = []
        self.discarded = []
        for island in found:
            if island.size < min_size or (largest is not None and island is not largest):
                for cell_id in island.cells:
                    cell = cells[cell_id]
                    cell.is_water = True
                    cell.is_ocean = True
                    cell.island_id = -1
                self.discarded.append(island)
            else:
                island.id = len(self.islands)
                for cell_id in island.cells:
                    cells[cell_id].island_id = island.id
                self.islands.append(island)

        logger.info("Islands detected",
                    found=len(found), kept=len(self.islands),
                    discarded=len(self.discarded), min_size=min_size)

        return self.islands
