"""Moisture: distance from fresh water, measured in cell hops."""

from collections import deque
from typing import Dict

import numpy as np
import structlog

from .graph import PolygonGraph

logger = structlog.get_logger()

UNREACHED = -1


class MoistureSolver:
    """Assigns moisture to cells from their distance to rivers and lakes."""

    def __init__(self, graph: PolygonGraph):
        self.graph = graph
        self.water_distance = None  # Hop distance per cell, UNREACHED if none
        self.max_distance = 1

    def find_moisture_seeds(self) -> Dict[int, None]:
        """
        Cells on either side of a river edge or of an edge touching a lake.

        Returns:
            Insertion ordered set of cell indices
        """
        cells = self.graph.cells
        seeds: Dict[int, None] = {}

        for edge in self.graph.edges:
            if edge.water_volume > 0 or cells[edge.d0].is_lake or cells[edge.d1].is_lake:
                seeds[edge.d0] = None
                seeds[edge.d1] = None

        return seeds

    def assign_moisture(self):
        """
        Breadth first search from the seeds through land cells, then
        normalize. Water is fully moist; land the search never reaches
        is as dry as the driest reached cell.
        """
        cells = self.graph.cells
        seeds = self.find_moisture_seeds()

        distance = np.full(len(cells), UNREACHED, dtype=np.int32)
        queue = deque(seeds)
        for cell_id in seeds:
            distance[cell_id] = 0

        self.max_distance = 1
        while queue:
            current = queue.popleft()
            for neighbor_id in cells[current].neighbor_cells:
                if not cells[neighbor_id].is_water and distance[neighbor_id] == UNREACHED:
                    new_distance = distance[current] + 1
                    distance[neighbor_id] = new_distance
                    if new_distance > self.max_distance:
                        self.max_distance = int(new_distance)
                    queue.append(neighbor_id)

        self.water_distance = distance

        for cell in cells:
            if cell.is_water:
                cell.moisture = 1.0
            elif distance[cell.index] == UNREACHED:
                cell.moisture = 0.0
            else:
                cell.moisture = 1.0 - float(distance[cell.index]) / self.max_distance

        logger.info("Moisture assigned",
                    seeds=len(seeds), max_distance=self.max_distance,
                    unreached=sum(1 for c in cells if not c.is_water and distance[c.index] == UNREACHED))
