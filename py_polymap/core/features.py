"""
Geographic features: water, ocean, lakes and coastline.

This module handles:
- Corner water flags from the island shape
- Ocean flood fill from the map border, leaving enclosed water as lakes
- Coastline detection for cells
- Corner reclassification from the surrounding cells
"""

from collections import deque

import structlog

from .graph import PolygonGraph
from .shapes import ShapePredicate

logger = structlog.get_logger()

# Fraction of a cell's corners that must be water for the cell to be water
LAKE_THRESHOLD = 0.3


class Features:
    """Handles water, ocean and coast classification of a PolygonGraph."""

    def __init__(self, graph: PolygonGraph, shape: ShapePredicate, seed: int = 0):
        """
        Initialize Features with a PolygonGraph.

        Args:
            graph: Freshly built PolygonGraph
            shape: Island shape predicate
            seed: Map seed handed to the shape predicate
        """
        self.graph = graph
        self.shape = shape
        self.seed = seed

    def assign_water(self):
        """Mark every corner outside the island shape as water."""
        map_size = (self.graph.bounds.width, self.graph.bounds.height)

        for corner in self.graph.corners:
            corner.is_water = not self.shape(corner.position, map_size, self.seed)

        logger.debug("Corner water assigned",
                     water_corners=sum(c.is_water for c in self.graph.corners))

    def assign_ocean_coast_and_land(self):
        """
        Classify cells as ocean, lake or land and mark coast cells.

        Cells touching the map border, or with no corners at all, are ocean;
        ocean then floods through every connected water cell. Water the
        flood cannot reach is a lake.
        """
        cells = self.graph.cells
        corners = self.graph.corners
        queue = deque()

        for cell in cells:
            num_water = 0

            if not cell.cell_corners:
                # A cell without corners spans the whole rectangle
                cell.is_border = True
                cell.is_ocean = True

            for corner_id in cell.cell_corners:
                corner = corners[corner_id]
                if corner.is_border:
                    # The map edge is always ocean
                    cell.is_border = True
                    cell.is_ocean = True
                    corner.is_water = True

                if corner.is_water:
                    num_water += 1

            if cell.is_ocean:
                queue.append(cell.index)

            cell.is_water = cell.is_ocean or num_water >= len(cell.cell_corners) * LAKE_THRESHOLD

        while queue:
            cell = cells[queue.popleft()]

            for neighbor_id in cell.neighbor_cells:
                neighbor = cells[neighbor_id]
                if neighbor.is_water and not neighbor.is_ocean:
                    neighbor.is_ocean = True
                    queue.append(neighbor_id)

        for cell in cells:
            num_ocean = 0
            num_land = 0

            for neighbor_id in cell.neighbor_cells:
                neighbor = cells[neighbor_id]
                num_ocean += neighbor.is_ocean
                num_land += not neighbor.is_water

            cell.is_coast = num_ocean > 0 and num_land > 0

        logger.info("Cell hydrology assigned",
                    ocean=sum(c.is_ocean for c in cells),
                    lakes=sum(c.is_lake for c in cells),
                    coast=sum(c.is_coast for c in cells))

    def assign_corner_types(self):
        """
        Reclassify corners from the cells that touch them.

        A corner is ocean when every touching cell is ocean and coast when it
        touches both ocean and land. Coast corners count as land.
        """
        cells = self.graph.cells

        for corner in self.graph.corners:
            num_ocean = 0
            num_land = 0

            for cell_id in corner.touching_cells:
                cell = cells[cell_id]
                num_ocean += cell.is_ocean
                num_land += not cell.is_water

            touching = len(corner.touching_cells)
            corner.is_ocean = num_ocean == touching
            corner.is_coast = num_ocean > 0 and num_land > 0
            corner.is_water = corner.is_border or (num_land != touching and not corner.is_coast)

        logger.info("Corner hydrology assigned",
                    ocean=sum(c.is_ocean for c in self.graph.corners),
                    coast=sum(c.is_coast for c in self.graph.corners))
