"""
Biome classification.

Every cell gets exactly one biome from a fixed decision table over its
water flags, elevation and moisture. The thresholds define the look of
the generated maps and must not be retuned casually.
"""

from enum import IntEnum
from typing import Dict, TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from .graph import PolygonGraph

logger = structlog.get_logger()


class BiomeType(IntEnum):
    """Biome ids; 0 is reserved for cells that were never classified."""

    UNDEFINED = 0
    OCEAN = 1
    BEACH = 2
    LAKE = 3
    ICE = 4
    MARSH = 5
    SNOW = 6
    TUNDRA = 7
    BARE = 8
    SCORCHED = 9
    TAIGA = 10
    SHRUBLAND = 11
    TEMPERATE_DESERT = 12
    TEMPERATE_RAIN_FOREST = 13
    TEMPERATE_DECIDUOUS_FOREST = 14
    GRASSLAND = 15
    TROPICAL_RAIN_FOREST = 16
    TROPICAL_SEASONAL_FOREST = 17
    SUBTROPICAL_DESERT = 18


# Biome names for display
BIOME_NAMES: Dict[BiomeType, str] = {
    BiomeType.UNDEFINED: "Undefined",
    BiomeType.OCEAN: "Ocean",
    BiomeType.BEACH: "Beach",
    BiomeType.LAKE: "Lake",
    BiomeType.ICE: "Ice",
    BiomeType.MARSH: "Marsh",
    BiomeType.SNOW: "Snow",
    BiomeType.TUNDRA: "Tundra",
    BiomeType.BARE: "Bare",
    BiomeType.SCORCHED: "Scorched",
    BiomeType.TAIGA: "Taiga",
    BiomeType.SHRUBLAND: "Shrubland",
    BiomeType.TEMPERATE_DESERT: "Temperate Desert",
    BiomeType.TEMPERATE_RAIN_FOREST: "Temperate Rain Forest",
    BiomeType.TEMPERATE_DECIDUOUS_FOREST: "Temperate Deciduous Forest",
    BiomeType.GRASSLAND: "Grassland",
    BiomeType.TROPICAL_RAIN_FOREST: "Tropical Rain Forest",
    BiomeType.TROPICAL_SEASONAL_FOREST: "Tropical Seasonal Forest",
    BiomeType.SUBTROPICAL_DESERT: "Subtropical Desert",
}


def classify_biome(is_ocean: bool, is_water: bool, is_coast: bool,
                   elevation: float, moisture: float) -> BiomeType:
    """
    Pick the biome for one cell. First matching branch wins.

    Args:
        is_ocean: Cell is ocean
        is_water: Cell is water (ocean or lake)
        is_coast: Cell borders both ocean and land
        elevation: Cell elevation, [-1, 1]
        moisture: Cell moisture, [0, 1]

    Returns:
        BiomeType for the cell
    """
    if is_ocean:
        return BiomeType.OCEAN

    if is_water:
        if elevation < 0.1:
            return BiomeType.MARSH
        if elevation > 0.8:
            return BiomeType.ICE
        return BiomeType.LAKE

    if is_coast:
        return BiomeType.BEACH

    if elevation > 0.8:
        if moisture > 0.5:
            return BiomeType.SNOW
        if moisture > 0.33:
            return BiomeType.TUNDRA
        if moisture > 0.16:
            return BiomeType.BARE
        return BiomeType.SCORCHED

    if elevation > 0.6:
        if moisture > 0.66:
            return BiomeType.TAIGA
        if moisture > 0.33:
            return BiomeType.SHRUBLAND
        return BiomeType.TEMPERATE_DESERT

    if elevation > 0.3:
        if moisture > 0.83:
            return BiomeType.TEMPERATE_RAIN_FOREST
        if moisture > 0.5:
            return BiomeType.TEMPERATE_DECIDUOUS_FOREST
        if moisture > 0.16:
            return BiomeType.GRASSLAND
        return BiomeType.TEMPERATE_DESERT

    if moisture > 0.66:
        return BiomeType.TROPICAL_RAIN_FOREST
    if moisture > 0.33:
        return BiomeType.TROPICAL_SEASONAL_FOREST
    if moisture > 0.16:
        return BiomeType.GRASSLAND
    return BiomeType.SUBTROPICAL_DESERT


class BiomeClassifier:
    """Assigns a biome to every cell of a fully solved graph."""

    def __init__(self, graph: "PolygonGraph"):
        """
        Initialize biome classifier.

        Args:
            graph: PolygonGraph with elevation and moisture assigned
        """
        self.graph = graph

    def assign_biomes(self) -> Dict[BiomeType, int]:
        """
        Classify every cell.

        Returns:
            Number of cells per biome
        """
        counts: Dict[BiomeType, int] = {}

        for cell in self.graph.cells:
            cell.biome = classify_biome(
                cell.is_ocean, cell.is_water, cell.is_coast,
                cell.elevation, cell.moisture,
            )
            counts[cell.biome] = counts.get(cell.biome, 0) + 1

        logger.info("Biomes assigned",
                    distribution={BIOME_NAMES[b]: n for b, n in sorted(counts.items())})
        return counts
