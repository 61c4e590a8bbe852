"""
Core terrain graph synthesis.
"""

from .voronoi_graph import Bounds, Subdivision, VoronoiEdgeRecord, sample_points, subdivide
from .graph import Cell, Corner, Edge, PolygonGraph, build_graph
from .biomes import BiomeType, BIOME_NAMES, BiomeClassifier, classify_biome
from .shapes import IslandShape, RadialShape, MaskShape, BorderMarginShape
from .elevation import PiecewiseCurve, linear_curve
from .islands import Island, IslandOptions
from .hydrology import HydrologyOptions, River
from .map_generator import (MapConfig, PolygonMap, PolygonMapGenerator,
                            GenerationResult, generate_polygon_map)
from .errors import (TerrainGraphError, GraphDataError, DownslopeCycleError,
                     GenerationInProgressError)

__all__ = ['Bounds', 'Subdivision', 'VoronoiEdgeRecord', 'sample_points', 'subdivide',
           'Cell', 'Corner', 'Edge', 'PolygonGraph', 'build_graph',
           'BiomeType', 'BIOME_NAMES', 'BiomeClassifier', 'classify_biome',
           'IslandShape', 'RadialShape', 'MaskShape', 'BorderMarginShape',
           'PiecewiseCurve', 'linear_curve',
           'Island', 'IslandOptions', 'HydrologyOptions', 'River',
           'MapConfig', 'PolygonMap', 'PolygonMapGenerator', 'GenerationResult',
           'generate_polygon_map',
           'TerrainGraphError', 'GraphDataError', 'DownslopeCycleError',
           'GenerationInProgressError']
