"""
Polygon map generation pipeline.

Runs the full terrain synthesis for one seed:

1. Sample points and compute the relaxed Voronoi subdivision
2. Build the polygon graph
3. Water, ocean and coast classification
4. Island detection and filtering
5. Corner reclassification
6. Elevation
7. Rivers
8. Moisture
9. Biomes

Each stage runs exactly once per call, in this order.
"""

import time
import uuid
from dataclasses import dataclass, field
from typing import Callable, List, NamedTuple, Optional

import structlog

from .alea_prng import AleaPRNG
from .biomes import BiomeClassifier
from .elevation import ElevationCurve, ElevationSolver, linear_curve
from .errors import GenerationInProgressError, GraphDataError
from .features import Features
from .graph import PolygonGraph, build_graph
from .hydrology import Hydrology, HydrologyOptions, River
from .islands import Island, IslandDetector, IslandOptions
from .moisture import MoistureSolver
from .shapes import IslandShape, ShapePredicate
from .voronoi_graph import Bounds, Subdivision, sample_points, subdivide
from ..utils.random import ELEVATION_STREAM, make_stream, next_seed

logger = structlog.get_logger()

DEFAULT_POLYGON_COUNT = 2048
DEFAULT_MAP_WIDTH = 2.0
DEFAULT_MAP_HEIGHT = 2.0
DEFAULT_RELAXATION = 4


class MapConfig(NamedTuple):
    """Configuration for the polygon layout."""
    polygon_count: int = DEFAULT_POLYGON_COUNT
    width: float = DEFAULT_MAP_WIDTH
    height: float = DEFAULT_MAP_HEIGHT
    relaxation: int = DEFAULT_RELAXATION

    @property
    def bounds(self) -> Bounds:
        return Bounds(self.width, self.height)


@dataclass
class PolygonMap:
    """A finished map: the classified graph plus its islands and rivers."""
    graph: PolygonGraph
    islands: List[Island]
    rivers: List[River]
    seed: int
    springs_seed: int
    discarded_islands: List[Island] = field(default_factory=list)
    generation_time_seconds: float = 0.0

    @property
    def cells(self):
        return self.graph.cells

    @property
    def corners(self):
        return self.graph.corners

    @property
    def edges(self):
        return self.graph.edges


class GenerationResult(NamedTuple):
    """Map produced by a run and the seed to use for the next one."""
    map: PolygonMap
    next_seed: int


class PolygonMapGenerator:
    """
    Generates polygon maps from seeds.

    Listeners registered with ``add_listener`` are called without arguments
    once per successful run, after every stage has finished.
    """

    def __init__(self,
                 config: Optional[MapConfig] = None,
                 shape: Optional[ShapePredicate] = None,
                 island_options: Optional[IslandOptions] = None,
                 hydrology_options: Optional[HydrologyOptions] = None,
                 elevation_curve: Optional[ElevationCurve] = None):
        self.config = config or MapConfig()
        self.shape = shape or IslandShape()
        self.island_options = island_options or IslandOptions()
        self.hydrology_options = hydrology_options or HydrologyOptions()
        self.elevation_curve = elevation_curve or linear_curve

        self._listeners: List[Callable[[], None]] = []
        self._running = False

    def add_listener(self, listener: Callable[[], None]) -> None:
        """Register a "generation complete" callback."""
        self._listeners.append(listener)

    def remove_listener(self, listener: Callable[[], None]) -> None:
        self._listeners.remove(listener)

    def build_subdivision(self, seed: int) -> Subdivision:
        """Sample the sites for ``seed`` and compute their relaxed subdivision."""
        points = sample_points(self.config.polygon_count, self.config.width,
                               self.config.height, seed)
        return subdivide(points, self.config.bounds, self.config.relaxation)

    def generate(self, seed: int) -> GenerationResult:
        """
        Generate a complete map for ``seed``.

        Returns:
            GenerationResult with the map and the seed for the next run
        """
        logger.info("Generating polygon map",
                    seed=seed, polygons=self.config.polygon_count,
                    width=self.config.width, height=self.config.height,
                    relaxation=self.config.relaxation)

        return self._run(seed, lambda: self.build_subdivision(seed))

    def generate_from_subdivision(self, subdivision: Subdivision, seed: int = 0) -> GenerationResult:
        """Run the terrain stages on caller supplied sites and edge records.

        Raises:
            GraphDataError: if the subdivision was clipped to a rectangle other
                than the configured bounds
        """
        if subdivision.bounds is not None and tuple(subdivision.bounds) != tuple(self.config.bounds):
            raise GraphDataError(
                f"Subdivision was built for bounds {tuple(subdivision.bounds)}, "
                f"generator is configured for {tuple(self.config.bounds)}"
            )
        return self._run(seed, lambda: subdivision)

    def _run(self, seed: int, make_subdivision: Callable[[], Subdivision]) -> GenerationResult:
        if self._running:
            raise GenerationInProgressError("A generation run is already in progress")

        self._running = True
        try:
            start = time.perf_counter()
            polygon_map = self._synthesize(seed, make_subdivision())
            polygon_map.generation_time_seconds = time.perf_counter() - start
        finally:
            self._running = False

        logger.info("Polygon map generated",
                    seed=seed,
                    cells=len(polygon_map.cells),
                    islands=len(polygon_map.islands),
                    rivers=len(polygon_map.rivers),
                    seconds=round(polygon_map.generation_time_seconds, 3))

        for listener in list(self._listeners):
            listener()

        return GenerationResult(map=polygon_map, next_seed=next_seed(seed))

    def _synthesize(self, seed: int, subdivision: Subdivision) -> PolygonMap:
        graph = build_graph(subdivision.sites, subdivision.edges, self.config.bounds)

        features = Features(graph, self.shape, seed)
        features.assign_water()
        features.assign_ocean_coast_and_land()

        detector = IslandDetector(graph, self.island_options)
        islands = detector.detect_islands()

        features.assign_corner_types()

        solver = ElevationSolver(graph, make_stream(seed, ELEVATION_STREAM), self.elevation_curve)
        solver.assign_elevations()

        hydrology = Hydrology(graph, self.hydrology_options)
        rivers = hydrology.add_rivers(AleaPRNG(self.hydrology_options.springs_seed))

        MoistureSolver(graph).assign_moisture()
        BiomeClassifier(graph).assign_biomes()

        return PolygonMap(
            graph=graph,
            islands=islands,
            rivers=rivers,
            seed=seed,
            springs_seed=self.hydrology_options.springs_seed,
            discarded_islands=detector.discarded,
        )


def generate_polygon_map(seed: int,
                         config: Optional[MapConfig] = None,
                         shape: Optional[ShapePredicate] = None,
                         island_options: Optional[IslandOptions] = None,
                         hydrology_options: Optional[HydrologyOptions] = None,
                         elevation_curve: Optional[ElevationCurve] = None) -> GenerationResult:
    """One-shot helper around PolygonMapGenerator.generate."""
    generator = PolygonMapGenerator(config, shape, island_options,
                                    hydrology_options, elevation_curve)
    return generator.generate(seed)


def random_seed() -> int:
    """Fresh seed for callers that did not pick one."""
    return uuid.uuid4().int % (2 ** 31)
