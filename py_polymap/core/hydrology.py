"""
Rivers: springs and downslope flow accumulation.

This module implements:
- Spring selection among land corners inside an elevation band
- Flow tracing along downslope pointers to the coast
- Additive water volume where rivers merge
"""

from dataclasses import dataclass, field
from typing import List, Optional

import structlog

from .alea_prng import AleaPRNG
from .errors import DownslopeCycleError
from .graph import PolygonGraph

logger = structlog.get_logger()


@dataclass
class HydrologyOptions:
    """River generation options."""
    springs_seed: int = 3  # Seed of the spring selection stream
    number_of_springs: int = 15  # Rivers to trace, at most
    min_spring_elevation: float = 0.3  # Lowest elevation a spring may have
    max_spring_elevation: float = 0.9  # Highest elevation a spring may have

    def __post_init__(self):
        if self.number_of_springs < 0:
            raise ValueError(f"number_of_springs must be non-negative, got {self.number_of_springs}")
        if self.min_spring_elevation > self.max_spring_elevation:
            raise ValueError("min_spring_elevation must not exceed max_spring_elevation")


@dataclass
class River:
    """One traced river, from its spring to where its walk ended."""
    id: int
    spring: int  # Spring corner index
    corners: List[int] = field(default_factory=list)  # Spring first, mouth last
    edges: List[int] = field(default_factory=list)  # Downslope edges in flow order

    @property
    def mouth(self) -> int:
        return self.corners[-1]

    @property
    def length(self) -> int:
        """Number of edges the river flows along."""
        return len(self.edges)


class Hydrology:
    """Selects springs and accumulates river flow on the edges."""

    def __init__(self, graph: PolygonGraph, options: Optional[HydrologyOptions] = None):
        """
        Initialize hydrology system.

        Args:
            graph: PolygonGraph with elevations and downslope pointers assigned
            options: River generation options
        """
        self.graph = graph
        self.options = options or HydrologyOptions()
        self.rivers: List[River] = []

    def find_spring_candidates(self) -> List[int]:
        """Land corners whose elevation lies inside the spring band."""
        low = self.options.min_spring_elevation
        high = self.options.max_spring_elevation
        return [
            corner.index for corner in self.graph.corners
            if low <= corner.elevation <= high and not corner.is_water
        ]

    def select_springs(self, prng: Optional[AleaPRNG] = None) -> List[int]:
        """
        Pick springs uniformly at random, without replacement.

        Args:
            prng: Selection stream; a fresh stream of ``springs_seed`` by default

        Returns:
            Spring corner indices in selection order
        """
        if prng is None:
            prng = AleaPRNG(self.options.springs_seed)

        candidates = self.find_spring_candidates()
        springs = []

        while candidates and len(springs) < self.options.number_of_springs:
            springs.append(candidates.pop(prng.randrange(len(candidates))))

        logger.debug("Springs selected", candidates=len(candidates) + len(springs), springs=len(springs))
        return springs

    def trace_river(self, river_id: int, spring: int) -> River:
        """
        Follow downslope pointers from a spring, adding one unit of water to
        every edge on the way.

        Raises:
            DownslopeCycleError: if the chain revisits a corner
        """
        corners = self.graph.corners
        river = River(id=river_id, spring=spring, corners=[spring])
        visited = {spring}
        current = corners[spring]

        # A chain can never be longer than the corner count
        for _ in range(len(corners)):
            if current.downslope_corner is None:
                if current.elevation != 0:
                    logger.warning("River stopped at a local minimum",
                                   river=river_id, corner=current.index,
                                   elevation=current.elevation)
                break

            self.graph.edges[current.downslope_edge].water_volume += 1
            river.edges.append(current.downslope_edge)

            if current.downslope_corner in visited:
                raise DownslopeCycleError(spring, current.downslope_corner)
            visited.add(current.downslope_corner)

            current = corners[current.downslope_corner]
            river.corners.append(current.index)

        return river

    def add_rivers(self, prng: Optional[AleaPRNG] = None) -> List[River]:
        """Select springs and trace one river from each."""
        for edge in self.graph.edges:
            edge.water_volume = 0

        self.rivers = [
            self.trace_river(river_id, spring)
            for river_id, spring in enumerate(self.select_springs(prng))
        ]

        logger.info("Rivers traced",
                    rivers=len(self.rivers),
                    river_edges=sum(1 for e in self.graph.edges if e.water_volume > 0))
        return self.rivers
