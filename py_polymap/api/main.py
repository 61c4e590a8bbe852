"""FastAPI main application."""

import threading
import uuid
from collections import OrderedDict
from datetime import datetime, timezone
from typing import List, Optional, Tuple

import structlog
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field, model_validator

from .. import __version__
from ..config import settings
from ..core.biomes import BIOME_NAMES
from ..core.elevation import PiecewiseCurve
from ..core.errors import TerrainGraphError
from ..core.hydrology import HydrologyOptions
from ..core.islands import IslandOptions
from ..core.map_generator import MapConfig, PolygonMap, PolygonMapGenerator, random_seed
from ..core.shapes import get_shape
from ..core.statistics import summarize_map
from ..utils.logging import configure_logging

configure_logging(settings.log_level, settings.log_format)

logger = structlog.get_logger()

app = FastAPI(
    title="Polygon Map Generator API",
    description="Procedural island maps on a Voronoi polygon graph",
    version=__version__,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Request/Response models
class MapGenerationRequest(BaseModel):
    """Request to generate a new map."""

    seed: Optional[int] = Field(None, description="Map seed; random when omitted")
    polygon_count: int = Field(settings.default_polygon_count, ge=3, le=settings.max_polygon_count,
                               description="Number of polygons")
    width: float = Field(settings.default_map_width, gt=0, description="Map width")
    height: float = Field(settings.default_map_height, gt=0, description="Map height")
    relaxation: int = Field(settings.default_relaxation, ge=0, le=20, description="Lloyd relaxation iterations")
    shape: str = Field("radial", description="Island shape name (square, radial)")
    single_island: bool = Field(False, description="Keep only the largest island")
    min_island_size: int = Field(0, ge=0, description="Islands with fewer cells become ocean")
    springs_seed: int = Field(3, description="Seed of the spring selection")
    number_of_springs: int = Field(15, ge=0, description="Rivers to trace")
    min_spring_elevation: float = Field(0.3, ge=0, le=1, description="Lowest spring elevation")
    max_spring_elevation: float = Field(0.9, ge=0, le=1, description="Highest spring elevation")
    elevation_curve: Optional[List[Tuple[float, float]]] = Field(
        None, description="Control points (x, y) of the elevation remap curve"
    )
    map_name: Optional[str] = Field(None, description="Custom map name")

    @model_validator(mode="after")
    def check_spring_band(self):
        if self.min_spring_elevation > self.max_spring_elevation:
            raise ValueError("min_spring_elevation must not exceed max_spring_elevation")
        return self


class BiomeStatistics(BaseModel):
    """Biome distribution entry."""

    biome_id: int
    biome_name: str
    cell_count: int
    percentage: float


class RiverInfo(BaseModel):
    """Information about a river."""

    id: int
    spring_corner: int
    mouth_corner: int
    length: int
    mouth_volume: int
    spring_elevation: float


class IslandInfo(BaseModel):
    """Information about an island."""

    id: int
    cell_count: int
    cells: List[int]


class MapSummaryResponse(BaseModel):
    """Summary information about a generated map."""

    id: str
    name: str
    seed: int
    next_seed: int
    springs_seed: int
    width: float
    height: float
    cells_count: int
    islands_count: int
    rivers_count: int
    created_at: datetime
    generation_time_seconds: float


class MapStatistics(BaseModel):
    """Comprehensive statistics about a generated map."""

    map_id: str
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
    rivers_count: int
    river_edges: int
    biome_distribution: List[BiomeStatistics]
    elevation_range: Tuple[float, float]
    moisture_range: Tuple[float, float]


class CellData(BaseModel):
    """All computed fields of one cell."""

    index: int
    position: Tuple[float, float]
    biome: str
    biome_id: int
    is_water: bool
    is_ocean: bool
    is_coast: bool
    is_border: bool
    island_id: int
    elevation: float
    moisture: float
    neighbor_cells: List[int]
    cell_corners: List[int]


class StoredMap:
    def __init__(self, map_id: str, name: str, polygon_map: PolygonMap, next_seed: int):
        self.id = map_id
        self.name = name
        self.map = polygon_map
        self.next_seed = next_seed
        self.created_at = datetime.now(timezone.utc)


class MapStore:
    """Keeps the most recent maps in memory; the oldest is evicted first."""

    def __init__(self, capacity: int):
        self.capacity = capacity
        self._maps: "OrderedDict[str, StoredMap]" = OrderedDict()
        self._lock = threading.Lock()

    def add(self, stored: StoredMap) -> None:
        with self._lock:
            self._maps[stored.id] = stored
            while len(self._maps) > self.capacity:
                evicted, _ = self._maps.popitem(last=False)
                logger.info("Evicted map from store", map_id=evicted)

    def get(self, map_id: str) -> Optional[StoredMap]:
        with self._lock:
            return self._maps.get(map_id)

    def list(self) -> List[StoredMap]:
        with self._lock:
            return list(self._maps.values())

    def clear(self) -> None:
        with self._lock:
            self._maps.clear()


store = MapStore(settings.max_stored_maps)


def get_map_or_404(map_id: str) -> StoredMap:
    """Get stored map by ID or raise 404."""
    stored = store.get(map_id)
    if stored is None:
        raise HTTPException(status_code=404, detail="Map not found")
    return stored


def to_summary(stored: StoredMap) -> MapSummaryResponse:
    polygon_map = stored.map
    bounds = polygon_map.graph.bounds
    return MapSummaryResponse(
        id=stored.id,
        name=stored.name,
        seed=polygon_map.seed,
        next_seed=stored.next_seed,
        springs_seed=polygon_map.springs_seed,
        width=bounds.width,
        height=bounds.height,
        cells_count=len(polygon_map.cells),
        islands_count=len(polygon_map.islands),
        rivers_count=len(polygon_map.rivers),
        created_at=stored.created_at,
        generation_time_seconds=polygon_map.generation_time_seconds,
    )


def build_generator(request: MapGenerationRequest) -> PolygonMapGenerator:
    """Translate an API request into a configured generator."""
    try:
        shape = get_shape(request.shape)
        curve = None
        if request.elevation_curve:
            xs, ys = zip(*request.elevation_curve)
            curve = PiecewiseCurve(xs, ys)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return PolygonMapGenerator(
        config=MapConfig(
            polygon_count=request.polygon_count,
            width=request.width,
            height=request.height,
            relaxation=request.relaxation,
        ),
        shape=shape,
        island_options=IslandOptions(
            single_island=request.single_island,
            min_island_size=request.min_island_size,
        ),
        hydrology_options=HydrologyOptions(
            springs_seed=request.springs_seed,
            number_of_springs=request.number_of_springs,
            min_spring_elevation=request.min_spring_elevation,
            max_spring_elevation=request.max_spring_elevation,
        ),
        elevation_curve=curve,
    )


# API endpoints
@app.get("/")
def root():
    """Root endpoint."""
    return {
        "message": "Polygon Map Generator API",
        "version": __version__,
        "status": "running",
    }


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "stored_maps": len(store.list())}


@app.post("/maps/generate", response_model=MapSummaryResponse)
def generate_map(request: MapGenerationRequest):
    """Generate a map synchronously and keep it in the store."""
    logger.info("Map generation requested", request=request.model_dump())

    generator = build_generator(request)
    seed = request.seed if request.seed is not None else random_seed()

    try:
        result = generator.generate(seed)
    except TerrainGraphError as e:
        logger.error("Map generation failed", seed=seed, error=str(e))
        raise HTTPException(status_code=422, detail=str(e))

    map_id = str(uuid.uuid4())
    stored = StoredMap(
        map_id=map_id,
        name=request.map_name or f"Map {seed}",
        polygon_map=result.map,
        next_seed=result.next_seed,
    )
    store.add(stored)

    logger.info("Map stored", map_id=map_id, seed=seed)
    return to_summary(stored)


@app.get("/maps", response_model=List[MapSummaryResponse])
def list_maps():
    """List all stored maps, newest first."""
    return [to_summary(stored) for stored in reversed(store.list())]


@app.get("/maps/{map_id}", response_model=MapSummaryResponse)
def get_map(map_id: str):
    """Get map details."""
    return to_summary(get_map_or_404(map_id))


@app.get("/maps/{map_id}/statistics", response_model=MapStatistics)
def get_map_statistics(map_id: str):
    """Get comprehensive statistics for a map."""
    stored = get_map_or_404(map_id)
    summary = summarize_map(stored.map)

    return MapStatistics(
        map_id=stored.id,
        total_cells=summary.total_cells,
        land_cells=summary.land_cells,
        water_cells=summary.water_cells,
        ocean_cells=summary.ocean_cells,
        lake_cells=summary.lake_cells,
        coast_cells=summary.coast_cells,
        corners=summary.corners,
        edges=summary.edges,
        island_sizes=summary.island_sizes,
        discarded_islands=summary.discarded_islands,
        rivers_count=len(summary.rivers),
        river_edges=summary.river_edges,
        biome_distribution=[
            BiomeStatistics(biome_id=int(s.biome), biome_name=s.name,
                            cell_count=s.cell_count, percentage=s.percentage)
            for s in summary.biome_distribution
        ],
        elevation_range=summary.elevation_range,
        moisture_range=summary.moisture_range,
    )


@app.get("/maps/{map_id}/biomes", response_model=List[BiomeStatistics])
def get_map_biomes(map_id: str):
    """Get biome distribution for a map."""
    summary = summarize_map(get_map_or_404(map_id).map)
    return [
        BiomeStatistics(biome_id=int(s.biome), biome_name=s.name,
                        cell_count=s.cell_count, percentage=s.percentage)
        for s in summary.biome_distribution
    ]


@app.get("/maps/{map_id}/rivers", response_model=List[RiverInfo])
def get_map_rivers(map_id: str):
    """Get river information for a map."""
    summary = summarize_map(get_map_or_404(map_id).map)
    return [
        RiverInfo(id=r.id, spring_corner=r.spring, mouth_corner=r.mouth,
                  length=r.length, mouth_volume=r.mouth_volume,
                  spring_elevation=r.spring_elevation)
        for r in summary.rivers
    ]


@app.get("/maps/{map_id}/islands", response_model=List[IslandInfo])
def get_map_islands(map_id: str):
    """Get the surviving islands of a map."""
    polygon_map = get_map_or_404(map_id).map
    return [
        IslandInfo(id=island.id, cell_count=island.size, cells=island.cells)
        for island in polygon_map.islands
    ]


@app.get("/maps/{map_id}/cells/{cell_index}", response_model=CellData)
def get_cell(map_id: str, cell_index: int):
    """Get all computed data of one cell."""
    polygon_map = get_map_or_404(map_id).map

    if cell_index < 0 or cell_index >= len(polygon_map.cells):
        raise HTTPException(status_code=400, detail="Invalid cell index")

    cell = polygon_map.cells[cell_index]
    return CellData(
        index=cell.index,
        position=cell.position,
        biome=BIOME_NAMES[cell.biome],
        biome_id=int(cell.biome),
        is_water=cell.is_water,
        is_ocean=cell.is_ocean,
        is_coast=cell.is_coast,
        is_border=cell.is_border,
        island_id=cell.island_id,
        elevation=cell.elevation,
        moisture=cell.moisture,
        neighbor_cells=cell.neighbor_cells,
        cell_corners=cell.cell_corners,
    )


def run():
    """Serve the API with uvicorn."""
    import uvicorn

    uvicorn.run(app, host=settings.api_host, port=settings.api_port)


if __name__ == "__main__":
    run()
