"""Tests for water, ocean, lake and coast classification."""

from py_polymap.core.features import LAKE_THRESHOLD, Features
from py_polymap.core.graph import build_graph
from py_polymap.core.islands import IslandDetector, IslandOptions
from py_polymap.core.voronoi_graph import Bounds

LAKE_CELLS = {24, 23, 25, 17, 31}


def ring_of(index, n=7):
    """0 for the outer ring of an n x n grid, 1 for the next one, and so on."""
    i, j = index % n, index // n
    return min(i, j, n - 1 - i, n - 1 - j)


def corner_at(graph, position):
    return next(c for c in graph.corners if c.position == position)


class TestFeatures:
    """Test the hydrology classification on the lake grid."""

    def test_threshold(self):
        assert LAKE_THRESHOLD == 0.3

    def test_corner_water_from_shape(self, grid_graph):
        features = Features(grid_graph, lambda p, size, seed: p[0] < 3.5)
        features.assign_water()

        for corner in grid_graph.corners:
            assert corner.is_water == (corner.position[0] >= 3.5)

    def test_shape_receives_map_size_and_seed(self, grid_graph):
        calls = []

        def shape(point, map_size, seed):
            calls.append((map_size, seed))
            return True

        Features(grid_graph, shape, seed=99).assign_water()

        assert len(calls) == len(grid_graph.corners)
        assert set(calls) == {((7.0, 7.0), 99)}

    def test_border_cells_are_ocean(self, lake_grid):
        for cell in lake_grid.cells:
            if ring_of(cell.index) == 0:
                assert cell.is_border
                assert cell.is_ocean
                assert cell.is_water
            else:
                assert not cell.is_border
                assert not cell.is_ocean

    def test_border_corners_are_water(self, lake_grid):
        for corner in lake_grid.corners:
            if corner.is_border:
                assert corner.is_water

    def test_lake(self, lake_grid):
        lakes = {cell.index for cell in lake_grid.cells if cell.is_lake}

        assert lakes == LAKE_CELLS
        for index in LAKE_CELLS:
            assert lake_grid.cells[index].is_water
            assert not lake_grid.cells[index].is_ocean

    def test_land(self, lake_grid):
        land = [c for c in lake_grid.cells if not c.is_water]
        assert len(land) == 20

    def test_coast(self, lake_grid):
        for cell in lake_grid.cells:
            ring = ring_of(cell.index)
            if ring == 1:
                assert cell.is_coast
            elif ring >= 2:
                assert not cell.is_coast

        # Ocean cells next to land count as coast, rectangle corners do not
        assert lake_grid.cells[7 * 3].is_coast
        assert not lake_grid.cells[0].is_coast

    def test_ocean_flood_reaches_connected_water(self, grid_graph):
        """Water connected to the border becomes ocean, not lake."""
        channel = {(3.0, y) for y in range(8)} | {(4.0, y) for y in range(8)}
        features = Features(grid_graph, lambda p, size, seed: p not in channel)
        features.assign_water()
        features.assign_ocean_coast_and_land()

        assert not any(cell.is_lake for cell in grid_graph.cells)
        assert grid_graph.cells[7 * 3 + 3].is_ocean

    def test_all_water(self, grid_graph):
        features = Features(grid_graph, lambda p, size, seed: False)
        features.assign_water()
        features.assign_ocean_coast_and_land()

        assert all(cell.is_ocean for cell in grid_graph.cells)
        assert not any(cell.is_coast for cell in grid_graph.cells)

    def test_cell_without_corners_is_ocean(self):
        graph = build_graph([(1.0, 1.0)], [], Bounds(2.0, 2.0))
        features = Features(graph, lambda p, size, seed: True)
        features.assign_water()
        features.assign_ocean_coast_and_land()

        cell = graph.cells[0]
        assert cell.is_border
        assert cell.is_ocean
        assert cell.is_water
        assert not cell.is_lake


class TestCornerTypes:
    """Test corner reclassification from the touching cells."""

    def test_coast_corner(self, lake_grid):
        corner = corner_at(lake_grid, (1.0, 3.0))

        assert corner.is_coast
        assert not corner.is_ocean
        assert not corner.is_water

    def test_ocean_corner(self, lake_grid):
        corner = corner_at(lake_grid, (0.0, 3.0))

        assert corner.is_ocean
        assert corner.is_water
        assert not corner.is_coast

    def test_lake_corner(self, lake_grid):
        for position in [(3.0, 3.0), (2.0, 3.0), (3.0, 2.0)]:
            corner = corner_at(lake_grid, position)
            assert corner.is_water
            assert not corner.is_ocean
            assert not corner.is_coast

    def test_land_corner(self, lake_grid):
        corner = corner_at(lake_grid, (2.0, 2.0))

        assert not corner.is_water
        assert not corner.is_ocean
        assert not corner.is_coast

    def test_runs_after_island_filtering(self, grid_graph):
        """Corners next to a discarded island end up ocean."""
        features = Features(grid_graph, lambda p, size, seed: 2.5 < p[0] < 4.5 and 2.5 < p[1] < 4.5)
        features.assign_water()
        features.assign_ocean_coast_and_land()
        assert any(not cell.is_water for cell in grid_graph.cells)

        IslandDetector(grid_graph, IslandOptions(min_island_size=100)).detect_islands()
        features.assign_corner_types()

        assert all(cell.is_ocean for cell in grid_graph.cells)
        assert all(corner.is_ocean for corner in grid_graph.corners)
        assert not any(corner.is_coast for corner in grid_graph.corners)
