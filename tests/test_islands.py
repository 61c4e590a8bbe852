"""Tests for island detection and filtering."""

import pytest

from py_polymap.core.islands import Island, IslandDetector, IslandOptions

# Cell indices on a 7x7 grid, index = j * 7 + i
ISLAND_A = [8, 9]            # (1,1) (2,1)
ISLAND_B = [32, 33, 39]      # (4,4) (5,4) (4,5)
ISLAND_C = [36]              # (1,5)


def flag_land(graph, land):
    """Make every cell ocean except ``land``."""
    for cell in graph.cells:
        is_land = cell.index in land
        cell.is_water = not is_land
        cell.is_ocean = not is_land


class TestIslandOptions:

    def test_defaults(self):
        options = IslandOptions()
        assert options.single_island is False
        assert options.min_island_size == 0

    def test_negative_min_size(self):
        with pytest.raises(ValueError):
            IslandOptions(min_island_size=-1)


class TestIslandDetector:
    """Test island detection on hand-flagged grids."""

    @pytest.fixture
    def graph(self, grid_graph):
        flag_land(grid_graph, set(ISLAND_A + ISLAND_B + ISLAND_C))
        return grid_graph

    def test_discovery_order(self, graph):
        islands = IslandDetector(graph).detect_islands()

        assert [i.id for i in islands] == [0, 1, 2]
        assert [sorted(i.cells) for i in islands] == [ISLAND_A, ISLAND_B, ISLAND_C]
        assert [i.size for i in islands] == [2, 3, 1]

    def test_island_ids_on_cells(self, graph):
        IslandDetector(graph).detect_islands()

        for cell in graph.cells:
            if cell.is_ocean:
                assert cell.island_id == -1
            else:
                assert cell.island_id >= 0

        assert graph.cells[ISLAND_B[0]].island_id == 1

    def test_min_island_size(self, graph):
        detector = IslandDetector(graph, IslandOptions(min_island_size=2))
        islands = detector.detect_islands()

        assert [sorted(i.cells) for i in islands] == [ISLAND_A, ISLAND_B]
        assert [i.id for i in islands] == [0, 1]
        assert [d.cells for d in detector.discarded] == [ISLAND_C]

        discarded = graph.cells[ISLAND_C[0]]
        assert discarded.is_water
        assert discarded.is_ocean
        assert discarded.island_id == -1

    def test_survivors_renumbered(self, graph):
        detector = IslandDetector(graph, IslandOptions(min_island_size=3))
        islands = detector.detect_islands()

        assert len(islands) == 1
        assert islands[0].id == 0
        for index in ISLAND_B:
            assert graph.cells[index].island_id == 0

    def test_single_island(self, graph):
        detector = IslandDetector(graph, IslandOptions(single_island=True))
        islands = detector.detect_islands()

        assert len(islands) == 1
        assert sorted(islands[0].cells) == ISLAND_B
        assert len(detector.discarded) == 2
        assert sum(not c.is_ocean for c in graph.cells) == 3

    def test_single_island_tie_keeps_first(self, grid_graph):
        island_a = ISLAND_A + [10]
        flag_land(grid_graph, set(island_a + ISLAND_B))

        islands = IslandDetector(grid_graph, IslandOptions(single_island=True)).detect_islands()

        assert len(islands) == 1
        assert sorted(islands[0].cells) == island_a
        assert all(grid_graph.cells[i].is_ocean for i in ISLAND_B)

    def test_no_land(self, grid_graph):
        flag_land(grid_graph, set())

        detector = IslandDetector(grid_graph, IslandOptions(single_island=True))

        assert detector.detect_islands() == []
        assert detector.discarded == []

    def test_lakes_belong_to_islands(self, lake_grid):
        """Islands group non-ocean cells, lakes included."""
        islands = IslandDetector(lake_grid).detect_islands()

        assert len(islands) == 1
        assert islands[0].size == 25
        assert lake_grid.cells[24].island_id == 0

    def test_rerun_resets(self, graph):
        detector = IslandDetector(graph)
        first = [sorted(i.cells) for i in detector.detect_islands()]
        second = [sorted(i.cells) for i in detector.detect_islands()]

        assert first == second


def test_island_size():
    assert Island(id=0, cells=[3, 4, 5]).size == 3
