"""Tests for polygon graph construction."""

import pytest

from py_polymap.core.errors import GraphDataError
from py_polymap.core.graph import build_graph, build_graph_from_subdivision
from py_polymap.core.voronoi_graph import Bounds, VoronoiEdgeRecord, sample_points, subdivide


def corner_at(graph, position):
    return next(c for c in graph.corners if c.position == position)


class TestGridGraph:
    """Test adjacency on a grid of unit squares."""

    def test_counts(self, grid_graph):
        assert len(grid_graph.cells) == 49
        # Lattice points minus the four rectangle corners
        assert len(grid_graph.corners) == 60
        assert len(grid_graph.edges) == 84

    def test_cell_order_follows_sites(self, grid_graph):
        assert grid_graph.cells[0].position == (0.5, 0.5)
        assert grid_graph.cells[7 * 3 + 2].position == (2.5, 3.5)

    def test_interior_cell(self, grid_graph):
        cell = grid_graph.cells[7 * 3 + 3]

        assert sorted(cell.neighbor_cells) == [17, 23, 25, 31]
        assert len(cell.border_edges) == 4
        positions = {grid_graph.corners[c].position for c in cell.cell_corners}
        assert positions == {(3.0, 3.0), (4.0, 3.0), (3.0, 4.0), (4.0, 4.0)}

    def test_interior_corner(self, grid_graph):
        corner = corner_at(grid_graph, (3.0, 3.0))

        assert not corner.is_border
        assert len(corner.neighbor_corners) == 4
        assert len(corner.connected_edges) == 4
        assert sorted(corner.touching_cells) == [16, 17, 23, 24]

    def test_border_corner(self, grid_graph):
        corner = corner_at(grid_graph, (0.0, 3.0))

        assert corner.is_border
        assert len(corner.connected_edges) == 1
        assert sorted(corner.touching_cells) == [14, 21]

    def test_adjacency_is_symmetric(self, grid_graph):
        for cell in grid_graph.cells:
            for neighbor_id in cell.neighbor_cells:
                assert cell.index in grid_graph.cells[neighbor_id].neighbor_cells

        for corner in grid_graph.corners:
            for neighbor_id in corner.neighbor_corners:
                assert corner.index in grid_graph.corners[neighbor_id].neighbor_corners

    def test_edges_are_wired_both_ways(self, grid_graph):
        for edge in grid_graph.edges:
            assert edge.v0 != edge.v1
            assert edge.d0 != edge.d1
            for cell_id in (edge.d0, edge.d1):
                cell = grid_graph.cells[cell_id]
                assert edge.index in cell.border_edges
                assert edge.v0 in cell.cell_corners
                assert edge.v1 in cell.cell_corners
            for corner_id in (edge.v0, edge.v1):
                corner = grid_graph.corners[corner_id]
                assert edge.index in corner.connected_edges
                assert edge.d0 in corner.touching_cells
                assert edge.d1 in corner.touching_cells

    def test_no_duplicates(self, grid_graph):
        for cell in grid_graph.cells:
            assert len(set(cell.neighbor_cells)) == len(cell.neighbor_cells)
            assert len(set(cell.cell_corners)) == len(cell.cell_corners)
        for corner in grid_graph.corners:
            assert len(set(corner.neighbor_corners)) == len(corner.neighbor_corners)
            assert len(set(corner.touching_cells)) == len(corner.touching_cells)

    def test_other_corner(self, grid_graph):
        edge = grid_graph.edges[0]
        assert edge.other_corner(edge.v0) == edge.v1
        assert edge.other_corner(edge.v1) == edge.v0

    def test_arrays(self, grid_graph):
        assert grid_graph.cell_array("index").tolist() == list(range(49))
        assert grid_graph.corner_array("is_border", dtype=bool).sum() == 24
        assert grid_graph.edge_array("water_volume").sum() == 0


class TestBuildGraph:
    """Test record handling in build_graph."""

    def test_duplicate_sites_collapse(self):
        sites = [(0.5, 1.0), (1.5, 1.0), (0.5, 1.0)]
        records = [VoronoiEdgeRecord((0.5, 1.0), (1.5, 1.0), ((1.0, 0.0), (1.0, 2.0)))]

        graph = build_graph(sites, records, Bounds(2.0, 2.0))

        assert len(graph.cells) == 2
        assert graph.cells[0].neighbor_cells == [1]

    def test_shared_corners_deduplicated(self):
        sites = [(0.5, 0.5), (1.5, 0.5), (0.5, 1.5)]
        records = [
            VoronoiEdgeRecord((0.5, 0.5), (1.5, 0.5), ((1.0, 0.0), (1.0, 1.0))),
            VoronoiEdgeRecord((0.5, 0.5), (0.5, 1.5), ((0.0, 1.0), (1.0, 1.0))),
        ]

        graph = build_graph(sites, records, Bounds(2.0, 2.0))

        assert len(graph.corners) == 3
        shared = corner_at(graph, (1.0, 1.0))
        assert len(shared.connected_edges) == 2
        assert sorted(shared.touching_cells) == [0, 1, 2]

    def test_unclipped_and_zero_length_records_skipped(self):
        sites = [(0.5, 0.5), (1.5, 0.5), (0.5, 1.5)]
        records = [
            VoronoiEdgeRecord((0.5, 0.5), (1.5, 0.5), None),
            VoronoiEdgeRecord((0.5, 0.5), (0.5, 1.5), ((1.0, 1.0), (1.0, 1.0))),
        ]

        graph = build_graph(sites, records, Bounds(2.0, 2.0))

        assert len(graph.cells) == 3
        assert graph.corners == []
        assert graph.edges == []
        assert all(cell.neighbor_cells == [] for cell in graph.cells)

    def test_unknown_site(self):
        records = [VoronoiEdgeRecord((0.5, 0.5), (9.0, 9.0), ((1.0, 0.0), (1.0, 1.0)))]

        with pytest.raises(GraphDataError):
            build_graph([(0.5, 0.5)], records, Bounds(2.0, 2.0))

    def test_edge_between_same_site(self):
        records = [VoronoiEdgeRecord((0.5, 0.5), (0.5, 0.5), ((1.0, 0.0), (1.0, 1.0)))]

        with pytest.raises(GraphDataError):
            build_graph([(0.5, 0.5)], records, Bounds(2.0, 2.0))

    def test_border_flag_uses_bounds(self):
        sites = [(0.5, 0.5), (1.5, 0.5)]
        records = [VoronoiEdgeRecord((0.5, 0.5), (1.5, 0.5), ((1.0, 0.0), (1.0, 0.5)))]

        graph = build_graph(sites, records, Bounds(2.0, 2.0))

        assert corner_at(graph, (1.0, 0.0)).is_border
        assert not corner_at(graph, (1.0, 0.5)).is_border


class TestVoronoiGraph:
    """Test graphs built from a real subdivision."""

    @pytest.fixture
    def graph(self):
        points = sample_points(300, 2.0, 2.0, seed=21)
        return build_graph_from_subdivision(subdivide(points, Bounds(2.0, 2.0), 2), Bounds(2.0, 2.0))

    def test_one_cell_per_site(self, graph):
        assert len(graph.cells) == 300

    def test_every_cell_has_neighbors(self, graph):
        for cell in graph.cells:
            assert len(cell.neighbor_cells) >= 2
            assert len(cell.cell_corners) >= len(cell.border_edges)

    def test_border_corners_on_sides(self, graph):
        border = [c for c in graph.corners if c.is_border]
        assert len(border) > 0
        for corner in border:
            x, y = corner.position
            assert x in (0.0, 2.0) or y in (0.0, 2.0)

    def test_corners_inside_rectangle(self, graph):
        for corner in graph.corners:
            x, y = corner.position
            assert 0.0 <= x <= 2.0
            assert 0.0 <= y <= 2.0
