from millserver.board import (
    ADJACENCY,
    BOARD_SIZE,
    MILL_LINES,
    adjacent_to,
    lines_through,
)


def test_sixteen_mill_lines_cover_every_point():
    assert len(MILL_LINES) == 16
    assert len(set(MILL_LINES)) == 16
    for index in range(BOARD_SIZE):
        assert 2 <= len(lines_through(index)) <= 3


def test_adjacency_is_symmetric_without_self_loops():
    assert set(ADJACENCY) == set(range(BOARD_SIZE))
    for index, neighbours in ADJACENCY.items():
        assert index not in neighbours
        assert 2 <= len(neighbours) <= 4
        for other in neighbours:
            assert index in adjacent_to(other)


def test_adjacency_links_rings_at_every_offset():
    assert adjacent_to(0) == {1, 7, 8}
    assert adjacent_to(8) == {0, 9, 15, 16}
    assert adjacent_to(9) == {1, 8, 10, 17}
    assert adjacent_to(16) == {8, 17, 23}
    assert adjacent_to(23) == {15, 22, 16}


def test_lines_through_midpoint_include_cross_ring_line():
    assert lines_through(3) == ((2, 3, 4), (3, 11, 19))
    assert lines_through(0) == ((0, 1, 2), (6, 7, 0))


def test_unknown_index_has_no_topology():
    assert adjacent_to(24) == frozenset()
    assert adjacent_to(-1) == frozenset()
    assert lines_through(99) == ()
