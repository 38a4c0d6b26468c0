"""
Tests for the Fleet Placement Validator.
"""

import pytest

from ..engine_core.board import Board, Cell
from ..engine_core.errors import NonLinearShip, WrongShipCount, WrongShipSizes
from ..engine_core.placement import (
    DEFAULT_FLEET,
    find_clusters,
    parse_fleet,
    validate_fleet,
    validate_or_raise,
)
from .utils import board_with, horizontal, standard_layout, vertical


class TestValidateFleet:
    """Tests for validate_fleet."""

    def test_single_two_length_run(self):
        """Fleet [2] with one run at (0,0)-(1,0) is valid."""
        result = validate_fleet(board_with(horizontal(0, 0, 2)), [2])

        assert result.valid
        assert result.error is None
        assert result.runs == [[(0, 0), (1, 0)]]

    def test_two_single_cells_are_wrong_sizes(self):
        """Same hull count as fleet [2], wrong shape."""
        result = validate_fleet(board_with([(0, 0), (5, 5)]), [2])

        assert not result.valid
        assert result.error_code == WrongShipSizes.code

    def test_standard_fleet(self):
        result = validate_fleet(board_with(standard_layout()), DEFAULT_FLEET)
        assert result.valid
        assert sorted(len(run) for run in result.runs) == [2, 3, 3, 4, 5]

    def test_vertical_ships(self):
        cells = vertical(0, 0, 5) + vertical(2, 0, 4) + vertical(4, 0, 3) + vertical(6, 0, 3) + vertical(8, 0, 2)
        assert validate_fleet(board_with(cells), DEFAULT_FLEET).valid

    def test_l_shape_is_non_linear(self):
        """An L with the right cell count still fails."""
        cells = [(0, 0), (1, 0), (1, 1)]
        result = validate_fleet(board_with(cells), [3])

        assert result.error_code == NonLinearShip.code

    def test_side_by_side_ships_allowed(self):
        """Orthogonally touching parallel ships are split back apart."""
        cells = horizontal(0, 0, 2) + horizontal(0, 1, 2)
        result = validate_fleet(board_with(cells), [2, 2])

        assert result.valid
        assert result.runs == [[(0, 0), (1, 0)], [(0, 1), (1, 1)]]

    def test_touching_ships_in_standard_fleet(self):
        """Carrier on row 0 and battleship on row 1, the rest apart."""
        cells = (
            horizontal(0, 0, 5)
            + horizontal(0, 1, 4)
            + horizontal(0, 4, 3)
            + horizontal(0, 6, 3)
            + horizontal(0, 8, 2)
        )
        result = validate_fleet(board_with(cells), DEFAULT_FLEET)

        assert result.valid
        assert sorted(len(run) for run in result.runs) == [2, 3, 3, 4, 5]

    def test_ships_touching_end_to_side(self):
        """A vertical ship hanging off the end of a horizontal one."""
        cells = horizontal(0, 0, 3) + vertical(3, 0, 2)
        assert validate_fleet(board_with(cells), [3, 2]).valid

    def test_block_that_fits_no_fleet_is_non_linear(self):
        """A 2x2 block cannot be read as ships of length 3 and 1."""
        cells = horizontal(0, 0, 2) + horizontal(0, 1, 2)
        result = validate_fleet(board_with(cells), [3, 1])

        assert result.error_code == NonLinearShip.code

    def test_diagonal_contact_allowed(self):
        """Ships touching only at a corner are separate ships."""
        cells = horizontal(0, 0, 2) + horizontal(2, 1, 2)
        assert validate_fleet(board_with(cells), [2, 2]).valid

    def test_missing_ship_is_wrong_count(self):
        cells = horizontal(0, 0, 3)
        result = validate_fleet(board_with(cells), [3, 2])

        assert result.error_code == WrongShipCount.code

    def test_extra_ship_is_wrong_count(self):
        cells = horizontal(0, 0, 2) + horizontal(0, 5, 3)
        result = validate_fleet(board_with(cells), [2])

        assert result.error_code == WrongShipCount.code

    def test_same_count_wrong_lengths(self):
        cells = horizontal(0, 0, 4) + horizontal(0, 5, 4)
        result = validate_fleet(board_with(cells), [3, 2])

        assert result.error_code == WrongShipSizes.code

    def test_empty_board_is_wrong_count(self):
        assert validate_fleet(Board(), [2]).error_code == WrongShipCount.code

    def test_validation_does_not_mutate(self):
        board = board_with(horizontal(0, 0, 2))
        before = board.to_rows()

        validate_fleet(board, [3])

        assert board.to_rows() == before

    def test_ignores_hit_and_miss_cells(self):
        board = board_with(horizontal(0, 0, 2))
        board.grid[5][5] = Cell.MISS

        assert validate_fleet(board, [2]).valid


class TestValidateOrRaise:
    """Tests for the raising variant."""

    def test_raises_placement_error(self):
        with pytest.raises(NonLinearShip):
            validate_or_raise(board_with([(0, 0), (1, 0), (1, 1)]), [3])

    def test_returns_runs(self):
        runs = validate_or_raise(board_with(vertical(3, 3, 3)), [3])
        assert runs == [[(3, 3), (3, 4), (3, 5)]]


class TestClusters:
    """Tests for find_clusters."""

    def test_clusters_in_row_major_order(self):
        board = board_with([(5, 5), (0, 0), (0, 1)])
        assert find_clusters(board) == [[(0, 0), (0, 1)], [(5, 5)]]


class TestParseFleet:
    """Tests for parse_fleet."""

    def test_default(self):
        assert parse_fleet(None) == (5, 4, 3, 3, 2)

    def test_from_string(self):
        assert parse_fleet("4, 3,2") == (4, 3, 2)

    def test_from_list(self):
        assert parse_fleet([2, 2]) == (2, 2)

    @pytest.mark.parametrize("value", ["", "a,b", [0], [11], [10] * 11])
    def test_invalid(self, value):
        with pytest.raises(ValueError):
            parse_fleet(value)
