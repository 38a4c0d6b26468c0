"""
Board - A player's private 10x10 grid.

Cells move through a fixed set of transitions:
    EMPTY -> SHIP   (placement)
    SHIP  -> HIT    (firing)
    EMPTY -> MISS   (firing)

HIT and MISS are final. Nothing else mutates a board.

Coordinates are (x, y): x is the column, y the row, stored as grid[y][x].
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Iterable

from .errors import AlreadyTargeted, Occupied, OutOfBounds


BOARD_SIZE = 10

Coord = tuple[int, int]


class Cell(IntEnum):
    """Cell values. The integer value is the wire/storage encoding."""
    EMPTY = 0
    SHIP = 1
    HIT = 2
    MISS = 3


def in_bounds(x: int, y: int) -> bool:
    return 0 <= x < BOARD_SIZE and 0 <= y < BOARD_SIZE


def _empty_grid() -> list[list[Cell]]:
    return [[Cell.EMPTY] * BOARD_SIZE for _ in range(BOARD_SIZE)]


@dataclass
class Board:
    """
    A 10x10 grid owned by one room.

    Mutated only through place_ship() and resolve_shot().
    """
    grid: list[list[Cell]] = field(default_factory=_empty_grid)

    def get(self, x: int, y: int) -> Cell:
        """Get the cell at (x, y)."""
        if not in_bounds(x, y):
            raise OutOfBounds(f"({x}, {y}) is outside the board")
        return self.grid[y][x]

    def place_ship(self, cells: Iterable[Coord]) -> None:
        """
        Mark cells as SHIP.

        All-or-nothing: every coordinate is checked before any cell is
        written, so a failed call leaves the board untouched.

        Raises:
            OutOfBounds: a coordinate is outside [0, 10) x [0, 10)
            Occupied: a target cell is not EMPTY (or is listed twice)
        """
        targets = [(int(x), int(y)) for x, y in cells]
        seen: set[Coord] = set()
        for x, y in targets:
            if not in_bounds(x, y):
                raise OutOfBounds(f"({x}, {y}) is outside the board")
            if self.grid[y][x] != Cell.EMPTY or (x, y) in seen:
                raise Occupied(f"({x}, {y}) is already occupied")
            seen.add((x, y))

        for x, y in targets:
            self.grid[y][x] = Cell.SHIP

    def resolve_shot(self, x: int, y: int) -> Cell:
        """
        Fire at (x, y).

        Returns Cell.HIT or Cell.MISS.

        Raises:
            OutOfBounds: coordinate is off the board
            AlreadyTargeted: cell is already HIT or MISS
        """
        cell = self.get(x, y)
        if cell in (Cell.HIT, Cell.MISS):
            raise AlreadyTargeted(f"({x}, {y}) has already been targeted")

        outcome = Cell.HIT if cell == Cell.SHIP else Cell.MISS
        self.grid[y][x] = outcome
        return outcome

    def all_ships_sunk(self) -> bool:
        """True iff no cell still holds SHIP."""
        return self.count(Cell.SHIP) == 0

    def count(self, value: Cell) -> int:
        return sum(row.count(value) for row in self.grid)

    def ship_cells(self) -> list[Coord]:
        """All (x, y) holding SHIP, in row-major order."""
        return [
            (x, y)
            for y, row in enumerate(self.grid)
            for x, cell in enumerate(row)
            if cell == Cell.SHIP
        ]

    def copy(self) -> Board:
        return Board(grid=[list(row) for row in self.grid])

    def to_rows(self) -> list[list[int]]:
        """Plain integer rows for JSON."""
        return [[int(cell) for cell in row] for row in self.grid]

    @classmethod
    def from_rows(cls, rows: list[list[int]]) -> Board:
        """
        Rebuild a board from to_rows() output.

        Used for persisted state, which may legitimately contain HIT and
        MISS cells. Player submissions go through place_ship() instead.
        """
        if len(rows) != BOARD_SIZE or any(len(row) != BOARD_SIZE for row in rows):
            raise ValueError(f"Board must be {BOARD_SIZE}x{BOARD_SIZE}")
        return cls(grid=[[Cell(int(value)) for value in row] for row in rows])
