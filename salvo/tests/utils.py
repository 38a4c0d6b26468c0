"""Shared helpers for tests."""

from __future__ import annotations
from typing import Any

from ..engine_core.board import BOARD_SIZE, Board, Coord


def horizontal(x: int, y: int, length: int) -> list[Coord]:
    return [(x + i, y) for i in range(length)]


def vertical(x: int, y: int, length: int) -> list[Coord]:
    return [(x, y + i) for i in range(length)]


def standard_layout() -> list[Coord]:
    """Fleet (5, 4, 3, 3, 2) laid out on even rows from the left edge."""
    cells: list[Coord] = []
    for row, length in zip((0, 2, 4, 6, 8), (5, 4, 3, 3, 2)):
        cells.extend(horizontal(0, row, length))
    return cells


def board_with(cells: list[Coord]) -> Board:
    board = Board()
    board.place_ship(cells)
    return board


def grid_with(cells: list[Coord]) -> list[list[int]]:
    """10x10 wire grid (rows are y) with 1 at every cell."""
    grid = [[0] * BOARD_SIZE for _ in range(BOARD_SIZE)]
    for x, y in cells:
        grid[y][x] = 1
    return grid


class FakeTransport:
    """Records what the broker sends; can be told to fail."""

    def __init__(self, fail: bool = False):
        self.sent: list[dict[str, Any]] = []
        self.closed = False
        self.fail = fail

    async def send_json(self, data: Any) -> None:
        if self.fail:
            raise ConnectionError("socket gone")
        self.sent.append(data)

    async def close(self, code: int = 1000) -> None:
        self.closed = True

    def of_type(self, message_type: str) -> list[dict[str, Any]]:
        return [m for m in self.sent if m["type"] == message_type]

    @property
    def last(self) -> dict[str, Any]:
        return self.sent[-1]

    @property
    def last_update(self) -> dict[str, Any]:
        return self.of_type("update")[-1]["state"]
