"""
Fleet Placement Validator - Checks a submitted layout against the fleet.

Validates that:
1. Every ship is a single straight horizontal or vertical line
2. The layout has as many ships as the fleet
3. The multiset of ship lengths equals the fleet's

Ships may touch, side by side or at a corner. There is no separation
buffer. Touching ships form one connected cluster of SHIP cells, so a
layout is accepted when its cells split exactly into straight ships of
the fleet's lengths. A shape no such split explains, like an L for a
single ship, is non-linear.

Validation is pure. It runs once, when a player submits a complete
layout, never incrementally.
"""

from __future__ import annotations
from collections import Counter
from dataclasses import dataclass, field

from .board import BOARD_SIZE, Board, Coord
from .errors import NonLinearShip, PlacementError, WrongShipCount, WrongShipSizes


DEFAULT_FLEET: tuple[int, ...] = (5, 4, 3, 3, 2)

# Backtracking budget for split_ships
SPLIT_STEP_LIMIT = 10_000


def parse_fleet(value: str | list[int] | tuple[int, ...] | None) -> tuple[int, ...]:
    """
    Parse and check a fleet specification.

    Accepts "5,4,3,3,2" or a sequence of ints. None gives DEFAULT_FLEET.

    Raises:
        ValueError: empty fleet, a length that cannot fit on the board,
            or more hull cells than the board holds
    """
    if value is None:
        return DEFAULT_FLEET
    if isinstance(value, str):
        parts = [p.strip() for p in value.split(",") if p.strip()]
        try:
            lengths = tuple(int(p) for p in parts)
        except ValueError:
            raise ValueError(f"Invalid fleet specification: {value!r}")
    else:
        lengths = tuple(int(v) for v in value)

    if not lengths:
        raise ValueError("Fleet must contain at least one ship")
    for length in lengths:
        if not 1 <= length <= BOARD_SIZE:
            raise ValueError(f"Ship length {length} does not fit on the board")
    if sum(lengths) > BOARD_SIZE * BOARD_SIZE:
        raise ValueError("Fleet has more cells than the board")
    return lengths


@dataclass
class PlacementResult:
    """Result of validating a layout."""
    valid: bool
    runs: list[list[Coord]] = field(default_factory=list)
    error: PlacementError | None = None

    @property
    def error_code(self) -> str | None:
        return self.error.code if self.error else None


def find_clusters(board: Board) -> list[list[Coord]]:
    """
    Partition SHIP cells into orthogonally connected clusters.

    Clusters come back in row-major order of their first cell, each
    cluster's cells sorted the same way.
    """
    remaining = set(board.ship_cells())
    clusters: list[list[Coord]] = []

    for start in board.ship_cells():
        if start not in remaining:
            continue
        remaining.discard(start)
        stack = [start]
        cluster = []
        while stack:
            x, y = stack.pop()
            cluster.append((x, y))
            for neighbour in ((x + 1, y), (x - 1, y), (x, y + 1), (x, y - 1)):
                if neighbour in remaining:
                    remaining.discard(neighbour)
                    stack.append(neighbour)
        clusters.append(sorted(cluster, key=lambda c: (c[1], c[0])))

    return clusters


def is_straight(cells: list[Coord]) -> bool:
    """True if cells form one unbroken horizontal or vertical line."""
    xs = {x for x, _ in cells}
    ys = {y for _, y in cells}
    if len(ys) == 1:
        return max(xs) - min(xs) + 1 == len(cells)
    if len(xs) == 1:
        return max(ys) - min(ys) + 1 == len(cells)
    return False


def split_ships(
    cells: list[Coord],
    lengths: Counter,
    max_steps: int = SPLIT_STEP_LIMIT,
) -> list[list[Coord]] | None:
    """
    Cover cells with straight ships whose lengths come from `lengths`.

    Each length can be used as many times as its count. Not every length
    has to be used. Returns the ships in row-major order of their first
    cell, or None if no cover exists (or the search runs out of steps).

    The first uncovered cell in row-major order always starts its ship,
    running right or down, so only those two directions are tried.
    """
    remaining = set(cells)
    available = Counter({length: count for length, count in lengths.items() if count > 0})
    ships: list[list[Coord]] = []
    steps = 0

    def search() -> bool:
        nonlocal steps
        if not remaining:
            return True
        steps += 1
        if steps > max_steps:
            return False

        x, y = min(remaining, key=lambda c: (c[1], c[0]))
        for length in sorted((n for n, k in available.items() if k > 0), reverse=True):
            directions = ((1, 0),) if length == 1 else ((1, 0), (0, 1))
            for dx, dy in directions:
                ship = [(x + dx * i, y + dy * i) for i in range(length)]
                if not remaining.issuperset(ship):
                    continue
                remaining.difference_update(ship)
                available[length] -= 1
                ships.append(ship)
                if search():
                    return True
                ships.pop()
                available[length] += 1
                remaining.update(ship)
        return False

    if not search():
        return None
    return ships


def validate_fleet(board: Board, fleet: tuple[int, ...] | list[int]) -> PlacementResult:
    """
    Validate a board layout against a fleet specification.

    A layout whose SHIP cells can be split exactly into the fleet's ships
    is valid, however the ships touch. Otherwise the errors are reported
    against the maximal straight runs, in this order:
    - a cluster that cannot be split into fleet-length lines -> NonLinearShip
    - same hull total as the fleet but different lengths -> WrongShipSizes
    - different number of ships -> WrongShipCount
    - otherwise different lengths -> WrongShipSizes
    """
    clusters = find_clusters(board)
    expected = Counter(fleet)

    if sum(len(cluster) for cluster in clusters) == sum(fleet):
        ships = split_ships(board.ship_cells(), expected)
        if ships is not None:
            return PlacementResult(valid=True, runs=ships)

    runs = [cluster for cluster in clusters if is_straight(cluster)]
    bent = [cluster for cluster in clusters if not is_straight(cluster)]
    if bent:
        unused = expected - Counter(len(run) for run in runs)
        pieces = split_ships([cell for cluster in bent for cell in cluster], unused)
        if pieces is None:
            x, y = bent[0][0]
            return PlacementResult(
                valid=False,
                runs=clusters,
                error=NonLinearShip(f"Ship starting at ({x}, {y}) is not a straight line"),
            )
        runs = sorted(runs + pieces, key=lambda run: (run[0][1], run[0][0]))

    lengths = Counter(len(run) for run in runs)
    if lengths == expected:
        return PlacementResult(valid=True, runs=runs)

    sizes_error = WrongShipSizes(
        f"Ship lengths {sorted(lengths.elements(), reverse=True)} "
        f"do not match fleet {sorted(fleet, reverse=True)}"
    )
    if sum(len(run) for run in runs) == sum(fleet):
        return PlacementResult(valid=False, runs=runs, error=sizes_error)
    if len(runs) != len(fleet):
        return PlacementResult(
            valid=False,
            runs=runs,
            error=WrongShipCount(f"Expected {len(fleet)} ships, found {len(runs)}"),
        )
    return PlacementResult(valid=False, runs=runs, error=sizes_error)


def validate_or_raise(board: Board, fleet: tuple[int, ...] | list[int]) -> list[list[Coord]]:
    """Validate and return the ship runs, raising the PlacementError on failure."""
    result = validate_fleet(board, fleet)
    if result.error is not None:
        raise result.error
    return result.runs
