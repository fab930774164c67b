"""Reading map files and the mutable tile grid they describe."""

from __future__ import annotations

import os
from typing import Iterable, Iterator, NamedTuple

from .errors import MapError

INT_MAX = 2**31 - 1

EMPTY = "0"
WALL = "1"
COLLECTIBLE = "C"
EXIT = "E"
PLAYER = "P"
VALID_TILES = EMPTY + WALL + COLLECTIBLE + EXIT + PLAYER


class Coord(NamedTuple):
    """A tile position: column x, row y, both counted from the top left."""

    x: int
    y: int


NOWHERE = Coord(-1, -1)


def read_rows(filename: str | os.PathLike[str]) -> list[str]:
    """Read a map file into its rows, each without its line terminator.

    Only a trailing newline is removed from each row; any other character,
    a carriage return included, is kept as part of the row.
    """
    try:
        with open(filename, encoding="latin-1", newline="") as handle:
            content = handle.read()
    except OSError as exc:
        raise MapError("Failed to open map file") from exc
    rows = content.split("\n")
    if rows[-1] == "":
        rows.pop()
    if not rows:
        raise MapError("Map file is empty")
    if len(rows) > INT_MAX:
        raise MapError("Map file is too large")
    return rows


class GameMap:
    """A grid of tiles, addressed by Coord (or any (x, y) pair)."""

    def __init__(self, rows: Iterable[str]) -> None:
        self._rows = [list(row) for row in rows]
        if not self._rows:
            raise MapError("Map file is empty")
        if len(self._rows[0]) > INT_MAX:
            raise MapError("Too long rows in map file")

    @property
    def width(self) -> int:
        """The number of tiles in the first row."""
        return len(self._rows[0])

    @property
    def height(self) -> int:
        return len(self._rows)

    @property
    def rows(self) -> tuple[str, ...]:
        """The rows as strings, top to bottom."""
        return tuple("".join(row) for row in self._rows)

    def _tiles(self) -> Iterator[tuple[Coord, str]]:
        for y, row in enumerate(self._rows):
            for x, tile in enumerate(row):
                yield Coord(x, y), tile

    def find(self, entity: str) -> Coord:
        """Return the first position of a tile, scanning row by row.

        Returns Coord(-1, -1) when the tile does not appear.
        """
        return next(
            (coord for coord, tile in self._tiles() if tile == entity), NOWHERE
        )

    def count(self, entity: str) -> int:
        """Return how many times a tile appears on the map."""
        return sum(1 for _, tile in self._tiles() if tile == entity)

    def copy(self) -> GameMap:
        """Return an independent copy of the map."""
        return GameMap(self.rows)

    def _locate(self, coord: tuple[int, int]) -> tuple[list[str], int]:
        x, y = coord
        if not 0 <= y < len(self._rows):
            raise IndexError(f"row {y} is outside the map")
        row = self._rows[y]
        if not 0 <= x < len(row):
            raise IndexError(f"column {x} is outside row {y}")
        return row, x

    def __getitem__(self, coord: tuple[int, int]) -> str:
        row, x = self._locate(coord)
        return row[x]

    def __setitem__(self, coord: tuple[int, int], value: str) -> None:
        if not isinstance(value, str) or len(value) != 1:
            raise ValueError("a tile is a single character")
        row, x = self._locate(coord)
        row[x] = value

    def __str__(self) -> str:
        return "\n".join(self.rows)

    def __repr__(self) -> str:
        return f"GameMap({list(self.rows)!r})"


def load_map(filename: str | os.PathLike[str]) -> GameMap:
    """Read a map file into a GameMap."""
    return GameMap(read_rows(filename))