"""Game state and the rules for moving the player around the map."""

from __future__ import annotations

import enum

from .keys import Key
from .map import COLLECTIBLE, EMPTY, EXIT, PLAYER, Coord, GameMap

_STEPS = {
    Key.W: (0, -1),
    Key.A: (-1, 0),
    Key.S: (0, 1),
    Key.D: (1, 0),
}

_WALKABLE = (EMPTY, COLLECTIBLE, EXIT)


class MoveOutcome(enum.Enum):
    """What a key press did to the game."""

    QUIT = "quit"
    BLOCKED = "blocked"
    MOVED = "moved"
    COLLECTED = "collected"
    WON = "won"

    @property
    def moved(self) -> bool:
        """Whether the player changed position."""
        return self in (MoveOutcome.MOVED, MoveOutcome.COLLECTED, MoveOutcome.WON)


def target_coord(position: tuple[int, int], key: Key | int) -> Coord:
    """Return the tile a movement key points to; other keys stay in place."""
    x, y = position
    try:
        dx, dy = _STEPS[Key(key)]
    except (KeyError, ValueError):
        return Coord(x, y)
    return Coord(x + dx, y + dy)


class Game:
    """A game in progress: the map, the player, the exit and the score."""

    def __init__(self, game_map: GameMap) -> None:
        self.map = game_map
        self.collectibles = game_map.count(COLLECTIBLE)
        self.exit = game_map.find(EXIT)
        self.player = game_map.find(PLAYER)
        self.movements = 0

    def _move_player(self, target: Coord) -> None:
        self.map[self.player] = EXIT if self.player == self.exit else EMPTY
        self.map[target] = PLAYER
        self.player = target

    def handle_key(self, key: Key | int) -> MoveOutcome:
        """Apply a pressed key to the game and report what happened."""
        if key == Key.ESCAPE:
            return MoveOutcome.QUIT
        target = target_coord(self.player, key)
        tile = self.map[target]
        if tile not in _WALKABLE:
            return MoveOutcome.BLOCKED
        self.movements += 1
        outcome = MoveOutcome.MOVED
        if tile == COLLECTIBLE:
            self.collectibles -= 1
            outcome = MoveOutcome.COLLECTED
        elif tile == EXIT and self.collectibles == 0:
            outcome = MoveOutcome.WON
        self._move_player(target)
        return outcome