"""Textures, images and drawing of the game onto the engine window."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from .engine import Image, Mlx, Texture, load_png
from .errors import MapError
from .game import Game, MoveOutcome
from .keys import Action, KeyData
from .map import COLLECTIBLE, EMPTY, EXIT, PLAYER, VALID_TILES, WALL, Coord

TILE_SIZE = 100
TEXTURE_DIR = "textures"


@dataclass(frozen=True)
class TextureSet:
    """The textures of every kind of tile."""

    floor: Texture
    wall: Texture
    collectible: Texture
    exit: Texture
    player: Texture


def load_textures(directory: str | os.PathLike[str] = TEXTURE_DIR) -> TextureSet:
    """Load floor, wall, collectible, exit and player PNGs from a directory."""
    base = Path(directory)
    return TextureSet(
        floor=load_png(base / "floor.png"),
        wall=load_png(base / "wall.png"),
        collectible=load_png(base / "collectible.png"),
        exit=load_png(base / "exit.png"),
        player=load_png(base / "player.png"),
    )


class Renderer:
    """Draws a game with the engine and keeps the picture in step with it."""

    def __init__(
        self,
        mlx: Mlx,
        game: Game,
        textures: TextureSet,
        tile_size: int = TILE_SIZE,
    ) -> None:
        self.mlx = mlx
        self.game = game
        self.tile_size = tile_size
        self.floor = mlx.texture_to_image(textures.floor)
        self.wall = mlx.texture_to_image(textures.wall)
        self.collectible = mlx.texture_to_image(textures.collectible)
        self.exit = mlx.texture_to_image(textures.exit)
        self.player = mlx.texture_to_image(textures.player)
        self._overlays = {
            COLLECTIBLE: self.collectible,
            EXIT: self.exit,
            PLAYER: self.player,
        }

    def _pixels(self, coord: tuple[int, int]) -> tuple[int, int]:
        x, y = coord
        return x * self.tile_size, y * self.tile_size

    def _draw_tile(self, tile: str, coord: Coord) -> None:
        if tile not in VALID_TILES:
            raise MapError("Invalid character on the map")
        px, py = self._pixels(coord)
        self.mlx.image_to_window(self.wall if tile == WALL else self.floor, px, py)
        overlay = self._overlays.get(tile)
        if overlay is not None:
            self.mlx.image_to_window(overlay, px, py)

    def _set_depths(self) -> None:
        layers: tuple[tuple[Image, int], ...] = (
            (self.floor, 0),
            (self.wall, 0),
            (self.collectible, 1),
            (self.exit, 1),
            (self.player, 2),
        )
        for image, depth in layers:
            for instance in image.instances:
                instance.set_depth(depth)

    def draw_game(self) -> None:
        """Place every tile of the map in the window, layered by kind."""
        for y, row in enumerate(self.game.map.rows):
            for x, tile in enumerate(row):
                self._draw_tile(tile, Coord(x, y))
        self._set_depths()

    def move_player(self, target: tuple[int, int]) -> None:
        """Move the player picture to a tile."""
        instance = self.player.instances[0]
        instance.x, instance.y = self._pixels(target)

    def collect(self, target: tuple[int, int]) -> None:
        """Hide the collectible drawn on a tile."""
        px, py = self._pixels(target)
        instance = next(
            (i for i in self.collectible.instances if i.x == px and i.y == py),
            None,
        )
        if instance is not None:
            instance.enabled = False

    def on_key(self, keydata: KeyData) -> None:
        """Key hook: move the player on key presses and end the game."""
        if keydata.action != Action.PRESS:
            return
        outcome = self.game.handle_key(keydata.key)
        if outcome is MoveOutcome.QUIT:
            self.mlx.close_window()
            return
        if not outcome.moved:
            return
        print(f"Movements: {self.game.movements}", flush=True)
        if outcome is MoveOutcome.COLLECTED:
            self.collect(self.game.player)
        elif outcome is MoveOutcome.WON:
            self.mlx.close_window()
        self.move_player(self.game.player)


__all__ = [
    "EMPTY",
    "TILE_SIZE",
    "Renderer",
    "TextureSet",
    "load_textures",
]