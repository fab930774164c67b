# solong

Building blocks for a small top-down puzzle game: a player walks around a
walled map, picks up every collectible and then steps onto the exit.

The package provides map loading, the game rules, a small tile graphics
engine built on pygame, and a renderer that draws a game with that engine.

## Installing

```
pip install .
```

## Map format

A map is a text file with one row per line, built from these characters:

| Char | Meaning      |
|------|--------------|
| `1`  | wall         |
| `0`  | floor        |
| `C`  | collectible  |
| `E`  | exit         |
| `P`  | player start |

```
1111111
1P0C0E1
1111111
```

## Modules

- `solong.map` — `load_map(filename)` reads a file into a `GameMap`;
  `read_rows(filename)` returns its rows with only the trailing newline
  removed. A `GameMap` is indexed by `Coord(x, y)` (or any `(x, y)` pair),
  and offers `width`, `height`, `rows`, `find(entity)` (returns
  `Coord(-1, -1)` when absent), `count(entity)` and `copy()`. An unreadable
  file raises `MapError("Failed to open map file")`, an empty one
  `MapError("Map file is empty")`.
- `solong.game` — `Game(game_map)` tracks the player, exit, remaining
  collectibles and the number of movements. `Game.handle_key(key)` applies
  a key and returns a `MoveOutcome`: `QUIT` for Escape, `BLOCKED`,
  `MOVED`, `COLLECTED`, or `WON` when the player steps onto the exit with
  nothing left to collect. `W`, `A`, `S`, `D` move up, left, down and
  right; `target_coord(position, key)` gives the tile a key points to.
- `solong.keys` — key codes (`Key`), `Action`, `ModifierKey`, `MouseKey`,
  `MouseMode`, `CursorShape`, and the `KeyData` passed to key hooks.
- `solong.engine` — the tile engine: `Mlx` (window, images, render queue,
  key/close/loop hooks, `loop()`, `terminate()`, usable as a context
  manager), `Image`, `Instance`, `Texture`, `load_png(path)`, and
  `set_setting(setting, value)` with `Setting` values such as
  `Setting.HEADLESS`, which runs hooks without opening a window.
  `Mlx.press_key(key)` delivers a key event to the key hook directly.
- `solong.graphics` — `load_textures(directory)` loads `floor.png`,
  `wall.png`, `collectible.png`, `exit.png` and `player.png` (default
  directory `textures`), and `Renderer(mlx, game, textures, tile_size=100)`
  draws the map and keeps it in step with the game through
  `Renderer.on_key`, printing `Movements: N` after every step.
- `solong.errors` — `SoLongError`, `MapError`, `MlxError` with its
  `MlxErrno` code, `strerror(code)`, and `format_error(message, error)`,
  which builds an `Error\nso_long: ...` report.

## Example

```python
from solong.engine import Mlx
from solong.game import Game
from solong.graphics import TILE_SIZE, Renderer, load_textures
from solong.map import load_map

game = Game(load_map("maps/level.ber"))
with Mlx(game.map.width * TILE_SIZE, game.map.height * TILE_SIZE, "so_long") as mlx:
    renderer = Renderer(mlx, game, load_textures("textures"))
    renderer.draw_game()
    mlx.key_hook(renderer.on_key)
    mlx.loop()
```

## What it does not do

- There is no command to start the game; it is run from Python code as
  above.
- Maps are not validated. Nothing checks that a map is rectangular,
  surrounded by walls, holds exactly one exit and one player and at least
  one collectible, or that every collectible and the exit can be reached.
  A map that breaks these rules may leave the game unwinnable, and a move
  off the edge of an unwalled map raises `IndexError`.

## Running the tests

```
pip install ".[test]"
pytest
```