"""A small tile graphics engine: images, instances, a render queue and hooks.

Images hold RGBA pixel buffers and are drawn at one or more positions
(instances) ordered by depth.  A window is opened with pygame unless the
headless setting is on, in which case the engine runs its hooks without
any display, which is what tests and scripted runs use.
"""

from __future__ import annotations

import dataclasses
import enum
import io
import os
import string
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterator

os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

import pygame  # noqa: E402

from .errors import MlxErrno, MlxError  # noqa: E402
from .keys import Action, Key, KeyData, ModifierKey  # noqa: E402

BPP = 4
INT16_MAX = 0x7FFF
FRAME_RATE = 60
PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


class Setting(enum.IntEnum):
    """Engine settings; set them before creating an Mlx."""

    STRETCH_IMAGE = 0
    FULLSCREEN = 1
    MAXIMIZED = 2
    DECORATED = 3
    HEADLESS = 4


@dataclass
class Settings:
    """The values of every engine setting, indexable by Setting."""

    stretch_image: bool = False
    fullscreen: bool = False
    maximized: bool = False
    decorated: bool = True
    headless: bool = False

    def __getitem__(self, setting: Setting | int) -> bool:
        return getattr(self, Setting(setting).name.lower())

    def __setitem__(self, setting: Setting | int, value: object) -> None:
        setattr(self, Setting(setting).name.lower(), bool(value))


settings = Settings()


def set_setting(setting: Setting | int, value: object) -> None:
    """Change a global engine setting; raises ValueError for unknown settings."""
    settings[Setting(setting)] = value


def _check_dimensions(width: int, height: int) -> None:
    if not (0 < width <= INT16_MAX and 0 < height <= INT16_MAX):
        raise MlxError(MlxErrno.INVDIM)


@dataclass
class Texture:
    """Decoded RGBA pixel data, as loaded from disk."""

    width: int
    height: int
    pixels: bytearray
    bytes_per_pixel: int = BPP

    def __post_init__(self) -> None:
        if self.bytes_per_pixel != BPP:
            raise ValueError("only RGBA textures with 4 bytes per pixel exist")
        self.pixels = bytearray(self.pixels)
        if len(self.pixels) != self.width * self.height * BPP:
            raise ValueError("pixel data does not match the texture size")

    @classmethod
    def from_surface(cls, surface: pygame.Surface) -> Texture:
        """Build a texture from the RGBA contents of a pygame surface."""
        width, height = surface.get_size()
        data = pygame.image.tostring(surface, "RGBA")
        return cls(width, height, bytearray(data))


def load_png(path: str | os.PathLike[str]) -> Texture:
    """Decode a PNG file into a texture."""
    try:
        data = Path(path).read_bytes()
    except OSError as exc:
        raise MlxError(MlxErrno.INVFILE) from exc
    if not data.startswith(PNG_SIGNATURE):
        raise MlxError(MlxErrno.INVPNG)
    try:
        surface = pygame.image.load(io.BytesIO(data), "texture.png")
    except pygame.error as exc:
        raise MlxError(MlxErrno.INVPNG) from exc
    return Texture.from_surface(surface)


@dataclass(eq=False)
class Instance:
    """One placement of an image in the window."""

    x: int
    y: int
    z: int = 0
    enabled: bool = True

    def set_depth(self, zdepth: int) -> None:
        """Move the instance to another depth layer."""
        self.z = zdepth


class Image:
    """A pixel buffer that can be drawn at several places in the window."""

    def __init__(self, width: int, height: int, pixels: bytes | None = None) -> None:
        _check_dimensions(width, height)
        self._width = width
        self._height = height
        size = width * height * BPP
        self.pixels = bytearray(size) if pixels is None else bytearray(pixels)
        if len(self.pixels) != size:
            raise ValueError("pixel data does not match the image size")
        self.instances: list[Instance] = []
        self.enabled = True

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def count(self) -> int:
        return len(self.instances)

    def _offset(self, x: int, y: int) -> int:
        if not (0 <= x < self._width and 0 <= y < self._height):
            raise MlxError(MlxErrno.INVPOS)
        return (y * self._width + x) * BPP

    def put_pixel(self, x: int, y: int, color: int) -> None:
        """Set the pixel at (x, y) to an 0xRRGGBBAA colour."""
        offset = self._offset(x, y)
        self.pixels[offset:offset + BPP] = (color & 0xFFFFFFFF).to_bytes(4, "big")

    def get_pixel(self, x: int, y: int) -> int:
        """Return the pixel at (x, y) as an 0xRRGGBBAA colour."""
        offset = self._offset(x, y)
        return int.from_bytes(self.pixels[offset:offset + BPP], "big")

    def resize(self, new_width: int, new_height: int) -> None:
        """Scale the image to a new size using nearest-neighbour sampling."""
        _check_dimensions(new_width, new_height)
        old = self.pixels
        resized = bytearray(new_width * new_height * BPP)
        for y in range(new_height):
            src_y = y * self._height // new_height
            for x in range(new_width):
                src_x = x * self._width // new_width
                src = (src_y * self._width + src_x) * BPP
                dst = (y * new_width + x) * BPP
                resized[dst:dst + BPP] = old[src:src + BPP]
        self.pixels = resized
        self._width = new_width
        self._height = new_height


def _build_key_map() -> dict[int, Key]:
    mapping = {
        pygame.K_SPACE: Key.SPACE,
        pygame.K_QUOTE: Key.APOSTROPHE,
        pygame.K_COMMA: Key.COMMA,
        pygame.K_MINUS: Key.MINUS,
        pygame.K_PERIOD: Key.PERIOD,
        pygame.K_SLASH: Key.SLASH,
        pygame.K_SEMICOLON: Key.SEMICOLON,
        pygame.K_EQUALS: Key.EQUAL,
        pygame.K_LEFTBRACKET: Key.LEFT_BRACKET,
        pygame.K_BACKSLASH: Key.BACKSLASH,
        pygame.K_RIGHTBRACKET: Key.RIGHT_BRACKET,
        pygame.K_BACKQUOTE: Key.GRAVE_ACCENT,
        pygame.K_ESCAPE: Key.ESCAPE,
        pygame.K_RETURN: Key.ENTER,
        pygame.K_TAB: Key.TAB,
        pygame.K_BACKSPACE: Key.BACKSPACE,
        pygame.K_INSERT: Key.INSERT,
        pygame.K_DELETE: Key.DELETE,
        pygame.K_RIGHT: Key.RIGHT,
        pygame.K_LEFT: Key.LEFT,
        pygame.K_DOWN: Key.DOWN,
        pygame.K_UP: Key.UP,
        pygame.K_PAGEUP: Key.PAGE_UP,
        pygame.K_PAGEDOWN: Key.PAGE_DOWN,
        pygame.K_HOME: Key.HOME,
        pygame.K_END: Key.END,
        pygame.K_CAPSLOCK: Key.CAPS_LOCK,
        pygame.K_PAUSE: Key.PAUSE,
        pygame.K_LSHIFT: Key.LEFT_SHIFT,
        pygame.K_LCTRL: Key.LEFT_CONTROL,
        pygame.K_LALT: Key.LEFT_ALT,
        pygame.K_RSHIFT: Key.RIGHT_SHIFT,
        pygame.K_RCTRL: Key.RIGHT_CONTROL,
        pygame.K_RALT: Key.RIGHT_ALT,
        pygame.K_MENU: Key.MENU,
    }
    for letter in string.ascii_lowercase:
        mapping[getattr(pygame, f"K_{letter}")] = Key[letter.upper()]
    for digit in string.digits:
        mapping[getattr(pygame, f"K_{digit}")] = Key[f"KEY_{digit}"]
    for number in range(1, 16):
        mapping[getattr(pygame, f"K_F{number}")] = Key[f"F{number}"]
    return mapping


_PYGAME_KEYS = _build_key_map()

_PYGAME_MODIFIERS = (
    (pygame.KMOD_SHIFT, ModifierKey.SHIFT),
    (pygame.KMOD_CTRL, ModifierKey.CONTROL),
    (pygame.KMOD_ALT, ModifierKey.ALT),
    (pygame.KMOD_META, ModifierKey.SUPERKEY),
    (pygame.KMOD_CAPS, ModifierKey.CAPSLOCK),
    (pygame.KMOD_NUM, ModifierKey.NUMLOCK),
)


def _modifiers(mod: int) -> ModifierKey:
    result = ModifierKey(0)
    for mask, flag in _PYGAME_MODIFIERS:
        if mod & mask:
            result |= flag
    return result


@dataclass(eq=False)
class _RenderEntry:
    image: Image
    instance: Instance


class Mlx:
    """An engine instance: a window (or none when headless), images and hooks."""

    def __init__(self, width: int, height: int, title: str, resize: bool = False) -> None:
        _check_dimensions(width, height)
        self.width = width
        self.height = height
        self.title = title
        self.resizable = resize
        self.delta_time = 0.0
        self.settings = dataclasses.replace(settings)
        self._initial_size = (width, height)
        self._images: list[Image] = []
        self._queue: list[_RenderEntry] = []
        self._zdepth = 0
        self._loop_hooks: list[Callable[[], None]] = []
        self._key_hook: Callable[[KeyData], None] | None = None
        self._close_hook: Callable[[], None] | None = None
        self._should_close = False
        self._terminated = False
        self._clock: pygame.time.Clock | None = None
        if not self.settings.headless:
            self._open_window()

    def _open_window(self) -> None:
        try:
            pygame.display.init()
        except pygame.error as exc:
            raise MlxError(MlxErrno.GLFWFAIL) from exc
        flags = 0
        size = (self.width, self.height)
        if self.resizable:
            flags |= pygame.RESIZABLE
        if not self.settings.decorated:
            flags |= pygame.NOFRAME
        if self.settings.maximized:
            size = pygame.display.get_desktop_sizes()[0]
            flags |= pygame.RESIZABLE
        elif self.settings.fullscreen:
            flags |= pygame.FULLSCREEN
        try:
            pygame.display.set_mode(size, flags)
        except pygame.error as exc:
            pygame.display.quit()
            raise MlxError(MlxErrno.WINFAIL) from exc
        pygame.display.set_caption(self.title)
        self.width, self.height = pygame.display.get_surface().get_size()
        self._clock = pygame.time.Clock()

    def new_image(self, width: int, height: int) -> Image:
        """Create a blank, fully transparent image owned by this instance."""
        image = Image(width, height)
        self._images.append(image)
        return image

    def texture_to_image(self, texture: Texture) -> Image:
        """Create an image holding a copy of a texture's pixels."""
        image = Image(texture.width, texture.height, texture.pixels)
        self._images.append(image)
        return image

    def _check_owned(self, image: Image) -> None:
        if not any(owned is image for owned in self._images):
            raise MlxError(MlxErrno.INVIMG)

    def image_to_window(self, image: Image, x: int, y: int) -> int:
        """Place a new instance of an image at (x, y); return its index."""
        self._check_owned(image)
        instance = Instance(x, y, self._zdepth)
        self._zdepth += 1
        image.instances.append(instance)
        self._queue.append(_RenderEntry(image, instance))
        return len(image.instances) - 1

    def delete_image(self, image: Image) -> None:
        """Remove an image and all of its instances from the window."""
        self._check_owned(image)
        self._queue = [entry for entry in self._queue if entry.image is not image]
        self._images = [owned for owned in self._images if owned is not image]
        image.instances.clear()
        image.pixels = bytearray()

    def render_queue(self) -> list[tuple[Image, Instance]]:
        """Every placed instance with its image, in drawing order (by depth)."""
        ordered = sorted(self._queue, key=lambda entry: entry.instance.z)
        return [(entry.image, entry.instance) for entry in ordered]

    def key_hook(self, func: Callable[[KeyData], None]) -> None:
        """Set the function called for every key event."""
        self._key_hook = func

    def close_hook(self, func: Callable[[], None]) -> None:
        """Set the function called when the user asks to close the window."""
        self._close_hook = func

    def loop_hook(self, func: Callable[[], None]) -> None:
        """Add a function run once every frame."""
        self._loop_hooks.append(func)

    def _dispatch_key(self, keydata: KeyData) -> None:
        if self._key_hook is not None:
            self._key_hook(keydata)

    def press_key(self, key: Key | int, action: Action | int = Action.PRESS) -> None:
        """Deliver a key event to the key hook as if it came from the keyboard."""
        self._dispatch_key(KeyData(Key(key), Action(action)))

    def close_window(self) -> None:
        """Ask the main loop to stop at the end of the current frame."""
        self._should_close = True

    def should_close(self) -> bool:
        return self._should_close

    def _poll_events(self) -> None:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self._should_close = True
                if self._close_hook is not None:
                    self._close_hook()
            elif event.type in (pygame.KEYDOWN, pygame.KEYUP):
                key = _PYGAME_KEYS.get(event.key)
                if key is None:
                    continue
                action = Action.PRESS if event.type == pygame.KEYDOWN else Action.RELEASE
                self._dispatch_key(
                    KeyData(
                        key,
                        action,
                        getattr(event, "scancode", 0),
                        _modifiers(getattr(event, "mod", 0)),
                    )
                )
            elif event.type == pygame.VIDEORESIZE:
                self.width, self.height = event.w, event.h

    def _scaled_surfaces(self) -> Iterator[tuple[pygame.Surface, tuple[int, int]]]:
        scale_x = scale_y = 1.0
        if self.settings.stretch_image:
            scale_x = self.width / self._initial_size[0]
            scale_y = self.height / self._initial_size[1]
        cache: dict[int, pygame.Surface] = {}
        for image, instance in self.render_queue():
            if not (image.enabled and instance.enabled):
                continue
            surface = cache.get(id(image))
            if surface is None:
                surface = pygame.image.frombuffer(
                    bytes(image.pixels), (image.width, image.height), "RGBA"
                )
                if scale_x != 1.0 or scale_y != 1.0:
                    surface = pygame.transform.scale(
                        surface,
                        (round(image.width * scale_x), round(image.height * scale_y)),
                    )
                cache[id(image)] = surface
            yield surface, (round(instance.x * scale_x), round(instance.y * scale_y))

    def _render(self) -> None:
        screen = pygame.display.get_surface()
        screen.fill((0, 0, 0))
        for surface, position in self._scaled_surfaces():
            screen.blit(surface, position)
        pygame.display.flip()

    def loop(self) -> None:
        """Run frames until close_window is called or the window is closed."""
        last = time.perf_counter()
        while not self._should_close:
            now = time.perf_counter()
            self.delta_time = now - last
            last = now
            for hook in list(self._loop_hooks):
                hook()
            if not self.settings.headless:
                self._render()
                self._poll_events()
                if self._clock is not None:
                    self._clock.tick(FRAME_RATE)

    def terminate(self) -> None:
        """Close the window and release every image and hook."""
        if self._terminated:
            return
        self._terminated = True
        self._should_close = True
        for image in self._images:
            image.instances.clear()
        self._images.clear()
        self._queue.clear()
        self._loop_hooks.clear()
        self._key_hook = None
        self._close_hook = None
        if not self.settings.headless:
            pygame.display.quit()

    def __enter__(self) -> Mlx:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.terminate()


__all__ = [
    "Image",
    "Instance",
    "Mlx",
    "Setting",
    "Settings",
    "Texture",
    "field",
    "load_png",
    "set_setting",
    "settings",
]