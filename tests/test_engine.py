import pygame
import pytest

from solong.engine import (
    Image,
    Mlx,
    Setting,
    Texture,
    load_png,
    set_setting,
    settings,
)
from solong.errors import MlxErrno, MlxError
from solong.keys import Action, Key, KeyData

WIDTH = 400
HEIGHT = 400
NAME = "MLX42"


def _restore_defaults():
    set_setting(Setting.STRETCH_IMAGE, False)
    set_setting(Setting.FULLSCREEN, False)
    set_setting(Setting.MAXIMIZED, False)
    set_setting(Setting.DECORATED, True)
    set_setting(Setting.HEADLESS, False)


@pytest.fixture
def headless():
    set_setting(Setting.HEADLESS, True)
    yield
    _restore_defaults()


@pytest.fixture
def mlx(headless):
    window = Mlx(WIDTH, HEIGHT, NAME, False)
    yield window
    window.terminate()


def test_basic_window(mlx):
    assert (mlx.width, mlx.height, mlx.title) == (WIDTH, HEIGHT, NAME)
    assert mlx.should_close() is False


def test_settings(headless):
    set_setting(Setting.STRETCH_IMAGE, True)
    set_setting(Setting.MAXIMIZED, True)
    set_setting(Setting.DECORATED, True)
    set_setting(Setting.FULLSCREEN, True)
    set_setting(Setting.HEADLESS, True)
    assert settings[Setting.STRETCH_IMAGE] is True
    assert settings[Setting.FULLSCREEN] is True
    window = Mlx(400, 400, NAME, False)
    assert window.settings.maximized is True
    assert window.settings.headless is True
    window.terminate()
    assert window.should_close() is True


def test_unknown_setting_rejected():
    with pytest.raises(ValueError):
        set_setting(99, True)


def test_single_image(mlx):
    img = mlx.new_image(WIDTH // 2, HEIGHT // 2)
    assert (img.width, img.height) == (200, 200)
    index = mlx.image_to_window(img, WIDTH // 4, HEIGHT // 4)
    assert index == 0
    assert (img.instances[0].x, img.instances[0].y) == (100, 100)
    mlx.delete_image(img)
    assert mlx.render_queue() == []
    assert img.instances == []


def test_multiple_images(mlx):
    img1 = mlx.new_image(WIDTH // 2, HEIGHT // 2)
    img2 = mlx.new_image(WIDTH, HEIGHT)
    assert mlx.image_to_window(img1, WIDTH // 4, HEIGHT // 4) == 0
    assert mlx.image_to_window(img2, 0, 0) == 0
    queue = mlx.render_queue()
    assert [image for image, _ in queue] == [img1, img2]
    assert [instance.z for _, instance in queue] == [0, 1]
    mlx.delete_image(img1)
    assert [image for image, _ in mlx.render_queue()] == [img2]
    mlx.delete_image(img2)
    assert mlx.render_queue() == []


def test_string_torture_loop(mlx):
    img = mlx.new_image(WIDTH // 2, HEIGHT // 2)
    img.pixels[:] = b"\xff" * (4 * img.width * img.height)
    assert mlx.image_to_window(img, WIDTH // 4, HEIGHT // 4) == 0
    state = {"count": 0, "image": None}

    def draw():
        if state["image"] is not None:
            mlx.delete_image(state["image"])
        state["image"] = mlx.new_image(10, 20)
        mlx.image_to_window(state["image"], 0, 0)
        if state["count"] >= 420:
            mlx.close_window()
        state["count"] += 1

    mlx.loop_hook(draw)
    mlx.loop()
    assert state["count"] == 421
    assert len(mlx.render_queue()) == 2
    assert img.get_pixel(0, 0) == 0xFFFFFFFF
    mlx.delete_image(img)
    assert [image for image, _ in mlx.render_queue()] == [state["image"]]


def test_loop_hooks_run_in_order(mlx):
    calls = []
    mlx.loop_hook(lambda: calls.append("first"))

    def second():
        calls.append("second")
        mlx.close_window()

    mlx.loop_hook(second)
    mlx.loop()
    assert calls == ["first", "second"]
    assert mlx.delta_time >= 0.0


@pytest.mark.parametrize("size", [(0, 10), (10, 0), (0x8000, 1)])
def test_new_image_invalid_dimensions(mlx, size):
    with pytest.raises(MlxError) as info:
        mlx.new_image(*size)
    assert info.value.code is MlxErrno.INVDIM


def test_image_to_window_rejects_foreign_image(mlx):
    with pytest.raises(MlxError) as info:
        mlx.image_to_window(Image(4, 4), 0, 0)
    assert info.value.code is MlxErrno.INVIMG


def test_put_and_get_pixel(mlx):
    img = mlx.new_image(3, 2)
    img.put_pixel(2, 1, 0x11223344)
    assert img.get_pixel(2, 1) == 0x11223344
    assert img.pixels[20:24] == bytes([0x11, 0x22, 0x33, 0x44])
    assert img.get_pixel(0, 0) == 0


def test_put_pixel_out_of_bounds(mlx):
    img = mlx.new_image(3, 2)
    with pytest.raises(MlxError) as info:
        img.put_pixel(3, 0, 0xFF)
    assert info.value.code is MlxErrno.INVPOS


def test_resize_nearest_neighbour(mlx):
    img = mlx.new_image(2, 1)
    img.put_pixel(0, 0, 0xAA0000FF)
    img.put_pixel(1, 0, 0x00BB00FF)
    img.resize(4, 1)
    assert (img.width, img.height) == (4, 1)
    assert [img.get_pixel(x, 0) for x in range(4)] == [
        0xAA0000FF,
        0xAA0000FF,
        0x00BB00FF,
        0x00BB00FF,
    ]


def test_resize_invalid(mlx):
    img = mlx.new_image(2, 2)
    with pytest.raises(MlxError) as info:
        img.resize(0, 2)
    assert info.value.code is MlxErrno.INVDIM


def test_set_depth_reorders_queue(mlx):
    floor = mlx.new_image(1, 1)
    player = mlx.new_image(1, 1)
    mlx.image_to_window(player, 0, 0)
    mlx.image_to_window(floor, 0, 0)
    player.instances[0].set_depth(2)
    floor.instances[0].set_depth(0)
    assert [image for image, _ in mlx.render_queue()] == [floor, player]


def test_texture_to_image_copies_pixels(mlx):
    texture = Texture(2, 1, bytearray([1, 2, 3, 4, 5, 6, 7, 8]))
    img = mlx.texture_to_image(texture)
    assert img.get_pixel(1, 0) == 0x05060708
    img.put_pixel(0, 0, 0)
    assert texture.pixels[:4] == bytearray([1, 2, 3, 4])


def test_texture_size_mismatch():
    with pytest.raises(ValueError):
        Texture(2, 2, bytearray(3))


def test_texture_from_surface():
    surface = pygame.Surface((2, 1), pygame.SRCALPHA)
    surface.fill((0, 0, 0, 0))
    surface.set_at((0, 0), (255, 0, 0, 255))
    texture = Texture.from_surface(surface)
    assert (texture.width, texture.height) == (2, 1)
    assert texture.pixels == bytearray([255, 0, 0, 255, 0, 0, 0, 0])


def test_load_png_round_trip(tmp_path):
    surface = pygame.Surface((3, 2), pygame.SRCALPHA)
    surface.fill((10, 20, 30, 255))
    path = tmp_path / "tile.png"
    pygame.image.save(surface, str(path))
    texture = load_png(path)
    assert (texture.width, texture.height) == (3, 2)
    assert texture.pixels[:4] == bytearray([10, 20, 30, 255])


def test_load_png_missing_file(tmp_path):
    with pytest.raises(MlxError) as info:
        load_png(tmp_path / "missing.png")
    assert info.value.code is MlxErrno.INVFILE


def test_load_png_not_a_png(tmp_path):
    path = tmp_path / "fake.png"
    path.write_bytes(b"not an image")
    with pytest.raises(MlxError) as info:
        load_png(path)
    assert info.value.code is MlxErrno.INVPNG


def test_key_hook_receives_pressed_keys(mlx):
    received = []
    mlx.key_hook(received.append)
    mlx.press_key(Key.W, Action.PRESS)
    mlx.press_key(Key.ESCAPE, Action.RELEASE)
    assert received == [
        KeyData(Key.W, Action.PRESS),
        KeyData(Key.ESCAPE, Action.RELEASE),
    ]


def test_context_manager_terminates(headless):
    with Mlx(50, 50, NAME, False) as window:
        image = window.new_image(1, 1)
        window.image_to_window(image, 0, 0)
        assert len(window.render_queue()) == 1
    assert window.should_close() is True
    assert window.render_queue() == []


def test_invalid_window_dimensions(headless):
    with pytest.raises(MlxError) as info:
        Mlx(0, 10, NAME, False)
    assert info.value.code is MlxErrno.INVDIM