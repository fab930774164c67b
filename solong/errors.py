"""Error codes, exceptions and the game's error report format."""

from __future__ import annotations

import enum


class MlxErrno(enum.IntEnum):
    """Error codes of the graphics engine."""

    SUCCESS = 0
    INVEXT = 1
    INVFILE = 2
    INVPNG = 3
    INVXPM = 4
    INVPOS = 5
    INVDIM = 6
    INVIMG = 7
    VERTFAIL = 8
    FRAGFAIL = 9
    SHDRFAIL = 10
    MEMFAIL = 11
    GLADFAIL = 12
    GLFWFAIL = 13
    WINFAIL = 14
    STRTOOBIG = 15


_MESSAGES = {
    MlxErrno.SUCCESS: "No Errors",
    MlxErrno.INVEXT: "File has an invalid extension",
    MlxErrno.INVFILE: "File was invalid / does not exist.",
    MlxErrno.INVPNG: "Something is wrong with the given PNG file.",
    MlxErrno.INVXPM: "Something is wrong with the given XPM file.",
    MlxErrno.INVPOS: "The specified X/Y positions are out of bounds.",
    MlxErrno.INVDIM: "The specified W/H dimensions are out of bounds.",
    MlxErrno.INVIMG: (
        "The provided image is invalid, might indicate mismanagement of images."
    ),
    MlxErrno.VERTFAIL: "Failed to compile the vertex shader.",
    MlxErrno.FRAGFAIL: "Failed to compile the fragment shader.",
    MlxErrno.SHDRFAIL: "Failed to compile the shaders.",
    MlxErrno.MEMFAIL: "Dynamic memory allocation has failed.",
    MlxErrno.GLADFAIL: "OpenGL loader has failed.",
    MlxErrno.GLFWFAIL: "GLFW failed to initialize.",
    MlxErrno.WINFAIL: "Failed to create a window.",
    MlxErrno.STRTOOBIG: "The string is too big to be drawn.",
}


def strerror(code: int) -> str:
    """Return the English description of an engine error code.

    Raises ValueError for a code that is not a known error code.
    """
    return _MESSAGES[MlxErrno(code)]


class SoLongError(Exception):
    """Base class for errors that end the game with an error report."""


class MapError(SoLongError):
    """The map file is missing, unreadable or not a valid map."""


class MlxError(SoLongError):
    """An error reported by the graphics engine, identified by its code."""

    def __init__(self, code: int) -> None:
        self.code = MlxErrno(code)
        if self.code is MlxErrno.SUCCESS:
            raise ValueError("an engine error needs a non-zero code")
        super().__init__(strerror(self.code))


def format_error(message: str | None, error: BaseException | None = None) -> str:
    """Build the report printed to standard error when the game fails.

    An engine error takes precedence over the message, as it names the cause.
    """
    if isinstance(error, MlxError) and error.code > MlxErrno.SUCCESS:
        detail = f"MLX42: {strerror(error.code)}"
    else:
        detail = message if message is not None else ""
    return f"Error\nso_long: {detail}\n"