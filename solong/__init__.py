"""Tile puzzle game parts: maps, game rules, a pygame tile engine and a renderer."""

__version__ = "1.0.0"