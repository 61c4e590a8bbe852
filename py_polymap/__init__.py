"""Procedural polygon island maps: hydrology, elevation, rivers, moisture and biomes."""

__version__ = "0.1.0"
