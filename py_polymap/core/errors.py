"""Exceptions raised by the terrain engine.

All of them signal broken contracts (malformed collaborator input or a
solver defect). Valid but empty outcomes, such as an all-ocean map or a
map without rivers, never raise.
"""


class TerrainGraphError(Exception):
    """Base class for terrain engine errors."""


class GraphDataError(TerrainGraphError):
    """Subdivision data does not describe a consistent graph."""


class DownslopeCycleError(TerrainGraphError):
    """A downslope chain revisits a corner instead of reaching the coast."""

    def __init__(self, spring: int, corner: int):
        self.spring = spring
        self.corner = corner
        super().__init__(
            f"Downslope chain from spring corner {spring} revisits corner {corner}"
        )


class GenerationInProgressError(TerrainGraphError):
    """generate() was called while the same generator was still running."""
