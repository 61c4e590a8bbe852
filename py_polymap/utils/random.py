"""
Random stream helpers.

The engine never uses Python's ``random`` or NumPy's global generator.
Each stage gets its own Alea stream derived from the map seed and a
stream name, so that consuming more numbers in one stage (e.g. sampling
more points) never shifts the choices made in another.
"""

from ..core.alea_prng import AleaPRNG

POINTS_STREAM = "points"
ELEVATION_STREAM = "elevation"


def make_stream(seed, stream: str = "") -> AleaPRNG:
    """
    Create an independent Alea stream.

    Args:
        seed: Map seed (int or str)
        stream: Stream name; an empty name gives the plain seed stream

    Returns:
        AleaPRNG instance
    """
    if not stream:
        return AleaPRNG(seed)
    return AleaPRNG([seed, stream])


def next_seed(seed: int) -> int:
    """Seed to use for the run after ``seed``."""
    return seed + 1
