"""
Alea pseudorandom number generator.

Based on Johannes Baagøe's Alea algorithm. Every random decision taken by
the terrain engine (point sampling, relaxation traversal order, spring
selection) draws from its own Alea stream so that a map is reproducible
from its seeds alone, independent of Python's global random state.
"""


def _uint32(n):
    """Convert to unsigned 32-bit integer."""
    return int(n) & 0xFFFFFFFF


class AleaPRNG:
    """
    Seedable Alea generator.

    Accepts a single seed (string or number) or an iterable of seed parts,
    e.g. ``AleaPRNG([42, "points"])`` for a named stream of seed 42.
    """

    def __init__(self, seed):
        """Initialize with seed string, number or sequence of parts."""
        self.call_count = 0

        if hasattr(seed, "__iter__") and not isinstance(seed, str):
            args = list(seed)
        else:
            args = [seed]

        mash_n = 0xEFC8249D  # 4022871197

        def mash(data):
            nonlocal mash_n
            data = str(data)
            for char in data:
                mash_n = mash_n + ord(char)
                h = 0.02519603282416938 * mash_n
                mash_n = _uint32(h)
                h -= mash_n
                h *= mash_n
                mash_n = _uint32(h)
                h -= mash_n
                mash_n += h * 0x100000000  # 2^32
            return _uint32(mash_n) * 2.3283064365386963e-10  # 2^-32

        self.s0 = mash(" ")
        self.s1 = mash(" ")
        self.s2 = mash(" ")
        self.c = 1

        for arg in args:
            self.s0 -= mash(arg)
            if self.s0 < 0:
                self.s0 += 1
            self.s1 -= mash(arg)
            if self.s1 < 0:
                self.s1 += 1
            self.s2 -= mash(arg)
            if self.s2 < 0:
                self.s2 += 1

    def random(self) -> float:
        """Generate next random number in [0, 1)."""
        self.call_count += 1
        t = 2091639 * self.s0 + self.c * 2.3283064365386963e-10  # 2^-32
        self.s0 = self.s1
        self.s1 = self.s2
        self.c = int(t)
        self.s2 = t - self.c
        return self.s2

    def uniform(self, low: float, high: float) -> float:
        """Random float in [low, high)."""
        return low + (high - low) * self.random()

    def randrange(self, stop: int) -> int:
        """Random integer in [0, stop). ``stop`` must be positive."""
        if stop <= 0:
            raise ValueError(f"randrange() needs a positive stop, got {stop}")
        return min(int(self.random() * stop), stop - 1)

    def choice(self, seq):
        """Choose a random element from a non-empty sequence."""
        if not seq:
            raise IndexError("Cannot choose from an empty sequence")
        return seq[self.randrange(len(seq))]
