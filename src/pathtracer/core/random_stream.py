"""Per-worker random number streams.

Every parallel work unit of a render (one image row) owns exactly one PCG32
stream, so kernels draw random numbers without any locking and without ever
sharing a generator between threads. Because the stream used for a sample is
decided by the work unit rather than by whichever thread happens to run it,
two renders seeded identically produce bit-identical images.

Streams are seeded through ``numpy.random.SeedSequence``: from operating
system entropy by default, or from an explicit integer seed for reproducible
runs.

Example:
    >>> streams = RandomStreams(360)            # entropy-seeded
    >>> seeded = RandomStreams(360, seed=1234)  # reproducible
    >>> # inside a kernel: u = seeded.next_uniform(row)
"""

import logging

import numpy as np
import numpy.typing as npt
import taichi as ti

logger = logging.getLogger(__name__)

# PCG32 (RXS-M-XS variant) constants; all fit in a signed 32-bit literal.
PCG_MULTIPLIER = 747796405
PCG_OUTPUT_MULTIPLIER = 277803737

# 2^26 and 2^53, used to assemble a 53-bit double from two 32-bit words
_TWO_POW_26 = 67108864.0
_TWO_POW_53 = 9007199254740992.0


class EntropyUnavailableError(RuntimeError):
    """Raised when no entropy source is available to seed the streams."""


def _seed_words(count: int, seed: int | None) -> tuple[npt.NDArray[np.uint32], int]:
    """Generate ``count`` 32-bit seed words and the entropy they derive from."""
    try:
        sequence = np.random.SeedSequence(seed)
    except (OSError, NotImplementedError) as exc:
        raise EntropyUnavailableError(
            "Unable to seed random streams: no entropy source available"
        ) from exc
    return sequence.generate_state(count, dtype=np.uint32), int(sequence.entropy)


@ti.data_oriented
class RandomStreams:
    """A set of independent PCG32 streams addressed by index.

    Attributes:
        count: Number of streams.
        seed_entropy: The entropy the streams were derived from. Passing it
            back as ``seed`` reproduces the same streams.
    """

    def __init__(self, count: int, seed: int | None = None) -> None:
        """Create ``count`` streams.

        Args:
            count: Number of independent streams (one per parallel work unit).
            seed: Explicit seed for reproducible runs. ``None`` seeds from
                operating system entropy.

        Raises:
            ValueError: If ``count`` is not positive.
            EntropyUnavailableError: If ``seed`` is None and the operating
                system cannot provide entropy.
        """
        if count <= 0:
            raise ValueError(f"Stream count must be positive, got {count}")

        self._count = count
        self._seed_entropy = 0
        self.state = ti.field(dtype=ti.u32, shape=count)
        self.increment = ti.field(dtype=ti.u32, shape=count)
        self.reseed(seed)

    @property
    def count(self) -> int:
        """Get the number of streams."""
        return self._count

    @property
    def seed_entropy(self) -> int:
        """Get the entropy the current stream states were derived from."""
        return self._seed_entropy

    def reseed(self, seed: int | None = None) -> None:
        """Reset every stream from a new seed.

        Raises:
            EntropyUnavailableError: If ``seed`` is None and no entropy is
                available.
        """
        words, entropy = _seed_words(2 * self._count, seed)
        self.state.from_numpy(words[: self._count])
        # PCG increments must be odd; distinct increments give distinct streams
        self.increment.from_numpy(words[self._count :] | np.uint32(1))
        self._seed_entropy = entropy
        logger.debug("Seeded %d random streams (entropy=%d)", self._count, entropy)

    @ti.func
    def next_u32(self, stream: ti.i32) -> ti.u32:
        """Advance ``stream`` and return 32 random bits."""
        old = self.state[stream]
        self.state[stream] = old * ti.cast(PCG_MULTIPLIER, ti.u32) + self.increment[stream]
        shift = (old >> ti.cast(28, ti.u32)) + ti.cast(4, ti.u32)
        word = ((old >> shift) ^ old) * ti.cast(PCG_OUTPUT_MULTIPLIER, ti.u32)
        return (word >> ti.cast(22, ti.u32)) ^ word

    @ti.func
    def next_uniform(self, stream: ti.i32) -> ti.f64:
        """Return a uniform double in [0, 1) drawn from ``stream``."""
        high = self.next_u32(stream) >> ti.cast(5, ti.u32)
        low = self.next_u32(stream) >> ti.cast(6, ti.u32)
        return (ti.cast(high, ti.f64) * _TWO_POW_26 + ti.cast(low, ti.f64)) / _TWO_POW_53

    @ti.kernel
    def _draw_kernel(self, stream: ti.i32, out: ti.template()):
        ti.loop_config(serialize=True)
        for k in range(out.shape[0]):
            out[k] = self.next_uniform(stream)

    def draw(self, stream: int, n: int) -> npt.NDArray[np.float64]:
        """Draw ``n`` uniforms from one stream on the host.

        Used for testing and debugging; rendering draws inside kernels.

        Args:
            stream: Index of the stream to advance.
            n: Number of values to draw.

        Returns:
            A float64 array of shape (n,).
        """
        if not 0 <= stream < self._count:
            raise IndexError(f"Stream {stream} out of range [0, {self._count})")
        out = ti.field(dtype=ti.f64, shape=n)
        self._draw_kernel(stream, out)
        return out.to_numpy()

    def __repr__(self) -> str:
        return f"RandomStreams(count={self._count}, seed_entropy={self._seed_entropy})"
