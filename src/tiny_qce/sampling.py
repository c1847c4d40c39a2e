"""
Discretised inverse-CDF sampling of measurement outcomes.

The probability space [0, 1) is cut into ``round(1 / precision)`` equal
buckets. One bucket is drawn uniformly and the basis index whose cumulative
probability range contains it is returned. Outcomes with probability below
one bucket width may therefore never be drawn.
"""

from __future__ import annotations

from typing import Union

import numpy as np
from numpy import ndarray

from tiny_qce.exceptions import InvalidArgumentError, StateInvalidError
from tiny_qce.logging import get_logger
from tiny_qce.utils import NORM_TOLERANCE, amplitudes_to_probabilities

logger = get_logger(__name__)

PROBABILITY_PRECISION = 1e-5
"""Width of one sampling bucket."""

RandomSource = Union[np.random.Generator, int, None]


def make_rng(rng: RandomSource = None) -> np.random.Generator:
    """Return ``rng`` if it is a Generator, else a new one seeded with it."""
    if isinstance(rng, np.random.Generator):
        return rng
    return np.random.default_rng(rng)


def probability_random_choice(
    probabilities: ndarray,
    rng: np.random.Generator,
    precision: float = PROBABILITY_PRECISION,
) -> int:
    """
    Draw one index from a discrete distribution.

    Parameters
    ----------
    probabilities : ndarray
        Non-negative weights summing to 1 within ``NORM_TOLERANCE``.
    rng : numpy.random.Generator
        Source of randomness.
    precision : float
        Bucket width of the discretisation.

    Returns
    -------
    int
        The chosen index. Zero-probability indices are never returned.

    Raises
    ------
    StateInvalidError
        If the probabilities do not sum to 1.
    """
    probabilities = np.asarray(probabilities, dtype=np.float64)
    if probabilities.ndim != 1 or probabilities.size == 0:
        raise InvalidArgumentError("Probabilities must be a non-empty 1-D array")
    if not 0 < precision < 1:
        raise InvalidArgumentError(f"Precision must be in (0, 1), got {precision}")
    total = float(probabilities.sum())
    if abs(total - 1.0) > NORM_TOLERANCE:
        raise StateInvalidError(
            f"Probabilities sum to {total:.8f}, not 1 within {NORM_TOLERANCE:g}"
        )

    bucket_count = int(round(1.0 / precision))
    draw = int(rng.integers(0, bucket_count))

    cumulative = 0.0
    for index, p in enumerate(probabilities):
        cumulative += p * bucket_count
        if p > 0 and draw < cumulative:
            return index

    # Rounding left the draw past the last boundary.
    return int(np.flatnonzero(probabilities > 0)[-1])


class Sampler:
    """
    Draws classical outcomes from state vectors or solutions.

    Parameters
    ----------
    seed : int | numpy.random.Generator | None
        Seed or generator for reproducible sampling.
    precision : float
        Bucket width of the discretisation.

    Example
    -------
    >>> import numpy as np
    >>> sampler = Sampler(seed=7)
    >>> sampler.sample(np.array([0, 1, 0, 0]))
    1
    """

    def __init__(
        self, seed: RandomSource = None, precision: float = PROBABILITY_PRECISION
    ) -> None:
        self._rng = make_rng(seed)
        self.precision = precision

    @staticmethod
    def _amplitudes(source) -> ndarray:
        return np.asarray(getattr(source, "statevector", source))

    def probabilities(self, source) -> ndarray:
        return amplitudes_to_probabilities(self._amplitudes(source))

    def sample(self, source) -> int:
        """Draw one basis index from a state vector or Solution."""
        return probability_random_choice(
            self.probabilities(source), self._rng, self.precision
        )

    def sample_many(self, source, shots: int) -> list[int]:
        """Draw ``shots`` basis indices, computing probabilities once."""
        if shots < 0:
            raise InvalidArgumentError(f"Shots must be non-negative, got {shots}")
        probs = self.probabilities(source)
        logger.debug("Sampling %d shots over %d outcomes", shots, probs.size)
        return [
            probability_random_choice(probs, self._rng, self.precision)
            for _ in range(shots)
        ]
