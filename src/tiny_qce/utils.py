"""
Linear-algebra helpers shared by the operations, simulator and sampler.
"""

from __future__ import annotations

from functools import reduce
from typing import Iterable, Sequence

import numpy as np
from numpy import ndarray

from tiny_qce.exceptions import InvalidArgumentError, StateInvalidError

NORM_TOLERANCE = 1e-5
"""Allowed deviation of a total probability from 1."""


def kron_all(matrices: Iterable[ndarray]) -> ndarray:
    """
    Kronecker product of a sequence of matrices or vectors, left to right.

    The first element ends up in the most significant position of the
    result, matching the basis convention of :mod:`tiny_qce.operations`.
    """
    matrices = list(matrices)
    if not matrices:
        raise InvalidArgumentError("Kronecker product of an empty sequence")
    return np.array(reduce(np.kron, matrices), dtype=np.complex128)


def combine_states(states: Sequence[ndarray]) -> ndarray:
    """
    Combine per-qubit two-amplitude states into one joint state vector.

    Parameters
    ----------
    states : sequence of ndarray
        One length-2 amplitude array per qubit, in qubit-index order.

    Returns
    -------
    ndarray
        Joint state vector of length 2^n (complex128). Qubit 0 is the most
        significant bit of the basis index.
    """
    if len(states) == 0:
        return np.zeros(0, dtype=np.complex128)
    vectors = [np.asarray(s, dtype=np.complex128).reshape(2) for s in states]
    return kron_all(vectors)


def amplitudes_to_probabilities(vector: ndarray) -> ndarray:
    """Squared magnitude of every amplitude."""
    return np.abs(np.asarray(vector)) ** 2


def total_probability(vector: ndarray) -> float:
    return float(np.sum(amplitudes_to_probabilities(vector)))


def is_normalised(vector: ndarray, tol: float = NORM_TOLERANCE) -> bool:
    """True if the squared magnitudes of ``vector`` sum to 1 within ``tol``."""
    return abs(total_probability(vector) - 1.0) <= tol


def check_normalised(vector: ndarray, tol: float = NORM_TOLERANCE) -> None:
    """
    Raise :class:`StateInvalidError` unless ``vector`` is normalised.
    """
    total = total_probability(vector)
    if abs(total - 1.0) > tol:
        raise StateInvalidError(
            f"State is not normalised: total probability {total:.8f} "
            f"deviates from 1 by more than {tol:g}"
        )


def integer_log2(dim: int) -> int:
    """
    Number of qubits for a state of dimension ``dim``.

    Raises
    ------
    InvalidArgumentError
        If ``dim`` is not a positive power of two.
    """
    if dim < 1 or dim & (dim - 1):
        raise InvalidArgumentError(f"Dimension {dim} is not a power of 2")
    return dim.bit_length() - 1


def bit_weight(position: int, n_qubits: int) -> int:
    """Value of the basis-index bit at ``position`` (0 = most significant)."""
    return 1 << (n_qubits - position - 1)


def format_basis(index: int, n_qubits: int) -> str:
    """Bitstring label of a basis index, most significant bit first."""
    return format(index, f"0{n_qubits}b")
