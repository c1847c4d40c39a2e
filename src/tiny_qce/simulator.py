"""
Sequential state-vector simulation of a compiled operation graph.

The initial joint state is the Kronecker product of the per-qubit initial
states in index order. Every operation is then applied exactly once, in
circuit order, to the running vector: later gates always act on the output
of earlier ones.

Memory: ~16 bytes * 2^n for the vector, ~16 bytes * 4^n for each gate matrix.
    8 qubits = 1 MB per matrix, 12 qubits = 256 MB per matrix.
"""

from __future__ import annotations

from typing import Optional

import numpy as np
from numpy import ndarray

from tiny_qce.exceptions import InvalidArgumentError
from tiny_qce.graph import OperationGraph, OperationGraphHolder
from tiny_qce.logging import get_logger
from tiny_qce.sampling import (
    PROBABILITY_PRECISION,
    RandomSource,
    make_rng,
    probability_random_choice,
)
from tiny_qce.utils import (
    NORM_TOLERANCE,
    amplitudes_to_probabilities,
    combine_states,
    format_basis,
    integer_log2,
    total_probability,
)

logger = get_logger(__name__)


class Solution:
    """
    Final state vector of a simulation run.

    The vector is read-only; sampling never re-simulates.

    Parameters
    ----------
    statevector : ndarray
        Amplitudes, length 2^n.
    """

    def __init__(self, statevector: ndarray) -> None:
        vector = np.array(statevector, dtype=np.complex128)
        if vector.ndim != 1:
            raise InvalidArgumentError(f"State vector must be 1-D, got shape {vector.shape}")
        self.n_qubits = integer_log2(vector.size)
        vector.setflags(write=False)
        self._statevector = vector
        self._probabilities: Optional[ndarray] = None

    @property
    def statevector(self) -> ndarray:
        """Final amplitudes (read-only)."""
        return self._statevector

    def probabilities(self) -> ndarray:
        """Probability of every basis state."""
        if self._probabilities is None:
            probs = amplitudes_to_probabilities(self._statevector)
            probs.setflags(write=False)
            self._probabilities = probs
        return self._probabilities

    def probability(self, index: int) -> float:
        if not 0 <= index < self._statevector.size:
            raise InvalidArgumentError(
                f"Basis index {index} out of range for {self.n_qubits} qubits"
            )
        return float(self.probabilities()[index])

    def norm(self) -> float:
        """Total probability; 1 for any unitary evolution."""
        return total_probability(self._statevector)

    def most_probable(self) -> int:
        return int(np.argmax(self.probabilities()))

    def sample(
        self, rng: RandomSource = None, precision: float = PROBABILITY_PRECISION
    ) -> int:
        """
        Draw one classical outcome.

        Parameters
        ----------
        rng : numpy.random.Generator | int | None
            Generator or seed. Pass the same Generator across calls for an
            independent stream of draws.
        precision : float
            Bucket width of the discretised sampler.

        Returns
        -------
        int
            Basis index of the outcome.
        """
        return probability_random_choice(self.probabilities(), make_rng(rng), precision)

    def sample_counts(self, shots: int, rng: RandomSource = None) -> dict[str, int]:
        """
        Sample ``shots`` outcomes and count them by bitstring.

        Returns
        -------
        dict[str, int]
            Counts keyed by bitstrings, most significant qubit first.
        """
        if shots < 0:
            raise InvalidArgumentError(f"Shots must be non-negative, got {shots}")
        generator = make_rng(rng)
        counts: dict[str, int] = {}
        for _ in range(shots):
            key = format_basis(self.sample(generator), self.n_qubits)
            counts[key] = counts.get(key, 0) + 1
        return dict(sorted(counts.items()))

    def expectation(self, observable: ndarray) -> complex:
        """Expectation value <psi|O|psi> of a 2^n x 2^n observable."""
        return complex(self._statevector.conj() @ observable @ self._statevector)

    def __repr__(self) -> str:
        return f"Solution(qubits={self.n_qubits}, dim={self._statevector.size})"


class Simulator:
    """
    Single-pass dense simulator.

    Example
    -------
    >>> from tiny_qce import Register, Simulator
    >>> reg = Register(2)
    >>> reg.h(0)
    >>> reg.cx(0, 1)
    >>> solution = Simulator().construct_solution(reg.compile())
    >>> solution.probabilities().round(2).tolist()
    [0.5, 0.0, 0.0, 0.5]
    """

    def construct_solution(
        self, holder: OperationGraphHolder | OperationGraph
    ) -> Solution:
        """
        Evaluate a compiled graph into its final state.

        Parameters
        ----------
        holder : OperationGraphHolder or OperationGraph
            Snapshot to simulate. A live graph is compiled first.

        Returns
        -------
        Solution

        Raises
        ------
        InvalidArgumentError
            If an operation does not span the holder's qubits.
        GateNotImplementedError
            If an operation cannot be built.
        """
        if isinstance(holder, OperationGraph):
            holder = holder.compile_state()

        state = combine_states(holder.initial_states)
        logger.debug(
            "Simulating %d operations on %d qubits", len(holder.operations), holder.n_qubits
        )

        for step, operation in enumerate(holder.operations):
            if operation.n_qubits != holder.n_qubits:
                raise InvalidArgumentError(
                    f"Operation {step} spans {operation.n_qubits} qubits, "
                    f"register has {holder.n_qubits}"
                )
            state = operation.construct_matrix() @ state
            logger.debug("Step %d: applied %r", step, operation)

        drift = abs(total_probability(state) - 1.0)
        if drift > NORM_TOLERANCE:
            logger.warning("Final state norm drifted by %.2e", drift)

        return Solution(state)
