"""
Full-system gate operations.

A :class:`GateOperation` records one gate of a circuit together with the
qubit ordering that was active when it was appended. From that it builds the
complete 2^n x 2^n unitary acting on the whole register.

Basis convention
----------------
Basis index ``i`` is read as an n-bit number. The most significant bit
belongs to ``ordering[0]``, the least significant to ``ordering[-1]``. A
qubit at position ``p`` of the ordering therefore has bit weight
``2 ** (n - p - 1)``.

Construction strategies
-----------------------
* Single-qubit kinds (H, X, Y, Z, S) take the Kronecker product, over the
  ordering, of the 2x2 gate at the target position and the identity
  elsewhere. This costs O(4^n) entries.
* Two-qubit kinds (CNOT, SWAP, CZ, CPHASE) are written directly in the 2^n
  basis by inspecting the control and target bit of every basis index.

Example
-------
>>> from tiny_qce.operations import GateKind, GateOperation
>>> op = GateOperation(GateKind.CNOT, target=1, controls=(0,), ordering=(0, 1))
>>> op.construct_matrix().real.astype(int)
array([[1, 0, 0, 0],
       [0, 1, 0, 0],
       [0, 0, 0, 1],
       [0, 0, 1, 0]])
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Sequence

import numpy as np
from numpy import ndarray

from tiny_qce import gates as g
from tiny_qce.exceptions import GateNotImplementedError, InvalidArgumentError
from tiny_qce.logging import get_logger
from tiny_qce.utils import bit_weight, combine_states, kron_all

logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Gate kinds
# ---------------------------------------------------------------------------

class GateKind(Enum):
    """Closed set of gates the simulator knows about."""

    HADAMARD = "h"
    X = "x"
    Y = "y"
    Z = "z"
    PHASE = "s"
    CNOT = "cnot"
    SWAP = "swap"
    CZ = "cz"
    CPHASE = "cphase"
    TOFFOLI = "toffoli"
    FREDKIN = "fredkin"

    @property
    def n_controls(self) -> int:
        """Number of control qubits the kind takes."""
        return _CONTROL_ARITY[self]

    @property
    def is_single_qubit(self) -> bool:
        return self in _SINGLE_QUBIT_KINDS

    @property
    def is_implemented(self) -> bool:
        return self in _BUILDERS


_SINGLE_QUBIT_KINDS = frozenset(
    {GateKind.HADAMARD, GateKind.X, GateKind.Y, GateKind.Z, GateKind.PHASE}
)

_CONTROL_ARITY: dict[GateKind, int] = {
    GateKind.HADAMARD: 0,
    GateKind.X: 0,
    GateKind.Y: 0,
    GateKind.Z: 0,
    GateKind.PHASE: 0,
    GateKind.CNOT: 1,
    GateKind.SWAP: 1,
    GateKind.CZ: 1,
    GateKind.CPHASE: 1,
    GateKind.TOFFOLI: 2,
    GateKind.FREDKIN: 1,
}


# ---------------------------------------------------------------------------
# GateOperation
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class GateOperation:
    """
    One gate applied to a register under a fixed qubit ordering.

    Parameters
    ----------
    kind : GateKind
        Which gate.
    target : int
        Target qubit index. For SWAP this is the first swapped qubit.
    controls : tuple of int
        Control qubit indices: empty for single-qubit kinds, exactly one for
        CNOT, SWAP, CZ and CPHASE. SWAP uses its control as the second
        swapped qubit.
    ordering : tuple of int
        Permutation of all qubit indices of the register. Defines which bit
        of a basis index belongs to which qubit.

    Raises
    ------
    InvalidArgumentError
        If the ordering is not a permutation, a qubit is missing from it,
        a qubit is repeated, or the number of controls does not fit the kind.
    """

    kind: GateKind
    target: int
    controls: tuple[int, ...]
    ordering: tuple[int, ...]

    def __post_init__(self) -> None:
        # Normalise list inputs so the dataclass stays hashable.
        object.__setattr__(self, "controls", tuple(int(c) for c in self.controls))
        object.__setattr__(self, "ordering", tuple(int(q) for q in self.ordering))
        object.__setattr__(self, "target", int(self.target))

        validate_ordering(self.ordering)

        for q in self.qubits:
            if q not in self.ordering:
                raise InvalidArgumentError(
                    f"Qubit {q} is not part of the ordering {self.ordering}"
                )
        if len(set(self.qubits)) != len(self.qubits):
            raise InvalidArgumentError(f"Duplicate qubits in {self.kind.name}: {self.qubits}")

        expected = self.kind.n_controls
        if len(self.controls) != expected:
            if expected == 0:
                raise InvalidArgumentError(
                    f"{self.kind.name} takes no control qubits, got {self.controls}"
                )
            raise InvalidArgumentError(
                f"{self.kind.name} requires exactly {expected} control qubit(s), "
                f"got {len(self.controls)}"
            )

    # -- Properties ---------------------------------------------------------

    @property
    def qubits(self) -> tuple[int, ...]:
        """Target followed by the controls."""
        return (self.target,) + self.controls

    @property
    def n_qubits(self) -> int:
        """Width of the register the operation acts on."""
        return len(self.ordering)

    @property
    def dim(self) -> int:
        return 1 << self.n_qubits

    def position(self, qubit: int) -> int:
        """Position of ``qubit`` in the ordering (0 = most significant bit)."""
        return self.ordering.index(qubit)

    # -- Matrix construction -------------------------------------------------

    def construct_matrix(self) -> ndarray:
        """
        Build the full 2^n x 2^n unitary of this gate.

        Raises
        ------
        GateNotImplementedError
            If the kind is recognised but cannot be built yet.
        """
        builder = _BUILDERS.get(self.kind)
        if builder is None:
            raise GateNotImplementedError(
                f"{self.kind.name} gates are not implemented yet"
            )
        logger.debug(
            "Building %s matrix on target %d, controls %s, %d qubits",
            self.kind.name, self.target, self.controls, self.n_qubits,
        )
        return builder(self)

    def apply(self, state: ndarray) -> ndarray:
        """
        Left-multiply ``state`` by the gate matrix.

        The input is left untouched; a new vector is returned.
        """
        state = np.asarray(state, dtype=np.complex128)
        if state.shape != (self.dim,):
            raise InvalidArgumentError(
                f"State shape {state.shape} != expected ({self.dim},) for "
                f"{self.n_qubits}-qubit {self.kind.name}"
            )
        return self.construct_matrix() @ state

    def apply_to_qubits(self, qubit_states: Sequence) -> ndarray:
        """
        Combine per-qubit states (index order) and apply the gate.

        Parameters
        ----------
        qubit_states : sequence
            One :class:`~tiny_qce.qubit.Qubit` or two-amplitude array per
            qubit index.

        Returns
        -------
        ndarray
            The new joint state vector. The qubit states are not modified.
        """
        amplitudes = [getattr(q, "state", q) for q in qubit_states]
        return self.apply(combine_states(amplitudes))

    def __repr__(self) -> str:
        ctrl = f", controls={list(self.controls)}" if self.controls else ""
        return f"GateOperation({self.kind.name}, target={self.target}{ctrl})"


def validate_ordering(ordering: Sequence[int], n_qubits: int | None = None) -> None:
    """
    Check that ``ordering`` is a permutation of ``range(n_qubits)``.

    ``n_qubits`` defaults to ``len(ordering)``.
    """
    if n_qubits is None:
        n_qubits = len(ordering)
    if len(ordering) == 0:
        raise InvalidArgumentError("Qubit ordering must not be empty")
    if sorted(ordering) != list(range(n_qubits)):
        raise InvalidArgumentError(
            f"Qubit ordering {tuple(ordering)} is not a permutation of "
            f"qubits 0..{n_qubits - 1}"
        )


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------

_SINGLE_QUBIT_MATRICES: dict[GateKind, ndarray] = {
    GateKind.HADAMARD: g.H,
    GateKind.X: g.X,
    GateKind.Y: g.Y,
    GateKind.Z: g.Z,
    GateKind.PHASE: g.S,
}


def _single_qubit_matrix(op: GateOperation) -> ndarray:
    gate = _SINGLE_QUBIT_MATRICES[op.kind]
    return kron_all(gate if q == op.target else g.I for q in op.ordering)


def _bit_masks(op: GateOperation) -> tuple[ndarray, ndarray, ndarray, int, int]:
    """Basis indices plus boolean control/target bit masks and weights."""
    n = op.n_qubits
    target_weight = bit_weight(op.position(op.target), n)
    control_weight = bit_weight(op.position(op.controls[0]), n)
    indices = np.arange(op.dim)
    control_set = (indices & control_weight) != 0
    target_set = (indices & target_weight) != 0
    return indices, control_set, target_set, target_weight, control_weight


def _permutation_matrix(indices: ndarray, destinations: ndarray) -> ndarray:
    """Matrix sending basis state ``indices[k]`` to ``destinations[k]``."""
    mat = np.zeros((indices.size, indices.size), dtype=np.complex128)
    mat[destinations, indices] = 1
    return mat


def _cnot_matrix(op: GateOperation) -> ndarray:
    indices, control_set, _, target_weight, _ = _bit_masks(op)
    destinations = np.where(control_set, indices ^ target_weight, indices)
    return _permutation_matrix(indices, destinations)


def _swap_matrix(op: GateOperation) -> ndarray:
    indices, control_set, target_set, target_weight, control_weight = _bit_masks(op)
    destinations = np.where(
        control_set != target_set,
        indices ^ (target_weight | control_weight),
        indices,
    )
    return _permutation_matrix(indices, destinations)


def _cz_matrix(op: GateOperation) -> ndarray:
    _, control_set, target_set, _, _ = _bit_masks(op)
    return np.diag(np.where(control_set & target_set, -1.0 + 0j, 1.0 + 0j))


def _cphase_matrix(op: GateOperation) -> ndarray:
    # Fixed quarter-turn phase, no angle parameter.
    _, control_set, target_set, _, _ = _bit_masks(op)
    return np.diag(np.where(control_set & target_set, 1j, 1.0 + 0j))


_BUILDERS: dict[GateKind, Callable[[GateOperation], ndarray]] = {
    GateKind.HADAMARD: _single_qubit_matrix,
    GateKind.X: _single_qubit_matrix,
    GateKind.Y: _single_qubit_matrix,
    GateKind.Z: _single_qubit_matrix,
    GateKind.PHASE: _single_qubit_matrix,
    GateKind.CNOT: _cnot_matrix,
    GateKind.SWAP: _swap_matrix,
    GateKind.CZ: _cz_matrix,
    GateKind.CPHASE: _cphase_matrix,
}
