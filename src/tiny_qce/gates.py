"""
Fixed gate matrices.

These are the small unitary building blocks the full-system operations in
:mod:`tiny_qce.operations` are assembled from.

Gate categories:
    - Single-qubit: I, H, X, Y, Z, S
    - Two-qubit: CNOT, SWAP, CZ, CPHASE
    - Three-qubit: TOFFOLI, FREDKIN
"""

from __future__ import annotations

import numpy as np
from numpy import ndarray

# Type alias
Matrix = ndarray

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
_SQRT2_INV = 1.0 / np.sqrt(2.0)

# ---------------------------------------------------------------------------
# Single-qubit gates (2x2 matrices)
# ---------------------------------------------------------------------------

I = np.eye(2, dtype=np.complex128)
"""Identity gate."""

H = np.array([[1, 1], [1, -1]], dtype=np.complex128) * _SQRT2_INV
"""Hadamard gate."""

X = np.array([[0, 1], [1, 0]], dtype=np.complex128)
"""Pauli-X (NOT) gate."""

Y = np.array([[0, -1j], [1j, 0]], dtype=np.complex128)
"""Pauli-Y gate."""

Z = np.array([[1, 0], [0, -1]], dtype=np.complex128)
"""Pauli-Z gate."""

S = np.array([[1, 0], [0, 1j]], dtype=np.complex128)
"""S (phase) gate: sqrt(Z)."""

# ---------------------------------------------------------------------------
# Two-qubit gates (4x4 matrices, control is the high bit)
# ---------------------------------------------------------------------------

CNOT = np.array(
    [[1, 0, 0, 0], [0, 1, 0, 0], [0, 0, 0, 1], [0, 0, 1, 0]],
    dtype=np.complex128,
)
"""Controlled-NOT (CX) gate."""
CX = CNOT  # alias

SWAP = np.array(
    [[1, 0, 0, 0], [0, 0, 1, 0], [0, 1, 0, 0], [0, 0, 0, 1]],
    dtype=np.complex128,
)
"""SWAP gate."""

CZ = np.diag([1, 1, 1, -1]).astype(np.complex128)
"""Controlled-Z gate."""

CPHASE = np.diag([1, 1, 1, 1j]).astype(np.complex128)
"""Controlled-phase gate with a fixed quarter-turn phase."""

# ---------------------------------------------------------------------------
# Three-qubit gates (8x8 matrices)
# ---------------------------------------------------------------------------

TOFFOLI = np.eye(8, dtype=np.complex128)
TOFFOLI[6, 6] = 0
TOFFOLI[7, 7] = 0
TOFFOLI[6, 7] = 1
TOFFOLI[7, 6] = 1
"""Toffoli (CCX) gate."""

FREDKIN = np.eye(8, dtype=np.complex128)
FREDKIN[5, 5] = 0
FREDKIN[6, 6] = 0
FREDKIN[5, 6] = 1
FREDKIN[6, 5] = 1
"""Fredkin (CSWAP) gate."""

for _m in (I, H, X, Y, Z, S, CNOT, SWAP, CZ, CPHASE, TOFFOLI, FREDKIN):
    _m.setflags(write=False)
del _m


# ---------------------------------------------------------------------------
# Gate metadata registry
# ---------------------------------------------------------------------------

GATE_REGISTRY: dict[str, dict] = {
    "i": {"matrix": I, "n_qubits": 1},
    "h": {"matrix": H, "n_qubits": 1},
    "x": {"matrix": X, "n_qubits": 1},
    "y": {"matrix": Y, "n_qubits": 1},
    "z": {"matrix": Z, "n_qubits": 1},
    "s": {"matrix": S, "n_qubits": 1},
    "cx": {"matrix": CNOT, "n_qubits": 2},
    "cnot": {"matrix": CNOT, "n_qubits": 2},
    "swap": {"matrix": SWAP, "n_qubits": 2},
    "cz": {"matrix": CZ, "n_qubits": 2},
    "cphase": {"matrix": CPHASE, "n_qubits": 2},
    "toffoli": {"matrix": TOFFOLI, "n_qubits": 3},
    "ccx": {"matrix": TOFFOLI, "n_qubits": 3},
    "fredkin": {"matrix": FREDKIN, "n_qubits": 3},
    "cswap": {"matrix": FREDKIN, "n_qubits": 3},
}


def get_matrix(name: str) -> Matrix:
    """
    Look up a gate matrix by name.

    Parameters
    ----------
    name : str
        Gate name (case-insensitive).

    Returns
    -------
    numpy.ndarray
        Read-only unitary matrix for the gate.

    Raises
    ------
    KeyError
        If gate name is not found.
    """
    key = name.lower()
    if key not in GATE_REGISTRY:
        raise KeyError(f"Unknown gate: '{name}'. Available: {sorted(GATE_REGISTRY.keys())}")
    return GATE_REGISTRY[key]["matrix"]


def is_unitary(m: Matrix, tol: float = 1e-9) -> bool:
    """Check U @ U^dagger == I within ``tol``."""
    product = m @ m.conj().T
    return np.allclose(product, np.eye(len(m)), atol=tol)
