"""
Single-qubit states and the common basis-state constants.

Example
-------
>>> from tiny_qce.qubit import Qubit, PLUS
>>> q = Qubit(1, 0)
>>> PLUS.probabilities()
array([0.5, 0.5])
"""

from __future__ import annotations

import numpy as np
from numpy import ndarray

from tiny_qce.exceptions import StateInvalidError
from tiny_qce.utils import is_normalised

_SQRT2_INV = 1.0 / np.sqrt(2.0)


class Qubit:
    """
    A normalised single-qubit pure state ``alpha|0> + beta|1>``.

    Parameters
    ----------
    alpha, beta : complex
        Amplitudes of |0> and |1>. ``|alpha|^2 + |beta|^2`` must equal 1
        within ``NORM_TOLERANCE``; the stored amplitudes are rescaled to unit
        norm. Two qubits compare equal when their amplitudes agree to five
        decimal places.

    Raises
    ------
    StateInvalidError
        If the amplitudes are not normalised or not finite.
    """

    __slots__ = ("_state",)

    def __init__(self, alpha: complex, beta: complex) -> None:
        state = np.array([alpha, beta], dtype=np.complex128)
        if not np.all(np.isfinite(state)) or not is_normalised(state):
            raise StateInvalidError(
                f"Qubit amplitudes ({alpha}, {beta}) are not normalised: "
                f"|a|^2 + |b|^2 = {float(np.sum(np.abs(state) ** 2)):.8f}"
            )
        state = state / np.linalg.norm(state)
        state.setflags(write=False)
        self._state = state

    @classmethod
    def from_state(cls, state: Qubit | ndarray | tuple | list) -> Qubit:
        """Build a Qubit from another Qubit or a two-amplitude sequence."""
        if isinstance(state, Qubit):
            return state
        amplitudes = np.asarray(state, dtype=np.complex128).reshape(-1)
        if amplitudes.shape != (2,):
            raise StateInvalidError(
                f"A qubit state needs exactly 2 amplitudes, got {amplitudes.shape[0]}"
            )
        return cls(amplitudes[0], amplitudes[1])

    @property
    def state(self) -> ndarray:
        """Amplitudes as a length-2 complex array (copy)."""
        return self._state.copy()

    @property
    def alpha(self) -> complex:
        return complex(self._state[0])

    @property
    def beta(self) -> complex:
        return complex(self._state[1])

    def ket(self) -> ndarray:
        """Column vector |psi> of shape (2, 1)."""
        return self._state.reshape(2, 1).copy()

    def bra(self) -> ndarray:
        """Row vector <psi| of shape (1, 2)."""
        return self._state.conj().reshape(1, 2)

    def density_matrix(self) -> ndarray:
        """Outer product |psi><psi|."""
        return self.ket() @ self.bra()

    def probabilities(self) -> ndarray:
        """Measurement probabilities of |0> and |1>."""
        return np.abs(self._state) ** 2

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Qubit):
            return self._key() == other._key()
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._key())

    def _key(self) -> tuple:
        # Equality and hashing share this rounding.
        return tuple(complex(a) for a in np.round(self._state, 5))

    def __repr__(self) -> str:
        return f"Qubit({self.alpha:.4g}, {self.beta:.4g})"


# ---------------------------------------------------------------------------
# Basis states
# ---------------------------------------------------------------------------

ZERO = Qubit(1, 0)
"""|0>"""

ONE = Qubit(0, 1)
"""|1>"""

PLUS = Qubit(_SQRT2_INV, _SQRT2_INV)
"""|+> = (|0> + |1>)/sqrt(2)"""

MINUS = Qubit(_SQRT2_INV, -_SQRT2_INV)
"""|-> = (|0> - |1>)/sqrt(2)"""

PLUS_I = Qubit(_SQRT2_INV, 1j * _SQRT2_INV)
"""|+i> = (|0> + i|1>)/sqrt(2)"""

MINUS_I = Qubit(_SQRT2_INV, -1j * _SQRT2_INV)
"""|-i> = (|0> - i|1>)/sqrt(2)"""
