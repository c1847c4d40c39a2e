"""
Error types raised by tiny-qce.

Every error is fatal to the call that raised it. A graph that rejected an
operation, and any Solution produced before the failure, stay valid.
"""

from __future__ import annotations


class QceError(Exception):
    """Base class for all tiny-qce errors."""


class InvalidArgumentError(QceError, ValueError):
    """
    Malformed construction input.

    Raised for a wrong number of control qubits, an out-of-range qubit or
    node index, a qubit ordering that is not a permutation of the known
    qubits, or a state vector of the wrong size.
    """


class GateNotImplementedError(QceError, NotImplementedError):
    """A gate kind that is recognised but not yet constructible."""


class StateInvalidError(QceError, ValueError):
    """An amplitude pair or distribution that fails the normalisation check."""
