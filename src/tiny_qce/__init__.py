"""
tiny-qce: a small dense state-vector quantum circuit simulator.

Every gate is expanded to its full 2^n x 2^n matrix over the register and
applied to the complete amplitude vector, in circuit order.

Quick Start:
    >>> from tiny_qce import Register
    >>> reg = Register(2)
    >>> reg.h(0)
    >>> reg.cx(0, 1)
    >>> solution = reg.simulate()
    >>> solution.statevector  # (|00> + |11>)/sqrt(2)
    >>> solution.sample(rng=42)  # 0 or 3

Lower level:
    >>> from tiny_qce import OperationGraph, GateOperation, GateKind, Simulator
    >>> graph = OperationGraph.with_qubits(3)
    >>> graph.add(GateOperation(GateKind.HADAMARD, 0, (), (0, 1, 2)))
    >>> solution = Simulator().construct_solution(graph.compile_state())
"""

__version__ = "0.1.0"

from tiny_qce import gates
from tiny_qce.exceptions import (
    GateNotImplementedError,
    InvalidArgumentError,
    QceError,
    StateInvalidError,
)
from tiny_qce.graph import Node, OperationGraph, OperationGraphHolder, QubitGroups
from tiny_qce.operations import GateKind, GateOperation
from tiny_qce.qubit import MINUS, MINUS_I, ONE, PLUS, PLUS_I, ZERO, Qubit
from tiny_qce.register import Register
from tiny_qce.sampling import Sampler, probability_random_choice
from tiny_qce.simulator import Simulator, Solution

__all__ = [
    # Core
    "Register",
    "OperationGraph",
    "OperationGraphHolder",
    "Node",
    "QubitGroups",
    "GateKind",
    "GateOperation",
    "Simulator",
    "Solution",
    "Sampler",
    "probability_random_choice",
    # Qubits
    "Qubit",
    "ZERO",
    "ONE",
    "PLUS",
    "MINUS",
    "PLUS_I",
    "MINUS_I",
    # Errors
    "QceError",
    "InvalidArgumentError",
    "GateNotImplementedError",
    "StateInvalidError",
    # Submodules
    "gates",
]
