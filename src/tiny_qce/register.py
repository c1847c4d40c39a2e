"""
Qubit register - the main user-facing API.

Example
-------
>>> from tiny_qce import Register
>>> reg = Register(2)
>>> reg.h(0)
>>> reg.cx(0, 1)
>>> solution = reg.simulate()
>>> solution.sample_counts(1000, rng=42)  # doctest: +SKIP
{'00': 503, '11': 497}
"""

from __future__ import annotations

from typing import Optional, Sequence

from tiny_qce.exceptions import InvalidArgumentError
from tiny_qce.graph import OperationGraph, OperationGraphHolder
from tiny_qce.operations import GateKind, GateOperation
from tiny_qce.qubit import ZERO, Qubit
from tiny_qce.sampling import RandomSource
from tiny_qce.simulator import Simulator, Solution


class Register:
    """
    An n-qubit register with a gate-append API.

    Each gate method appends exactly one operation to the underlying
    :class:`~tiny_qce.graph.OperationGraph` and returns nothing. Gates are
    built over the identity ordering ``(0, 1, ..., n-1)``, so qubit 0 is the
    most significant bit of every basis index.

    Parameters
    ----------
    n_qubits : int
        Number of qubits.
    initial_state : Qubit
        State every qubit starts in. Defaults to |0>.
    """

    def __init__(self, n_qubits: int, initial_state: Qubit = ZERO) -> None:
        self._graph = OperationGraph.with_qubits(n_qubits, initial_state)

    @classmethod
    def from_states(cls, states: Sequence) -> Register:
        """Register whose qubit ``i`` starts in ``states[i]``."""
        reg = cls.__new__(cls)
        reg._graph = OperationGraph(states)
        return reg

    # -- Properties ---------------------------------------------------------

    @property
    def n_qubits(self) -> int:
        return self._graph.n_qubits

    @property
    def graph(self) -> OperationGraph:
        return self._graph

    def __len__(self) -> int:
        return len(self._graph)

    def __repr__(self) -> str:
        return f"Register(qubits={self.n_qubits}, ops={len(self._graph)})"

    # -- Internal helpers ---------------------------------------------------

    def _check_qubits(self, *qubits: int) -> None:
        for q in qubits:
            if not 0 <= q < self.n_qubits:
                raise InvalidArgumentError(
                    f"Qubit {q} out of range for a {self.n_qubits}-qubit register"
                )
        if len(set(qubits)) != len(qubits):
            raise InvalidArgumentError(f"Duplicate qubits: {qubits}")

    def _add(self, kind: GateKind, target: int, controls: tuple[int, ...] = ()) -> None:
        operation = GateOperation(
            kind, target, controls, self._graph.default_ordering
        )
        self._graph.add(operation)

    # -- Single-qubit gates -------------------------------------------------

    def h(self, qubit: int) -> None:
        """Hadamard gate."""
        self._add(GateKind.HADAMARD, qubit)

    def x(self, qubit: int) -> None:
        """Pauli-X gate."""
        self._add(GateKind.X, qubit)

    def y(self, qubit: int) -> None:
        """Pauli-Y gate."""
        self._add(GateKind.Y, qubit)

    def z(self, qubit: int) -> None:
        """Pauli-Z gate."""
        self._add(GateKind.Z, qubit)

    def s(self, qubit: int) -> None:
        """S (phase) gate."""
        self._add(GateKind.PHASE, qubit)

    # -- Two-qubit gates ----------------------------------------------------

    def cx(self, control: int, target: int) -> None:
        """CNOT gate."""
        self._add(GateKind.CNOT, target, (control,))

    def cnot(self, control: int, target: int) -> None:
        """Alias for cx."""
        self.cx(control, target)

    def swap(self, target: int, control: int) -> None:
        """Exchange the bits of ``target`` and ``control``."""
        self._add(GateKind.SWAP, target, (control,))

    def cz(self, control: int, target: int) -> None:
        """Controlled-Z gate."""
        self._add(GateKind.CZ, target, (control,))

    def cphase(self, control: int, target: int) -> None:
        """Controlled phase gate; multiplies |11> by i."""
        self._add(GateKind.CPHASE, target, (control,))

    # -- Three-qubit gates --------------------------------------------------

    def toffoli(self, control1: int, control2: int, target: int) -> None:
        """Toffoli gate. Not implemented yet; the register is left unchanged."""
        self._add(GateKind.TOFFOLI, target, (control1, control2))

    def fredkin(self, control: int, target1: int, target2: int) -> None:
        """Fredkin gate. Not implemented yet; the register is left unchanged."""
        self._check_qubits(control, target1, target2)
        self._add(GateKind.FREDKIN, target1, (control,))

    # -- Editing ------------------------------------------------------------

    def remove(self, index: int) -> None:
        """Remove the operation at position ``index``."""
        self._graph.remove(index)

    def change_state(self, qubit: int, state) -> None:
        """Replace the initial state of ``qubit``."""
        self._graph.change_state(qubit, state)

    # -- Execution ----------------------------------------------------------

    def compile(self) -> OperationGraphHolder:
        """Frozen snapshot of the current circuit."""
        return self._graph.compile_state()

    def simulate(self, simulator: Optional[Simulator] = None) -> Solution:
        """Simulate the current circuit and return its Solution."""
        return (simulator or Simulator()).construct_solution(self.compile())

    def sample(self, rng: RandomSource = None) -> int:
        """Simulate once and draw a single outcome."""
        return self.simulate().sample(rng)
