"""
Operation graph: the ordered record of a circuit and its initial conditions.

The graph owns a flat arena of :class:`~tiny_qce.operations.GateOperation`
objects and a sequence of :class:`Node` handles into it. Node order is the
temporal order of the circuit. Alongside, a :class:`QubitGroups` union-find
tracks which qubits have interacted through multi-qubit gates. The grouping
is advisory: simulation always builds full-width matrices.

Example
-------
>>> from tiny_qce.graph import OperationGraph
>>> from tiny_qce.operations import GateKind, GateOperation
>>> graph = OperationGraph.with_qubits(2)
>>> graph.add(GateOperation(GateKind.HADAMARD, 0, (), (0, 1)))
0
>>> graph.add(GateOperation(GateKind.CNOT, 1, (0,), (0, 1)))
1
>>> holder = graph.compile_state()
>>> len(holder.operations)
2
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Sequence

import numpy as np
from numpy import ndarray

from tiny_qce.exceptions import GateNotImplementedError, InvalidArgumentError
from tiny_qce.logging import get_logger
from tiny_qce.operations import GateOperation, validate_ordering
from tiny_qce.qubit import ZERO, Qubit

logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# QubitGroups: union-find over qubit indices
# ---------------------------------------------------------------------------

class QubitGroups:
    """
    Disjoint sets of qubit indices.

    ``find`` is iterative with path halving and ``union`` merges by set size,
    so both run in amortised near-constant time.
    """

    def __init__(self, n_qubits: int) -> None:
        self._parent = list(range(n_qubits))
        self._size = [1] * n_qubits

    def __len__(self) -> int:
        return len(self._parent)

    def _check(self, qubit: int) -> None:
        if not 0 <= qubit < len(self._parent):
            raise InvalidArgumentError(
                f"Qubit {qubit} out of range for {len(self._parent)} qubits"
            )

    def find(self, qubit: int) -> int:
        """Representative of the set containing ``qubit``."""
        self._check(qubit)
        parent = self._parent
        while parent[qubit] != qubit:
            parent[qubit] = parent[parent[qubit]]
            qubit = parent[qubit]
        return qubit

    def union(self, a: int, b: int) -> int:
        """Merge the sets of ``a`` and ``b``; return the new representative."""
        ra, rb = self.find(a), self.find(b)
        if ra == rb:
            return ra
        if self._size[ra] < self._size[rb]:
            ra, rb = rb, ra
        self._parent[rb] = ra
        self._size[ra] += self._size[rb]
        return ra

    def connected(self, a: int, b: int) -> bool:
        return self.find(a) == self.find(b)

    def group_size(self, qubit: int) -> int:
        return self._size[self.find(qubit)]

    def groups(self) -> list[tuple[int, ...]]:
        """All disjoint groups, each sorted, ordered by smallest member."""
        members: dict[int, list[int]] = {}
        for q in range(len(self._parent)):
            members.setdefault(self.find(q), []).append(q)
        return sorted(tuple(m) for m in members.values())

    def copy(self) -> QubitGroups:
        clone = QubitGroups(0)
        clone._parent = list(self._parent)
        clone._size = list(self._size)
        return clone


# ---------------------------------------------------------------------------
# Node and snapshot
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Node:
    """A position in the circuit, referring to an operation by arena handle."""
    handle: int


@dataclass(frozen=True)
class OperationGraphHolder:
    """
    Frozen snapshot of a graph, ready for simulation.

    Attributes
    ----------
    operations : tuple of GateOperation
        Operations in circuit order.
    initial_states : tuple of ndarray
        Read-only two-amplitude state per qubit index.
    """

    operations: tuple[GateOperation, ...]
    initial_states: tuple[ndarray, ...]

    @property
    def n_qubits(self) -> int:
        return len(self.initial_states)

    def __len__(self) -> int:
        return len(self.operations)


# ---------------------------------------------------------------------------
# OperationGraph
# ---------------------------------------------------------------------------

class OperationGraph:
    """
    Ordered circuit record plus per-qubit initial states.

    Parameters
    ----------
    initial_states : sequence
        One :class:`~tiny_qce.qubit.Qubit` (or two-amplitude sequence) per
        qubit index. Each must be normalised.

    Raises
    ------
    InvalidArgumentError
        If no qubit is given.
    StateInvalidError
        If an initial state is not normalised.
    """

    def __init__(self, initial_states: Sequence) -> None:
        if len(initial_states) < 1:
            raise InvalidArgumentError("Need at least 1 qubit, got 0")
        self._states: list[Qubit] = [Qubit.from_state(s) for s in initial_states]
        self._arena: list[GateOperation] = []
        self._nodes: list[Node] = []
        self._groups = QubitGroups(len(self._states))

    @classmethod
    def with_qubits(cls, n_qubits: int, initial: Qubit = ZERO) -> OperationGraph:
        """Graph of ``n_qubits`` qubits all starting in ``initial``."""
        if n_qubits < 1:
            raise InvalidArgumentError(f"Need at least 1 qubit, got {n_qubits}")
        return cls([initial] * n_qubits)

    # -- Properties ---------------------------------------------------------

    @property
    def n_qubits(self) -> int:
        return len(self._states)

    @property
    def nodes(self) -> list[Node]:
        """Nodes in circuit order (copy)."""
        return list(self._nodes)

    @property
    def operations(self) -> list[GateOperation]:
        """Operations in circuit order."""
        return [self._arena[node.handle] for node in self._nodes]

    @property
    def groups(self) -> QubitGroups:
        """Union-find of qubits that have interacted."""
        return self._groups

    @property
    def default_ordering(self) -> tuple[int, ...]:
        return tuple(range(self.n_qubits))

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[GateOperation]:
        return iter(self.operations)

    def __getitem__(self, index: int) -> GateOperation:
        self._check_node_index(index)
        return self._arena[self._nodes[index].handle]

    def __repr__(self) -> str:
        return f"OperationGraph(qubits={self.n_qubits}, nodes={len(self._nodes)})"

    # -- Internal helpers ---------------------------------------------------

    def _compact(self) -> None:
        self._arena = [self._arena[node.handle] for node in self._nodes]
        self._nodes = [Node(i) for i in range(len(self._arena))]
        logger.debug("Compacted arena to %d operations", len(self._arena))

    def _check_qubit_index(self, qubit: int) -> None:
        if not 0 <= qubit < self.n_qubits:
            raise InvalidArgumentError(
                f"Qubit {qubit} out of range for {self.n_qubits}-qubit graph"
            )

    def _check_node_index(self, index: int) -> None:
        if not 0 <= index < len(self._nodes):
            raise InvalidArgumentError(
                f"Node index {index} out of range for graph with {len(self._nodes)} nodes"
            )

    # -- Mutation -----------------------------------------------------------

    def add(self, operation: GateOperation) -> int:
        """
        Append ``operation`` at the end of the circuit.

        Returns
        -------
        int
            Position of the new node.

        Raises
        ------
        InvalidArgumentError
            If the operation's ordering does not cover exactly this graph's
            qubits.
        GateNotImplementedError
            If the operation's kind cannot be built yet.
        """
        validate_ordering(operation.ordering, self.n_qubits)
        if not operation.kind.is_implemented:
            raise GateNotImplementedError(
                f"{operation.kind.name} gates are not implemented yet"
            )

        self._arena.append(operation)
        self._nodes.append(Node(len(self._arena) - 1))
        for control in operation.controls:
            self._groups.union(operation.target, control)

        logger.debug("Added node %d: %r", len(self._nodes) - 1, operation)
        return len(self._nodes) - 1

    def remove(self, index: int) -> GateOperation:
        """
        Remove the node at position ``index`` and return its operation.

        Once the arena holds more removed operations than live ones it is
        compacted, which renumbers the handles of the remaining nodes.

        Raises
        ------
        InvalidArgumentError
            If ``index`` is out of bounds. The graph is left unchanged.
        """
        self._check_node_index(index)
        node = self._nodes.pop(index)
        operation = self._arena[node.handle]
        logger.debug("Removed node %d", index)
        if len(self._arena) - len(self._nodes) > len(self._nodes):
            self._compact()
        return operation

    def change_state(self, qubit_index: int, new_state) -> None:
        """
        Replace the initial state of one qubit.

        Raises
        ------
        InvalidArgumentError
            If ``qubit_index`` is out of range.
        StateInvalidError
            If ``new_state`` is not normalised.
        """
        self._check_qubit_index(qubit_index)
        self._states[qubit_index] = Qubit.from_state(new_state)

    def initial_state(self, qubit_index: int) -> Qubit:
        self._check_qubit_index(qubit_index)
        return self._states[qubit_index]

    # -- Snapshot -----------------------------------------------------------

    def compile_state(self) -> OperationGraphHolder:
        """
        Snapshot the current circuit.

        The graph is not modified. Every call yields an independent holder.
        """
        states = []
        for qubit in self._states:
            amplitudes = np.array(qubit.state, dtype=np.complex128)
            amplitudes.setflags(write=False)
            states.append(amplitudes)
        return OperationGraphHolder(
            operations=tuple(self.operations),
            initial_states=tuple(states),
        )
