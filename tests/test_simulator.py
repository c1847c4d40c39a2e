"""Tests for the sequential simulator and Solution."""

import numpy as np
import pytest

from tiny_qce import Register, Simulator, Solution
from tiny_qce import gates as g
from tiny_qce.exceptions import InvalidArgumentError
from tiny_qce.graph import OperationGraph, OperationGraphHolder
from tiny_qce.operations import GateKind, GateOperation
from tiny_qce.qubit import MINUS, ONE, PLUS, PLUS_I, Qubit, ZERO


@pytest.fixture
def simulator():
    return Simulator()


# ---------------------------------------------------------------------------
# Initial states
# ---------------------------------------------------------------------------

def test_zero_state(simulator):
    sol = simulator.construct_solution(OperationGraph.with_qubits(1))
    np.testing.assert_allclose(sol.statevector, [1, 0], atol=1e-12)


def test_no_gates_all_ones(simulator):
    """|111> with no gates is the last basis state."""
    graph = OperationGraph.with_qubits(3, ONE)
    sol = simulator.construct_solution(graph.compile_state())
    expected = np.zeros(8)
    expected[7] = 1
    np.testing.assert_allclose(sol.statevector, expected, atol=1e-12)


def test_qubits_at_tolerance_edge_stay_normalised():
    """Accepted qubits whose errors would compound across the product."""
    edge = Qubit(np.sqrt(1 + 0.9e-5), 0)
    reg = Register.from_states([edge] * 3)
    reg.h(0)
    sol = reg.simulate()
    assert sol.norm() == pytest.approx(1.0, abs=1e-12)
    assert sol.sample(rng=1) in (0, 4)


def test_initial_product_state(simulator):
    graph = OperationGraph([PLUS, ONE])
    sol = simulator.construct_solution(graph.compile_state())
    expected = np.kron(PLUS.state, ONE.state)
    np.testing.assert_allclose(sol.statevector, expected, atol=1e-12)


# ---------------------------------------------------------------------------
# End-to-end circuits
# ---------------------------------------------------------------------------

def test_hadamard_on_all_three_qubits():
    reg = Register(3)
    reg.h(0)
    reg.h(1)
    reg.h(2)
    sol = reg.simulate()
    np.testing.assert_allclose(sol.statevector, np.full(8, 1 / (2 * np.sqrt(2))), atol=1e-5)


def test_hadamard_on_outer_qubits():
    reg = Register(3)
    reg.h(0)
    reg.h(2)
    sol = reg.simulate()
    np.testing.assert_allclose(sol.statevector, [0.5, 0.5, 0, 0, 0.5, 0.5, 0, 0], atol=1e-5)


def test_hadamard_on_low_qubits_of_four():
    """Qubit 0 is the most significant bit, so only the first half is populated."""
    reg = Register(4)
    for q in (1, 2, 3):
        reg.h(q)
    sol = reg.simulate()
    amp = 1 / (2 * np.sqrt(2))
    expected = np.concatenate([np.full(8, amp), np.zeros(8)])
    np.testing.assert_allclose(sol.statevector, expected, atol=1e-5)


def test_bell_state():
    reg = Register(2)
    reg.h(0)
    reg.cx(0, 1)
    sol = reg.simulate()
    expected = np.array([1, 0, 0, 1]) / np.sqrt(2)
    np.testing.assert_allclose(sol.statevector, expected, atol=1e-12)


def test_ghz_3_qubit():
    reg = Register(3)
    reg.h(0)
    reg.cx(0, 1)
    reg.cx(0, 2)
    sv = reg.simulate().statevector
    assert abs(sv[0]) ** 2 == pytest.approx(0.5, abs=1e-10)
    assert abs(sv[7]) ** 2 == pytest.approx(0.5, abs=1e-10)
    assert sum(abs(sv[i]) ** 2 for i in range(1, 7)) == pytest.approx(0, abs=1e-10)


def test_application_order_matters():
    """X then H gives |->, H then X gives |+>."""
    a = Register(1)
    a.x(0)
    a.h(0)
    np.testing.assert_allclose(a.simulate().statevector, MINUS.state, atol=1e-12)

    b = Register(1)
    b.h(0)
    b.x(0)
    np.testing.assert_allclose(b.simulate().statevector, PLUS.state, atol=1e-12)


def test_s_gate_phase():
    reg = Register(1)
    reg.h(0)
    reg.s(0)
    np.testing.assert_allclose(reg.simulate().statevector, PLUS_I.state, atol=1e-12)


def test_y_gate():
    reg = Register(1)
    reg.y(0)
    np.testing.assert_allclose(reg.simulate().statevector, [0, 1j], atol=1e-12)


def test_z_gate_phase():
    reg = Register(1)
    reg.h(0)
    reg.z(0)
    np.testing.assert_allclose(reg.simulate().statevector, MINUS.state, atol=1e-12)


def test_swap_moves_excitation():
    reg = Register.from_states([ONE, ZERO])
    reg.swap(0, 1)
    np.testing.assert_allclose(reg.simulate().statevector, [0, 1, 0, 0], atol=1e-12)


def test_cz_phase_kickback():
    reg = Register.from_states([ONE, ONE])
    reg.cz(0, 1)
    np.testing.assert_allclose(reg.simulate().statevector, [0, 0, 0, -1], atol=1e-12)


def test_cphase_applies_quarter_turn():
    reg = Register.from_states([ONE, ONE])
    reg.cphase(0, 1)
    np.testing.assert_allclose(reg.simulate().statevector, [0, 0, 0, 1j], atol=1e-12)


def test_later_gates_act_on_earlier_output():
    """H, CNOT, CNOT, H returns to |00>."""
    reg = Register(2)
    reg.h(0)
    reg.cx(0, 1)
    reg.cx(0, 1)
    reg.h(0)
    np.testing.assert_allclose(reg.simulate().statevector, [1, 0, 0, 0], atol=1e-12)


def test_gate_ordering_defines_bit_layout(simulator):
    """Each matrix is built over its own ordering and applied as is."""
    graph = OperationGraph.with_qubits(3)
    # Qubit 0 sits at position 1 of (2, 0, 1): the X flips the weight-2 bit.
    graph.add(GateOperation(GateKind.X, 0, (), (2, 0, 1)))
    sol = simulator.construct_solution(graph.compile_state())
    expected = np.zeros(8)
    expected[2] = 1
    np.testing.assert_allclose(sol.statevector, expected, atol=1e-12)

    # Control 1 at position 0 (weight 4) is clear, so nothing changes.
    graph.add(GateOperation(GateKind.CNOT, 0, (1,), (1, 2, 0)))
    np.testing.assert_allclose(
        simulator.construct_solution(graph).statevector, expected, atol=1e-12
    )

    # Control 2 at position 1 of (0, 2, 1) is the weight-2 bit, which is set.
    graph.add(GateOperation(GateKind.CNOT, 0, (2,), (0, 2, 1)))
    expected = np.zeros(8)
    expected[6] = 1
    np.testing.assert_allclose(
        simulator.construct_solution(graph).statevector, expected, atol=1e-12
    )


def test_norm_preserved_over_random_circuit():
    rng = np.random.default_rng(1234)
    n = 4
    states = []
    for _ in range(n):
        v = rng.normal(size=2) + 1j * rng.normal(size=2)
        v /= np.linalg.norm(v)
        states.append(Qubit(v[0], v[1]))

    reg = Register.from_states(states)
    single = [reg.h, reg.x, reg.y, reg.z, reg.s]
    double = [reg.cx, reg.swap, reg.cz, reg.cphase]
    for _ in range(40):
        if rng.random() < 0.5:
            single[rng.integers(len(single))](int(rng.integers(n)))
        else:
            a, b = rng.choice(n, size=2, replace=False)
            double[rng.integers(len(double))](int(a), int(b))

    assert reg.simulate().norm() == pytest.approx(1.0, abs=1e-5)


# ---------------------------------------------------------------------------
# Failure handling
# ---------------------------------------------------------------------------

def test_mismatched_operation_aborts_run(simulator):
    holder = OperationGraphHolder(
        operations=(GateOperation(GateKind.X, 0, (), (0, 1, 2)),),
        initial_states=(ZERO.state, ZERO.state),
    )
    with pytest.raises(InvalidArgumentError):
        simulator.construct_solution(holder)


def test_failed_simulation_leaves_previous_solution(simulator):
    reg = Register(2)
    reg.x(0)
    sol = reg.simulate(simulator)
    with pytest.raises(InvalidArgumentError):
        reg.cx(0, 5)
    np.testing.assert_allclose(sol.statevector, [0, 0, 1, 0], atol=1e-12)
    np.testing.assert_allclose(reg.simulate(simulator).statevector, sol.statevector)


# ---------------------------------------------------------------------------
# Solution
# ---------------------------------------------------------------------------

def test_solution_read_only():
    sol = Solution(np.array([1, 0]))
    with pytest.raises(ValueError):
        sol.statevector[0] = 0


def test_solution_copies_input():
    vec = np.array([0, 1], dtype=np.complex128)
    sol = Solution(vec)
    vec[1] = 0
    np.testing.assert_allclose(sol.statevector, [0, 1])


@pytest.mark.parametrize("bad", [np.zeros(3), np.zeros((2, 2)), np.zeros(0)])
def test_solution_rejects_bad_shapes(bad):
    with pytest.raises(InvalidArgumentError):
        Solution(bad)


def test_solution_probabilities():
    sol = Solution(np.array([1, 0, 0, 1]) / np.sqrt(2))
    np.testing.assert_allclose(sol.probabilities(), [0.5, 0, 0, 0.5], atol=1e-12)
    assert sol.probability(3) == pytest.approx(0.5)
    assert sol.n_qubits == 2
    assert sol.norm() == pytest.approx(1.0)
    with pytest.raises(InvalidArgumentError):
        sol.probability(4)


def test_solution_most_probable():
    sol = Solution(np.array([0.6, 0.8, 0, 0]))
    assert sol.most_probable() == 1


def test_solution_repeated_sampling():
    reg = Register(2)
    reg.h(0)
    reg.cx(0, 1)
    sol = reg.simulate()
    rng = np.random.default_rng(42)
    outcomes = {sol.sample(rng) for _ in range(200)}
    assert outcomes == {0, 3}


def test_solution_sample_seeded_reproducible():
    sol = Solution(np.full(4, 0.5))
    assert sol.sample(rng=7) == sol.sample(rng=7)


def test_solution_sample_counts():
    reg = Register(2)
    reg.h(0)
    reg.cx(0, 1)
    counts = reg.simulate().sample_counts(1000, rng=42)
    assert set(counts) <= {"00", "11"}
    assert sum(counts.values()) == 1000
    for count in counts.values():
        assert 0.35 < count / 1000 < 0.65


def test_solution_sample_counts_negative_shots():
    with pytest.raises(InvalidArgumentError):
        Solution(np.array([1, 0])).sample_counts(-1)


def test_solution_expectation():
    """<Z⊗I> on |10> is -1."""
    reg = Register.from_states([ONE, ZERO])
    sol = reg.simulate()
    zi = np.kron(g.Z, g.I)
    assert sol.expectation(zi) == pytest.approx(-1.0)


def test_construct_solution_accepts_live_graph(simulator):
    graph = OperationGraph.with_qubits(1)
    graph.add(GateOperation(GateKind.X, 0, (), (0,)))
    np.testing.assert_allclose(simulator.construct_solution(graph).statevector, [0, 1])
