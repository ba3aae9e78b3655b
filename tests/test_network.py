from __future__ import annotations

import numpy as np
import pytest

from spinnet.errors import StructuralError
from spinnet.gates import GateFragment, and_gate, copy_gate, not_gate, or_gate, xor_gate
from spinnet.network import AUXILIARY, INPUT, OUTPUT, SpinNetwork

F, T = False, True


def test_indices_are_handed_out_in_order():
    network = SpinNetwork()

    a = network.add_input_variable()
    b = network.add_input_variable(bias=0.25)
    z = network.add_composite_variable([a, b], and_gate())
    w = network.add_composite_variable([z], not_gate())

    assert (a, b, z) == (0, 1, 2)
    assert w == 5
    assert len(network) == network.num_spins == 6
    assert network.biases.shape == (6,)
    assert network.biases[1] == pytest.approx(0.25)


def test_provenance():
    network = SpinNetwork()
    a = network.add_input_variable()
    b = network.add_input_variable()
    z = network.add_composite_variable([a, b], xor_gate())

    assert network.input_indices == [a, b]
    assert network.output_indices == [z]
    assert network.auxiliary_indices == [3, 4, 5]
    assert network.kind(a) == INPUT
    assert network.kind(z) == OUTPUT
    assert network.kind(4) == AUXILIARY

    with pytest.raises(StructuralError):
        network.kind(6)


def test_existing_indices_survive_growth():
    network = SpinNetwork()
    a = network.add_input_variable()
    b = network.add_input_variable()
    z = network.add_composite_variable([a, b], and_gate())
    before = network.hamiltonian()

    network.add_composite_variable([z, a], or_gate())
    after = network.hamiltonian()

    assert after.couplings[: len(before.couplings)] == before.couplings
    np.testing.assert_array_equal(after.biases[: before.num_spins], before.biases)
    assert network.kind(z) == OUTPUT


def test_direct_and_embedding():
    fragment = GateFragment(
        "AND3",
        2,
        0,
        {0: 0.5, 1: 0.5, 2: -1.0},
        ((0, 1, -0.5), (0, 2, 1.0), (1, 2, 1.0)),
    )
    network = SpinNetwork()
    a = network.add_input_variable()
    b = network.add_input_variable()
    z = network.add_composite_variable([a, b], fragment)

    np.testing.assert_array_equal(network.biases, [0.5, 0.5, -1.0])

    states = {g.state for g in network.find_all_ground_states(spin_ordering=[a, b, z])}
    assert states == {(F, F, F), (T, F, F), (F, T, F), (T, T, T)}


def test_three_input_or_from_two_gates():
    network = SpinNetwork()
    a = network.add_input_variable()
    b = network.add_input_variable()
    c = network.add_input_variable()
    ab = network.add_composite_variable([a, b], or_gate())
    z = network.add_composite_variable([ab, c], or_gate())

    result = network.find_all_ground_states(spin_ordering=[a, b, c, z])

    assert [g.state for g in result] == [
        (F, F, F, F),
        (T, F, F, T),
        (T, T, F, T),
        (F, T, F, T),
        (F, T, T, T),
        (T, T, T, T),
        (T, F, T, T),
        (F, F, T, T),
    ]
    assert all(g.energy == pytest.approx(-7.0) for g in result)


def test_copy_chain():
    network = SpinNetwork()
    spin = network.add_input_variable()
    for _ in range(3):
        spin = network.add_composite_variable([spin], copy_gate())

    result = network.find_all_ground_states()

    assert [g.state for g in result] == [(F, F, F, F), (T, T, T, T)]
    assert all(g.energy == pytest.approx(-3.0) for g in result)


# ---------------------------------------------------------------------------
# rejected additions
# ---------------------------------------------------------------------------


def _assert_unchanged(network, spins, couplings):
    assert network.num_spins == spins
    assert len(network.couplings) == couplings


def test_wrong_arity():
    network = SpinNetwork()
    a = network.add_input_variable()

    with pytest.raises(StructuralError):
        network.add_composite_variable([a], and_gate())
    _assert_unchanged(network, 1, 0)


def test_missing_source():
    network = SpinNetwork()
    a = network.add_input_variable()

    with pytest.raises(StructuralError):
        network.add_composite_variable([a, 7], or_gate())
    _assert_unchanged(network, 1, 0)


def test_duplicate_pair_is_rejected_before_appending():
    fragment = GateFragment("TIE", 2, 0, {}, ((0, 2, 1.0), (1, 2, 1.0), (0, 1, 1.0)))
    network = SpinNetwork()
    a = network.add_input_variable()
    b = network.add_input_variable()
    network.add_composite_variable([a, b], fragment)

    with pytest.raises(StructuralError):
        network.add_composite_variable([a, b], fragment)
    _assert_unchanged(network, 3, 3)


def test_same_source_twice_is_a_self_coupling():
    fragment = GateFragment("TIE", 2, 0, {}, ((0, 1, 1.0),))
    network = SpinNetwork()
    a = network.add_input_variable()

    with pytest.raises(StructuralError):
        network.add_composite_variable([a, a], fragment)
    _assert_unchanged(network, 1, 0)


# ---------------------------------------------------------------------------
# persistence
# ---------------------------------------------------------------------------


def test_save_and_load(tmp_path):
    network = SpinNetwork()
    a = network.add_input_variable(bias=-0.5)
    b = network.add_input_variable()
    network.add_composite_variable([a, b], xor_gate())

    path = network.save(tmp_path / "xor")
    loaded = SpinNetwork.load(path)

    assert path.suffix == ".npz"
    assert loaded.couplings == network.couplings
    np.testing.assert_array_equal(loaded.biases, network.biases)
    assert loaded.input_indices == network.input_indices
    assert loaded.auxiliary_indices == network.auxiliary_indices
    assert loaded.find_all_ground_states() == network.find_all_ground_states()


def test_loaded_network_keeps_growing(tmp_path):
    network = SpinNetwork()
    a = network.add_input_variable()
    b = network.add_input_variable()
    network.add_composite_variable([a, b], and_gate())
    loaded = SpinNetwork.load(network.save(tmp_path / "and.npz"))

    with pytest.raises(StructuralError):
        loaded.add_composite_variable([a, 3], GateFragment("DUP", 2, 0, {}, ((0, 1, 1.0),)))
    assert loaded.add_composite_variable([a], not_gate()) == 5
