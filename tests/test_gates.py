from __future__ import annotations

import pytest

from spinnet.errors import StructuralError
from spinnet.gates import (
    GATES,
    GateFragment,
    and_gate,
    copy_gate,
    nand_gate,
    nor_gate,
    not_gate,
    or_gate,
    xnor_gate,
    xor_gate,
)
from spinnet.network import SpinNetwork

F, T = False, True


def _solve_single_gate(fragment):
    network = SpinNetwork()
    sources = [network.add_input_variable() for _ in range(fragment.num_inputs)]
    output = network.add_composite_variable(sources, fragment)
    return network.find_all_ground_states(spin_ordering=sources + [output])


@pytest.mark.parametrize(
    "fragment, energy, expected",
    [
        (copy_gate(), -1.0, [(F, F), (T, T)]),
        (not_gate(), -1.0, [(T, F), (F, T)]),
        (and_gate(), -3.5, [(F, F, F), (T, F, F), (T, T, T), (F, T, F)]),
        (or_gate(), -3.5, [(F, F, F), (T, F, T), (T, T, T), (F, T, T)]),
        (nand_gate(), -3.5, [(F, F, T), (T, F, T), (T, T, F), (F, T, T)]),
        (nor_gate(), -3.5, [(F, F, T), (T, F, F), (T, T, F), (F, T, F)]),
        (xor_gate(), -4.0, [(F, F, F), (T, F, T), (T, T, F), (F, T, T)]),
        (xnor_gate(), -4.0, [(F, F, T), (T, F, F), (T, T, T), (F, T, F)]),
    ],
    ids=lambda value: value.name if isinstance(value, GateFragment) else None,
)
def test_truth_tables(fragment, energy, expected):
    result = _solve_single_gate(fragment)

    assert [ground_state.state for ground_state in result] == expected
    assert all(ground_state.energy == pytest.approx(energy) for ground_state in result)


def test_biased_copy_prefers_up():
    result = _solve_single_gate(copy_gate(bias=0.5))

    assert [ground_state.state for ground_state in result] == [(T, T)]


@pytest.mark.parametrize("name", sorted(GATES))
def test_catalog_fragments_are_valid(name):
    fragment = GATES[name]()

    fragment.validate()
    assert fragment.name == name
    assert fragment.output == fragment.num_inputs
    assert fragment.size == fragment.num_inputs + 1 + fragment.num_auxiliary


@pytest.mark.parametrize(
    "fragment",
    [
        GateFragment("LOOP", 1, 0, {}, ((1, 1, 1.0),)),
        GateFragment("FAR", 1, 0, {}, ((0, 2, 1.0),)),
        GateFragment("TWICE", 1, 0, {}, ((0, 1, 1.0), (1, 0, 1.0))),
        GateFragment("BIAS", 1, 0, {3: 1.0}, ()),
        GateFragment("NEG", -1, 0, {}, ()),
    ],
    ids=lambda fragment: fragment.name,
)
def test_malformed_fragments(fragment):
    with pytest.raises(StructuralError):
        fragment.validate()
