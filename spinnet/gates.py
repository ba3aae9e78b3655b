"""Logic-gate embeddings as Hamiltonian fragments.

A :class:`GateFragment` is expressed in local indices: ``0 .. k-1`` are the
gate inputs, ``k`` is the output and ``k+1 ..`` are auxiliary spins.  When a
fragment is spliced into a :class:`~spinnet.network.SpinNetwork` the inputs
are wired to existing spins and the output and auxiliaries become new spins.
The ground states of a fragment are exactly the rows of the gate's truth
table (``True`` meaning spin up).

Two-input gates route each input through an auxiliary copy spin, which keeps
the output coupled to spins that belong to the gate alone.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, Mapping, Tuple

from .errors import StructuralError

LocalCoupling = Tuple[int, int, float]


@dataclass(frozen=True)
class GateFragment:
    """Bias and coupling contributions of one gate in local indices."""

    name: str
    num_inputs: int
    num_auxiliary: int = 0
    biases: Mapping[int, float] = field(default_factory=dict)
    couplings: Tuple[LocalCoupling, ...] = ()

    @property
    def output(self) -> int:
        return self.num_inputs

    @property
    def size(self) -> int:
        """Number of local spins: inputs, output and auxiliaries."""

        return self.num_inputs + 1 + self.num_auxiliary

    def validate(self) -> None:
        if self.num_inputs < 0 or self.num_auxiliary < 0:
            raise StructuralError(f"Gate {self.name} has a negative spin count")
        for local in self.biases:
            if not 0 <= local < self.size:
                raise StructuralError(
                    f"Gate {self.name} biases local spin {local} outside 0..{self.size - 1}"
                )
        pairs = set()
        for a, b, _ in self.couplings:
            if a == b or not (0 <= a < self.size and 0 <= b < self.size):
                raise StructuralError(f"Gate {self.name} has invalid coupling ({a}, {b})")
            pair = (min(a, b), max(a, b))
            if pair in pairs:
                raise StructuralError(f"Gate {self.name} couples {pair} twice")
            pairs.add(pair)


def copy_gate(bias: float = 0.0) -> GateFragment:
    """Output follows the input."""

    return GateFragment("COPY", 1, 0, {1: bias}, ((0, 1, 1.0),))


def not_gate() -> GateFragment:
    return GateFragment("NOT", 1, 0, {1: 0.0}, ((0, 1, -1.0),))


def _with_copies(
    name: str,
    output_bias: float,
    copy_bias: float,
    copy_to_output: float,
) -> GateFragment:
    # inputs 0, 1; output 2; copies 3, 4
    return GateFragment(
        name,
        2,
        2,
        {2: output_bias, 3: copy_bias, 4: copy_bias},
        (
            (0, 3, 1.0),
            (1, 4, 1.0),
            (3, 4, -0.5),
            (3, 2, copy_to_output),
            (4, 2, copy_to_output),
        ),
    )


def and_gate() -> GateFragment:
    return _with_copies("AND", -1.0, 0.5, 1.0)


def or_gate() -> GateFragment:
    return _with_copies("OR", 1.0, -0.5, 1.0)


def nand_gate() -> GateFragment:
    return _with_copies("NAND", 1.0, 0.5, -1.0)


def nor_gate() -> GateFragment:
    return _with_copies("NOR", -1.0, -0.5, -1.0)


def _parity(name: str, output_bias: float, sign: float) -> GateFragment:
    # inputs 0, 1; output 2; helper spin 3; copies 4, 5
    return GateFragment(
        name,
        2,
        3,
        {2: output_bias, 3: -1.0, 4: -0.5, 5: -0.5},
        (
            (0, 4, 1.0),
            (1, 5, 1.0),
            (4, 5, -0.5),
            (4, 3, -1.0),
            (5, 3, -1.0),
            (4, 2, 0.5 * sign),
            (5, 2, 0.5 * sign),
            (3, 2, sign),
        ),
    )


def xor_gate() -> GateFragment:
    return _parity("XOR", -0.5, -1.0)


def xnor_gate() -> GateFragment:
    return _parity("XNOR", 0.5, 1.0)


GATES: Dict[str, Callable[[], GateFragment]] = {
    "COPY": copy_gate,
    "NOT": not_gate,
    "AND": and_gate,
    "OR": or_gate,
    "NAND": nand_gate,
    "NOR": nor_gate,
    "XOR": xor_gate,
    "XNOR": xnor_gate,
}


__all__ = [
    "GateFragment",
    "GATES",
    "copy_gate",
    "not_gate",
    "and_gate",
    "or_gate",
    "nand_gate",
    "nor_gate",
    "xor_gate",
    "xnor_gate",
]
