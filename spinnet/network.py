"""Append-only builder for spin-glass circuits."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Sequence, Set, Tuple

import numpy as np

from .algorithms.exact import EXACT_MAX_SPINS, GroundState, find_all_ground_states
from .algorithms.simulated_annealing import (
    AnnealingRecord,
    SimulatedAnnealingConfig,
    simulated_annealing,
)
from .errors import StructuralError
from .gates import GateFragment
from .hamiltonian import Coupling, Hamiltonian

logger = logging.getLogger(__name__)

INPUT = "input"
OUTPUT = "output"
AUXILIARY = "auxiliary"
_KINDS = (INPUT, OUTPUT, AUXILIARY)


class SpinNetwork:
    """A Hamiltonian grown one spin or one gate at a time.

    Spins are never removed or renumbered, so every index handed out stays
    valid for the lifetime of the network.  Each spin remembers whether it was
    added as a free input, as the output of a gate, or as an auxiliary spin of
    a gate; results can then be projected onto the spins of interest.

    Example
    -------
    >>> from spinnet.gates import and_gate
    >>> network = SpinNetwork()
    >>> a = network.add_input_variable()
    >>> b = network.add_input_variable()
    >>> z = network.add_composite_variable([a, b], and_gate())
    >>> network.find_all_ground_states(spin_ordering=[a, b, z])  # doctest: +SKIP
    """

    def __init__(self) -> None:
        self._biases: List[float] = []
        self._couplings: List[Coupling] = []
        self._pairs: Set[Tuple[int, int]] = set()
        self._kinds: List[str] = []

    def _append(self, bias: float, kind: str) -> int:
        self._biases.append(float(bias))
        self._kinds.append(kind)
        return len(self._biases) - 1

    def add_input_variable(self, bias: float = 0.0) -> int:
        """Add a free spin; a positive bias pushes it towards ``True``."""

        return self._append(bias, INPUT)

    def add_composite_variable(self, sources: Sequence[int], fragment: GateFragment) -> int:
        """Splice ``fragment`` in with its inputs wired to ``sources``.

        Returns the index of the gate's output spin.  The fragment is checked
        completely before anything is appended.
        """

        fragment.validate()
        sources = [int(source) for source in sources]
        if len(sources) != fragment.num_inputs:
            raise StructuralError(
                f"Gate {fragment.name} takes {fragment.num_inputs} inputs, got {len(sources)}"
            )
        n = self.num_spins
        for source in sources:
            if not 0 <= source < n:
                raise StructuralError(f"Source spin {source} does not exist")

        mapping = sources + list(range(n, n + 1 + fragment.num_auxiliary))
        new_couplings = []
        new_pairs = set()
        for a, b, weight in fragment.couplings:
            i, j = mapping[a], mapping[b]
            pair = (min(i, j), max(i, j))
            if i == j or pair in self._pairs or pair in new_pairs:
                raise StructuralError(
                    f"Gate {fragment.name} would couple spins {pair} more than once"
                )
            new_pairs.add(pair)
            new_couplings.append((i, j, float(weight)))

        output = self._append(0.0, OUTPUT)
        for _ in range(fragment.num_auxiliary):
            self._append(0.0, AUXILIARY)
        for local, bias in fragment.biases.items():
            self._biases[mapping[local]] += float(bias)
        self._couplings.extend(new_couplings)
        self._pairs.update(new_pairs)

        logger.debug(
            "Added %s gate on %s: output %d, %d auxiliary spins",
            fragment.name,
            sources,
            output,
            fragment.num_auxiliary,
        )
        return output

    @property
    def num_spins(self) -> int:
        return len(self._biases)

    def __len__(self) -> int:
        return self.num_spins

    @property
    def biases(self) -> np.ndarray:
        return np.asarray(self._biases, dtype=np.float64)

    @property
    def couplings(self) -> List[Coupling]:
        return list(self._couplings)

    def kind(self, index: int) -> str:
        if not 0 <= index < self.num_spins:
            raise StructuralError(f"Spin {index} does not exist")
        return self._kinds[index]

    def _indices_of(self, kind: str) -> List[int]:
        return [index for index, current in enumerate(self._kinds) if current == kind]

    @property
    def input_indices(self) -> List[int]:
        return self._indices_of(INPUT)

    @property
    def output_indices(self) -> List[int]:
        return self._indices_of(OUTPUT)

    @property
    def auxiliary_indices(self) -> List[int]:
        return self._indices_of(AUXILIARY)

    def hamiltonian(self) -> Hamiltonian:
        """Snapshot of the current ``(h, J)``; later additions do not affect it."""

        return Hamiltonian(self._biases, self._couplings)

    def find_all_ground_states(
        self,
        spin_ordering: Optional[Sequence[int]] = None,
        *,
        max_spins: int = EXACT_MAX_SPINS,
    ) -> List[GroundState]:
        return find_all_ground_states(
            self.hamiltonian(), max_spins=max_spins, spin_ordering=spin_ordering
        )

    def run_simulated_annealing(
        self,
        config: Optional[SimulatedAnnealingConfig] = None,
        spin_ordering: Optional[Sequence[int]] = None,
        *,
        rng: Optional[np.random.Generator] = None,
    ) -> List[AnnealingRecord]:
        return simulated_annealing(
            self.hamiltonian(), config=config, rng=rng, spin_ordering=spin_ordering
        )

    def save(self, path: Path | str) -> Path:
        """Write ``h``, ``J`` as flat arrays and the spin kinds to an ``.npz`` file."""

        path = Path(path)
        h, rows, cols, weights = self.hamiltonian().to_arrays()
        kinds = np.asarray([_KINDS.index(kind) for kind in self._kinds], dtype=np.int8)
        np.savez(path, h=h, rows=rows, cols=cols, weights=weights, kinds=kinds)
        # numpy appends the suffix when it is missing
        return path if path.suffix == ".npz" else path.with_name(path.name + ".npz")

    @classmethod
    def load(cls, path: Path | str) -> "SpinNetwork":
        with np.load(Path(path)) as archive:
            hamiltonian = Hamiltonian.from_arrays(
                archive["h"], archive["rows"], archive["cols"], archive["weights"]
            )
            kinds = archive["kinds"]
        if kinds.shape[0] != hamiltonian.num_spins:
            raise StructuralError("Stored spin kinds do not match the bias vector")

        network = cls()
        for bias, kind in zip(hamiltonian.biases, kinds):
            network._append(float(bias), _KINDS[int(kind)])
        for i, j, weight in hamiltonian.couplings:
            network._couplings.append((i, j, weight))
            network._pairs.add((min(i, j), max(i, j)))
        return network

    def __repr__(self) -> str:
        return (
            f"SpinNetwork(spins={self.num_spins}, couplings={len(self._couplings)}, "
            f"inputs={len(self.input_indices)})"
        )


__all__ = ["SpinNetwork", "INPUT", "OUTPUT", "AUXILIARY"]
