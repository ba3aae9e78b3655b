"""Computation of solver-quality observables."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np

from .algorithms.exact import GroundState
from .algorithms.simulated_annealing import AnnealingRecord
from .hamiltonian import ENERGY_TOLERANCE, Hamiltonian


def _as_spin_batch(states: Sequence[Sequence[bool]]) -> np.ndarray:
    """``(K, N)`` array of ``±1`` spins from boolean states."""

    return np.where(np.asarray(states, dtype=bool), 1, -1).astype(np.int8)


@dataclass
class SolverObservables:
    ground_energy: float
    annealed_energy: float
    residual_energy: float
    hit_fraction: float


class ObservableEvaluator:
    """Compare annealing records with the exact ground states of an instance.

    ``residual_energy`` is the gap between the best annealed energy and the
    ground energy; ``hit_fraction`` is the share of exact ground states that
    the annealer reached.
    """

    def compute(
        self,
        hamiltonian: Hamiltonian,
        exact: Sequence[GroundState],
        annealed: Sequence[AnnealingRecord],
    ) -> SolverObservables:
        if not exact or not annealed:
            raise ValueError("Both solvers must report at least one state")

        exact_energy = hamiltonian.energies(_as_spin_batch([g.state for g in exact]))
        annealed_energy = hamiltonian.energies(_as_spin_batch([r.state for r in annealed]))
        e0 = float(exact_energy.min())
        e_best = float(annealed_energy.min())

        found = {tuple(r.state) for r, e in zip(annealed, annealed_energy) if e - e0 <= ENERGY_TOLERANCE}
        hits = sum(1 for g in exact if tuple(g.state) in found)

        return SolverObservables(
            ground_energy=e0,
            annealed_energy=e_best,
            residual_energy=e_best - e0,
            hit_fraction=hits / len(exact),
        )


__all__ = ["SolverObservables", "ObservableEvaluator"]
