"""Metropolis simulated annealing driven by the incremental energy engine."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, NamedTuple, Optional, Sequence, Tuple

import numpy as np
from numba import njit
from tqdm import tqdm

from ..engine import IncrementalEnergyEngine, _commit_flip
from ..errors import ConfigurationError
from ..hamiltonian import ENERGY_TOLERANCE, Coupling, Hamiltonian
from ..states import StateLike, check_ordering, project

logger = logging.getLogger(__name__)


class AnnealingRecord(NamedTuple):
    energy: float
    state: Tuple[bool, ...]
    sweep: int


@dataclass
class SimulatedAnnealingConfig:
    """Parameters of one annealing run.

    The temperature decays geometrically from ``initial_temperature`` to
    ``final_temperature`` over ``temperature_steps`` values (at least two, so
    both ends are visited), each held for ``sweeps_per_temperature`` sweeps.
    With ``trace`` every improvement found on the way is returned, otherwise
    only the states of the final best energy.
    """

    initial_temperature: float = 273.15
    final_temperature: float = 0.015
    sweeps_per_temperature: int = 1
    temperature_steps: int = 1000
    seed: Optional[int] = None
    trace: bool = False
    progress: bool = False

    @property
    def total_sweeps(self) -> int:
        return int(self.sweeps_per_temperature) * int(self.temperature_steps)

    def validate(self) -> None:
        if self.initial_temperature <= 0.0 or self.final_temperature <= 0.0:
            raise ConfigurationError("Temperatures must be positive")
        if self.final_temperature >= self.initial_temperature:
            raise ConfigurationError(
                "final_temperature must be lower than initial_temperature "
                f"(got {self.final_temperature} >= {self.initial_temperature})"
            )
        if self.sweeps_per_temperature <= 0:
            raise ConfigurationError("sweeps_per_temperature must be positive")
        if self.temperature_steps < 2:
            raise ConfigurationError(
                "temperature_steps must be at least 2 to reach final_temperature"
            )

    def schedule(self) -> np.ndarray:
        """Temperatures visited, one per temperature step."""

        return np.geomspace(
            float(self.initial_temperature),
            float(self.final_temperature),
            int(self.temperature_steps),
        )


# ---------------------------------------------------------------------------
# Core kernel
# ---------------------------------------------------------------------------


@njit(cache=True)
def _metropolis_kernel(
    indptr: np.ndarray,
    indices: np.ndarray,
    data: np.ndarray,
    spins: np.ndarray,
    fields: np.ndarray,
    energy: float,
    best: float,
    temperature: float,
    picks: np.ndarray,
    draws: np.ndarray,
    first_sweep: int,
    tolerance: float,
) -> Tuple[float, float, np.ndarray, np.ndarray, np.ndarray]:
    """Apply one temperature step of Metropolis proposals in place.

    Every accepted flip that lowers ``best`` or ties with it is snapshotted
    together with its 1-based sweep index and whether it was a new low.
    """

    n = spins.shape[0]
    capacity = 16
    snapshots = np.empty((capacity, n), dtype=np.int8)
    sweeps = np.empty(capacity, dtype=np.int64)
    lows = np.empty(capacity, dtype=np.bool_)
    count = 0

    for k in range(picks.shape[0]):
        index = picks[k]
        delta = 2.0 * spins[index] * fields[index]
        if delta > 0.0 and draws[k] >= np.exp(-delta / temperature):
            continue
        energy += _commit_flip(indptr, indices, data, spins, fields, index)

        new_low = energy < best - tolerance
        if not new_low and abs(energy - best) > tolerance:
            continue
        if new_low:
            best = energy
        if count == capacity:
            grown_snapshots = np.empty((2 * capacity, n), dtype=np.int8)
            grown_snapshots[:capacity] = snapshots
            snapshots = grown_snapshots
            grown_sweeps = np.empty(2 * capacity, dtype=np.int64)
            grown_sweeps[:capacity] = sweeps
            sweeps = grown_sweeps
            grown_lows = np.empty(2 * capacity, dtype=np.bool_)
            grown_lows[:capacity] = lows
            lows = grown_lows
            capacity *= 2
        snapshots[count] = spins
        sweeps[count] = first_sweep + k // n
        lows[count] = new_low
        count += 1

    return energy, best, snapshots[:count], sweeps[:count], lows[:count]


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


class SimulatedAnnealingRunner:
    """Run annealing on a :class:`Hamiltonian` with a fixed configuration.

    Each sweep makes ``n`` proposals; every proposal picks a spin uniformly at
    random.  A flip is accepted when ``dE <= 0`` or with probability
    ``exp(-dE / T)`` otherwise.  The random numbers of a temperature step are
    drawn up front and the proposals run inside a numba kernel.
    """

    def __init__(self, config: Optional[SimulatedAnnealingConfig] = None) -> None:
        self.config = config if config is not None else SimulatedAnnealingConfig()

    def run(
        self,
        hamiltonian: Hamiltonian,
        *,
        rng: Optional[np.random.Generator] = None,
        initial_state: Optional[StateLike] = None,
    ) -> List[AnnealingRecord]:
        cfg = self.config
        cfg.validate()
        n = hamiltonian.num_spins
        if n == 0:
            raise ConfigurationError("Cannot anneal a Hamiltonian without spins")

        if rng is None:
            rng = np.random.default_rng(cfg.seed)
        if initial_state is None:
            initial_state = rng.choice(np.array([-1, 1], dtype=np.int8), size=n)

        engine = IncrementalEnergyEngine(hamiltonian, initial_state)
        energy = engine.energy()
        best = energy
        start = engine.spins()
        found: List[Tuple[np.ndarray, int]] = [(start, 0)]
        seen = {start.tobytes()}

        proposals = cfg.sweeps_per_temperature * n
        sweep = 0
        # the kernel flips the engine's arrays in place; engine.energy() goes stale
        for temperature in tqdm(cfg.schedule(), desc="annealing", disable=not cfg.progress):
            picks = rng.integers(0, n, size=proposals)
            draws = rng.random(proposals)
            energy, best, snapshots, sweeps, lows = _metropolis_kernel(
                *engine.kernel_arrays(),
                energy,
                best,
                float(temperature),
                picks,
                draws,
                sweep + 1,
                ENERGY_TOLERANCE,
            )
            sweep += cfg.sweeps_per_temperature

            for spins, found_at, new_low in zip(snapshots, sweeps, lows):
                key = spins.tobytes()
                if new_low:
                    if not cfg.trace:
                        found.clear()
                        seen.clear()
                elif key in seen:
                    continue
                found.append((spins.copy(), int(found_at)))
                seen.add(key)

        logger.info(
            "Annealed %d spins for %d sweeps: best energy %.6g, %d records",
            n,
            sweep,
            best,
            len(found),
        )
        return [
            AnnealingRecord(
                hamiltonian.energy(spins), tuple(bool(s > 0) for s in spins), found_at
            )
            for spins, found_at in found
        ]


def simulated_annealing(
    biases: Sequence[float] | Hamiltonian,
    couplings: Sequence[Coupling] = (),
    config: Optional[SimulatedAnnealingConfig] = None,
    *,
    rng: Optional[np.random.Generator] = None,
    spin_ordering: Optional[Sequence[int]] = None,
    initial_state: Optional[StateLike] = None,
) -> List[AnnealingRecord]:
    """Anneal ``(h, J)`` and return the low-energy states met on the way.

    Records come in discovery order, each tagged with the sweep (``0`` for the
    starting state) in which it was first reached.  ``spin_ordering`` restricts
    the reported states to the given indices; energies and acceptance always
    involve every spin.
    """

    hamiltonian = (
        biases if isinstance(biases, Hamiltonian) else Hamiltonian(biases, couplings)
    )
    check_ordering(spin_ordering, hamiltonian.num_spins)
    records = SimulatedAnnealingRunner(config).run(
        hamiltonian, rng=rng, initial_state=initial_state
    )
    if spin_ordering is None:
        return records
    return [
        AnnealingRecord(record.energy, project(record.state, spin_ordering), record.sweep)
        for record in records
    ]


__all__ = [
    "AnnealingRecord",
    "SimulatedAnnealingConfig",
    "SimulatedAnnealingRunner",
    "simulated_annealing",
]
