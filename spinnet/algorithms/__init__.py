"""Ground-state solvers for the spin-glass model."""

from .exact import EXACT_MAX_SPINS, GroundState, find_all_ground_states
from .simulated_annealing import (
    AnnealingRecord,
    SimulatedAnnealingConfig,
    SimulatedAnnealingRunner,
    simulated_annealing,
)

__all__ = [
    "EXACT_MAX_SPINS",
    "GroundState",
    "find_all_ground_states",
    "AnnealingRecord",
    "SimulatedAnnealingConfig",
    "SimulatedAnnealingRunner",
    "simulated_annealing",
]
