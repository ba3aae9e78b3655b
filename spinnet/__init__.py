"""Spin-glass circuits: an Ising model with exact and annealing ground-state solvers."""

from .algorithms import (
    AnnealingRecord,
    GroundState,
    SimulatedAnnealingConfig,
    SimulatedAnnealingRunner,
    find_all_ground_states,
    simulated_annealing,
)
from .engine import IncrementalEnergyEngine
from .errors import CapacityError, ConfigurationError, SpinGlassError, StructuralError
from .gates import GateFragment
from .hamiltonian import ENERGY_TOLERANCE, Hamiltonian
from .network import SpinNetwork

__all__ = [
    "AnnealingRecord",
    "GroundState",
    "SimulatedAnnealingConfig",
    "SimulatedAnnealingRunner",
    "find_all_ground_states",
    "simulated_annealing",
    "IncrementalEnergyEngine",
    "CapacityError",
    "ConfigurationError",
    "SpinGlassError",
    "StructuralError",
    "GateFragment",
    "ENERGY_TOLERANCE",
    "Hamiltonian",
    "SpinNetwork",
]
