"""Problem definitions for random spin-glass instances."""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict

import numpy as np
import scipy.sparse as sp

from ..hamiltonian import Hamiltonian


@dataclass
class ProblemConfig:
    """Generic configuration for an Ising problem."""

    N: int
    params: Dict[str, Any]


class IsingProblem(ABC):
    """Interface implemented by all problem generators."""

    def __init__(self, config: ProblemConfig) -> None:
        self.config = config

    @abstractmethod
    def build_couplings(self) -> sp.spmatrix:
        """Return the symmetric sparse interaction matrix ``J``."""

    def build_biases(self) -> np.ndarray:
        """Per-spin biases; zero unless a problem overrides it."""

        return np.zeros(self.config.N, dtype=np.float64)

    def build_hamiltonian(self) -> Hamiltonian:
        """Assemble ``(h, J)`` with each coupled pair listed once."""

        J = sp.triu(self.build_couplings(), k=1).tocoo()
        couplings = [
            (int(i), int(j), float(w)) for i, j, w in zip(J.row, J.col, J.data) if w != 0.0
        ]
        return Hamiltonian(self.build_biases(), couplings)


__all__ = ["ProblemConfig", "IsingProblem"]
