"""Collection of random spin-glass instance generators."""

from .base import IsingProblem, ProblemConfig
from .bethe import BetheProblem
from .lattice import LatticeProblem

__all__ = ["BetheProblem", "LatticeProblem", "ProblemConfig", "IsingProblem"]
