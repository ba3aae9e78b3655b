"""Bethe lattice Ising instance."""
from __future__ import annotations

import networkx as nx
import numpy as np
import scipy.sparse as sp

from .base import IsingProblem, ProblemConfig


class BetheProblem(IsingProblem):
    """Random regular graph where every spin has ``degree + 1`` neighbours."""

    def __init__(self, N: int, degree: int, seed: int = 0) -> None:
        super().__init__(ProblemConfig(N=N, params={"degree": degree, "seed": seed}))
        self.degree = degree
        self.seed = seed

    def build_couplings(self) -> sp.spmatrix:  # type: ignore[override]
        return _create_bethe(self.config.N, self.degree + 1, seed=self.seed)


def _create_bethe(N: int, degree: int, seed: int = 0) -> sp.spmatrix:
    """Generate a random regular graph with ±1 couplings."""

    if N * degree % 2 != 0:
        raise ValueError("N * degree must be even for a regular graph")

    rng = np.random.default_rng(seed)
    graph = nx.random_regular_graph(degree, N, seed=seed)
    couplings = nx.to_scipy_sparse_array(graph, format="lil", dtype=np.int8)

    rows, cols = couplings.nonzero()
    mask = rows < cols
    signs = rng.choice([-1, 1], size=mask.sum())

    for (i, j), sign in zip(zip(rows[mask], cols[mask]), signs):
        couplings[i, j] = sign
        couplings[j, i] = sign

    return sp.csr_matrix(couplings, dtype=np.float64)


__all__ = ["BetheProblem"]
