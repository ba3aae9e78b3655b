"""Two-dimensional ±J spin glass on a square grid."""
from __future__ import annotations

import networkx as nx
import numpy as np
import scipy.sparse as sp

from .base import IsingProblem, ProblemConfig


class LatticeProblem(IsingProblem):
    """``rows x cols`` grid with random ±1 bonds and optional Gaussian fields.

    Spin ``(r, c)`` has index ``r * cols + c``.  With ``periodic`` the grid
    wraps around into a torus.
    """

    def __init__(
        self,
        rows: int,
        cols: int,
        *,
        seed: int = 0,
        field_scale: float = 0.0,
        periodic: bool = False,
    ) -> None:
        super().__init__(
            ProblemConfig(
                N=rows * cols,
                params={
                    "rows": rows,
                    "cols": cols,
                    "seed": seed,
                    "field_scale": field_scale,
                    "periodic": periodic,
                },
            )
        )
        self.rows = rows
        self.cols = cols
        self.seed = seed
        self.field_scale = field_scale
        self.periodic = periodic

    def build_couplings(self) -> sp.spmatrix:  # type: ignore[override]
        graph = nx.grid_2d_graph(self.rows, self.cols, periodic=self.periodic)
        order = [(r, c) for r in range(self.rows) for c in range(self.cols)]
        couplings = nx.to_scipy_sparse_array(
            graph, nodelist=order, format="coo", dtype=np.float64
        )
        rng = np.random.default_rng(self.seed)
        upper = sp.triu(couplings, k=1).tocoo()
        signs = rng.choice([-1.0, 1.0], size=upper.nnz)
        upper = sp.coo_matrix((signs, (upper.row, upper.col)), shape=couplings.shape)
        return (upper + upper.T).tocsr()

    def build_biases(self) -> np.ndarray:
        if self.field_scale == 0.0:
            return super().build_biases()
        # offset the stream so fields do not reuse the bond draws
        rng = np.random.default_rng(self.seed + 1)
        return self.field_scale * rng.standard_normal(self.config.N)


__all__ = ["LatticeProblem"]
