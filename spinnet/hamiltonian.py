"""Two-local Ising Hamiltonian with per-spin biases.

The energy of a configuration ``s`` with ``s_i`` in ``{-1, +1}`` is

    E(s) = - sum_i h_i s_i - sum_{(i, j, w) in J} w s_i s_j

so ground states are the configurations minimising ``E``.
"""
from __future__ import annotations

from typing import Iterable, List, Sequence, Tuple

import numpy as np
import scipy.sparse as sp

from .errors import StructuralError
from .states import StateLike, as_spins

Coupling = Tuple[int, int, float]

# Tie tolerance used by both solvers when comparing energies.
ENERGY_TOLERANCE = 1e-9


def _validate(n: int, couplings: Sequence[Coupling]) -> List[Coupling]:
    seen = set()
    checked: List[Coupling] = []
    for i, j, weight in couplings:
        i, j = int(i), int(j)
        if i == j:
            raise StructuralError(f"Self-coupling on spin {i} is not allowed")
        _check_endpoints(i, j, n)
        pair = (min(i, j), max(i, j))
        if pair in seen:
            raise StructuralError(f"Duplicate coupling between spins {pair}")
        seen.add(pair)
        checked.append((i, j, float(weight)))
    return checked


class Hamiltonian:
    """Immutable pair ``(h, J)`` together with its energy function."""

    def __init__(self, biases: Iterable[float], couplings: Iterable[Coupling] = ()) -> None:
        self._biases = np.asarray(list(biases), dtype=np.float64)
        self._biases.setflags(write=False)
        self._couplings = tuple(_validate(self.num_spins, list(couplings)))
        self._csr: sp.csr_matrix | None = None

    @property
    def num_spins(self) -> int:
        return int(self._biases.shape[0])

    def __len__(self) -> int:
        return self.num_spins

    @property
    def biases(self) -> np.ndarray:
        return self._biases

    @property
    def couplings(self) -> Tuple[Coupling, ...]:
        return self._couplings

    def energy(self, state: StateLike) -> float:
        """Return ``E(state)`` in ``O(n + |J|)``."""

        return energy(self._biases, self._couplings, state)

    def local_field(self, state: StateLike, index: int) -> float:
        """Return ``h_i + sum_j J_ij s_j`` for spin ``index`` in ``O(degree)``."""

        n = self.num_spins
        if not 0 <= index < n:
            raise StructuralError(f"Spin index {index} is out of range for {n} spins")
        spins = as_spins(state, n)
        matrix = self.to_csr()
        start, end = matrix.indptr[index], matrix.indptr[index + 1]
        neighbours = matrix.indices[start:end]
        return float(self._biases[index] + np.dot(matrix.data[start:end], spins[neighbours]))

    def to_csr(self) -> sp.csr_matrix:
        """Symmetric sparse coupling matrix with both ``(i, j)`` and ``(j, i)``.

        The matrix is built once and cached; callers must not modify it.
        """

        if self._csr is None:
            self._csr = self._build_csr()
        return self._csr

    def _build_csr(self) -> sp.csr_matrix:
        n = self.num_spins
        rows, cols, weights = self.to_arrays()[1:]
        matrix = sp.coo_matrix(
            (
                np.concatenate([weights, weights]),
                (np.concatenate([rows, cols]), np.concatenate([cols, rows])),
            ),
            shape=(n, n),
        ).tocsr()
        matrix.sort_indices()
        return matrix

    def to_arrays(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
        """Flat serialisation ``(h, rows, cols, weights)``."""

        if self._couplings:
            rows, cols, weights = (np.asarray(column) for column in zip(*self._couplings))
        else:
            rows = cols = np.zeros(0, dtype=np.int64)
            weights = np.zeros(0, dtype=np.float64)
        return (
            np.array(self._biases, dtype=np.float64),
            rows.astype(np.int64),
            cols.astype(np.int64),
            weights.astype(np.float64),
        )

    @classmethod
    def from_arrays(
        cls,
        biases: np.ndarray,
        rows: np.ndarray,
        cols: np.ndarray,
        weights: np.ndarray,
    ) -> "Hamiltonian":
        if not len(rows) == len(cols) == len(weights):
            raise StructuralError("Coupling arrays must have the same length")
        couplings = [
            (int(i), int(j), float(w)) for i, j, w in zip(rows, cols, weights)
        ]
        return cls(np.asarray(biases, dtype=np.float64), couplings)

    def energies(self, spins: np.ndarray) -> np.ndarray:
        """Vectorised energies of a ``(K, n)`` batch of ``±1`` configurations."""

        batch = np.atleast_2d(np.asarray(spins, dtype=np.float64))
        if batch.shape[1] != self.num_spins:
            raise StructuralError(
                f"Batch has {batch.shape[1]} spins, expected {self.num_spins}"
            )
        interaction = np.asarray(self.to_csr() @ batch.T).T
        return -batch @ self._biases - 0.5 * np.sum(batch * interaction, axis=1)

    def __repr__(self) -> str:
        return f"Hamiltonian(num_spins={self.num_spins}, couplings={len(self._couplings)})"


def _check_endpoints(i: int, j: int, n: int) -> None:
    if not (0 <= i < n and 0 <= j < n):
        raise StructuralError(
            f"Coupling ({i}, {j}) references a spin outside 0..{n - 1}"
        )


def energy(
    biases: Sequence[float], couplings: Sequence[Coupling], state: StateLike
) -> float:
    """Evaluate the Hamiltonian from scratch."""

    h = np.asarray(biases, dtype=np.float64)
    n = h.shape[0]
    spins = as_spins(state, n)
    total = -float(np.dot(h, spins))
    for i, j, weight in couplings:
        _check_endpoints(i, j, n)
        total -= weight * spins[i] * spins[j]
    return total


def local_field(
    biases: Sequence[float],
    couplings: Sequence[Coupling],
    state: StateLike,
    index: int,
) -> float:
    """Field acting on spin ``index``; flipping it changes ``E`` by ``2 s_i field``."""

    h = np.asarray(biases, dtype=np.float64)
    n = h.shape[0]
    if not 0 <= index < n:
        raise StructuralError(f"Spin index {index} is out of range for {n} spins")
    spins = as_spins(state, n)
    field = float(h[index])
    for i, j, weight in couplings:
        _check_endpoints(i, j, n)
        if i == index:
            field += weight * spins[j]
        elif j == index:
            field += weight * spins[i]
    return field


__all__ = ["Coupling", "ENERGY_TOLERANCE", "Hamiltonian", "energy", "local_field"]
