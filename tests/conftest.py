from __future__ import annotations

import itertools

import numpy as np
import pytest

from spinnet.hamiltonian import Hamiltonian, energy


def make_random_hamiltonian(
    rng: np.random.Generator, n: int, density: float = 0.5, field: bool = True
) -> Hamiltonian:
    """Gaussian couplings on a random graph, optionally with Gaussian biases."""

    biases = rng.standard_normal(n) if field else np.zeros(n)
    couplings = [
        (i, j, float(rng.standard_normal()))
        for i, j in itertools.combinations(range(n), 2)
        if rng.random() < density
    ]
    return Hamiltonian(biases, couplings)


def brute_force_minimum(hamiltonian: Hamiltonian) -> tuple[float, set]:
    """Scan every configuration from scratch; no incremental updates."""

    n = hamiltonian.num_spins
    scored = []
    for bits in itertools.product([False, True], repeat=n):
        scored.append((energy(hamiltonian.biases, hamiltonian.couplings, list(bits)), bits))
    lowest = min(e for e, _ in scored)
    return lowest, {bits for e, bits in scored if e - lowest <= 1e-9}


@pytest.fixture()
def rng() -> np.random.Generator:
    return np.random.default_rng(1234)


@pytest.fixture(params=[3, 6, 9])
def random_hamiltonian(request, rng) -> Hamiltonian:
    return make_random_hamiltonian(rng, request.param)
