"""Exhaustive ground-state search over a reflected binary Gray code."""
from __future__ import annotations

import logging
from typing import List, NamedTuple, Optional, Sequence, Tuple

import numpy as np
from numba import njit

from ..engine import IncrementalEnergyEngine, _commit_flip
from ..errors import CapacityError
from ..hamiltonian import ENERGY_TOLERANCE, Coupling, Hamiltonian
from ..states import bits_to_bools, check_ordering, project

logger = logging.getLogger(__name__)

# Default safety ceiling; 2**32 single flips is already hours of work.
EXACT_MAX_SPINS = 32
# Bit-patterns are held in signed 64-bit integers.
_HARD_MAX_SPINS = 62
_WARN_SPINS = 24


class GroundState(NamedTuple):
    energy: float
    state: Tuple[bool, ...]


@njit(cache=True)
def gray_code(step: int) -> int:
    return step ^ (step >> 1)


@njit(cache=True)
def _flipped_bit(step: int) -> int:
    """Position of the bit that differs between ``gray_code(step - 1)`` and ``gray_code(step)``."""

    bit = 0
    while (step >> bit) & 1 == 0:
        bit += 1
    return bit


@njit(cache=True)
def _gray_code_kernel(
    indptr: np.ndarray,
    indices: np.ndarray,
    data: np.ndarray,
    spins: np.ndarray,
    fields: np.ndarray,
    energy: float,
    n: int,
    tolerance: float,
) -> Tuple[float, np.ndarray]:
    """Visit all ``2**n`` states and return the lowest energy and its bit-patterns.

    ``spins`` must start with every spin down (bit-pattern ``0``).
    """

    total = np.int64(1) << np.int64(n)
    capacity = 16
    codes = np.empty(capacity, dtype=np.int64)
    codes[0] = 0
    count = 1
    lowest = energy
    code = np.int64(0)

    for step in range(1, total):
        bit = _flipped_bit(step)
        energy += _commit_flip(indptr, indices, data, spins, fields, bit)
        code ^= np.int64(1) << np.int64(bit)

        if abs(energy - lowest) <= tolerance:
            if count == capacity:
                grown = np.empty(2 * capacity, dtype=np.int64)
                grown[:capacity] = codes
                codes = grown
                capacity *= 2
            codes[count] = code
            count += 1
        elif energy < lowest:
            lowest = energy
            codes[0] = code
            count = 1

    return lowest, codes[:count]


def gray_code_sequence(n: int) -> List[int]:
    """Bit-patterns visited by the exhaustive search, in visiting order.

    Replays the flip rule of the search kernel starting from all spins down.
    """

    code = 0
    sequence = [code]
    for step in range(1, 1 << n):
        code ^= 1 << int(_flipped_bit(step))
        sequence.append(code)
    return sequence


def find_all_ground_states(
    biases: Sequence[float] | Hamiltonian,
    couplings: Sequence[Coupling] = (),
    *,
    max_spins: int = EXACT_MAX_SPINS,
    spin_ordering: Optional[Sequence[int]] = None,
) -> List[GroundState]:
    """Return every configuration of minimal energy.

    The enumeration starts with every spin down and flips exactly one spin per
    step, so each of the ``2**n`` steps costs ``O(degree)``.  Energies within
    :data:`~spinnet.hamiltonian.ENERGY_TOLERANCE` of the running minimum count
    as ties.  States are reported in discovery order; when ``spin_ordering``
    is given they are projected onto those indices.

    Raises
    ------
    CapacityError
        If the instance has more than ``max_spins`` spins.
    """

    hamiltonian = (
        biases if isinstance(biases, Hamiltonian) else Hamiltonian(biases, couplings)
    )
    n = hamiltonian.num_spins
    check_ordering(spin_ordering, n)

    ceiling = min(int(max_spins), _HARD_MAX_SPINS)
    if n > ceiling:
        raise CapacityError(
            f"Exhaustive search over {n} spins exceeds the limit of {ceiling} spins"
        )
    if n >= _WARN_SPINS:
        logger.warning("Exhaustive search will visit 2**%d configurations", n)

    engine = IncrementalEnergyEngine(hamiltonian)
    # The kernel flips spins in place on the engine's arrays; the engine is
    # discarded afterwards.
    lowest, codes = _gray_code_kernel(
        *engine.kernel_arrays(),
        engine.energy(),
        n,
        ENERGY_TOLERANCE,
    )
    logger.info(
        "Exhaustive search over %d spins: lowest energy %.6g, %d ground states",
        n,
        lowest,
        len(codes),
    )

    ground_states = []
    for code in codes:
        state = bits_to_bools(int(code), n)
        ground_states.append(
            GroundState(hamiltonian.energy(int(code)), project(state, spin_ordering))
        )
    return ground_states


__all__ = [
    "EXACT_MAX_SPINS",
    "GroundState",
    "find_all_ground_states",
    "gray_code",
    "gray_code_sequence",
]
