"""Conversions between the representations of a spin configuration.

A configuration is stored compactly as an ``int`` bit-pattern where bit ``i``
is set when spin ``i`` points up (``+1``).  Results are reported as tuples of
booleans (``True`` for up) and the numerical code works on ``int8`` arrays of
``±1`` values.
"""
from __future__ import annotations

from typing import Sequence, Tuple, Union

import numpy as np

from .errors import StructuralError

StateLike = Union[int, Sequence[bool], Sequence[int], np.ndarray]


def bits_to_spins(code: int, n: int) -> np.ndarray:
    """Return the ``±1`` spin array encoded by ``code``."""

    code = int(code)
    # shifted in Python so patterns wider than 64 bits do not overflow
    return np.fromiter(
        (2 * ((code >> i) & 1) - 1 for i in range(n)), dtype=np.int8, count=n
    )


def spins_to_bits(spins: np.ndarray) -> int:
    code = 0
    for index in np.flatnonzero(np.asarray(spins) > 0):
        code |= 1 << int(index)
    return code


def bits_to_bools(code: int, n: int) -> Tuple[bool, ...]:
    return tuple(bool((code >> i) & 1) for i in range(n))


def as_spins(state: StateLike, n: int) -> np.ndarray:
    """Normalise any accepted configuration format to a ``±1`` ``int8`` array.

    Parameters
    ----------
    state:
        Either an ``int`` bit-pattern, a sequence of booleans or a sequence of
        ``±1`` values.
    n:
        Number of spins expected by the model.
    """

    if isinstance(state, (int, np.integer)) and not isinstance(state, bool):
        code = int(state)
        if code < 0 or code >> n:
            raise StructuralError(
                f"Bit-pattern {code} does not fit in {n} spins"
            )
        return bits_to_spins(code, n)

    values = np.asarray(state)
    if values.ndim != 1 or values.shape[0] != n:
        raise StructuralError(
            f"Configuration has shape {values.shape}, expected ({n},)"
        )
    if values.dtype == np.bool_:
        return np.where(values, 1, -1).astype(np.int8)
    if not np.all(np.isin(values, (-1, 1))):
        raise StructuralError("Spin values must be -1 or +1")
    return values.astype(np.int8)


def project(state: Tuple[bool, ...], spin_ordering: Sequence[int] | None) -> Tuple[bool, ...]:
    """Restrict ``state`` to the indices in ``spin_ordering`` (in that order)."""

    if spin_ordering is None:
        return state
    return tuple(state[index] for index in spin_ordering)


def check_ordering(spin_ordering: Sequence[int] | None, n: int) -> None:
    if spin_ordering is None:
        return
    for index in spin_ordering:
        if not 0 <= int(index) < n:
            raise StructuralError(
                f"Spin index {index} in ordering is out of range for {n} spins"
            )


__all__ = [
    "StateLike",
    "bits_to_spins",
    "spins_to_bits",
    "bits_to_bools",
    "as_spins",
    "project",
    "check_ordering",
]
