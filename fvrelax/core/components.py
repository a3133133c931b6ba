"""Component selectors collapsing field values to per-entry scalars.

Values are stored as ``(n,)`` arrays for scalar types and ``(n, ncomp)`` arrays
for multi-component types (vectors, tensors). Every selector returns an ``(n,)``
array so the scalar diagonal bookkeeping does not depend on the value width.
"""

from __future__ import annotations

import numpy as np


def ncomponents(values: np.ndarray) -> int:
    values = np.asarray(values)
    return 1 if values.ndim == 1 else int(values.shape[1])


def _as_components(values: np.ndarray) -> np.ndarray:
    arr = np.asarray(values, dtype=float)
    if arr.ndim == 1:
        return arr[:, None]
    if arr.ndim != 2:
        raise ValueError(f"Expected (n,) or (n, ncomp) values, got shape {arr.shape}")
    return arr


def component(values: np.ndarray, index: int) -> np.ndarray:
    arr = _as_components(values)
    if not 0 <= index < arr.shape[1]:
        raise IndexError(f"Component {index} out of range for {arr.shape[1]} components")
    return arr[:, index]


def cmpt_mag(values: np.ndarray) -> np.ndarray:
    return np.abs(np.asarray(values, dtype=float))


def cmpt_max(values: np.ndarray) -> np.ndarray:
    return _as_components(values).max(axis=1)


def cmpt_min(values: np.ndarray) -> np.ndarray:
    return _as_components(values).min(axis=1)


def cmpt_max_mag(values: np.ndarray) -> np.ndarray:
    """Largest component magnitude per entry."""
    return cmpt_max(cmpt_mag(values))
