"""Coupled patch fields: processor (inter-partition) and cyclic (periodic)."""

from __future__ import annotations

from typing import Optional

import numpy as np

from .base import CoupledPatchField, register_patch_field


@register_patch_field("processor")
class ProcessorPatchField(CoupledPatchField):
    """Interface to a neighbouring partition.

    Neighbour cell values arrive through an external halo exchange and are
    stored with :meth:`update_halo` before the patch is evaluated.
    """

    def __init__(self, patch, mesh, neighbour_rank: Optional[int] = None, halo=None):
        super().__init__(patch, mesh)
        self.neighbour_rank = neighbour_rank
        self._halo: Optional[np.ndarray] = None
        if halo is not None:
            self.update_halo(halo)

    def update_halo(self, values) -> None:
        arr = np.array(values, dtype=float)
        if arr.shape[:1] != (self.size,):
            raise ValueError(
                f"Processor patch {self.patch} expects {self.size} halo values, got shape {arr.shape}"
            )
        self._halo = arr

    def patch_neighbour_field(self, field) -> np.ndarray:
        if self._halo is None:
            raise RuntimeError(f"Processor patch {self.patch} has no halo values")
        return self._halo


@register_patch_field("cyclic")
class CyclicPatchField(CoupledPatchField):
    """Periodic pairing of two patches of the same mesh, matched face by face."""

    def __init__(self, patch, mesh, neighbour_patch: str):
        super().__init__(patch, mesh)
        self.neighbour_patch = neighbour_patch
        self.neighbour_cells = mesh.patch_addr(neighbour_patch)
        if self.neighbour_cells.size != self.size:
            raise ValueError(
                f"Cyclic patches {patch} and {neighbour_patch} differ in size "
                f"({self.size} != {self.neighbour_cells.size})"
            )

    def patch_neighbour_field(self, field) -> np.ndarray:
        values = getattr(field, "values", field)
        return np.asarray(values)[self.neighbour_cells]
