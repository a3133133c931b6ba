"""Patch field base classes and type registry."""

from __future__ import annotations

from abc import ABC, abstractmethod

import numpy as np

from ...utils.registry import Registry
from ..mesh import Mesh


patch_field_registry = Registry("patch field")


def register_patch_field(*names: str):
    return patch_field_registry.register(*names)


def make_patch_field(type_name: str, patch: str, mesh: Mesh, **kwargs):
    return patch_field_registry.create(type_name, patch, mesh, **kwargs)


class PatchField(ABC):
    """Boundary condition of one field on one mesh patch."""

    def __init__(self, patch: str, mesh: Mesh) -> None:
        self.patch = patch
        self.mesh = mesh
        self.face_cells = mesh.patch_addr(patch)

    @property
    def size(self) -> int:
        return int(self.face_cells.size)

    @property
    def coupled(self) -> bool:
        """Whether the patch couples to cells beyond the physical boundary."""
        return False

    def patch_internal_field(self, field) -> np.ndarray:
        values = getattr(field, "values", field)
        return np.asarray(values)[self.face_cells]

    @abstractmethod
    def evaluate(self, field) -> np.ndarray:
        """Face values consistent with the boundary condition."""

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(patch={self.patch!r}, size={self.size})"


class CoupledPatchField(PatchField):
    """Patch whose outside is the interior of another partition or periodic image."""

    weight = 0.5

    @property
    def coupled(self) -> bool:
        return True

    @abstractmethod
    def patch_neighbour_field(self, field) -> np.ndarray:
        """Cell values on the far side of each patch face."""

    def evaluate(self, field) -> np.ndarray:
        internal = self.patch_internal_field(field)
        neighbour = self.patch_neighbour_field(field)
        return self.weight * internal + (1.0 - self.weight) * neighbour
