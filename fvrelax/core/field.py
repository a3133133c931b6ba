"""Field containers for collocated FV variables."""

from __future__ import annotations

from typing import Iterable, List, Optional, Tuple

import numpy as np

from .components import ncomponents
from .mesh import Mesh


class Field:
    """Cell-centred values with an ordered boundary field.

    Values are ``(ncells,)`` for scalars or ``(ncells, ncomp)`` for any
    multi-component type.
    """

    def __init__(
        self,
        name: str,
        mesh: Mesh,
        values: Iterable,
        boundary_field: Optional[Iterable] = None,
    ) -> None:
        self.name = name
        self.mesh = mesh
        arr = np.array(values, dtype=float)
        if arr.ndim not in (1, 2) or arr.shape[0] != mesh.ncells:
            raise ValueError(
                f"Field {name} expects {mesh.ncells} cells, got shape {arr.shape}"
            )
        self.values = arr
        self.boundary_field: List = []
        if boundary_field is not None:
            self.set_boundary_field(boundary_field)

    @property
    def value_shape(self) -> Tuple[int, ...]:
        return self.values.shape[1:]

    @property
    def ncomponents(self) -> int:
        return ncomponents(self.values)

    def set_boundary_field(self, patch_fields: Iterable) -> None:
        fields = list(patch_fields)
        seen = set()
        for pf in fields:
            if pf.mesh is not self.mesh:
                raise ValueError(f"Patch field {pf.patch} belongs to a different mesh")
            if pf.patch in seen:
                raise ValueError(f"Field {self.name} has two conditions on patch {pf.patch}")
            seen.add(pf.patch)
        self.boundary_field = fields

    def patch_field(self, patch: str):
        for pf in self.boundary_field:
            if pf.patch == patch:
                return pf
        raise KeyError(f"Field {self.name} has no condition on patch '{patch}'")

    def boundary_values(self, patch: str) -> np.ndarray:
        return self.patch_field(patch).evaluate(self)

    def copy(self, name: Optional[str] = None) -> "Field":
        return self.__class__(
            name or self.name, self.mesh, self.values.copy(), self.boundary_field
        )

    def __array__(self, dtype=None, copy=None) -> np.ndarray:
        if dtype is None:
            return self.values
        return self.values.astype(dtype)

    def __getitem__(self, idx):
        return self.values[idx]

    def __setitem__(self, idx, value) -> None:
        self.values[idx] = value


class ScalarField(Field):
    """Scalar field stored at cell centres."""

    def __init__(self, name: str, mesh: Mesh, values: Iterable[float], boundary_field=None):
        super().__init__(name, mesh, values, boundary_field)
        if self.values.ndim != 1:
            raise ValueError(f"ScalarField {name} expects shape ({mesh.ncells},)")


class VectorField(Field):
    """Vector field with three components per cell."""

    def __init__(
        self,
        name: str,
        mesh: Mesh,
        values: Iterable[Iterable[float]],
        boundary_field=None,
    ):
        super().__init__(name, mesh, values, boundary_field)
        if self.values.shape != (mesh.ncells, 3):
            raise ValueError(
                f"VectorField {name} expects shape {(mesh.ncells, 3)}, got {self.values.shape}"
            )
