"""Mesh addressing for finite-volume matrices.

The mesh is a consumer-side view of topology produced elsewhere: faces with an
owner and an optional neighbour, and named boundary patches grouping boundary
faces. Interior faces define the lower/upper (owner/neighbour) addressing of the
matrix off-diagonals; boundary patches define the patch face -> cell addressing.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import numpy as np


@dataclass
class Face:
    """Face connecting two cells or a cell and boundary."""

    owner: int
    neighbour: Optional[int]
    area_vector: Optional[np.ndarray] = None
    center: Optional[np.ndarray] = None
    patch: Optional[str] = None

    @property
    def area(self) -> float:
        if self.area_vector is None:
            return 0.0
        return float(np.linalg.norm(self.area_vector))


class Mesh:
    """Unstructured mesh with LDU interior addressing and ordered boundary patches."""

    def __init__(
        self,
        ncells: int,
        faces: Sequence[Face],
        boundary_patches: Mapping[str, Sequence[int]],
        cell_centers: Optional[np.ndarray] = None,
        cell_volumes: Optional[np.ndarray] = None,
        shape: Optional[Tuple[int, int]] = None,
    ) -> None:
        if ncells < 0:
            raise ValueError("Mesh requires a non-negative cell count")
        self._ncells = int(ncells)
        self.faces = list(faces)
        self.cell_centers = cell_centers
        self.cell_volumes = cell_volumes
        self.shape = shape

        owners: List[int] = []
        neighbours: List[int] = []
        self._internal_index: Dict[Tuple[int, int], int] = {}
        for fid, face in enumerate(self.faces):
            self._check_cell(face.owner, fid)
            if face.neighbour is None:
                continue
            self._check_cell(face.neighbour, fid)
            if face.neighbour == face.owner:
                raise ValueError(f"Face {fid} connects cell {face.owner} to itself")
            key = (face.owner, face.neighbour)
            if key in self._internal_index or key[::-1] in self._internal_index:
                raise ValueError(f"Cells {key} share more than one interior face")
            self._internal_index[key] = len(owners)
            owners.append(face.owner)
            neighbours.append(face.neighbour)

        self.lower_addr = np.asarray(owners, dtype=int)
        self.upper_addr = np.asarray(neighbours, dtype=int)

        self.boundary_patches: Dict[str, List[int]] = {}
        self._patch_addr: Dict[str, np.ndarray] = {}
        for name, face_ids in boundary_patches.items():
            fids = [int(fid) for fid in face_ids]
            for fid in fids:
                if not 0 <= fid < len(self.faces):
                    raise ValueError(f"Patch {name} references unknown face {fid}")
                if self.faces[fid].neighbour is not None:
                    raise ValueError(f"Patch {name} references interior face {fid}")
            self.boundary_patches[name] = fids
            self._patch_addr[name] = np.asarray(
                [self.faces[fid].owner for fid in fids], dtype=int
            )

    def _check_cell(self, cell: int, fid: int) -> None:
        if not 0 <= cell < self._ncells:
            raise ValueError(f"Face {fid} references cell {cell} outside [0, {self._ncells})")

    @property
    def ncells(self) -> int:
        return self._ncells

    @property
    def ninternal_faces(self) -> int:
        return int(self.lower_addr.size)

    @classmethod
    def from_addressing(
        cls,
        ncells: int,
        owner: Sequence[int],
        neighbour: Sequence[int],
        patches: Optional[Mapping[str, Sequence[int]]] = None,
    ) -> "Mesh":
        """Build a mesh from interior owner/neighbour lists and patch face cells.

        ``patches`` maps each patch name to the cells owning its faces, in patch
        face order. Patch order is preserved.
        """
        if len(owner) != len(neighbour):
            raise ValueError(
                f"owner/neighbour lengths differ: {len(owner)} != {len(neighbour)}"
            )
        faces = [Face(owner=int(o), neighbour=int(n)) for o, n in zip(owner, neighbour)]
        boundary: Dict[str, List[int]] = {}
        for name, face_cells in (patches or {}).items():
            boundary[name] = []
            for cell in face_cells:
                boundary[name].append(len(faces))
                faces.append(Face(owner=int(cell), neighbour=None, patch=name))
        return cls(ncells, faces, boundary)

    @classmethod
    def structured(
        cls,
        nx: int,
        ny: int,
        lengths: Tuple[float, float] = (1.0, 1.0),
        patch_aliases: Optional[Dict[str, str]] = None,
    ) -> "Mesh":
        """Cartesian 2D mesh with patches ``xmin``, ``xmax``, ``ymin``, ``ymax``.

        Boundary faces of opposite patches are stored in matching order, so
        ``xmin``/``xmax`` (and ``ymin``/``ymax``) can be paired as cyclics.
        """
        if nx <= 0 or ny <= 0:
            raise ValueError("Structured mesh requires nx, ny > 0")
        dx = lengths[0] / nx
        dy = lengths[1] / ny

        def cell_index(i: int, j: int) -> int:
            return j * nx + i

        centers = np.array(
            [[(i + 0.5) * dx, (j + 0.5) * dy, 0.0] for j in range(ny) for i in range(nx)]
        )
        volumes = np.full(nx * ny, dx * dy)
        faces: List[Face] = []

        # interior faces first, x-normal then y-normal
        for j in range(ny):
            for i in range(1, nx):
                faces.append(
                    Face(
                        owner=cell_index(i - 1, j),
                        neighbour=cell_index(i, j),
                        area_vector=np.array([dy, 0.0, 0.0]),
                        center=np.array([i * dx, (j + 0.5) * dy, 0.0]),
                    )
                )
        for j in range(1, ny):
            for i in range(nx):
                faces.append(
                    Face(
                        owner=cell_index(i, j - 1),
                        neighbour=cell_index(i, j),
                        area_vector=np.array([0.0, dx, 0.0]),
                        center=np.array([(i + 0.5) * dx, j * dy, 0.0]),
                    )
                )

        boundary: Dict[str, List[int]] = {"xmin": [], "xmax": [], "ymin": [], "ymax": []}

        def add_boundary(patch: str, cell: int, area_vector, center) -> None:
            boundary[patch].append(len(faces))
            faces.append(
                Face(
                    owner=cell,
                    neighbour=None,
                    area_vector=np.asarray(area_vector, dtype=float),
                    center=np.asarray(center, dtype=float),
                    patch=patch,
                )
            )

        for j in range(ny):
            yc = (j + 0.5) * dy
            add_boundary("xmin", cell_index(0, j), [-dy, 0.0, 0.0], [0.0, yc, 0.0])
        for j in range(ny):
            yc = (j + 0.5) * dy
            add_boundary("xmax", cell_index(nx - 1, j), [dy, 0.0, 0.0], [lengths[0], yc, 0.0])
        for i in range(nx):
            xc = (i + 0.5) * dx
            add_boundary("ymin", cell_index(i, 0), [0.0, -dx, 0.0], [xc, 0.0, 0.0])
        for i in range(nx):
            xc = (i + 0.5) * dx
            add_boundary("ymax", cell_index(i, ny - 1), [0.0, dx, 0.0], [xc, lengths[1], 0.0])

        if patch_aliases:
            for base_name, alias in patch_aliases.items():
                if base_name not in boundary:
                    raise KeyError(f"Unknown base patch '{base_name}'")
                boundary[alias] = boundary.pop(base_name)
                for fid in boundary[alias]:
                    faces[fid].patch = alias

        return cls(
            ncells=nx * ny,
            faces=faces,
            boundary_patches=boundary,
            cell_centers=centers,
            cell_volumes=volumes,
            shape=(nx, ny),
        )

    def internal_face(self, cell: int, neighbour: int) -> Tuple[int, bool]:
        """Return ``(face index, cell_is_owner)`` for the face between two cells."""
        key = (cell, neighbour)
        if key in self._internal_index:
            return self._internal_index[key], True
        key = (neighbour, cell)
        if key in self._internal_index:
            return self._internal_index[key], False
        raise KeyError(f"Cells {cell} and {neighbour} share no interior face")

    def patch_addr(self, name: str) -> np.ndarray:
        try:
            return self._patch_addr[name]
        except KeyError as exc:
            raise KeyError(f"Unknown patch '{name}'") from exc

    def patch_faces(self, name: str) -> List[int]:
        try:
            return self.boundary_patches[name]
        except KeyError as exc:
            raise KeyError(f"Unknown patch '{name}'") from exc

    def patches(self) -> List[str]:
        return list(self.boundary_patches.keys())

    def internal_faces(self) -> Iterable[Tuple[int, Face]]:
        """Yield ``(interior face index, face)`` in LDU order."""
        index = 0
        for face in self.faces:
            if face.neighbour is None:
                continue
            yield index, face
            index += 1
