"""LDU storage for finite-volume matrices."""

from __future__ import annotations

from typing import Iterable, List, Optional

import numpy as np

try:
    from scipy import sparse
except ImportError:  # pragma: no cover - SciPy is required for CSR export
    sparse = None  # type: ignore

from .field import Field


class FvMatrix:
    """Finite-volume matrix of one field in lower/diagonal/upper form.

    ``upper[f]`` is the coefficient in the owner row for the neighbour column of
    interior face ``f``; ``lower[f]`` is the neighbour row, owner column entry.
    Each entry of ``internal_coeffs``/``boundary_coeffs`` belongs to the patch
    field at the same position in ``psi.boundary_field``.
    """

    def __init__(self, psi: Field) -> None:
        self.psi = psi
        self.mesh = psi.mesh
        nfaces = self.mesh.ninternal_faces
        self._diag = np.zeros(self.mesh.ncells)
        self._lower = np.zeros(nfaces)
        self._upper = np.zeros(nfaces)
        self._source = np.zeros_like(psi.values)
        coeff_shapes = [(pf.size,) + psi.value_shape for pf in psi.boundary_field]
        self.internal_coeffs: List[np.ndarray] = [np.zeros(s) for s in coeff_shapes]
        self.boundary_coeffs: List[np.ndarray] = [np.zeros(s) for s in coeff_shapes]

    @property
    def diag(self) -> np.ndarray:
        return self._diag

    @property
    def lower(self) -> np.ndarray:
        return self._lower

    @property
    def upper(self) -> np.ndarray:
        return self._upper

    @property
    def source(self) -> np.ndarray:
        return self._source

    def add_diag(self, cell_ids: Iterable[int], coeffs: Iterable[float]) -> None:
        for cid, a_p in zip(cell_ids, coeffs):
            self._diag[cid] += a_p

    def add_nb(
        self, cell_ids: Iterable[int], nb_ids: Iterable[int], coeffs: Iterable[float]
    ) -> None:
        for cid, nid, coeff in zip(cell_ids, nb_ids, coeffs):
            if cid == nid:
                self._diag[cid] += coeff
                continue
            fid, is_owner = self.mesh.internal_face(cid, nid)
            if is_owner:
                self._upper[fid] += coeff
            else:
                self._lower[fid] += coeff

    def add_source(self, cell_ids: Iterable[int], values: Iterable) -> None:
        for cid, val in zip(cell_ids, values):
            self._source[cid] += val

    def set_diag(self, values) -> None:
        self._diag[:] = self._checked(values, self._diag.shape, "diagonal")

    def set_off_diag(self, upper, lower=None) -> None:
        """Set interior coefficients; a missing ``lower`` makes the matrix symmetric."""
        self._upper[:] = self._checked(upper, self._upper.shape, "upper")
        self._lower[:] = self._checked(
            upper if lower is None else lower, self._lower.shape, "lower"
        )

    def set_source(self, values) -> None:
        self._source[...] = self._checked(values, self._source.shape, "source")

    def set_boundary_coeffs(self, patch: str, internal, boundary=None) -> None:
        index = self.patch_index(patch)
        shape = self.internal_coeffs[index].shape
        self.internal_coeffs[index][...] = self._checked(internal, shape, f"{patch} internalCoeffs")
        if boundary is not None:
            self.boundary_coeffs[index][...] = self._checked(
                boundary, shape, f"{patch} boundaryCoeffs"
            )

    def patch_index(self, patch: str) -> int:
        for index, pf in enumerate(self.psi.boundary_field):
            if pf.patch == patch:
                return index
        raise KeyError(f"Field {self.psi.name} has no condition on patch '{patch}'")

    def check_boundary_coeffs(self) -> None:
        """Raise if the coefficient lists no longer line up with ``psi.boundary_field``."""
        npatches = len(self.psi.boundary_field)
        if len(self.internal_coeffs) != npatches or len(self.boundary_coeffs) != npatches:
            raise ValueError(
                f"Matrix for {self.psi.name} holds coefficients for "
                f"{len(self.internal_coeffs)} patches but the field has {npatches}"
            )
        for pf, internal, boundary in zip(
            self.psi.boundary_field, self.internal_coeffs, self.boundary_coeffs
        ):
            shape = (pf.size,) + self.psi.value_shape
            if internal.shape != shape or boundary.shape != shape:
                raise ValueError(
                    f"{pf.patch} coefficients expect shape {shape}, "
                    f"got {internal.shape} and {boundary.shape}"
                )

    @staticmethod
    def _checked(values, shape, label: str) -> np.ndarray:
        arr = np.asarray(values, dtype=float)
        if arr.shape != shape:
            raise ValueError(f"{label} expects shape {shape}, got {arr.shape}")
        return arr

    def sum_mag_off_diag(self, sum_off: Optional[np.ndarray] = None) -> np.ndarray:
        """Accumulate per-row sums of interior off-diagonal magnitudes."""
        if sum_off is None:
            sum_off = np.zeros(self.mesh.ncells)
        elif sum_off.shape != (self.mesh.ncells,):
            raise ValueError(f"sum_off expects shape ({self.mesh.ncells},), got {sum_off.shape}")
        np.add.at(sum_off, self.mesh.upper_addr, np.abs(self._lower))
        np.add.at(sum_off, self.mesh.lower_addr, np.abs(self._upper))
        return sum_off

    def matvec(self, vector) -> np.ndarray:
        """Interior product ``A x`` (diagonal plus interior faces)."""
        x = np.asarray(vector, dtype=float)
        l = self.mesh.lower_addr
        u = self.mesh.upper_addr
        if x.ndim == 1:
            result = self._diag * x
            np.add.at(result, l, self._upper * x[u])
            np.add.at(result, u, self._lower * x[l])
        else:
            result = self._diag[:, None] * x
            np.add.at(result, l, self._upper[:, None] * x[u])
            np.add.at(result, u, self._lower[:, None] * x[l])
        return result

    def residual(self, vector=None) -> np.ndarray:
        """Interior residual ``S - A x``; defaults to the current field values."""
        x = self.psi.values if vector is None else vector
        return self._source - self.matvec(x)

    def to_dense(self) -> np.ndarray:
        n = self.mesh.ncells
        mat = np.zeros((n, n))
        np.fill_diagonal(mat, self._diag)
        np.add.at(mat, (self.mesh.lower_addr, self.mesh.upper_addr), self._upper)
        np.add.at(mat, (self.mesh.upper_addr, self.mesh.lower_addr), self._lower)
        return mat

    def to_csr(self):
        if sparse is None:  # pragma: no cover - import guard
            raise RuntimeError("SciPy is required for CSR conversion")
        n = self.mesh.ncells
        l = self.mesh.lower_addr
        u = self.mesh.upper_addr
        rows = np.concatenate([np.arange(n), l, u])
        cols = np.concatenate([np.arange(n), u, l])
        data = np.concatenate([self._diag, self._upper, self._lower])
        return sparse.csr_matrix((data, (rows, cols)), shape=(n, n))

    def relax(
        self,
        alpha: float,
        diagnostics: bool = False,
        reduction=None,
        logger=None,
    ):
        from .relax import relax

        return relax(self, alpha, diagnostics=diagnostics, reduction=reduction, logger=logger)

    def copy(self) -> "FvMatrix":
        dup = FvMatrix(self.psi)
        dup._diag = self._diag.copy()
        dup._lower = self._lower.copy()
        dup._upper = self._upper.copy()
        dup._source = self._source.copy()
        dup.internal_coeffs = [c.copy() for c in self.internal_coeffs]
        dup.boundary_coeffs = [c.copy() for c in self.boundary_coeffs]
        return dup
