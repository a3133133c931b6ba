"""Implicit under-relaxation of finite-volume matrices.

Relaxation makes the diagonal dominant, scales it by ``1/alpha`` and moves the
change to the source, ``S += (D - D0) * psi``, so the converged solution of the
system is unchanged. Boundary patches take part through their
``internalCoeffs``: coupled patches contribute component 0 of the diagonal and
off-diagonal coefficients; non-coupled patches add their largest component
magnitude before the dominance step and remove only their smallest component
afterwards, so part of the inflation stays on the diagonal.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np

from ..parallel.reduce import Reduction, SerialReduction
from ..utils.logging import RelaxationLogger
from .components import cmpt_max_mag, cmpt_min, component
from .linalg import FvMatrix

SMALL = 1.0e-15


@dataclass
class DominanceReport:
    field: str
    n_non_dominant: int
    max_non_dominance: float
    average_non_dominance: float
    n_cells: int
    n_partitions: int


def add_boundary_diag(matrix: FvMatrix, diag: np.ndarray, sum_off: np.ndarray) -> None:
    for pf, i_coeffs, b_coeffs in zip(
        matrix.psi.boundary_field, matrix.internal_coeffs, matrix.boundary_coeffs
    ):
        if not pf.size:
            continue
        cells = pf.face_cells
        if pf.coupled:
            np.add.at(diag, cells, component(i_coeffs, 0))
            np.add.at(sum_off, cells, np.abs(component(b_coeffs, 0)))
        else:
            np.add.at(diag, cells, cmpt_max_mag(i_coeffs))


def remove_boundary_diag(matrix: FvMatrix, diag: np.ndarray) -> None:
    for pf, i_coeffs in zip(matrix.psi.boundary_field, matrix.internal_coeffs):
        if not pf.size:
            continue
        cells = pf.face_cells
        if pf.coupled:
            np.subtract.at(diag, cells, component(i_coeffs, 0))
        else:
            np.subtract.at(diag, cells, cmpt_min(i_coeffs))


def dominance_report(
    name: str,
    diag: np.ndarray,
    sum_off: np.ndarray,
    reduction: Reduction,
) -> DominanceReport:
    """Reduce the relative non-dominance ``(sumOff - D)/|D|`` over all partitions.

    ``|D|`` is floored at ``SMALL``: a zero diagonal with off-diagonal coupling
    gives a large finite ratio, a zero row gives zero.
    """
    ratio = (sum_off - diag) / np.maximum(np.abs(diag), SMALL)
    non_dominant = ratio[ratio > 0.0]

    n_non = int(reduction.sum_reduce(int(non_dominant.size)))
    max_non = float(reduction.max_reduce(float(non_dominant.max(initial=0.0))))
    sum_non = float(reduction.sum_reduce(float(non_dominant.sum())))
    n_cells = int(reduction.sum_reduce(int(diag.size)))

    return DominanceReport(
        field=name,
        n_non_dominant=n_non,
        max_non_dominance=max_non,
        average_non_dominance=sum_non / n_cells if n_cells else 0.0,
        n_cells=n_cells,
        n_partitions=int(reduction.count_participants()),
    )


def update_source(matrix: FvMatrix, d0: np.ndarray, psi: np.ndarray) -> None:
    delta = matrix.diag - d0
    if psi.ndim == 1:
        matrix.source[:] += delta * psi
    else:
        matrix.source[:] += delta[:, None] * psi


def relax(
    matrix: FvMatrix,
    alpha: float,
    diagnostics: bool = False,
    reduction: Optional[Reduction] = None,
    logger: Optional[RelaxationLogger] = None,
) -> Optional[DominanceReport]:
    """Relax ``matrix`` in place by ``alpha``.

    ``alpha <= 0`` leaves the matrix untouched. With ``diagnostics`` the
    dominance statistics are reduced across partitions and logged on the
    master; every partition must then pass the same flag.
    """
    if alpha <= 0.0:
        return None
    matrix.check_boundary_coeffs()

    reduction = reduction or SerialReduction()
    logger = logger or RelaxationLogger(verbose=diagnostics)
    name = matrix.psi.name
    if diagnostics and reduction.master:
        logger.info(f"Relaxing {name} by {alpha}")

    psi = matrix.psi.values.copy()
    diag = matrix.diag
    d0 = diag.copy()

    sum_off = matrix.sum_mag_off_diag()
    add_boundary_diag(matrix, diag, sum_off)

    report = None
    if diagnostics:
        report = dominance_report(name, diag, sum_off, reduction)
        if reduction.master:
            logger.log_dominance(report)

    # central coefficient is taken to be positive
    np.maximum(np.abs(diag), sum_off, out=diag)
    diag /= alpha

    remove_boundary_diag(matrix, diag)
    update_source(matrix, d0, psi)
    return report


def relax_equation(
    matrix: FvMatrix,
    controls,
    final_iteration: bool = False,
    reduction: Optional[Reduction] = None,
    logger: Optional[RelaxationLogger] = None,
) -> Optional[DominanceReport]:
    """Relax by the factor ``controls`` gives for the matrix field, if any.

    On the final outer iteration a ``<name>Final`` entry takes precedence.
    """
    name = matrix.psi.name
    if final_iteration and controls.relax_equation(name + "Final"):
        key = name + "Final"
    elif controls.relax_equation(name):
        key = name
    else:
        return None
    return relax(
        matrix,
        controls.equation_relaxation_factor(key),
        diagnostics=controls.diagnostics,
        reduction=reduction,
        logger=logger,
    )
