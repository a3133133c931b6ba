import pathlib
import sys

import numpy as np
import pytest

ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from fvrelax.core.field import ScalarField
from fvrelax.core.linalg import FvMatrix
from fvrelax.core.mesh import Mesh
from fvrelax.core.relax import SMALL, dominance_report, relax
from fvrelax.parallel import MpiReduction, Reduction, SerialReduction
from fvrelax.parallel import reduce as reduce_module
from fvrelax.utils.logging import RelaxationLogger


class MirroredReduction(Reduction):
    """Pretends ``copies`` identical partitions took part."""

    def __init__(self, copies: int, master: bool = True) -> None:
        self.copies = copies
        self._master = master
        self.calls = []

    def sum_reduce(self, value):
        self.calls.append("sum")
        return value * self.copies

    def max_reduce(self, value):
        self.calls.append("max")
        return value

    def count_participants(self) -> int:
        return self.copies

    @property
    def master(self) -> bool:
        return self._master


def _matrix() -> FvMatrix:
    # 0 - 1 - 2 - 3 chain, cells 1 and 2 are not dominant
    mesh = Mesh.from_addressing(4, owner=[0, 1, 2], neighbour=[1, 2, 3])
    T = ScalarField("T", mesh, np.ones(4))
    matrix = FvMatrix(T)
    matrix.set_diag([2.0, 1.0, 1.5, 2.0])
    matrix.set_off_diag([-1.0, -1.0, -1.0])
    return matrix


def test_report_counts_non_dominant_cells():
    matrix = _matrix()
    report = dominance_report("T", matrix.diag, matrix.sum_mag_off_diag(), SerialReduction())
    # ratios: cell 1 -> (2 - 1) / 1 = 1, cell 2 -> (2 - 1.5) / 1.5
    assert report.n_non_dominant == 2
    assert report.max_non_dominance == pytest.approx(1.0)
    assert report.average_non_dominance == pytest.approx((1.0 + 1.0 / 3.0) / 4)
    assert report.n_cells == 4
    assert report.n_partitions == 1


def test_report_is_reduced_across_partitions():
    matrix = _matrix()
    reduction = MirroredReduction(3)
    report = dominance_report("T", matrix.diag, matrix.sum_mag_off_diag(), reduction)
    assert reduction.calls == ["sum", "max", "sum", "sum"]
    assert report.n_non_dominant == 6
    assert report.max_non_dominance == pytest.approx(1.0)
    # global sum over global cell count
    assert report.average_non_dominance == pytest.approx((1.0 + 1.0 / 3.0) / 4)
    assert report.n_cells == 12
    assert report.n_partitions == 3


def test_zero_diagonal_is_guarded():
    diag = np.array([0.0, 0.0, 1.0])
    sum_off = np.array([2.0, 0.0, 0.5])
    report = dominance_report("T", diag, sum_off, SerialReduction())
    assert report.n_non_dominant == 1
    assert np.isfinite(report.max_non_dominance)
    assert report.max_non_dominance == pytest.approx(2.0 / SMALL)


def test_fully_dominant_matrix_reports_zero():
    diag = np.array([3.0, 3.0])
    report = dominance_report("T", diag, np.array([1.0, 2.0]), SerialReduction())
    assert report.n_non_dominant == 0
    assert report.max_non_dominance == 0.0
    assert report.average_non_dominance == 0.0


def test_diagnostics_do_not_change_the_result():
    plain = _matrix()
    checked = _matrix()
    relax(plain, 0.7)
    logger = RelaxationLogger(verbose=False)
    report = relax(checked, 0.7, diagnostics=True, logger=logger)
    assert np.array_equal(plain.diag, checked.diag)
    assert np.array_equal(plain.source, checked.source)
    assert report.n_non_dominant == 2
    assert logger.history[0]["field"] == "T"
    assert logger.history[0]["n_non_dominant"] == 2


def test_diagnostics_are_printed_on_master_only(capsys):
    relax(_matrix(), 0.5, diagnostics=True, reduction=MirroredReduction(2))
    out = capsys.readouterr().out
    assert "Relaxing T by 0.5" in out
    assert "number of non-dominant cells   : 4" in out

    logger = RelaxationLogger()
    report = relax(_matrix(), 0.5, diagnostics=True, reduction=MirroredReduction(2, master=False), logger=logger)
    assert capsys.readouterr().out == ""
    assert logger.history == []
    assert report.n_non_dominant == 4


def test_no_reduction_without_diagnostics():
    reduction = MirroredReduction(2)
    relax(_matrix(), 0.5, reduction=reduction)
    assert reduction.calls == []


def test_mpi_reduction_requires_mpi4py(monkeypatch):
    monkeypatch.setattr(reduce_module, "MPI", None)
    with pytest.raises(RuntimeError):
        MpiReduction()
