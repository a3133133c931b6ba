import pathlib
import sys

import numpy as np
import pytest

ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from scripts import dominance_check
from fvrelax.run.controls import RelaxationControls

CONTROLS = pathlib.Path(__file__).parent / "cases" / "controls.yaml"


@pytest.mark.parametrize("periodic", [False, True])
def test_convection_dominated_system_is_reported(periodic):
    summary = dominance_check.run(
        nx=8, ny=8, gamma=0.01, velocity=1.0, alpha=0.9, periodic=periodic, verbose=False
    )
    assert summary["cells"] == 64
    assert summary["margin_before"] < 0.0
    assert summary["non_dominant"] > 0
    assert summary["residual_change"] < 1e-12


def test_diffusion_only_system_is_dominant():
    summary = dominance_check.run(
        nx=4, ny=4, gamma=1.0, velocity=0.0, alpha=1.0, periodic=False, verbose=False
    )
    assert summary["non_dominant"] == 0
    assert summary["margin_after"] >= -1e-12


def test_interior_cells_dominant_after_relaxation():
    matrix = dominance_check.build_system(nx=8, ny=8, gamma=0.01, velocity=1.0)
    dominance_check.relax(matrix, 0.9)
    sum_off = matrix.sum_mag_off_diag()
    interior = [j * 8 + i for j in range(1, 7) for i in range(1, 7)]
    assert np.all(matrix.diag[interior] >= sum_off[interior] / 0.9 - 1e-12)


def test_controls_file_drives_the_factor():
    controls = RelaxationControls(equations={"T": 0.5}, diagnostics=True)
    summary = dominance_check.run(
        nx=4, ny=4, gamma=0.01, velocity=1.0, alpha=1.0, periodic=False,
        controls=controls, verbose=False,
    )
    assert "non_dominant" in summary

    zeroed = RelaxationControls.from_yaml(CONTROLS)
    summary = dominance_check.run(
        nx=4, ny=4, gamma=0.01, velocity=1.0, alpha=1.0, periodic=False,
        controls=zeroed, verbose=False,
    )
    assert "non_dominant" not in summary
    assert summary["margin_after"] == summary["margin_before"]


def test_main_prints_json(capsys):
    dominance_check.main(["--nx", "4", "--ny", "4", "--alpha", "0.8"])
    out = capsys.readouterr().out
    assert '"cells": 16' in out
