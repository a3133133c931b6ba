"""Implicit diagonal relaxation for finite-volume matrices."""

from .core import (
    DominanceReport,
    Field,
    FvMatrix,
    Mesh,
    ScalarField,
    VectorField,
    relax,
    relax_equation,
)
from .parallel import MpiReduction, Reduction, SerialReduction
from .run.controls import RelaxationControls

__all__ = [
    "DominanceReport",
    "Field",
    "FvMatrix",
    "Mesh",
    "MpiReduction",
    "Reduction",
    "RelaxationControls",
    "ScalarField",
    "SerialReduction",
    "VectorField",
    "relax",
    "relax_equation",
]

__version__ = "0.1.0"
