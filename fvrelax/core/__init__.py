"""Core finite-volume data structures and relaxation."""

from .field import Field, ScalarField, VectorField
from .linalg import FvMatrix
from .mesh import Face, Mesh
from .relax import DominanceReport, relax, relax_equation

__all__ = [
    "DominanceReport",
    "Face",
    "Field",
    "FvMatrix",
    "Mesh",
    "ScalarField",
    "VectorField",
    "relax",
    "relax_equation",
]
