"""Boundary condition (patch field) implementations."""

from .base import (
    CoupledPatchField,
    PatchField,
    make_patch_field,
    patch_field_registry,
    register_patch_field,
)
from .coupled import CyclicPatchField, ProcessorPatchField
from .fixed import FixedValue
from .zero import ZeroGradient

__all__ = [
    "PatchField",
    "CoupledPatchField",
    "FixedValue",
    "ZeroGradient",
    "ProcessorPatchField",
    "CyclicPatchField",
    "make_patch_field",
    "patch_field_registry",
    "register_patch_field",
]
