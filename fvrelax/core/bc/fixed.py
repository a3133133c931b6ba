"""Fixed-value (Dirichlet) boundary condition."""

from __future__ import annotations

import numpy as np

from .base import PatchField, register_patch_field


@register_patch_field("fixedValue", "uniformFixedValue")
class FixedValue(PatchField):
    def __init__(self, patch, mesh, value=0.0):
        super().__init__(patch, mesh)
        self.value = np.asarray(value, dtype=float)

    def evaluate(self, field):
        internal = self.patch_internal_field(field)
        values = np.empty_like(internal)
        values[...] = self.value
        return values
