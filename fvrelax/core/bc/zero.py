"""Zero-gradient (Neumann) boundary condition."""

from __future__ import annotations

from .base import PatchField, register_patch_field


@register_patch_field("zeroGradient")
class ZeroGradient(PatchField):
    def evaluate(self, field):
        return self.patch_internal_field(field).copy()
