"""Solver-control settings for equation relaxation."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from ..utils.io import read_yaml_file

# a lone "." does not make a key a pattern; dotted names like alpha.water stay exact
_REGEX_CHARS = set("*+?()[]{}|^$\\")


def _factor(key: str, value) -> float:
    if isinstance(value, bool):
        raise ValueError(f"Relaxation factor for '{key}' must be a number, got {value!r}")
    try:
        alpha = float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Relaxation factor for '{key}' must be a number, got {value!r}") from exc
    if not 0.0 <= alpha <= 1.0:
        raise ValueError(f"Relaxation factor for '{key}' must lie in [0, 1], got {alpha}")
    return alpha


@dataclass
class RelaxationControls:
    equations: Dict[str, float] = field(default_factory=dict)
    default: Optional[float] = None
    diagnostics: bool = False
    _patterns: List[Tuple[re.Pattern, float]] = field(
        default_factory=list, init=False, repr=False
    )

    def __post_init__(self) -> None:
        self.equations = {str(k): _factor(str(k), v) for k, v in self.equations.items()}
        if self.default is not None:
            self.default = _factor("default", self.default)
        # last declared pattern is tried first
        self._patterns = [
            (re.compile(key), alpha)
            for key, alpha in reversed(list(self.equations.items()))
            if _REGEX_CHARS.intersection(key)
        ]

    @classmethod
    def from_dict(cls, data) -> "RelaxationControls":
        if not data:
            return cls()
        factors = data.get("relaxationFactors", {}) or {}
        equations = dict(factors.get("equations", {}) or {})
        default = equations.pop("default", None)
        return cls(
            equations=equations,
            default=default,
            diagnostics=bool(data.get("diagnostics", False)),
        )

    @classmethod
    def from_yaml(cls, path: str | Path) -> "RelaxationControls":
        return cls.from_dict(read_yaml_file(path))

    def _lookup(self, name: str) -> Optional[float]:
        if name in self.equations:
            return self.equations[name]
        for pattern, alpha in self._patterns:
            if pattern.fullmatch(name):
                return alpha
        return self.default

    def relax_equation(self, name: str) -> bool:
        return self._lookup(name) is not None

    def equation_relaxation_factor(self, name: str) -> float:
        alpha = self._lookup(name)
        if alpha is None:
            raise KeyError(f"No relaxation factor for equation '{name}'")
        return alpha
