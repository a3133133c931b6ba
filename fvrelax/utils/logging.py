"""Print-based reporting for matrix relaxation."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List


@dataclass
class RelaxationLogger:
    name: str = "fvMatrix::relax"
    verbose: bool = True
    history: List[Dict[str, Any]] = field(default_factory=list)

    def info(self, message: str) -> None:
        if self.verbose:
            print(f"{self.name}: {message}", flush=True)

    def log_dominance(self, report) -> None:
        self.history.append(asdict(report))
        if not self.verbose:
            return
        lines = [
            f"{self.name}: Matrix dominance test for {report.field}",
            f"    number of non-dominant cells   : {report.n_non_dominant}",
            f"    maximum relative non-dominance : {report.max_non_dominance:.6g}",
            f"    average relative non-dominance : {report.average_non_dominance:.6g}",
        ]
        print("\n".join(lines), flush=True)
