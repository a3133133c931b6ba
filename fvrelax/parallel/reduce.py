"""Reductions across mesh partitions.

Every method is a collective: all partitions must call it, in the same order.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

try:  # Optional dependency for distributed runs
    from mpi4py import MPI  # type: ignore
except ImportError:  # pragma: no cover - optional path
    MPI = None


class Reduction(ABC):
    @abstractmethod
    def sum_reduce(self, value):
        """Sum of ``value`` over all partitions."""

    @abstractmethod
    def max_reduce(self, value):
        """Maximum of ``value`` over all partitions."""

    @abstractmethod
    def count_participants(self) -> int:
        """Number of partitions taking part in the reductions."""

    @property
    def master(self) -> bool:
        return True


class SerialReduction(Reduction):
    """Single-partition reduction: every operation is the identity."""

    def sum_reduce(self, value):
        return value

    def max_reduce(self, value):
        return value

    def count_participants(self) -> int:
        return 1


class MpiReduction(Reduction):
    def __init__(self, comm=None) -> None:
        if MPI is None:
            raise RuntimeError("MpiReduction requires mpi4py to be installed")
        self.comm = MPI.COMM_WORLD if comm is None else comm

    def sum_reduce(self, value):
        return self.comm.allreduce(value, op=MPI.SUM)

    def max_reduce(self, value):
        return self.comm.allreduce(value, op=MPI.MAX)

    def count_participants(self) -> int:
        return int(self.comm.Get_size())

    @property
    def master(self) -> bool:
        return self.comm.Get_rank() == 0
