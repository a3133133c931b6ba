"""Distributed reduction collaborators."""

from .reduce import MpiReduction, Reduction, SerialReduction

__all__ = ["Reduction", "SerialReduction", "MpiReduction"]
