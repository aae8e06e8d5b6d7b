"""Packaged fix-instruction resources."""

from apexlens.antipatterns.resources.loader import FixInstruction, FixInstructionLoader, get_default_loader

__all__ = ["FixInstruction", "FixInstructionLoader", "get_default_loader"]
