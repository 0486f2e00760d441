"""Conflict discovery, parsing and write-back."""

from conflux.conflict.model import Conflict, ConflictFile, Resolution
from conflux.conflict.registry import ConflictRegistry

__all__ = ["Conflict", "ConflictFile", "ConflictRegistry", "Resolution"]
