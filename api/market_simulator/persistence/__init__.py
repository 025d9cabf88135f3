"""
Persistence layer for market simulator.

Provides file-based checkpoints of complete simulation states.
"""

from .checkpoint import (
    CheckpointIntegrityError,
    CheckpointManager,
    CheckpointRecord,
    read_checkpoint,
)

__all__ = [
    "CheckpointIntegrityError",
    "CheckpointManager",
    "CheckpointRecord",
    "read_checkpoint",
]
