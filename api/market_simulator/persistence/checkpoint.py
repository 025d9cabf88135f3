"""Checkpoint Manager for Save/Load Simulation.

Manages persistence of simulation checkpoints as JSON files in a directory.
Enables pause/resume and rollback of long-running markets.
"""

from __future__ import annotations

import hashlib
import json
import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import numpy as np
from pydantic import BaseModel, Field

from market_simulator.engine.models import SimulationState

logger = logging.getLogger(__name__)


class CheckpointIntegrityError(ValueError):
    """Stored state does not match its recorded hash."""


class CheckpointRecord(BaseModel):
    """Checkpoint metadata, stored alongside the state in each file."""

    checkpoint_id: str
    created_at: datetime
    day: int
    description: str | None = None
    state_hash: str
    total_size_bytes: int
    num_companies: int
    num_investors: int
    path: Path | None = Field(None, exclude=True)


def _hash(state_json: str) -> str:
    return hashlib.sha256(state_json.encode("utf-8")).hexdigest()


def _restore_rng(rng_state: dict[str, Any] | None) -> np.random.Generator | None:
    if rng_state is None:
        return None
    bit_generator = np.random.PCG64()
    bit_generator.state = rng_state
    return np.random.Generator(bit_generator)


def read_checkpoint(path: Path | str) -> tuple[CheckpointRecord, dict[str, Any]]:
    """Read a checkpoint file without validating its state.

    Returns:
        Tuple of (metadata record, raw envelope dict)

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file is not a checkpoint envelope
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Checkpoint file not found: {path}")

    try:
        envelope = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValueError(f"Checkpoint {path} is not valid JSON: {e}") from e
    if not isinstance(envelope, dict) or "state_json" not in envelope:
        raise ValueError(f"Checkpoint {path} has no stored state")

    record = CheckpointRecord.model_validate(
        {k: v for k, v in envelope.items() if k in CheckpointRecord.model_fields}
    )
    record.path = path
    return record, envelope


class CheckpointManager:
    """Manages simulation checkpoints in a directory.

    Responsibilities:
    - Save state snapshots (and optionally the generator state) to disk
    - Load states back, validating integrity hashes
    - List and delete checkpoints
    """

    def __init__(self, directory: Path | str) -> None:
        """Initialize checkpoint manager.

        Args:
            directory: Directory holding checkpoint files (created on first save)
        """
        self.directory = Path(directory)

    def _path_for(self, checkpoint_id: str) -> Path:
        return self.directory / f"{checkpoint_id}.json"

    # =========================================================================
    # Save Checkpoint
    # =========================================================================

    def save_checkpoint(
        self,
        state: SimulationState,
        description: str | None = None,
        rng: np.random.Generator | None = None,
    ) -> CheckpointRecord:
        """Save a simulation state as a checkpoint file.

        Args:
            state: State to save
            description: Human-readable description
            rng: Generator whose state should resume with the simulation

        Returns:
            The saved checkpoint's record
        """
        state_json = state.model_dump_json()
        record = CheckpointRecord(
            checkpoint_id=uuid.uuid4().hex,
            created_at=datetime.now(timezone.utc),
            day=state.day,
            description=description,
            state_hash=_hash(state_json),
            total_size_bytes=len(state_json),
            num_companies=len(state.companies),
            num_investors=len(state.investors),
        )

        envelope = record.model_dump(mode="json")
        envelope["state_json"] = state_json
        envelope["rng_state"] = rng.bit_generator.state if rng is not None else None

        self.directory.mkdir(parents=True, exist_ok=True)
        path = self._path_for(record.checkpoint_id)
        path.write_text(json.dumps(envelope), encoding="utf-8")
        record.path = path

        logger.info("Saved checkpoint %s at day %d", record.checkpoint_id, state.day)
        return record

    # =========================================================================
    # Load Checkpoint
    # =========================================================================

    def load_checkpoint(
        self, checkpoint: str | Path
    ) -> tuple[SimulationState, np.random.Generator | None]:
        """Load a state from a checkpoint id or file path.

        Args:
            checkpoint: Checkpoint ID in this directory, or a path to a file

        Returns:
            Tuple of (state, restored generator or None)

        Raises:
            FileNotFoundError: If the checkpoint does not exist
            CheckpointIntegrityError: If the stored state fails its hash check
        """
        path = Path(checkpoint)
        if not path.exists():
            path = self._path_for(str(checkpoint))
        record, envelope = read_checkpoint(path)

        state_json = envelope["state_json"]
        computed_hash = _hash(state_json)
        if computed_hash != record.state_hash:
            raise CheckpointIntegrityError(
                f"Checkpoint integrity check failed: state hash mismatch "
                f"(expected: {record.state_hash}, computed: {computed_hash})"
            )

        state = SimulationState.model_validate_json(state_json)
        return state, _restore_rng(envelope.get("rng_state"))

    # =========================================================================
    # Query Checkpoints
    # =========================================================================

    def get_checkpoint(self, checkpoint_id: str) -> CheckpointRecord | None:
        """Retrieve checkpoint metadata by ID, or None if not found."""
        path = self._path_for(checkpoint_id)
        if not path.exists():
            return None
        record, _ = read_checkpoint(path)
        return record

    def list_checkpoints(self, limit: int | None = None) -> list[CheckpointRecord]:
        """List checkpoints ordered by simulation day, then creation time.

        Files that are not readable checkpoints are skipped with a warning.
        """
        if not self.directory.exists():
            return []

        records = []
        for path in self.directory.glob("*.json"):
            try:
                record, _ = read_checkpoint(path)
            except ValueError as e:
                logger.warning("Skipping %s: %s", path.name, e)
                continue
            records.append(record)

        records.sort(key=lambda r: (r.day, r.created_at))
        return records[:limit] if limit else records

    # =========================================================================
    # Delete Checkpoint
    # =========================================================================

    def delete_checkpoint(self, checkpoint_id: str) -> bool:
        """Delete checkpoint by ID.

        Returns:
            True if deleted, False if checkpoint didn't exist
        """
        path = self._path_for(checkpoint_id)
        if not path.exists():
            return False
        path.unlink()
        return True
