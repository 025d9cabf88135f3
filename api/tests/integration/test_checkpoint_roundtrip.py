"""Integration tests for checkpoint save, load, listing and integrity checks."""

import json

import pytest

from market_simulator.engine import advance, run_daily_transition
from market_simulator.engine.advancer import SECONDS_PER_DAY
from market_simulator.persistence import CheckpointIntegrityError, CheckpointManager
from market_simulator.sampling import make_rng


@pytest.fixture
def manager(tmp_path):
    return CheckpointManager(tmp_path / "checkpoints")


def test_round_trip_preserves_state(state, manager):
    for i in range(3):
        run_daily_transition(state, make_rng(i))

    record = manager.save_checkpoint(state, description="after three days")
    restored, rng = manager.load_checkpoint(record.checkpoint_id)

    assert restored.model_dump_json() == state.model_dump_json()
    assert rng is None
    assert record.day == state.day
    assert record.num_companies == 4
    assert record.path.exists()


def test_generator_state_resumes(state, manager):
    rng = make_rng(8)
    rng.random()
    record = manager.save_checkpoint(state, rng=rng)

    _, restored = manager.load_checkpoint(record.path)

    assert restored.random() == rng.random()


def test_resumed_run_matches_uninterrupted_run(state, manager):
    rng = make_rng(5)
    halfway = advance(state, 2 * SECONDS_PER_DAY, rng)
    record = manager.save_checkpoint(halfway, rng=rng)
    uninterrupted = advance(halfway, 2 * SECONDS_PER_DAY, rng)

    loaded, loaded_rng = manager.load_checkpoint(record.checkpoint_id)
    resumed = advance(loaded, 2 * SECONDS_PER_DAY, loaded_rng)

    assert resumed.day == halfway.day + 2
    assert resumed.model_dump_json() == uninterrupted.model_dump_json()


def test_tampered_state_fails_integrity_check(state, manager):
    record = manager.save_checkpoint(state)
    envelope = json.loads(record.path.read_text())
    envelope["state_json"] = envelope["state_json"].replace('"day":60', '"day":61', 1)
    record.path.write_text(json.dumps(envelope))

    with pytest.raises(CheckpointIntegrityError, match="hash mismatch"):
        manager.load_checkpoint(record.checkpoint_id)


def test_missing_checkpoint(manager):
    with pytest.raises(FileNotFoundError):
        manager.load_checkpoint("does-not-exist")
    assert manager.get_checkpoint("does-not-exist") is None


def test_list_and_delete(state, manager):
    first = manager.save_checkpoint(state, description="first")
    run_daily_transition(state, make_rng(1))
    second = manager.save_checkpoint(state, description="second")
    (manager.directory / "notes.json").write_text("[]")

    listed = manager.list_checkpoints()

    assert [r.checkpoint_id for r in listed] == [first.checkpoint_id, second.checkpoint_id]
    assert manager.list_checkpoints(limit=1)[0].checkpoint_id == first.checkpoint_id
    assert manager.get_checkpoint(second.checkpoint_id).description == "second"

    assert manager.delete_checkpoint(first.checkpoint_id) is True
    assert manager.delete_checkpoint(first.checkpoint_id) is False
    assert [r.checkpoint_id for r in manager.list_checkpoints()] == [second.checkpoint_id]


def test_empty_directory_lists_nothing(tmp_path):
    assert CheckpointManager(tmp_path / "missing").list_checkpoints() == []


def test_article_weights_survive_round_trip(state, manager):
    state.article_weights.update({"connector.amid": 0.3, "verb_negative.tumbled": -0.2})

    record = manager.save_checkpoint(state)
    restored, _ = manager.load_checkpoint(record.checkpoint_id)

    assert restored.article_weights == state.article_weights
