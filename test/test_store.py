from __future__ import annotations

import os
import time
from pathlib import Path

import pytest

from interband import InterbandConfig, InterbandStore, ValidationError


def _store(tmp_path: Path, **overrides: object) -> InterbandStore:
    return InterbandStore(InterbandConfig(root=tmp_path, **overrides))  # type: ignore[arg-type]


def test_publish_and_read_round_trip(tmp_path: Path) -> None:
    store = _store(tmp_path)
    payload = {
        "name": "worker-1",
        "workdir": "/srv/repo",
        "activity": "editing",
        "started": 1700000000,
        "turns": 4,
        "commands": 9,
        "messages": 12,
    }

    written = store.publish("clavain", "dispatch", "worker 1", "dispatch", payload, session_id="sess-9")

    assert written == tmp_path / "clavain" / "dispatch" / "worker_1.json"
    envelope = store.read("clavain", "dispatch", "worker 1")
    assert (envelope.namespace, envelope.type, envelope.session_id) == ("clavain", "dispatch", "sess-9")
    assert store.read_payload("clavain", "dispatch", "worker 1") == payload


def test_publish_overwrites_key_without_history(tmp_path: Path) -> None:
    store = _store(tmp_path)
    for phase in ("planned", "executing", "done"):
        store.publish("interphase", "bead", "iv-1", "bead_phase", {"id": "iv-1", "phase": phase, "ts": 1})

    assert store.read_payload("interphase", "bead", "iv-1")["phase"] == "done"
    assert [p.name for p in store.channel_dir("interphase", "bead").iterdir()] == ["iv-1.json"]


def test_publish_rejects_invalid_payload(tmp_path: Path) -> None:
    store = _store(tmp_path)
    with pytest.raises(ValidationError):
        store.publish("interlock", "coordination", "sig", "coordination_signal", {"layer": "files"})
    assert not store.path("interlock", "coordination", "sig").exists()


def test_publish_with_prune_bounds_the_channel(tmp_path: Path) -> None:
    store = _store(tmp_path, prune_interval_secs=0, max_files=2)
    for idx in range(3):
        written = store.publish("custom", "events", f"k{idx}", "anything", {"idx": idx})
        os.utime(written, (time.time() - 10 + idx, time.time() - 10 + idx))

    store.publish("custom", "events", "k3", "anything", {"idx": 3}, prune=True)

    remaining = sorted(p.name for p in store.channel_dir("custom", "events").glob("*.json"))
    assert remaining == ["k2.json", "k3.json"]


def test_iter_channel_and_prune_through_store(tmp_path: Path) -> None:
    store = _store(tmp_path, prune_interval_secs=0, retention_secs=60)
    stale = store.publish("custom", "events", "stale", "anything", {"v": 0})
    store.publish("custom", "events", "fresh", "anything", {"v": 1})
    os.utime(stale, (time.time() - 600, time.time() - 600))

    result = store.prune("custom", "events")

    assert result.expired == (stale,)
    assert [envelope.payload for _, envelope in store.iter_channel("custom", "events")] == [{"v": 1}]


def test_store_defaults_to_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("INTERBAND_ROOT", str(tmp_path))
    store = InterbandStore()
    assert store.root == tmp_path
