from __future__ import annotations

from pathlib import Path

import pytest

from interband import ArgumentError, InterbandConfig, channel_dir, path, root, safe_key


def test_safe_key_replaces_separators_whitespace_and_symbols() -> None:
    assert safe_key("a/b c?d") == "a_b_c_d"
    assert safe_key("tab\there\nnew") == "tab_here_new"
    assert safe_key("keep.this_one-OK9") == "keep.this_one-OK9"


def test_safe_key_empty_becomes_default() -> None:
    assert safe_key("") == "default"


def test_safe_key_is_idempotent_and_ascii_only() -> None:
    for raw in ["", "a/b c?d", "héllo wörld", "../../etc/passwd", "日本", "x" * 40]:
        once = safe_key(raw)
        assert safe_key(once) == once
        assert once
        assert all(char.isascii() and (char.isalnum() or char in "._-") for char in once)
    assert safe_key("日本") == "__"


def test_path_layout(tmp_path: Path) -> None:
    config = InterbandConfig(root=tmp_path)
    assert root(config) == tmp_path
    assert channel_dir("interphase", "bead", config) == tmp_path / "interphase" / "bead"
    assert path("interphase", "bead", "session 1", config) == tmp_path / "interphase" / "bead" / "session_1.json"


def test_path_uses_env_root_when_no_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("INTERBAND_ROOT", str(tmp_path))
    assert path("custom", "events", "x") == tmp_path / "custom" / "events" / "x.json"


@pytest.mark.parametrize(
    ("namespace", "channel", "key"),
    [("", "bead", "k"), ("interphase", " ", "k"), ("interphase", "bead", "")],
)
def test_path_rejects_blank_inputs(tmp_path: Path, namespace: str, channel: str, key: str) -> None:
    config = InterbandConfig(root=tmp_path)
    with pytest.raises(ArgumentError):
        path(namespace, channel, key, config)


def test_channel_dir_rejects_blank_inputs(tmp_path: Path) -> None:
    config = InterbandConfig(root=tmp_path)
    with pytest.raises(ArgumentError):
        channel_dir("  ", "bead", config)
    with pytest.raises(ArgumentError):
        channel_dir("interphase", "", config)
