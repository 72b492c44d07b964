from __future__ import annotations

from pathlib import Path

from interband.config import InterbandConfig, resolve_config
from interband.errors import ArgumentError

_SAFE_PUNCTUATION = frozenset("._-")


def _is_safe_char(char: str) -> bool:
    return char.isascii() and (char.isalnum() or char in _SAFE_PUNCTUATION)


def safe_key(raw: str) -> str:
    """Map *raw* onto ``[A-Za-z0-9._-]``; anything else becomes ``_``.

    The empty string maps to ``"default"``. The mapping is idempotent.
    """
    out = "".join(char if _is_safe_char(char) else "_" for char in raw)
    return out or "default"


def root(config: InterbandConfig | None = None) -> Path:
    return resolve_config(config).root


def channel_dir(namespace: str, channel: str, config: InterbandConfig | None = None) -> Path:
    if not namespace.strip() or not channel.strip():
        raise ArgumentError("namespace and channel are required")
    return root(config) / namespace / channel


def path(namespace: str, channel: str, key: str, config: InterbandConfig | None = None) -> Path:
    """Return ``{root}/{namespace}/{channel}/{safe_key(key)}.json``."""
    if not namespace.strip() or not channel.strip() or not key.strip():
        raise ArgumentError("namespace, channel, and key are required")
    return channel_dir(namespace, channel, config) / f"{safe_key(key)}.json"
