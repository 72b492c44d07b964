from __future__ import annotations

import dataclasses
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

DEFAULT_PROTOCOL_VERSION = "1.0.0"
DEFAULT_PRUNE_INTERVAL_SECS = 300
FALLBACK_RETENTION_SECS = 86400
FALLBACK_MAX_FILES = 256

DEFAULT_RETENTION_SECS: Mapping[tuple[str, str], int] = {
    ("clavain", "dispatch"): 21600,
    ("interlock", "coordination"): 43200,
    ("interphase", "bead"): 86400,
}
DEFAULT_MAX_FILES: Mapping[tuple[str, str], int] = {
    ("clavain", "dispatch"): 128,
    ("interlock", "coordination"): 256,
    ("interphase", "bead"): 256,
}

ROOT_ENV = "INTERBAND_ROOT"
PROTOCOL_VERSION_ENV = "INTERBAND_PROTOCOL_VERSION"
RETENTION_ENV = "INTERBAND_RETENTION_SECS"
MAX_FILES_ENV = "INTERBAND_MAX_FILES"
PRUNE_INTERVAL_ENV = "INTERBAND_PRUNE_INTERVAL_SECS"

_INT_RE = re.compile(r"^[+-]?[0-9]+$")
_RETENTION_KEY_RE = re.compile(r"^INTERBAND_RETENTION_(.+)_SECS$")
_MAX_FILES_KEY_RE = re.compile(r"^INTERBAND_MAX_FILES_(.+)$")
_ENV_UNSAFE_RE = re.compile(r"[^A-Z0-9]")


def env_safe(raw: str) -> str:
    """Uppercase *raw* and replace everything outside ``[A-Z0-9]`` with ``_``."""
    return _ENV_UNSAFE_RE.sub("_", raw.upper())


def channel_token(namespace: str, channel: str) -> str:
    """Lookup key for per-channel overrides, e.g. ``INTERLOCK_COORDINATION``."""
    return f"{env_safe(namespace)}_{env_safe(channel)}"


def retention_env_key(namespace: str, channel: str) -> str:
    return f"INTERBAND_RETENTION_{channel_token(namespace, channel)}_SECS"


def max_files_env_key(namespace: str, channel: str) -> str:
    return f"INTERBAND_MAX_FILES_{channel_token(namespace, channel)}"


def default_retention_seconds(namespace: str, channel: str) -> int:
    return DEFAULT_RETENTION_SECS.get((namespace, channel), FALLBACK_RETENTION_SECS)


def default_max_files(namespace: str, channel: str) -> int:
    return DEFAULT_MAX_FILES.get((namespace, channel), FALLBACK_MAX_FILES)


def _parse_int(value: Any) -> int | None:
    if value is None:
        return None
    text = str(value).strip()
    if not _INT_RE.match(text):
        return None
    return int(text)


def _default_root() -> Path:
    try:
        home = Path.home()
    except (RuntimeError, KeyError):
        return Path(".interband")
    if not str(home).strip():
        return Path(".interband")
    return home / ".interband"


@dataclass(frozen=True)
class InterbandConfig:
    """Resolved settings shared by every interband operation.

    Build one with :meth:`from_env` at process start and hand it to the
    functions and classes that need it.
    """

    root: Path = field(default_factory=_default_root)
    protocol_version: str = DEFAULT_PROTOCOL_VERSION
    prune_interval_secs: int = DEFAULT_PRUNE_INTERVAL_SECS
    retention_secs: int | None = None
    max_files: int | None = None
    retention_overrides: Mapping[str, int] = field(default_factory=dict)
    max_files_overrides: Mapping[str, int] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "root", Path(self.root))
        object.__setattr__(self, "prune_interval_secs", max(0, int(self.prune_interval_secs)))
        object.__setattr__(self, "retention_overrides", dict(self.retention_overrides))
        object.__setattr__(self, "max_files_overrides", dict(self.max_files_overrides))

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> InterbandConfig:
        env = os.environ if environ is None else environ

        root_text = env.get(ROOT_ENV, "").strip()
        root = Path(root_text) if root_text else _default_root()
        version = env.get(PROTOCOL_VERSION_ENV, "").strip() or DEFAULT_PROTOCOL_VERSION

        interval = _parse_int(env.get(PRUNE_INTERVAL_ENV))
        if interval is None:
            interval = DEFAULT_PRUNE_INTERVAL_SECS

        retention_overrides: dict[str, int] = {}
        max_files_overrides: dict[str, int] = {}
        for name, raw in env.items():
            if name in (RETENTION_ENV, MAX_FILES_ENV):
                continue
            match = _RETENTION_KEY_RE.match(name)
            if match is not None:
                value = _parse_int(raw)
                if value is not None:
                    retention_overrides[match.group(1)] = value
                continue
            match = _MAX_FILES_KEY_RE.match(name)
            if match is not None:
                value = _parse_int(raw)
                if value is not None:
                    max_files_overrides[match.group(1)] = value

        return cls(
            root=root,
            protocol_version=version,
            prune_interval_secs=interval,
            retention_secs=_parse_int(env.get(RETENTION_ENV)),
            max_files=_parse_int(env.get(MAX_FILES_ENV)),
            retention_overrides=retention_overrides,
            max_files_overrides=max_files_overrides,
        )

    def replace(self, **changes: Any) -> InterbandConfig:
        return dataclasses.replace(self, **changes)

    def retention_seconds(self, namespace: str, channel: str) -> int:
        """Retention window: per-channel, then global, then the built-in table."""
        token = channel_token(namespace, channel)
        if token in self.retention_overrides:
            return self.retention_overrides[token]
        if self.retention_secs is not None:
            return self.retention_secs
        return default_retention_seconds(namespace, channel)

    def max_files_for(self, namespace: str, channel: str) -> int:
        """File cap, resolved in the same order as :meth:`retention_seconds`."""
        token = channel_token(namespace, channel)
        if token in self.max_files_overrides:
            return self.max_files_overrides[token]
        if self.max_files is not None:
            return self.max_files
        return default_max_files(namespace, channel)


def resolve_config(config: InterbandConfig | None) -> InterbandConfig:
    return config if config is not None else InterbandConfig.from_env()
