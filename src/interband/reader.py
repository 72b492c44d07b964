from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Iterator

from interband.config import InterbandConfig
from interband.envelope import Envelope, decode_envelope, validate_envelope
from interband.errors import ArgumentError, InterbandError
from interband.paths import channel_dir

logger = logging.getLogger(__name__)


def read_envelope(source_path: str | os.PathLike[str]) -> Envelope:
    """Load and validate the envelope stored at *source_path*."""
    if not str(source_path).strip():
        raise ArgumentError("source path is required")
    raw = Path(source_path).read_bytes()
    envelope = decode_envelope(raw)
    validate_envelope(envelope)
    return envelope


def read_payload(source_path: str | os.PathLike[str]) -> dict[str, Any]:
    return read_envelope(source_path).payload or {}


def iter_channel(
    namespace: str,
    channel: str,
    *,
    config: InterbandConfig | None = None,
) -> Iterator[tuple[Path, Envelope]]:
    """Yield every readable envelope in a channel, newest first.

    Entries that vanish, fail to parse or fail validation are skipped.
    """
    directory = channel_dir(namespace, channel, config)
    try:
        with os.scandir(directory) as entries:
            candidates = []
            for entry in entries:
                if not entry.name.endswith(".json") or not entry.is_file(follow_symlinks=False):
                    continue
                try:
                    mtime_ns = entry.stat(follow_symlinks=False).st_mtime_ns
                except OSError:
                    continue
                candidates.append((mtime_ns, entry.path))
    except FileNotFoundError:
        return

    candidates.sort(reverse=True)
    for _, entry_path in candidates:
        try:
            envelope = read_envelope(entry_path)
        except (OSError, InterbandError) as exc:
            logger.debug("skipping unreadable entry %s: %s", entry_path, exc)
            continue
        yield Path(entry_path), envelope
