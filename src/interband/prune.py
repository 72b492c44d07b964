"""Retention pruning for channel directories.

Many uncoordinated producers write into the same channel directory, so every
channel is bounded twice: entries older than the retention window are removed,
and of the survivors only the newest ``max_files`` are kept. A stamp file
throttles passes so that callers can prune after every write without scanning
the directory each time.

Pruning is housekeeping. Filesystem errors are logged and counted in the
returned :class:`PruneResult`, never raised.
"""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass
from pathlib import Path

from interband.config import InterbandConfig, resolve_config
from interband.paths import channel_dir

logger = logging.getLogger(__name__)

PRUNE_STAMP_NAME = ".interband-prune.stamp"


@dataclass(frozen=True)
class PruneResult:
    """Summary of one :func:`prune_channel` call."""

    channel_dir: Path
    ran: bool = False
    throttled: bool = False
    scanned: int = 0
    expired: tuple[Path, ...] = ()
    evicted: tuple[Path, ...] = ()
    retained: int = 0
    failures: int = 0

    @property
    def deleted(self) -> tuple[Path, ...]:
        return self.expired + self.evicted


def _remove(path: str) -> bool:
    try:
        os.unlink(path)
    except FileNotFoundError:
        # Another pruner got there first.
        return True
    except OSError as exc:
        logger.warning("could not delete %s: %s", path, exc)
        return False
    return True


def _stamp_is_fresh(stamp: Path, now: float, interval: int) -> bool:
    try:
        stamp_mtime = stamp.stat().st_mtime
    except OSError:
        return False
    return now - stamp_mtime < interval


def _touch(stamp: Path) -> bool:
    try:
        stamp.touch(exist_ok=True)
    except OSError as exc:
        logger.warning("could not update prune stamp %s: %s", stamp, exc)
        return False
    return True


def prune_channel(
    namespace: str,
    channel: str,
    *,
    config: InterbandConfig | None = None,
    now: float | None = None,
) -> PruneResult:
    """Delete expired and excess ``*.json`` entries from one channel directory.

    Raises :class:`~interband.errors.ArgumentError` for a blank namespace or
    channel; every other failure is absorbed.
    """
    settings = resolve_config(config)
    directory = channel_dir(namespace, channel, settings)
    try:
        directory.stat()
    except FileNotFoundError:
        logger.debug("channel %s does not exist, nothing to prune", directory)
        return PruneResult(channel_dir=directory)
    except OSError as exc:
        logger.warning("could not stat channel %s: %s", directory, exc)
        return PruneResult(channel_dir=directory, failures=1)

    current = time.time() if now is None else now
    stamp = directory / PRUNE_STAMP_NAME
    if _stamp_is_fresh(stamp, current, settings.prune_interval_secs):
        logger.debug("prune of %s throttled", directory)
        return PruneResult(channel_dir=directory, throttled=True)

    # The stamp records the last attempt, so a failed listing still throttles.
    failures = 0 if _touch(stamp) else 1

    retention = max(0, settings.retention_seconds(namespace, channel))
    max_files = settings.max_files_for(namespace, channel)

    survivors: list[tuple[int, str]] = []
    expired: list[Path] = []
    scanned = 0
    try:
        with os.scandir(directory) as entries:
            for entry in entries:
                if not entry.name.endswith(".json"):
                    continue
                try:
                    if not entry.is_file(follow_symlinks=False):
                        continue
                    info = entry.stat(follow_symlinks=False)
                except OSError:
                    continue
                scanned += 1
                if current - info.st_mtime > retention:
                    if _remove(entry.path):
                        expired.append(Path(entry.path))
                    else:
                        failures += 1
                    continue
                survivors.append((info.st_mtime_ns, entry.path))
    except OSError as exc:
        logger.warning("could not list %s: %s", directory, exc)
        return PruneResult(
            channel_dir=directory,
            ran=True,
            scanned=scanned,
            expired=tuple(expired),
            retained=len(survivors),
            failures=failures + 1,
        )

    evicted: list[Path] = []
    if max_files > 0 and len(survivors) > max_files:
        # Newest first; equal mtimes fall back to the path so runs are repeatable.
        survivors.sort(reverse=True)
        for _, entry_path in survivors[max_files:]:
            if _remove(entry_path):
                evicted.append(Path(entry_path))
            else:
                failures += 1

    result = PruneResult(
        channel_dir=directory,
        ran=True,
        scanned=scanned,
        expired=tuple(expired),
        evicted=tuple(evicted),
        retained=len(survivors) - len(evicted),
        failures=failures,
    )
    if result.deleted:
        logger.info(
            "pruned %s: %d expired, %d over cap of %d, %d retained",
            directory,
            len(expired),
            len(evicted),
            max_files,
            result.retained,
        )
    return result
