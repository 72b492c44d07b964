from __future__ import annotations

from pathlib import Path
from typing import Any, Iterator, Mapping

from interband import paths
from interband.config import InterbandConfig
from interband.envelope import Envelope
from interband.prune import PruneResult, prune_channel
from interband.reader import iter_channel, read_envelope, read_payload
from interband.writer import write


class InterbandStore:
    """Sideband message store rooted at one configured directory.

    Layout is ``{root}/{namespace}/{channel}/{safe_key}.json``. Writes replace
    a key wholesale, so each key holds only its latest envelope.
    """

    def __init__(self, config: InterbandConfig | None = None) -> None:
        self.config = config if config is not None else InterbandConfig.from_env()

    @property
    def root(self) -> Path:
        return self.config.root

    def channel_dir(self, namespace: str, channel: str) -> Path:
        return paths.channel_dir(namespace, channel, self.config)

    def path(self, namespace: str, channel: str, key: str) -> Path:
        return paths.path(namespace, channel, key, self.config)

    def publish(
        self,
        namespace: str,
        channel: str,
        key: str,
        type_: str,
        payload: Mapping[str, Any],
        *,
        session_id: str = "",
        prune: bool = False,
    ) -> Path:
        """Write *payload* under *key* and return the entry path.

        With ``prune=True`` a throttled prune of the channel follows the write.
        """
        destination = write(
            self.path(namespace, channel, key),
            namespace,
            type_,
            session_id,
            payload,
            config=self.config,
        )
        if prune:
            self.prune(namespace, channel)
        return destination

    def read(self, namespace: str, channel: str, key: str) -> Envelope:
        return read_envelope(self.path(namespace, channel, key))

    def read_payload(self, namespace: str, channel: str, key: str) -> dict[str, Any]:
        return read_payload(self.path(namespace, channel, key))

    def iter_channel(self, namespace: str, channel: str) -> Iterator[tuple[Path, Envelope]]:
        """Stream the valid envelopes of a channel, newest first."""
        return iter_channel(namespace, channel, config=self.config)

    def prune(self, namespace: str, channel: str, now: float | None = None) -> PruneResult:
        return prune_channel(namespace, channel, config=self.config, now=now)
