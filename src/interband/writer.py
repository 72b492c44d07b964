from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Mapping

from interband.config import InterbandConfig, resolve_config
from interband.envelope import Envelope, encode_envelope, utc_timestamp
from interband.errors import ArgumentError
from interband.schema import validate_payload

logger = logging.getLogger(__name__)

TEMP_PREFIX = ".interband-tmp."


def write(
    target_path: str | os.PathLike[str],
    namespace: str,
    type_: str,
    session_id: str | None,
    payload: Mapping[str, Any],
    *,
    config: InterbandConfig | None = None,
) -> Path:
    """Validate *payload* and atomically replace *target_path* with a new envelope.

    The envelope is written to a temp file in the target's directory and then
    renamed over the target, so readers see either the old or the new file in
    full. Nothing touches disk when validation fails.
    """
    if not str(target_path).strip():
        raise ArgumentError("target path is required")
    if not namespace.strip() or not type_.strip():
        raise ArgumentError("namespace and type are required")
    validate_payload(namespace, type_, payload)

    settings = resolve_config(config)
    destination = Path(target_path)
    destination.parent.mkdir(parents=True, exist_ok=True)

    envelope = Envelope(
        version=settings.protocol_version,
        namespace=namespace,
        type=type_,
        session_id=session_id or "",
        timestamp=utc_timestamp(),
        payload=dict(payload),
    )

    fd, tmp_path = tempfile.mkstemp(dir=str(destination.parent), prefix=TEMP_PREFIX)
    try:
        try:
            handle = os.fdopen(fd, "w", encoding="utf-8")
        except BaseException:
            os.close(fd)
            raise
        with handle:
            handle.write(encode_envelope(envelope))
        os.replace(tmp_path, destination)
    except BaseException:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise
    logger.debug("wrote %s:%s envelope to %s", namespace, type_, destination)
    return destination
