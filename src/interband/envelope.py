from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping

from interband.errors import DecodeError, ValidationError, VersionError
from interband.schema import validate_payload

SUPPORTED_MAJOR_PREFIX = "1."
WIRE_FIELDS = ("version", "namespace", "type", "session_id", "timestamp", "payload")


def utc_timestamp(now: datetime | None = None) -> str:
    """Format *now* (default: current time) as ``YYYY-MM-DDTHH:MM:SSZ``."""
    value = now or datetime.now(timezone.utc)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _parse_timestamp(value: str) -> datetime | None:
    text = value[:-1] + "+00:00" if value.endswith("Z") else value
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _string_field(data: Mapping[str, Any], name: str) -> str:
    value = data.get(name)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError(f"{name} must be a string", field=name)
    return value


@dataclass(frozen=True)
class Envelope:
    """The versioned wrapper persisted for every message."""

    version: str
    namespace: str
    type: str
    session_id: str
    timestamp: str
    payload: dict[str, Any] | None = field(hash=False)
    extra: dict[str, Any] = field(default_factory=dict, hash=False)

    @property
    def major_version(self) -> str:
        return self.version.split(".", 1)[0]

    @property
    def parsed_timestamp(self) -> datetime | None:
        return _parse_timestamp(self.timestamp)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "version": self.version,
            "namespace": self.namespace,
            "type": self.type,
            "session_id": self.session_id,
            "timestamp": self.timestamp,
            "payload": self.payload,
        }
        for key, value in self.extra.items():
            data.setdefault(key, value)
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Envelope:
        payload = data.get("payload")
        if payload is not None and not isinstance(payload, dict):
            raise ValidationError("payload must be an object", field="payload")
        return cls(
            version=_string_field(data, "version"),
            namespace=_string_field(data, "namespace"),
            type=_string_field(data, "type"),
            session_id=_string_field(data, "session_id"),
            timestamp=_string_field(data, "timestamp"),
            payload=payload,
            extra={key: value for key, value in data.items() if key not in WIRE_FIELDS},
        )


def validate_envelope(envelope: Envelope) -> None:
    """Check the envelope structure, then its payload contract.

    Unknown top-level fields are tolerated so that newer 1.x producers stay
    readable by older consumers.
    """
    if not envelope.version.startswith(SUPPORTED_MAJOR_PREFIX):
        raise VersionError(envelope.version)
    if not envelope.namespace.strip():
        raise ValidationError("namespace is required", field="namespace")
    if not envelope.type.strip():
        raise ValidationError("type is required", field="type")
    if not envelope.timestamp.strip():
        raise ValidationError("timestamp is required", field="timestamp")
    if envelope.payload is None:
        raise ValidationError("payload must be an object", field="payload")
    validate_payload(envelope.namespace, envelope.type, envelope.payload)


def encode_envelope(envelope: Envelope) -> str:
    try:
        text = json.dumps(envelope.to_dict(), ensure_ascii=False, allow_nan=False, separators=(",", ":"))
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"envelope is not JSON-serializable: {exc}", field="payload") from exc
    return text + "\n"


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


def decode_envelope(raw: str | bytes) -> Envelope:
    try:
        data = json.loads(raw, parse_constant=_reject_constant)
    except ValueError as exc:
        raise DecodeError(f"malformed envelope JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise DecodeError("envelope must be a JSON object")
    return Envelope.from_dict(data)
