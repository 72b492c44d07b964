"""Payload contracts for the known ``namespace:type`` pairs.

Unknown pairs are accepted as long as the payload is an object, so producers
can introduce new message kinds without coordinating a release.
"""

from __future__ import annotations

from typing import Any, Callable, Mapping

from interband.errors import ValidationError

PayloadValidator = Callable[[Mapping[str, Any]], None]

ALLOWED_PHASES = frozenset(
    {
        "brainstorm",
        "brainstorm-reviewed",
        "strategized",
        "planned",
        "plan-reviewed",
        "executing",
        "shipping",
        "done",
    }
)


def is_non_empty_string(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_non_negative_number(value: Any) -> bool:
    return is_number(value) and value >= 0


def _require_strings(subject: str, payload: Mapping[str, Any], keys: tuple[str, ...]) -> None:
    for key in keys:
        if not is_non_empty_string(payload.get(key)):
            raise ValidationError(f"{subject}: {key} must be a non-empty string", field=key)


def _require_non_negative(subject: str, payload: Mapping[str, Any], keys: tuple[str, ...]) -> None:
    for key in keys:
        if not is_non_negative_number(payload.get(key)):
            raise ValidationError(f"{subject}: {key} must be a non-negative number", field=key)


def _validate_bead_phase(payload: Mapping[str, Any]) -> None:
    subject = "interphase/bead_phase"
    _require_strings(subject, payload, ("id", "phase"))
    phase = payload["phase"]
    if phase not in ALLOWED_PHASES:
        raise ValidationError(f"{subject}: unknown phase {phase!r}", field="phase")
    reason = payload.get("reason")
    if reason is not None and not isinstance(reason, str):
        raise ValidationError(f"{subject}: reason must be a string", field="reason")
    if not is_number(payload.get("ts")):
        raise ValidationError(f"{subject}: ts must be numeric", field="ts")


def _validate_dispatch(payload: Mapping[str, Any]) -> None:
    subject = "clavain/dispatch"
    _require_strings(subject, payload, ("name", "workdir", "activity"))
    _require_non_negative(subject, payload, ("started", "turns", "commands", "messages"))


def _validate_coordination_signal(payload: Mapping[str, Any]) -> None:
    subject = "interlock/coordination_signal"
    # ts is a string here, unlike bead_phase where it is numeric.
    _require_strings(subject, payload, ("layer", "icon", "text", "ts"))
    _require_non_negative(subject, payload, ("priority",))


CONTRACTS: Mapping[tuple[str, str], PayloadValidator] = {
    ("interphase", "bead_phase"): _validate_bead_phase,
    ("clavain", "dispatch"): _validate_dispatch,
    ("interlock", "coordination_signal"): _validate_coordination_signal,
}
KNOWN_CONTRACTS = frozenset(CONTRACTS)


def validate_payload(namespace: str, type_: str, payload: Any) -> None:
    """Raise :class:`ValidationError` unless *payload* satisfies its contract."""
    if not isinstance(payload, Mapping):
        raise ValidationError("payload must be an object", field="payload")
    validator = CONTRACTS.get((namespace, type_))
    if validator is not None:
        validator(payload)
