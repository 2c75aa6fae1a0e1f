"""Table-driven validation of sensor metadata payloads.

Each input type owns a tuple of ``FieldRule`` entries mapping a dotted field path
to a predicate. ``validate_payload`` walks the table once and returns every
violated field, so handlers never check fields inline.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Mapping, Sequence

_MISSING = object()


@dataclass(frozen=True)
class FieldRule:
    path: str
    check: Callable[[Any], bool]
    required: bool = True


@dataclass(frozen=True)
class FieldViolation:
    path: str
    reason: str  # "required" or "invalid"

    def __str__(self) -> str:
        return f"'{self.path}' is {self.reason}"


def _is_non_empty_string(value: Any) -> bool:
    return isinstance(value, str) and value != ""


def _is_object(value: Any) -> bool:
    return isinstance(value, Mapping)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def _is_string_list(value: Any) -> bool:
    return isinstance(value, list) and all(isinstance(item, str) for item in value)


SENSOR_METADATA_RULES: tuple[FieldRule, ...] = (
    FieldRule("name", _is_non_empty_string),
    FieldRule("location", _is_object),
    FieldRule("location.latitude", _is_number),
    FieldRule("location.longitude", _is_number),
    FieldRule("tags", _is_string_list, required=False),
)

SENSOR_METADATA_UPDATE_RULES: tuple[FieldRule, ...] = (
    FieldRule("id", _is_positive_int),
    *SENSOR_METADATA_RULES,
)


def _lookup(data: Mapping[str, Any], path: str) -> Any:
    current: Any = data
    for part in path.split("."):
        if not isinstance(current, Mapping) or part not in current:
            return _MISSING
        current = current[part]
    return current


def validate_payload(
    data: Mapping[str, Any], rules: Sequence[FieldRule]
) -> list[FieldViolation]:
    """Return the violated fields of ``data`` according to ``rules``.

    A JSON ``null`` counts as absent. Children of a field that already failed are
    not reported again.
    """
    violations: list[FieldViolation] = []
    failed: set[str] = set()
    for rule in rules:
        parent = rule.path.rpartition(".")[0]
        if parent and parent in failed:
            failed.add(rule.path)
            continue
        value = _lookup(data, rule.path)
        if value is _MISSING or value is None:
            if rule.required:
                violations.append(FieldViolation(rule.path, "required"))
                failed.add(rule.path)
            continue
        if not rule.check(value):
            violations.append(FieldViolation(rule.path, "invalid"))
            failed.add(rule.path)
    return violations


def format_violations(violations: Sequence[FieldViolation]) -> str:
    return "Validation failed: " + "; ".join(str(v) for v in violations)
