"""Helpers for condition sets and status comparison.

A condition set holds at most one condition per type. Conditions are
merged by type, never replaced wholesale, and two statuses are equal when
their type-keyed contents match regardless of list order.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

import yaml

from opstatus.status.models import Condition, ConditionStatus, ConditionType, OperatorStatus


def utcnow() -> datetime:
    """Return timezone-aware UTC datetime, truncated to whole seconds."""
    return datetime.now(UTC).replace(microsecond=0)


def find_status_condition(
    conditions: list[Condition], condition_type: ConditionType | str
) -> Condition | None:
    """Return the condition of the given type, or ``None``."""
    for condition in conditions:
        if condition.type == condition_type:
            return condition
    return None


def set_status_condition(conditions: list[Condition], new: Condition) -> None:
    """Merge ``new`` into ``conditions`` in place.

    An existing condition of the same type is replaced in its slot; the
    transition time moves only when the status value changes. Otherwise
    the condition is appended.
    """
    for index, existing in enumerate(conditions):
        if existing.type != new.type:
            continue
        if existing.status == new.status:
            transition = existing.last_transition_time
        else:
            transition = utcnow()
        conditions[index] = new.model_copy(update={"last_transition_time": transition})
        return

    conditions.append(new.model_copy(update={"last_transition_time": utcnow()}))


def is_condition_true(conditions: list[Condition], condition_type: ConditionType | str) -> bool:
    condition = find_status_condition(conditions, condition_type)
    return condition is not None and condition.status == ConditionStatus.TRUE


# ── Structural equality ──────────────────────────────────────────────────


def _condition_key(condition: Condition) -> tuple:
    return (
        condition.status,
        condition.reason,
        condition.message,
        condition.last_transition_time,
    )


def status_fingerprint(status: OperatorStatus) -> dict[str, Any]:
    """Order-insensitive view of a status used for idempotence checks."""
    return {
        "conditions": {c.type: _condition_key(c) for c in status.conditions},
        "versions": {v.name: v.version for v in status.versions},
        "related_objects": frozenset(
            (r.group, r.resource, r.namespace, r.name) for r in status.related_objects
        ),
    }


def status_equal(left: OperatorStatus, right: OperatorStatus) -> bool:
    """True when both statuses carry the same conditions, versions and related objects."""
    return status_fingerprint(left) == status_fingerprint(right)


# ── Rendering ────────────────────────────────────────────────────────────


def render_conditions(conditions: list[Condition]) -> str:
    """Render a condition set as YAML for log lines."""
    payload = [
        c.model_dump(mode="json", by_alias=True, exclude_none=True) for c in conditions
    ]
    try:
        return yaml.safe_dump(payload, default_flow_style=False, sort_keys=False)
    except yaml.YAMLError as exc:
        return f"(failed to convert to YAML: {exc})"


__all__ = [
    "find_status_condition",
    "set_status_condition",
    "is_condition_true",
    "status_fingerprint",
    "status_equal",
    "render_conditions",
]
