"""Priority-tiered tracking of Degraded causes.

Several controllers may each report a reason for the component to be
Degraded. Only one Degraded condition can be published, so every cause is
stored in the slot of its ``StatusLevel`` and the highest priority
(lowest-valued) non-empty slot wins.

Example:
    >>> tracker = DegradedLevelTracker()
    >>> tracker.set_degraded(StatusLevel.POD_DEPLOYMENT, "RolloutHung", "...")
    >>> tracker.set_degraded(StatusLevel.CLUSTER_CONFIG, "InvalidConfig", "...")
    >>> tracker.resolve().reason
    'InvalidConfig'
"""

from __future__ import annotations

import threading

from opstatus.status.models import Condition, ConditionStatus, ConditionType, StatusLevel


def degraded_condition(reason: str, message: str) -> Condition:
    return Condition(
        type=ConditionType.DEGRADED,
        status=ConditionStatus.TRUE,
        reason=reason,
        message=message,
    )


class DegradedLevelTracker:
    """Fixed-size registry of per-level Degraded conditions."""

    def __init__(self) -> None:
        self._slots: list[Condition | None] = [None] * len(StatusLevel)
        self._lock = threading.Lock()

    def set_level(self, level: StatusLevel, condition: Condition | None) -> None:
        """Write (or clear, with ``None``) the slot for ``level``."""
        with self._lock:
            self._slots[StatusLevel(level)] = condition

    def set_degraded(self, level: StatusLevel, reason: str, message: str) -> None:
        self.set_level(level, degraded_condition(reason, message))

    def clear(self, level: StatusLevel) -> None:
        self.set_level(level, None)

    def get(self, level: StatusLevel) -> Condition | None:
        with self._lock:
            return self._slots[StatusLevel(level)]

    def active_level(self) -> StatusLevel | None:
        """The level whose condition ``resolve()`` currently returns, if any."""
        with self._lock:
            for level in StatusLevel:
                if self._slots[level] is not None:
                    return level
        return None

    def resolve(self) -> Condition:
        """Return the highest priority Degraded condition, or ``Degraded=False``."""
        with self._lock:
            for condition in self._slots:
                if condition is not None:
                    return condition
        return Condition(type=ConditionType.DEGRADED, status=ConditionStatus.FALSE)

    def __repr__(self) -> str:
        return f"DegradedLevelTracker(active_level={self.active_level()!r})"
