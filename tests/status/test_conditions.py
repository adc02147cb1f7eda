"""Tests for condition set helpers and structural status equality."""

from datetime import UTC, datetime

import yaml

from opstatus.status.conditions import (
    find_status_condition,
    is_condition_true,
    render_conditions,
    set_status_condition,
    status_equal,
)
from opstatus.status.models import (
    Condition,
    ConditionStatus,
    ConditionType,
    ObjectReference,
    OperandVersion,
    OperatorStatus,
)


def _cond(type_, status=ConditionStatus.TRUE, reason="", message=""):
    return Condition(type=type_, status=status, reason=reason, message=message)


class TestSetStatusCondition:
    def test_appends_new_type(self):
        conditions = []
        set_status_condition(conditions, _cond(ConditionType.AVAILABLE))

        assert len(conditions) == 1
        assert conditions[0].last_transition_time is not None

    def test_replaces_same_type_in_place(self):
        conditions = [
            _cond(ConditionType.AVAILABLE),
            _cond(ConditionType.DEGRADED, ConditionStatus.FALSE),
        ]
        set_status_condition(
            conditions, _cond(ConditionType.AVAILABLE, ConditionStatus.FALSE, "Down", "gone")
        )

        assert [c.type for c in conditions] == [ConditionType.AVAILABLE, ConditionType.DEGRADED]
        assert conditions[0].status == ConditionStatus.FALSE
        assert conditions[0].reason == "Down"

    def test_leaves_other_types_untouched(self):
        available = _cond(ConditionType.AVAILABLE, reason="AsExpected", message="fine")
        conditions = [available]

        set_status_condition(conditions, _cond(ConditionType.DEGRADED, reason="Bad"))

        assert conditions[0] == available

    def test_foreign_type_is_kept_and_known_strings_match(self):
        foreign = Condition(type="EvaluationConditionsDetected", status=ConditionStatus.FALSE)
        conditions = [foreign, Condition(type="Available", status=ConditionStatus.TRUE)]

        set_status_condition(conditions, _cond(ConditionType.AVAILABLE, ConditionStatus.FALSE))

        assert conditions[0] == foreign
        assert conditions[1].type is ConditionType.AVAILABLE
        assert conditions[1].status == ConditionStatus.FALSE
        assert len(conditions) == 2

    def test_transition_time_kept_when_status_unchanged(self):
        stamp = datetime(2024, 1, 1, tzinfo=UTC)
        conditions = [
            Condition(
                type=ConditionType.PROGRESSING,
                status=ConditionStatus.TRUE,
                message="old",
                last_transition_time=stamp,
            )
        ]
        set_status_condition(conditions, _cond(ConditionType.PROGRESSING, message="new"))

        assert conditions[0].message == "new"
        assert conditions[0].last_transition_time == stamp

    def test_transition_time_moves_when_status_changes(self):
        stamp = datetime(2024, 1, 1, tzinfo=UTC)
        conditions = [
            Condition(
                type=ConditionType.PROGRESSING,
                status=ConditionStatus.TRUE,
                last_transition_time=stamp,
            )
        ]
        set_status_condition(conditions, _cond(ConditionType.PROGRESSING, ConditionStatus.FALSE))

        assert conditions[0].last_transition_time > stamp


class TestFind:
    def test_find_missing_returns_none(self):
        assert find_status_condition([], ConditionType.AVAILABLE) is None

    def test_is_condition_true(self):
        conditions = [_cond(ConditionType.PROGRESSING)]
        assert is_condition_true(conditions, ConditionType.PROGRESSING)
        assert not is_condition_true(conditions, ConditionType.AVAILABLE)


class TestStatusEqual:
    def test_condition_order_is_ignored(self):
        a = _cond(ConditionType.AVAILABLE)
        b = _cond(ConditionType.DEGRADED, ConditionStatus.FALSE)

        assert status_equal(OperatorStatus(conditions=[a, b]), OperatorStatus(conditions=[b, a]))

    def test_related_object_order_is_ignored(self):
        x = ObjectReference(resource="namespaces", name="openshift-sdn")
        y = ObjectReference(group="apps", resource="daemonsets", namespace="openshift-sdn", name="sdn")

        assert status_equal(
            OperatorStatus(related_objects=[x, y]), OperatorStatus(related_objects=[y, x])
        )

    def test_message_difference_is_detected(self):
        left = OperatorStatus(conditions=[_cond(ConditionType.PROGRESSING, message="a")])
        right = OperatorStatus(conditions=[_cond(ConditionType.PROGRESSING, message="b")])

        assert not status_equal(left, right)

    def test_version_difference_is_detected(self):
        left = OperatorStatus(versions=[OperandVersion(name="operator", version="1")])
        right = OperatorStatus(versions=[OperandVersion(name="operator", version="2")])

        assert not status_equal(left, right)
        assert not status_equal(left, OperatorStatus())


class TestRender:
    def test_renders_yaml_list(self):
        rendered = render_conditions(
            [_cond(ConditionType.DEGRADED, ConditionStatus.FALSE, "AsExpected", "ok")]
        )

        parsed = yaml.safe_load(rendered)
        assert parsed == [
            {"type": "Degraded", "status": "False", "reason": "AsExpected", "message": "ok"}
        ]
