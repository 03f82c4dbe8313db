"""Tests for taskfsm.core.errors module."""

import pytest

from taskfsm.core import (
    AlreadyStartedError,
    DefinitionError,
    FSMError,
    GuardRejectedError,
    IllegalTransitionError,
)


class TestErrorHierarchy:
    """All taskfsm errors share one base class."""

    @pytest.mark.parametrize(
        "error_cls",
        [AlreadyStartedError, DefinitionError, GuardRejectedError, IllegalTransitionError],
    )
    def test_inherits_from_fsm_error(self, error_cls):
        assert issubclass(error_cls, FSMError)

    def test_definition_error_is_value_error(self):
        """Malformed schemas are bad values."""
        assert issubclass(DefinitionError, ValueError)

    def test_guard_rejection_is_not_illegal_transition(self):
        """Callers must be able to tell the two apart."""
        assert not issubclass(GuardRejectedError, IllegalTransitionError)
        assert not issubclass(IllegalTransitionError, GuardRejectedError)


class TestDefinitionError:
    def test_lists_problems_in_message(self):
        err = DefinitionError("Bad schema", ["name: missing", "transitions: missing"])

        assert err.errors == ["name: missing", "transitions: missing"]
        assert str(err) == "Bad schema: name: missing; transitions: missing"

    def test_message_without_problems(self):
        err = DefinitionError("Bad schema")

        assert err.errors == []
        assert str(err) == "Bad schema"


class TestTransitionErrors:
    def test_illegal_transition_reports_state_and_event(self):
        err = IllegalTransitionError("finished", "finish")

        assert err.state == "finished"
        assert err.event == "finish"
        assert "'finish'" in str(err)
        assert "'finished'" in str(err)

    def test_guard_rejected_reports_guard(self):
        err = GuardRejectedError("review", "approve", "amountBelow")

        assert err.guard == "amountBelow"
        assert err.state == "review"
        assert err.event == "approve"

    def test_already_started_reports_state(self):
        err = AlreadyStartedError("init")

        assert err.state == "init"
        assert "'init'" in str(err)
