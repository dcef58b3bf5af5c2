"""Unit tests for the issue report status table."""

import pytest

from wastewise.issues.service import ISSUE_TRANSITIONS, validate_issue_transition
from wastewise.points.errors import InvalidTransition


class TestIssueTransitions:
    def test_closed_is_terminal(self):
        assert ISSUE_TRANSITIONS["closed"] == []

    @pytest.mark.parametrize(
        ("current", "target"),
        [
            ("open", "in_progress"),
            ("open", "closed"),
            ("in_progress", "resolved"),
            ("in_progress", "closed"),
            ("resolved", "closed"),
        ],
    )
    def test_allowed(self, current, target):
        validate_issue_transition(current, target)

    @pytest.mark.parametrize(
        ("current", "target"),
        [
            ("open", "resolved"),
            ("resolved", "open"),
            ("resolved", "in_progress"),
            ("closed", "open"),
            ("unknown", "closed"),
        ],
    )
    def test_rejected(self, current, target):
        with pytest.raises(InvalidTransition):
            validate_issue_transition(current, target)
