"""Tests for the flag policy."""

import pytest

from repofarm.domain import Operation, RepoEntry, RepoFlag
from repofarm.services.policy import ineligible_reason, is_eligible, required_flags


def entry(*flags):
    return RepoEntry(name="gg", path="/src", flags=frozenset(flags))


class TestIsEligible:
    """Tests for is_eligible."""

    @pytest.mark.parametrize("operation", list(Operation))
    def test_no_flags_means_every_operation(self, operation):
        assert is_eligible(entry(), operation)

    def test_clone_needs_clone_flag(self):
        assert is_eligible(entry(RepoFlag.CLONE), Operation.CLONE)
        assert not is_eligible(entry(RepoFlag.PUSH), Operation.CLONE)

    def test_pull_needs_pull_flag(self):
        assert is_eligible(entry(RepoFlag.PULL), Operation.PULL)
        assert not is_eligible(entry(RepoFlag.CLONE), Operation.PULL)

    def test_push_family_needs_push_flag(self):
        pusher = entry(RepoFlag.PUSH)
        for operation in (Operation.PUSH, Operation.ADD, Operation.COMMIT):
            assert is_eligible(pusher, operation)
            assert not is_eligible(entry(RepoFlag.PULL), operation)

    def test_quick_needs_pull_and_push(self):
        assert is_eligible(entry(RepoFlag.PULL, RepoFlag.PUSH), Operation.QUICK)
        assert not is_eligible(entry(RepoFlag.PUSH), Operation.QUICK)

    def test_message_flags_do_not_enable_operations(self):
        assert not is_eligible(entry(RepoFlag.QUICK), Operation.PUSH)
        assert not is_eligible(entry(RepoFlag.FAST), Operation.CLONE)

    def test_link_operations_need_nothing(self):
        assert required_flags(Operation.LINK) == frozenset()
        assert is_eligible(entry(RepoFlag.CLONE), Operation.UNLINK)


class TestIneligibleReason:
    """Tests for the skip reason text."""

    def test_names_missing_flags(self):
        reason = ineligible_reason(entry(RepoFlag.CLONE), Operation.QUICK)
        assert reason == "quick not enabled (missing flag: pull, push)"
