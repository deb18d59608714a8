"""Unit tests for ballot selection validation."""

import uuid

import pytest

from condo_voting.core.errors import InvalidSelectionError
from condo_voting.lib.ledger import validate_selection

YES, NO, ABSTAIN = uuid.uuid4(), uuid.uuid4(), uuid.uuid4()
OPTIONS = {YES, NO, ABSTAIN}


class TestSingleChoice:
    """single_choice polls take exactly one option."""

    def test_one_option_is_accepted(self) -> None:
        assert validate_selection("single_choice", [NO], OPTIONS) == [NO]

    def test_two_options_are_rejected(self) -> None:
        with pytest.raises(InvalidSelectionError, match="exactly one option, got 2"):
            validate_selection("single_choice", [YES, NO], OPTIONS)


class TestMultiChoice:
    """multi_choice polls take one or more distinct options."""

    def test_order_is_preserved(self) -> None:
        assert validate_selection("multi_choice", [ABSTAIN, YES], OPTIONS) == [ABSTAIN, YES]

    def test_single_option_is_accepted(self) -> None:
        assert validate_selection("multi_choice", [YES], OPTIONS) == [YES]

    def test_duplicates_are_rejected(self) -> None:
        with pytest.raises(InvalidSelectionError, match="more than once"):
            validate_selection("multi_choice", [YES, YES], OPTIONS)


class TestCommonRules:
    """Rules shared by both poll types."""

    @pytest.mark.parametrize("poll_type", ["single_choice", "multi_choice"])
    def test_empty_selection_is_rejected(self, poll_type: str) -> None:
        with pytest.raises(InvalidSelectionError, match="at least one option"):
            validate_selection(poll_type, [], OPTIONS)

    @pytest.mark.parametrize("poll_type", ["single_choice", "multi_choice"])
    def test_foreign_option_is_rejected(self, poll_type: str) -> None:
        foreign = uuid.uuid4()
        with pytest.raises(InvalidSelectionError, match=str(foreign)):
            validate_selection(poll_type, [foreign], OPTIONS)

    def test_partly_foreign_selection_is_rejected(self) -> None:
        with pytest.raises(InvalidSelectionError):
            validate_selection("multi_choice", [YES, uuid.uuid4()], OPTIONS)
