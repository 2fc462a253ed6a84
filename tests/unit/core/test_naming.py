"""Tests for branch name sequences and ref-name validation."""

import pytest

from branchfleet.core.errors import ConfigurationError
from branchfleet.core.naming import BranchSpec, validate_branch_name


def test_names_are_contiguous_and_in_order() -> None:
    spec = BranchSpec(prefix="dummy-", start=1, count=3)

    assert list(spec.names()) == ["dummy-1", "dummy-2", "dummy-3"]


def test_names_honor_start_index() -> None:
    spec = BranchSpec(prefix="load/", start=98, count=3)

    assert list(spec.names()) == ["load/98", "load/99", "load/100"]
    assert spec.end == 100


def test_zero_count_yields_nothing() -> None:
    spec = BranchSpec(prefix="dummy-", start=1, count=0)

    assert list(spec.names()) == []
    assert spec.describe() == "(no branches)"
    spec.validate()


def test_describe_shows_first_and_last() -> None:
    assert BranchSpec(prefix="dummy-", start=5, count=10).describe() == "dummy-5 .. dummy-14"


def test_negative_count_rejected() -> None:
    with pytest.raises(ConfigurationError, match="count must be >= 0"):
        BranchSpec(prefix="dummy-", start=1, count=-1).validate()


def test_negative_start_rejected() -> None:
    with pytest.raises(ConfigurationError, match="Start index"):
        BranchSpec(prefix="dummy-", start=-2, count=1).validate()


@pytest.mark.parametrize(
    "prefix",
    ["bad name-", "feat..", "-lead", "x~", ".hidden/", "a//b"],
)
def test_invalid_prefix_rejected(prefix: str) -> None:
    with pytest.raises(ConfigurationError, match="Invalid branch name"):
        BranchSpec(prefix=prefix, start=1, count=2).validate()


@pytest.mark.parametrize("name", ["main", "feature/load-1", "dummy-200", "release_1.2"])
def test_valid_names_accepted(name: str) -> None:
    validate_branch_name(name)


@pytest.mark.parametrize("name", ["", "@", "topic.lock", "trailing/", "a@{b"])
def test_invalid_names_rejected(name: str) -> None:
    with pytest.raises(ConfigurationError):
        validate_branch_name(name)
