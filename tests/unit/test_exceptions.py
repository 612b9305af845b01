"""Tests for the custom exception hierarchy."""

import pytest

from onboard_heuristics.exceptions import (
    CannotProvideError,
    ConfigError,
    OnboardError,
    OperationInterruptedError,
    RepoError,
    ValidationError,
)

EXCEPTION_CLASSES = [
    ConfigError,
    ValidationError,
    RepoError,
    CannotProvideError,
    OperationInterruptedError,
]


class TestExceptionHierarchy:
    """Tests for exception types, inheritance, and message handling."""

    @pytest.mark.parametrize("exc_class", EXCEPTION_CLASSES)
    def test_each_exception_is_caught_by_onboard_error(self, exc_class):
        with pytest.raises(OnboardError):
            raise exc_class("caught by base")

    @pytest.mark.parametrize("exc_class", EXCEPTION_CLASSES)
    def test_each_exception_inherits_from_onboard_error(self, exc_class):
        assert issubclass(exc_class, OnboardError)

    def test_onboard_error_inherits_from_exception(self):
        assert issubclass(OnboardError, Exception)

    @pytest.mark.parametrize("exc_class", [OnboardError, *EXCEPTION_CLASSES])
    def test_str_returns_message(self, exc_class):
        msg = "check str output"
        assert str(exc_class(msg)) == msg

    def test_interruption_is_not_a_repo_error(self):
        assert not issubclass(OperationInterruptedError, RepoError)

    def test_catching_onboard_error_does_not_catch_unrelated_exceptions(self):
        with pytest.raises(ValueError):
            try:
                raise ValueError("unrelated")
            except OnboardError:
                pytest.fail("OnboardError should not catch ValueError")


class TestRepoError:
    """Tests for the git failure details carried by RepoError."""

    def test_defaults(self):
        err = RepoError("git failed")
        assert err.command == []
        assert err.returncode is None
        assert err.stderr == ""

    def test_carries_command_details(self):
        err = RepoError(
            "fetch failed",
            command=["git", "fetch", "origin"],
            returncode=128,
            stderr="fatal: couldn't find remote ref",
        )
        assert err.command == ["git", "fetch", "origin"]
        assert err.returncode == 128
        assert "remote ref" in err.stderr
        assert str(err) == "fetch failed"
