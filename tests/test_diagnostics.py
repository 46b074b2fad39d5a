"""Tests for error to diagnostic translation."""

from keyward import (
    DiagnosticSeverity,
    KeyNotFoundError,
    WaitTimeoutError,
    diagnostics_from_error,
)


def test_no_error_gives_no_diagnostics():
    assert diagnostics_from_error(None) == []


def test_single_error():
    """Test a plain exception becomes one error diagnostic."""
    diagnostics = diagnostics_from_error(RuntimeError("boom"))

    assert len(diagnostics) == 1
    assert diagnostics[0].summary == "Error"
    assert diagnostics[0].detail == "boom"
    assert diagnostics[0].severity == DiagnosticSeverity.ERROR


def test_timeout_and_api_errors_are_distinguishable():
    """Test timeouts and API failures get different summaries."""
    timeout = diagnostics_from_error(WaitTimeoutError(20, 100))[0]
    not_found = diagnostics_from_error(KeyNotFoundError("kid"))[0]

    assert timeout.summary == "Timed out"
    assert "did not complete within the expected time" in timeout.detail
    assert not_found.summary == "Key not found"


def test_exception_group_is_flattened():
    """Test each member of a (nested) group becomes a diagnostic."""
    group = ExceptionGroup(
        "several",
        [ValueError("first"), ExceptionGroup("inner", [KeyError("second"), RuntimeError("third")])],
    )

    diagnostics = diagnostics_from_error(group)

    assert [d.detail for d in diagnostics] == ["first", "'second'", "third"]


def test_single_member_group():
    diagnostics = diagnostics_from_error(ExceptionGroup("one", [RuntimeError("only")]))
    assert [d.detail for d in diagnostics] == ["only"]
