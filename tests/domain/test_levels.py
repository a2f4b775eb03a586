from __future__ import annotations

import logging

import pytest

from lib_log_syslog.domain.levels import Facility, Severity, compute_priority, resolve_facility, resolve_severity


@pytest.mark.parametrize(
    "name, expected",
    [
        ("emerg", 0),
        ("alert", 1),
        ("crit", 2),
        ("err", 3),
        ("warn", 4),
        ("notice", 5),
        ("info", 6),
        ("debug", 7),
    ],
)
def test_resolve_severity_accepts_names(name: str, expected: int) -> None:
    assert resolve_severity(name) == expected


@pytest.mark.parametrize("level", list(Severity))
def test_name_and_number_resolve_to_the_same_severity(level: Severity) -> None:
    assert resolve_severity(level.name) == resolve_severity(int(level)) == resolve_severity(level)


def test_resolve_severity_defaults_to_notice() -> None:
    assert resolve_severity(None) == Severity.notice


def test_severity_zero_is_not_treated_as_missing() -> None:
    assert resolve_severity(0) == Severity.emerg
    assert resolve_facility(0) == Facility.kern


def test_severity_names_are_case_sensitive(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="lib_log_syslog.domain.levels"):
        assert resolve_severity("ERR") == Severity.notice
    assert "Unknown severity name 'ERR'" in caplog.text


@pytest.mark.parametrize("number", [-1, 8, 42])
def test_out_of_range_numbers_pass_through(number: int) -> None:
    assert resolve_severity(number) == number
    assert resolve_facility(number) == number


@pytest.mark.parametrize(
    "name, expected",
    [("kern", 0), ("user", 1), ("mail", 2), ("uucp", 8), ("local0", 16), ("local7", 23)],
)
def test_resolve_facility_accepts_names(name: str, expected: int) -> None:
    assert resolve_facility(name) == expected


def test_resolve_facility_defaults_to_user() -> None:
    assert resolve_facility(None) == Facility.user
    assert resolve_facility("nonsense") == Facility.user


@pytest.mark.parametrize("facility", list(Facility))
@pytest.mark.parametrize("severity", list(Severity))
def test_priority_combines_facility_and_severity(facility: Facility, severity: Severity) -> None:
    priority = compute_priority(facility, severity)
    assert priority == int(facility) * 8 + int(severity)
    assert 0 <= priority <= 191


def test_severity_order_puts_most_severe_first() -> None:
    assert sorted(Severity)[0] is Severity.emerg
    assert Severity.err < Severity.warn < Severity.debug
