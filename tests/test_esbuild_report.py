import logging

import pytest

from crux.esbuild_report import (
    Location,
    Message,
    ReportEntry,
    Severity,
    format_location,
    lower_first,
    normalize_and_sort,
    normalize_message,
    process_build_result,
)
from crux.validate import BuildError


@pytest.mark.parametrize("text, expected", [("Hello", "hello"), ("", ""), ("already", "already")])
def test_lower_first(text, expected):
    assert lower_first(text) == expected


def test_lower_first_only_touches_first():
    result = lower_first("ABC")
    assert result[1:] == "BC"
    assert result[0] == "a"


def test_format_location_with_file():
    assert format_location(Location("src/app.tsx", 3, 7)) == "src/app.tsx:3:7"


def test_format_location_without_file():
    assert format_location(Location("", 3, 7)) == "(unknown)"


def test_normalize_message_with_location():
    loc = Location("a.js", 10, 2)
    entry = normalize_message(Message("Unexpected token", loc), Severity.ERROR)
    assert entry == ReportEntry(
        Severity.ERROR, f"{format_location(loc)}: {lower_first('Unexpected token')}", 10, 2
    )


def test_normalize_message_without_location():
    entry = normalize_message(Message("Something odd"), Severity.WARNING)
    assert entry == ReportEntry(Severity.WARNING, lower_first("Something odd"), 0, 0)


def test_sort_order_and_stability():
    errors = [Message("e-late", Location("f", 5, 1)), Message("e-same", Location("f", 2, 4))]
    warnings = [Message("w-same", Location("f", 2, 4)), Message("w-early", Location("f", 2, 1)),
                Message("w-none")]
    entries = normalize_and_sort(errors, warnings)
    positions = [(e.line, e.column) for e in entries]
    assert positions == sorted(positions)
    assert entries[0].message == "w-none"
    same = [e.severity for e in entries if (e.line, e.column) == (2, 4)]
    assert same == [Severity.ERROR, Severity.WARNING]
    assert len(entries) == len(errors) + len(warnings)


def test_clean_build():
    assert process_build_result([], []) == []


def test_warnings_only(caplog):
    with caplog.at_level(logging.WARNING, logger="crux.esbuild_report"):
        entries = process_build_result([], [Message("Unused import", Location("x.ts", 1, 1))])
    assert [e.severity for e in entries] == [Severity.WARNING]
    assert "build completed with 1 warning(s)" in caplog.text


def test_errors_raise(caplog):
    with caplog.at_level(logging.ERROR, logger="crux.esbuild_report"):
        with pytest.raises(BuildError) as info:
            process_build_result([Message("Bad"), Message("Worse")], [Message("Meh")])
    assert "2 error(s) encountered during the build process" in str(info.value)
    assert lower_first("Worse") in caplog.text