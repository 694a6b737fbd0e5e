"""Tests for the format library."""

import io

import pytest

from cas_install.tool.format import PrintFormatter, YamlFormatter


def test_print_formatter_no_keys() -> None:
    """Tests with no columns."""
    assert list(PrintFormatter(keys=[]).format([{"kind": "RunTask"}])) == []


def test_print_formatter_columns() -> None:
    """Tests columns are aligned to the widest value."""
    assert list(
        PrintFormatter(keys=["kind", "name"]).format(
            [
                {"kind": "CASTemplate", "name": "cstor-volume-read-default-0.7.0"},
                {"kind": "RunTask", "name": "cstor-volume-read-output-default-0.7.0"},
            ]
        )
    ) == [
        "KIND           NAME                                      ",
        "CASTemplate    cstor-volume-read-default-0.7.0           ",
        "RunTask        cstor-volume-read-output-default-0.7.0    ",
    ]


def test_print_formatter() -> None:
    """Print formatting with empty data."""
    formatter = PrintFormatter()
    assert list(formatter.format([])) == []


def test_print_formatter_data() -> None:
    """Print formatting data objects."""
    formatter = PrintFormatter()
    assert list(
        formatter.format(
            [
                {"version": "0.7.0", "artifacts": 27},
                {"version": "0.8.0", "artifacts": 3},
            ]
        )
    ) == [
        "VERSION    ARTIFACTS    ",
        "0.7.0      27           ",
        "0.8.0      3            ",
    ]


def test_print_formatter_keys() -> None:
    """Print formatting with column names and missing values."""
    formatter = PrintFormatter(keys=["name", "namespace"])
    assert list(
        formatter.format(
            [
                {"kind": "CASTemplate", "name": "template", "namespace": None},
                {"kind": "RunTask", "name": "task", "namespace": "openebs"},
            ],
        )
    ) == [
        "NAME        NAMESPACE    ",
        "template                 ",
        "task        openebs      ",
    ]


def test_yaml_formatter() -> None:
    """Yaml formatting of a document per object."""
    formatter = YamlFormatter()
    assert list(
        formatter.format(
            [
                {"kind": "CASTemplate", "metadata": {"name": "template"}},
                {"kind": "RunTask", "metadata": {"name": "task"}},
            ]
        )
    ) == [
        "---",
        "kind: CASTemplate",
        "metadata:",
        "  name: template",
        "---",
        "kind: RunTask",
        "metadata:",
        "  name: task",
        "",
    ]


def test_print_formatter_writes_to_current_stdout(
    capsys: pytest.CaptureFixture[str],
) -> None:
    """Tests output goes to stdout as it is when printing."""
    PrintFormatter().print([{"version": "0.7.0"}])
    YamlFormatter().print([{"kind": "RunTask"}])
    assert capsys.readouterr().out == (
        "VERSION    \n0.7.0      \n---\nkind: RunTask\n"
    )


def test_print_formatter_file() -> None:
    """Tests output to a given file."""
    out = io.StringIO()
    PrintFormatter().print([{"version": "0.7.0"}], file=out)
    YamlFormatter().print([{"kind": "RunTask"}], file=out)
    assert out.getvalue() == "VERSION    \n0.7.0      \n---\nkind: RunTask\n"
