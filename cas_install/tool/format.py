"""Library for formatting command output."""

from collections.abc import Generator
from typing import Any, TextIO

import yaml


PADDING = 4


class PrintFormatter:
    """A formatter that prints a table with a column per key."""

    def __init__(self, keys: list[str] | None = None):
        """Initialize the PrintFormatter with optional keys to print."""
        self._keys = keys

    @staticmethod
    def _align(rows: list[list[str]]) -> Generator[str, None, None]:
        """Left align every cell to the widest value of its column."""
        widths = [
            max(len(row[i]) for row in rows) + PADDING for i in range(len(rows[0]))
        ]
        for row in rows:
            yield "".join(value.ljust(width) for value, width in zip(row, widths))

    def format(self, data: list[dict[str, Any]]) -> Generator[str, None, None]:
        """Format the data objects, missing values are left blank."""
        if not data:
            return
        keys = self._keys if self._keys is not None else list(data[0])
        if not keys:
            return
        header = [key.upper() for key in keys]
        rows = [[str(row.get(key) or "") for key in keys] for row in data]
        yield from self._align([header] + rows)

    def print(self, data: list[dict[str, Any]], file: TextIO | None = None) -> None:
        """Output the data objects, to stdout unless a file is given."""
        for line in self.format(data):
            print(line, file=file)


class YamlFormatter:
    """A formatter that prints a yaml document per object."""

    def format(self, data: list[dict[str, Any]]) -> Generator[str, None, None]:
        """Format the data objects."""
        yield from yaml.dump_all(data, sort_keys=False, explicit_start=True).split(
            "\n"
        )

    def print(self, data: list[dict[str, Any]], file: TextIO | None = None) -> None:
        """Output the data objects, to stdout unless a file is given."""
        print(
            yaml.dump_all(data, sort_keys=False, explicit_start=True), end="", file=file
        )
