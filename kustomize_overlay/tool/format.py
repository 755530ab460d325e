"""Library for formatting output."""

from abc import ABC, abstractmethod
from contextlib import contextmanager
import json
import sys
from typing import Any, Generator, Iterator, TextIO

import yaml


PADDING = 4

STDOUT_FILES = ("-", "/dev/stdout")


@contextmanager
def open_file(output_file: str, mode: str = "w") -> Iterator[TextIO]:
    """Open the output file, using the process stdout for `-` or /dev/stdout."""
    if output_file in STDOUT_FILES:
        yield sys.stdout
        return
    with open(output_file, mode) as file:
        yield file


def column_format_string(rows: list[list[str]]) -> str:
    """Produce a format string based on max width of columns."""
    widths = [0] * len(rows[0])
    for row in rows:
        for i, value in enumerate(row):
            widths[i] = max(widths[i], len(value))
    return "".join([f"{{:{w+PADDING}}}" for w in widths])


def format_columns(
    headers: list[str], rows: list[list[str]]
) -> Generator[str, None, None]:
    """Render the output rows in a column format."""
    data = [headers] + rows
    format_string = column_format_string(data)
    for row in data:
        yield format_string.format(*row).rstrip()


class Formatter(ABC):
    """A formatter that prints a build result."""

    @abstractmethod
    def format(self, data: dict[str, Any]) -> Generator[str, None, None]:
        """Format the build result."""

    def print(self, data: dict[str, Any], file: TextIO = sys.stdout) -> None:
        """Print the build result."""
        for line in self.format(data):
            print(line, file=file)


class TableFormatter(Formatter):
    """A formatter that prints the tier of each resource id."""

    def format(self, data: dict[str, Any]) -> Generator[str, None, None]:
        """Format the build result."""
        rows = [
            [str(tier), resource_id]
            for tier, ids in enumerate(data["ids_prio"])
            for resource_id in ids
        ]
        if not rows:
            return
        yield from format_columns(["TIER", "ID"], rows)


class YamlFormatter(Formatter):
    """A formatter that prints yaml output."""

    def format(self, data: dict[str, Any]) -> Generator[str, None, None]:
        """Format the build result."""
        content = yaml.dump(data, sort_keys=False, explicit_start=True)
        yield from content.rstrip("\n").split("\n")


class JsonFormatter(Formatter):
    """A formatter that prints json output."""

    def format(self, data: dict[str, Any]) -> Generator[str, None, None]:
        """Format the build result."""
        yield from json.dumps(data, indent=4, sort_keys=False).split("\n")


FORMATTERS: dict[str, type[Formatter]] = {
    "yaml": YamlFormatter,
    "json": JsonFormatter,
    "table": TableFormatter,
}
