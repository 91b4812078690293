from __future__ import annotations

from collections.abc import Iterable

from mztab_validator.errors import MzTabFormatError
from mztab_validator.mztab.constants import HEADER_SECTIONS, MzTabSection


def split_row(line: str) -> list[str]:
    """Split a tab-delimited mzTab line, keeping trailing empty cells."""

    return line.rstrip("\r\n").split("\t")


class MzTabSectionHeader:
    """Column layout of one mzTab data section (PRT, PEP, PSM or SML)."""

    def __init__(self, line: str):
        if line is None or not line.strip():
            raise MzTabFormatError("mzTab section header line cannot be empty")
        tokens = split_row(line)
        section = HEADER_SECTIONS.get(tokens[0].strip())
        if section is None:
            raise MzTabFormatError(
                f"Line [{line.rstrip()}] is not a recognized mzTab section header line"
            )
        self.line = line.rstrip("\r\n")
        self.section = section
        self.columns = tokens
        self.column_indices: dict[str, int] = {}
        for index, name in enumerate(tokens[1:], start=1):
            self.column_indices[name] = index

    def __len__(self) -> int:
        return len(self.columns)

    def column_index(self, name: str, *, case_sensitive: bool = True) -> int | None:
        if case_sensitive:
            return self.column_indices.get(name)
        wanted = name.lower()
        found = None
        for column, index in self.column_indices.items():
            if column.lower() == wanted:
                found = index
        return found

    def validate_header_expectations(
        self, section: MzTabSection, required_columns: Iterable[str] = ()
    ) -> None:
        if self.section != section:
            raise MzTabFormatError(
                f"mzTab section header line was expected to be of section type "
                f"[{section.value}], but is of type [{self.section.value}] instead"
            )
        missing = [
            column
            for column in required_columns
            if self.column_index(column, case_sensitive=False) is None
        ]
        if missing:
            raise MzTabFormatError(
                f"mzTab {self.section.value} section header line is missing required "
                f"column(s) {', '.join(repr(column) for column in missing)}"
            )

    def validate_mztab_row(self, line: str) -> list[str]:
        """Check ``line`` against this header and return its cells."""

        if line is None or not line.strip():
            raise MzTabFormatError("mzTab data row cannot be empty")
        tokens = split_row(line)
        if len(tokens) != len(self.columns):
            raise MzTabFormatError(
                f"mzTab {self.section.value} row has {len(tokens)} columns, but its "
                f"section header has {len(self.columns)}:\n{self.describe_row(tokens)}"
            )
        if tokens[0].strip() != self.section.value:
            raise MzTabFormatError(
                f"mzTab row of section type [{tokens[0]}] does not belong to a "
                f"[{self.section.value}] section"
            )
        return tokens

    def describe_row(self, tokens: list[str]) -> str:
        """Header/value comparison used in row mismatch errors."""

        lines = []
        for index in range(max(len(self.columns), len(tokens))):
            name = self.columns[index] if index < len(self.columns) else "<missing header>"
            value = tokens[index] if index < len(tokens) else "<missing value>"
            lines.append(f"  {index + 1}. {name} = {value}")
        return "\n".join(lines)
