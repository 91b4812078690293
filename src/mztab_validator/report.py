"""Validation statistics output."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from pydantic import BaseModel, Field
from rich.console import Console
from rich.table import Table

from mztab_validator.validation import MzTabFileReport


STATISTICS_HEADER = (
    "MzTab_file",
    "Uploaded_file",
    "File_descriptor",
    "PSM_rows",
    "Invalid_PSM_rows",
    "Found_PSMs",
    "Peptide_rows",
    "Found_Peptides",
    "Protein_rows",
    "Found_Proteins",
)


class FileSummary(BaseModel):
    mztab_file: str
    uploaded_file: str
    file_descriptor: str
    psm_rows: int = Field(0, ge=0)
    invalid_psm_rows: int = Field(0, ge=0)
    found_psms: int = Field(0, ge=0)
    peptide_rows: int = Field(0, ge=0)
    found_peptides: int = Field(0, ge=0)
    protein_rows: int = Field(0, ge=0)
    found_proteins: int = Field(0, ge=0)
    invalid_percentage: float = Field(0.0, ge=0.0, le=100.0)

    @classmethod
    def from_report(cls, report: MzTabFileReport) -> "FileSummary":
        return cls(**report.summary())


class ValidationSummary(BaseModel):
    threshold: float
    count_only: bool = False
    passed: bool = True
    failure: str | None = None
    files: list[FileSummary] = Field(default_factory=list)

    @property
    def psm_rows(self) -> int:
        return sum(item.psm_rows for item in self.files)

    @property
    def invalid_psm_rows(self) -> int:
        return sum(item.invalid_psm_rows for item in self.files)


def statistics_row(report: MzTabFileReport) -> tuple[str, ...]:
    return (
        report.mztab_filename,
        report.uploaded_filename,
        report.descriptor,
        str(report.psm_rows),
        str(report.invalid_psm_rows),
        str(report.found_psms),
        str(report.peptide_rows),
        str(report.found_peptides),
        str(report.protein_rows),
        str(report.found_proteins),
    )


class StatisticsWriter:
    """Tab-separated per-file statistics, one row written per validated file."""

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8") as handle:
            handle.write("\t".join(STATISTICS_HEADER) + "\n")

    def write(self, report: MzTabFileReport) -> None:
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write("\t".join(statistics_row(report)) + "\n")


def write_summary_json(summary: ValidationSummary, path: str | Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(summary.model_dump_json(indent=2) + "\n", encoding="utf-8")
    return path


def render_summary(
    reports: Iterable[MzTabFileReport],
    console: Console | None = None,
    *,
    threshold: float | None = None,
) -> None:
    """Pretty-print per-file validation counts using ``rich``."""

    if console is None:
        console = Console(stderr=True)

    table = Table(title="mzTab PSM Validation")
    table.add_column("mzTab file", style="bold cyan")
    table.add_column("Uploaded file", style="magenta")
    table.add_column("PSM rows", justify="right")
    table.add_column("Invalid", justify="right")
    table.add_column("Invalid %", justify="right")
    table.add_column("Found PSMs", justify="right", style="green")

    rows = 0
    for report in reports:
        rows += 1
        percentage = f"{report.invalid_percentage:.1f}"
        if threshold is not None and report.invalid_percentage > threshold:
            percentage = f"[bold red]{percentage}[/bold red]"
        table.add_row(
            report.mztab_filename,
            report.uploaded_filename,
            str(report.psm_rows),
            str(report.invalid_psm_rows),
            percentage,
            str(report.found_psms),
        )
    if not rows:
        table.add_row("[dim]No mzTab files found[/dim]", "", "", "", "", "")
    console.print(table)
