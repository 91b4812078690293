"""PSM row validation.

Every PSM row of an mzTab file must point (through its ``spectra_ref``) at a
spectrum that exists in one of the submitted peak list files. Rows that do
not are kept but marked ``INVALID`` with a reason in the
``opt_global_valid``/``opt_global_invalid_reason`` columns; the file is
rewritten in place with both columns present on every PSM row.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum

from mztab_validator.errors import MzTabFormatError, ValidationThresholdError
from mztab_validator.io.files import atomic_rewrite
from mztab_validator.logging import get_logger
from mztab_validator.mztab.constants import (
    ACCESSION_COLUMN,
    DEFAULT_INVALID_REASON,
    INVALID,
    INVALID_REASON_COLUMN,
    MODIFICATIONS_COLUMN,
    NULL_VALUE,
    SEQUENCE_COLUMN,
    SPECTRA_REF_COLUMN,
    SPECTRA_REF_MS_RUN_PATTERN,
    VALID,
    VALID_COLUMN,
    MzTabSection,
)
from mztab_validator.mztab.file import MzTabFile
from mztab_validator.mztab.header import MzTabSectionHeader
from mztab_validator.mztab.modification import ModificationRecord, clean_sequence
from mztab_validator.nativeid import (
    MzIdentMLNativeIDMap,
    NativeID,
    is_bare_integer,
    resolve_native_id,
)
from mztab_validator.outcome import Invalid, Outcome, Valid
from mztab_validator.spectra import PeakListSpectrumIndex, scans_filename


logger = get_logger(__file__)

DEFAULT_FAILURE_THRESHOLD = 10.0
_WHITESPACE = re.compile(r"[\t\r\n]+")

__all__ = [
    "DEFAULT_FAILURE_THRESHOLD",
    "Invalid",
    "MzTabFileReport",
    "PSMValidator",
    "Valid",
    "ValidityColumns",
    "check_threshold",
    "parse_spectra_ref",
]


class ValidityColumns:
    """Positions of the two validity columns in a PSH header.

    Columns missing from the header are appended, ``opt_global_valid``
    first.
    """

    def __init__(self, header: MzTabSectionHeader):
        self.header = header
        self.appended: list[str] = []
        width = len(header)
        self.valid_index = header.column_index(VALID_COLUMN, case_sensitive=False)
        if self.valid_index is None:
            self.valid_index = width
            width += 1
            self.appended.append(VALID_COLUMN)
        self.reason_index = header.column_index(INVALID_REASON_COLUMN, case_sensitive=False)
        if self.reason_index is None:
            self.reason_index = width
            width += 1
            self.appended.append(INVALID_REASON_COLUMN)
        self.width = width

    @property
    def had_valid_column(self) -> bool:
        return VALID_COLUMN not in self.appended

    def header_line(self) -> str:
        return "\t".join([self.header.line, *self.appended])

    def ensure(self, cells: list[str]) -> list[str]:
        """Pad ``cells`` so both columns exist, defaulting to VALID/null."""

        cells = list(cells)
        if self.valid_index >= len(cells):
            cells.extend([""] * (self.valid_index - len(cells)))
            cells.append(VALID)
        if self.reason_index >= len(cells):
            cells.extend([""] * (self.reason_index - len(cells)))
            cells.append(NULL_VALUE)
        return cells


class _State(Enum):
    BEFORE_HEADER = "before_header"
    READING_PSM_ROWS = "reading_psm_rows"


@dataclass
class MzTabFileReport:
    mztab_filename: str
    uploaded_filename: str
    descriptor: str
    psm_rows: int = 0
    invalid_psm_rows: int = 0
    peptide_rows: int = 0
    protein_rows: int = 0
    psms: set[tuple] = field(default_factory=set, repr=False)
    peptides: set[str] = field(default_factory=set, repr=False)
    proteins: set[str] = field(default_factory=set, repr=False)

    @property
    def found_psms(self) -> int:
        return len(self.psms)

    @property
    def found_peptides(self) -> int:
        # files with their own PEP section report those instead
        return 0 if self.peptide_rows else len(self.peptides)

    @property
    def found_proteins(self) -> int:
        return 0 if self.protein_rows else len(self.proteins)

    @property
    def invalid_percentage(self) -> float:
        if not self.psm_rows:
            return 0.0
        return self.invalid_psm_rows * 100.0 / self.psm_rows

    def summary(self) -> dict[str, object]:
        return {
            "mztab_file": self.mztab_filename,
            "uploaded_file": self.uploaded_filename,
            "file_descriptor": self.descriptor,
            "psm_rows": self.psm_rows,
            "invalid_psm_rows": self.invalid_psm_rows,
            "found_psms": self.found_psms,
            "peptide_rows": self.peptide_rows,
            "found_peptides": self.found_peptides,
            "protein_rows": self.protein_rows,
            "found_proteins": self.found_proteins,
            "invalid_percentage": round(self.invalid_percentage, 2),
        }


def parse_spectra_ref(spectra_ref: str) -> tuple[int, str] | Invalid:
    """``ms_run[2]:scan=5`` -> ``(2, "scan=5")``"""

    tokens = spectra_ref.strip().split(":")
    if len(tokens) != 2:
        return Invalid(
            f'"spectra_ref" column value [{spectra_ref}] is invalid: it should conform to '
            'the format "ms_run[<index>]:<nativeID>".'
        )
    match = SPECTRA_REF_MS_RUN_PATTERN.match(tokens[0].strip())
    if match is None:
        return Invalid(
            f'"spectra_ref" column value [{spectra_ref}] is invalid: its first element '
            f'[{tokens[0]}] should conform to the format "ms_run[<index>]".'
        )
    return int(match.group(1)), tokens[1].strip()


def check_threshold(report: MzTabFileReport, threshold: float = DEFAULT_FAILURE_THRESHOLD) -> None:
    if report.invalid_percentage > threshold:
        raise ValidationThresholdError(
            report.uploaded_filename, report.invalid_percentage, threshold
        )


def _sanitize_reason(reason: str) -> str:
    return _WHITESPACE.sub(" ", reason).strip()


class PSMValidator:
    def __init__(
        self,
        spectra: Mapping[str, PeakListSpectrumIndex],
        native_id_map: MzIdentMLNativeIDMap | None = None,
        *,
        count_only: bool = False,
        modifications: Iterable[ModificationRecord] = (),
    ):
        self.spectra = spectra
        self.native_id_map = native_id_map or MzIdentMLNativeIDMap()
        self.count_only = count_only
        self.modifications = tuple(modifications)

    def validate_file(self, mztab: MzTabFile) -> MzTabFileReport:
        report = MzTabFileReport(
            mztab_filename=mztab.name,
            uploaded_filename=mztab.uploaded_result_filename,
            descriptor=mztab.descriptor,
        )
        with atomic_rewrite(mztab.path, discard=self.count_only) as output:
            with mztab.path.open("r", encoding="utf-8") as source:
                self._process(mztab, source, output, report)

        logger.info("Validation summary: %s", report.summary())
        return report

    def _process(self, mztab: MzTabFile, source, output, report: MzTabFileReport) -> None:
        state = _State.BEFORE_HEADER
        header: MzTabSectionHeader | None = None
        columns: ValidityColumns | None = None

        for line_number, raw in enumerate(source, start=1):
            line = raw.rstrip("\r\n")
            tag = line.split("\t", 1)[0].strip()

            if tag == "PSH":
                if state is not _State.BEFORE_HEADER:
                    raise MzTabFormatError(
                        'A "PSH" row was already seen previously in this file', mztab.path, line_number
                    )
                try:
                    header = MzTabSectionHeader(line)
                    header.validate_header_expectations(
                        MzTabSection.PSM, (SEQUENCE_COLUMN, SPECTRA_REF_COLUMN)
                    )
                except MzTabFormatError as exc:
                    raise MzTabFormatError(str(exc), mztab.path, line_number) from exc
                columns = ValidityColumns(header)
                state = _State.READING_PSM_ROWS
                output.write(columns.header_line() + "\n")
            elif tag == "PSM":
                if state is not _State.READING_PSM_ROWS:
                    raise MzTabFormatError(
                        'A "PSM" row was found before any "PSH" row', mztab.path, line_number
                    )
                try:
                    cells = header.validate_mztab_row(line)
                except MzTabFormatError as exc:
                    raise MzTabFormatError(str(exc), mztab.path, line_number) from exc
                cells = self._validate_row(mztab, header, columns, cells, report)
                output.write("\t".join(cells) + "\n")
            else:
                if tag == "PRT":
                    report.protein_rows += 1
                elif tag == "PEP":
                    report.peptide_rows += 1
                output.write(line + "\n")

    def _validate_row(
        self,
        mztab: MzTabFile,
        header: MzTabSectionHeader,
        columns: ValidityColumns,
        cells: list[str],
        report: MzTabFileReport,
    ) -> list[str]:
        report.psm_rows += 1
        already_invalid = (
            columns.had_valid_column and cells[columns.valid_index].strip().upper() == INVALID
        )
        cells = columns.ensure(cells)
        if already_invalid:
            report.invalid_psm_rows += 1
            reason = cells[columns.reason_index].strip()
            if not reason or reason.lower() == NULL_VALUE:
                cells[columns.reason_index] = DEFAULT_INVALID_REASON
            return cells

        outcome = self.check_row(mztab, header, cells)
        if isinstance(outcome, Invalid):
            report.invalid_psm_rows += 1
            cells[columns.valid_index] = INVALID
            cells[columns.reason_index] = _sanitize_reason(outcome.reason)
            return cells

        cells[columns.valid_index] = VALID
        cells[columns.reason_index] = NULL_VALUE
        if outcome.spectra_ref is not None:
            spectra_ref_index = header.column_index(SPECTRA_REF_COLUMN, case_sensitive=False)
            cells[spectra_ref_index] = outcome.spectra_ref

        sequence = self._sequence(header, cells)
        native = outcome.native_id
        if isinstance(native, NativeID):
            native = native.render()
        modifications = _cell(header, cells, MODIFICATIONS_COLUMN)
        report.psms.add((outcome.ms_run, native, sequence, modifications))
        if sequence:
            report.peptides.add(sequence)
        accession = _cell(header, cells, ACCESSION_COLUMN)
        if accession and accession.lower() != NULL_VALUE:
            report.proteins.add(accession)
        return cells

    def _sequence(self, header: MzTabSectionHeader, cells: list[str]) -> str | None:
        sequence = _cell(header, cells, SEQUENCE_COLUMN)
        if not sequence or sequence.lower() == NULL_VALUE:
            return None
        if self.modifications:
            sequence = clean_sequence(sequence, self.modifications)
        return sequence

    def check_row(
        self, mztab: MzTabFile, header: MzTabSectionHeader, cells: list[str]
    ) -> Outcome:
        """Check one PSM row's spectrum reference."""

        spectra_ref = _cell(header, cells, SPECTRA_REF_COLUMN) or ""
        parsed = parse_spectra_ref(spectra_ref)
        if isinstance(parsed, Invalid):
            return parsed
        index, native_text = parsed

        ms_run = mztab.ms_run(index)
        if ms_run is None:
            return Invalid(
                f'"spectra_ref" column value [{spectra_ref}] refers to ms_run[{index}], '
                "but no such ms_run-location is declared in the mzTab file's metadata section."
            )
        if self.count_only:
            return Valid(native_id=native_text, ms_run=index)

        if ms_run.mangled_peak_list_filename is None:
            return Invalid(
                f'A file mapping for "ms_run" index {index} could not be resolved: '
                f"no submitted peak list file matches ms_run-location [{ms_run.location}]."
            )
        spectra = self.spectra.get(scans_filename(ms_run.mangled_peak_list_filename))
        if spectra is None:
            return Invalid(
                f"No spectra were found for peak list file [{ms_run.peak_list_path}] "
                f'(referenced as "ms_run" index {index}).'
            )

        rewritten = None
        native = resolve_native_id(native_text)
        if isinstance(native, Invalid) and is_bare_integer(native_text):
            native = self.native_id_map.resolve(
                mztab, self._sequence(header, cells), int(native_text)
            )
            if isinstance(native, NativeID):
                rewritten = f"ms_run[{index}]:{native.render()}"
        if isinstance(native, Invalid):
            return native

        if not spectra.contains(native):
            return Invalid(
                f"Invalid NativeID-formatted spectrum identifier [{native_text}]: spectrum "
                f"{native.kind} {native.value} could not be found within the submitted "
                f"peak list file [{ms_run.peak_list_path}]."
            )
        return Valid(native_id=native, ms_run=index, spectra_ref=rewritten)


def _cell(header: MzTabSectionHeader, cells: list[str], column: str) -> str | None:
    index = header.column_index(column, case_sensitive=False)
    if index is None or index >= len(cells):
        return None
    return cells[index].strip()
