"""Rewrite mzTab files for publication.

``MTD ms_run[n]-location`` values are replaced with the repository location of
the peak list file they refer to, and PSM rows are given the two validity
columns. In push-through mode only the validity columns are ensured.
"""

from __future__ import annotations

import shutil
from collections.abc import Iterable
from pathlib import Path

from mztab_validator.context import SubmissionContext
from mztab_validator.errors import FilenameMappingError, MzTabFormatError
from mztab_validator.logging import get_logger
from mztab_validator.mztab.constants import FILE_LINE_PATTERN
from mztab_validator.mztab.file import MzTabFile
from mztab_validator.mztab.header import MzTabSectionHeader, split_row
from mztab_validator.validation import ValidityColumns


logger = get_logger(__file__)

DEFAULT_FTP_HOST = "massive.ucsd.edu"


class LineProcessor:
    """One stage of an mzTab rewrite; subclasses override what they need."""

    def set_up(self, mztab: MzTabFile) -> None:
        self.mztab = mztab

    def process_line(self, line: str, line_number: int) -> str:
        return line

    def tear_down(self) -> None:
        pass


class ValidityProcessor(LineProcessor):
    """Ensure PSH/PSM lines carry ``opt_global_valid``/``opt_global_invalid_reason``."""

    def set_up(self, mztab: MzTabFile) -> None:
        super().set_up(mztab)
        self.columns: ValidityColumns | None = None

    def process_line(self, line: str, line_number: int) -> str:
        tag = line.split("\t", 1)[0].strip()
        if tag == "PSH":
            if self.columns is not None:
                raise MzTabFormatError(
                    'A "PSH" row was already seen previously in this file', self.mztab.path, line_number
                )
            self.columns = ValidityColumns(MzTabSectionHeader(line))
            return self.columns.header_line()
        if tag == "PSM":
            if self.columns is None:
                raise MzTabFormatError(
                    'A "PSM" row was found before any "PSH" row', self.mztab.path, line_number
                )
            return "\t".join(self.columns.ensure(split_row(line)))
        return line


class MsRunLocationProcessor(LineProcessor):
    """Point ``ms_run[n]-location`` at the repository copy of each peak list."""

    def __init__(self, dataset_id: str | None = None, ftp_host: str = DEFAULT_FTP_HOST):
        self.dataset_id = dataset_id
        self.ftp_host = ftp_host

    def location_for(self, ms_run) -> str:
        if self.dataset_id is not None:
            relative = ms_run.mapped_peak_list_path or ms_run.uploaded_peak_list_path
            if not relative:
                raise FilenameMappingError(
                    f"ms_run[{ms_run.index}] location [{ms_run.location}] of mzTab file "
                    f"[{self.mztab.name}] could not be mapped to a dataset peak list file."
                )
            return f"ftp://{self.dataset_id}@{self.ftp_host}/peak/{relative.lstrip('/')}"

        descriptor = ms_run.descriptor
        if not ms_run.is_resolved or not descriptor:
            raise FilenameMappingError(
                f"ms_run[{ms_run.index}] location [{ms_run.location}] of mzTab file "
                f"[{self.mztab.name}] could not be mapped to an uploaded peak list file."
            )
        # descriptors are "f.<path>" or "u.<path>"
        if len(descriptor) > 2 and descriptor[1] == ".":
            descriptor = descriptor[2:]
        return f"file://{descriptor}"

    def process_line(self, line: str, line_number: int) -> str:
        match = FILE_LINE_PATTERN.match(line.strip())
        if match is None:
            return line
        index = int(match.group(1))
        ms_run = self.mztab.ms_run(index)
        if ms_run is None:
            raise MzTabFormatError(f"ms_run[{index}] was not parsed", self.mztab.path, line_number)
        return f"MTD\tms_run[{index}]-location\t{self.location_for(ms_run)}"


def process_mztab(
    mztab: MzTabFile,
    output_path: str | Path,
    processors: Iterable[LineProcessor],
) -> Path:
    """Stream ``mztab`` through ``processors`` into ``output_path``."""

    output_path = Path(output_path)
    processors = list(processors)
    for processor in processors:
        processor.set_up(mztab)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    partial = output_path.with_name(output_path.name + ".part")
    try:
        with mztab.path.open("r", encoding="utf-8") as source, partial.open(
            "w", encoding="utf-8", newline=""
        ) as target:
            for line_number, raw in enumerate(source, start=1):
                line = raw.rstrip("\r\n")
                for processor in processors:
                    line = processor.process_line(line, line_number)
                target.write(line + "\n")
        shutil.move(str(partial), str(output_path))
    except BaseException:
        partial.unlink(missing_ok=True)
        raise
    finally:
        for processor in processors:
            processor.tear_down()
    return output_path


class MzTabCleaner:
    def __init__(
        self,
        context: SubmissionContext,
        *,
        push_through: bool = False,
        ftp_host: str = DEFAULT_FTP_HOST,
    ):
        self.context = context
        self.push_through = push_through
        self.ftp_host = ftp_host

    def processors(self) -> list[LineProcessor]:
        processors: list[LineProcessor] = []
        if not self.push_through:
            processors.append(MsRunLocationProcessor(self.context.dataset_id, self.ftp_host))
        processors.append(ValidityProcessor())
        return processors

    def clean_file(self, mztab: MzTabFile, output_path: str | Path) -> Path:
        path = process_mztab(mztab, output_path, self.processors())
        logger.debug("Cleaned %s -> %s", mztab.path, path)
        return path

    def clean_all(self, output_directory: str | Path) -> list[Path]:
        output_directory = Path(output_directory)
        written = [self.clean_file(mztab, output_directory / mztab.name) for mztab in self.context.mztab_files]
        logger.info(
            "Cleaning summary: %s",
            {
                "mztab_files": len(written),
                "output_directory": str(output_directory),
                "push_through": self.push_through,
                "dataset": self.context.dataset_id,
            },
        )
        return written
