"""Spectrum id sets read from per-peak-list ``.scans`` summary files.

Each non-blank line of a scans file is ``<peptide> <scan number> <index>``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from mztab_validator.errors import ScansFileError
from mztab_validator.logging import get_logger
from mztab_validator.mapping import normalize_path


logger = get_logger(__file__)

SCANS_EXTENSION = ".scans"
INTEGER_PATTERN = re.compile(r"^-?[0-9]+$")


def scans_filename(mangled_peak_list_filename: str) -> str:
    """``PEAK-00001.mzML`` -> ``PEAK-00001.scans``"""

    return PurePosixPath(normalize_path(mangled_peak_list_filename)).stem + SCANS_EXTENSION


def _parse_integer(token: str, label: str, path: Path, line_number: int) -> int:
    if INTEGER_PATTERN.match(token) is None:
        raise ScansFileError(f"{label} [{token}] is not an integer", path, line_number)
    return int(token)


@dataclass(frozen=True)
class PeakListSpectrumIndex:
    scan_numbers: frozenset[int]
    spectrum_indices: frozenset[int]

    @classmethod
    def parse(cls, path: str | Path) -> "PeakListSpectrumIndex | None":
        path = Path(path)
        scans: set[int] = set()
        indices: set[int] = set()
        with path.open("r", encoding="utf-8") as handle:
            for line_number, line in enumerate(handle, start=1):
                if not line.strip():
                    continue
                tokens = line.split()
                if len(tokens) != 3:
                    raise ScansFileError(
                        f"expected 3 whitespace-separated tokens (peptide, scan, index), "
                        f"found {len(tokens)}",
                        path,
                        line_number,
                    )
                scans.add(_parse_integer(tokens[1], "scan number", path, line_number))
                indices.add(_parse_integer(tokens[2], "spectrum index", path, line_number))
        if not scans and not indices:
            return None
        return cls(frozenset(scans), frozenset(indices))

    def contains(self, native_id) -> bool:
        if native_id.is_scan:
            return native_id.value in self.scan_numbers
        # indices may be 0- or 1-based depending on the source
        return any(
            candidate in self.spectrum_indices
            for candidate in (native_id.value, native_id.value - 1, native_id.value + 1)
        )

    def __len__(self) -> int:
        return max(len(self.scan_numbers), len(self.spectrum_indices))


def load_scans_directory(directory: str | Path | None) -> dict[str, PeakListSpectrumIndex]:
    """Parse every ``*.scans`` file in ``directory``, keyed by filename."""

    spectra: dict[str, PeakListSpectrumIndex] = {}
    if directory is None:
        return spectra
    root = Path(directory)
    if not root.is_dir():
        raise FileNotFoundError(f"Scans directory [{root}] could not be found.")
    for path in sorted(root.glob(f"*{SCANS_EXTENSION}")):
        index = PeakListSpectrumIndex.parse(path)
        if index is None:
            logger.warning("Scans file [%s] contains no spectra.", path.name)
            continue
        spectra[path.name] = index
    logger.info("Loaded spectrum ids for %d peak list file(s) from %s", len(spectra), root)
    return spectra
