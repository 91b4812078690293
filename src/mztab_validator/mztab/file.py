from __future__ import annotations

from pathlib import Path
from types import MappingProxyType

from mztab_validator.errors import MzTabFormatError
from mztab_validator.mapping import to_mztab_filename
from mztab_validator.mztab.constants import (
    DOUBLE_PROTOCOL_PATTERN,
    FILE_LINE_PATTERN,
    FILE_URI_PROTOCOL_PATTERN,
    METADATA_PREFIXES,
)


def clean_file_url(url: str | None) -> str | None:
    """Reduce an ``ms_run-location`` URL to a plain path."""

    if url is None:
        return None
    cleaned = url.strip()
    # some exporters write the scheme twice, e.g. "file:///file://..."
    match = DOUBLE_PROTOCOL_PATTERN.match(cleaned)
    if match:
        cleaned = match.group(1)
    match = FILE_URI_PROTOCOL_PATTERN.match(cleaned)
    if match:
        cleaned = match.group(1)
    if cleaned.startswith("file:"):
        cleaned = cleaned[len("file:"):]
    return cleaned


class MzTabMsRun:
    """One ``ms_run[n]`` entry of an mzTab metadata section."""

    def __init__(self, index: int, location: str):
        if index < 1:
            raise ValueError(f"ms_run index must be >= 1, got {index}")
        if location is None or not location.strip():
            raise ValueError(f"ms_run[{index}] must have a non-empty location")
        self._index = index
        self._location = location.strip()
        self.mangled_peak_list_filename: str | None = None
        self.uploaded_peak_list_path: str | None = None
        self.mapped_peak_list_path: str | None = None
        self._descriptor: str | None = None

    @property
    def index(self) -> int:
        return self._index

    @property
    def location(self) -> str:
        return self._location

    @property
    def cleaned_location(self) -> str:
        return clean_file_url(self._location)

    @property
    def peak_list_path(self) -> str:
        return (
            self.mapped_peak_list_path
            or self.uploaded_peak_list_path
            or self.mangled_peak_list_filename
            or self.cleaned_location
        )

    @property
    def descriptor(self) -> str:
        if self._descriptor is not None:
            return self._descriptor
        if self.uploaded_peak_list_path:
            return f"f.{self.uploaded_peak_list_path}"
        return self.cleaned_location

    @descriptor.setter
    def descriptor(self, value: str | None) -> None:
        self._descriptor = value

    @property
    def is_resolved(self) -> bool:
        return self.mangled_peak_list_filename is not None

    def __repr__(self) -> str:
        return (
            f"MzTabMsRun(index={self._index!r}, location={self._location!r}, "
            f"mangled={self.mangled_peak_list_filename!r})"
        )


def parse_ms_runs(path: str | Path) -> dict[int, MzTabMsRun]:
    """Read the ``ms_run[n]-location`` table from an mzTab metadata section."""

    path = Path(path)
    ms_runs: dict[int, MzTabMsRun] = {}
    with path.open("r", encoding="utf-8", errors="replace") as handle:
        for line_number, raw in enumerate(handle, start=1):
            line = raw.strip()
            if not line:
                continue
            if not line.startswith(METADATA_PREFIXES):
                break
            match = FILE_LINE_PATTERN.match(line)
            if match is None:
                continue
            index = int(match.group(1))
            if index < 1:
                raise MzTabFormatError(
                    f"ms_run index [{index}] is invalid: indices start at 1", path, line_number
                )
            if index in ms_runs:
                raise MzTabFormatError(
                    f"ms_run[{index}] is declared more than once", path, line_number
                )
            ms_runs[index] = MzTabMsRun(index, match.group(2))
    return dict(sorted(ms_runs.items()))


class MzTabFile:
    """An mzTab file and the spectrum files its metadata section references."""

    def __init__(self, path: str | Path, relative_path: str | None = None):
        self.path = Path(path)
        if not self.path.is_file():
            raise FileNotFoundError(f"mzTab file [{self.path}] could not be found.")
        self.relative_path = relative_path
        self.mangled_result_filename: str | None = None
        self.uploaded_result_path: str | None = None
        self.mapped_result_path: str | None = None
        self._descriptor: str | None = None
        self.ms_runs = MappingProxyType(parse_ms_runs(self.path))

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def mangled_mztab_filename(self) -> str:
        if self.mangled_result_filename:
            return to_mztab_filename(self.mangled_result_filename)
        return self.path.name

    @property
    def uploaded_result_filename(self) -> str:
        return self.uploaded_result_path or self.mapped_result_path or self.path.name

    @property
    def descriptor(self) -> str:
        if self._descriptor is not None:
            return self._descriptor
        if self.uploaded_result_path:
            return f"f.{self.uploaded_result_path}"
        return f"f.{self.path.name}"

    @descriptor.setter
    def descriptor(self, value: str | None) -> None:
        self._descriptor = value

    def ms_run(self, index: int) -> MzTabMsRun | None:
        return self.ms_runs.get(index)

    def __repr__(self) -> str:
        return f"MzTabFile(path={str(self.path)!r}, ms_runs={len(self.ms_runs)})"
