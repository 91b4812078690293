"""Reconcile a submission's mzTab files with its uploaded files.

For every mzTab file found under the working directory, work out which upload
it came from, and for each of its ``ms_run`` entries which uploaded peak list
file it refers to.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath

from mztab_validator.errors import ParameterError
from mztab_validator.logging import get_logger
from mztab_validator.mapping import (
    FilenameMapping,
    UploadMapping,
    longest_suffix_match,
    normalize_path,
)
from mztab_validator.mztab.file import MzTabFile, MzTabMsRun
from mztab_validator.params import ParameterDocument


logger = get_logger(__file__)

MZTAB_SUFFIX = ".mztab"
DEFAULT_RESULT_DIRECTORY = "ccms_result"
DEFAULT_PEAK_DIRECTORY = "peak"


def find_mztab_files(directory: str | Path) -> list[Path]:
    root = Path(directory)
    if not root.is_dir():
        raise NotADirectoryError(f"mzTab directory [{root}] must be a directory.")
    return sorted(
        path for path in root.rglob("*") if path.is_file() and path.suffix.lower() == MZTAB_SUFFIX
    )


def extract_relative_path(absolute_path: str | Path | None, prefix: str | None) -> str | None:
    """Portion of ``absolute_path`` that follows ``prefix`` (e.g. ``user/task``)."""

    if absolute_path is None or not prefix:
        return None
    text = normalize_path(str(absolute_path))
    start = text.find(prefix)
    if start < 0:
        return None
    relative = text[start + len(prefix):].lstrip("/")
    return relative or None


def _basename(path: str) -> str:
    return PurePosixPath(normalize_path(path)).name


def _stem(path: str) -> str:
    return PurePosixPath(normalize_path(path)).stem


@dataclass
class SubmissionContext:
    mapping: FilenameMapping
    mztab_files: list[MzTabFile] = field(default_factory=list)
    user: str | None = None
    task: str | None = None
    dataset_id: str | None = None
    mztab_relative_path: str | None = None
    peak_list_relative_path: str | None = None

    @classmethod
    def build(
        cls,
        params_path: str | Path,
        mztab_directory: str | Path | None,
        *,
        mztab_relative_path: str | None = None,
        peak_list_directory: str | Path | None = None,
        peak_list_relative_path: str | None = None,
        dataset_id: str | None = None,
    ) -> "SubmissionContext":
        params = ParameterDocument.from_file(params_path)
        return cls.from_parameters(
            params,
            mztab_directory,
            mztab_relative_path=mztab_relative_path,
            peak_list_directory=peak_list_directory,
            peak_list_relative_path=peak_list_relative_path,
            dataset_id=dataset_id,
        )

    @classmethod
    def from_parameters(
        cls,
        params: ParameterDocument,
        mztab_directory: str | Path | None,
        *,
        mztab_relative_path: str | None = None,
        peak_list_directory: str | Path | None = None,
        peak_list_relative_path: str | None = None,
        dataset_id: str | None = None,
    ) -> "SubmissionContext":
        user = task = None
        if dataset_id is None:
            user = params.get_single("user")
            task = params.get_single("task")
            if user is None:
                raise ParameterError('A "user" parameter could not be found in the parameters file.')
            if task is None:
                raise ParameterError('A "task" parameter could not be found in the parameters file.')
            prefix = f"{user}/{task}"
        else:
            prefix = dataset_id

        if mztab_relative_path is None and mztab_directory is not None:
            mztab_relative_path = extract_relative_path(Path(mztab_directory).resolve(), prefix)
        if peak_list_relative_path is None and peak_list_directory is not None:
            peak_list_relative_path = extract_relative_path(Path(peak_list_directory).resolve(), prefix)

        context = cls(
            mapping=FilenameMapping.build(params),
            user=user,
            task=task,
            dataset_id=dataset_id,
            mztab_relative_path=mztab_relative_path,
            peak_list_relative_path=peak_list_relative_path,
        )
        if mztab_directory is not None:
            for path in find_mztab_files(mztab_directory):
                context.add_mztab_file(MzTabFile(path, relative_path=mztab_relative_path))
        logger.info(
            "Submission context: %s",
            {
                "mztab_files": len(context.mztab_files),
                "ms_runs": sum(len(mztab.ms_runs) for mztab in context.mztab_files),
                "unresolved_ms_runs": len(context.unresolved_ms_runs()),
                "dataset": dataset_id,
            },
        )
        return context

    def add_mztab_file(self, mztab: MzTabFile) -> MzTabFile:
        self._map_mztab(mztab)
        self._set_mztab_descriptor(mztab)
        for ms_run in mztab.ms_runs.values():
            self._map_ms_run(mztab, ms_run)
            self._set_ms_run_descriptor(ms_run)
        self.mztab_files.append(mztab)
        return mztab

    def _map_mztab(self, mztab: MzTabFile) -> None:
        name = mztab.path.name
        stem = mztab.path.stem
        matched: UploadMapping | None = None
        for upload in self.mapping.uploads:
            if upload.mangled_filename == name or _stem(upload.mangled_filename) == stem:
                matched = upload
                break
        if matched is None:
            # fall back to the longest uploaded path the file path ends with
            file_path = normalize_path(str(mztab.path.resolve()))
            best = longest_suffix_match(file_path, (upload.upload_path for upload in self.mapping.uploads))
            if best is not None:
                matched = next(upload for upload in self.mapping.uploads if upload.upload_path == best)
        if matched is not None:
            mztab.mangled_result_filename = matched.mangled_filename
            mztab.uploaded_result_path = matched.upload_path

        mapped = self.mapping.mapped_result_path(mztab.mangled_mztab_filename)
        if mapped is None and mztab.uploaded_result_path is not None:
            candidates = [
                self.mapping.mapped_result_path(key) or key for key in self.mapping.result_filenames()
            ]
            mapped = longest_suffix_match(mztab.uploaded_result_path, candidates)
        mztab.mapped_result_path = mapped

    def _result_key(self, mztab: MzTabFile) -> str | None:
        key = mztab.mangled_mztab_filename
        if self.mapping.peak_list_mapping(key) is not None:
            return key
        for candidate in self.mapping.result_filenames():
            if mztab.mapped_result_path and self.mapping.mapped_result_path(candidate) == mztab.mapped_result_path:
                return candidate
        return None

    def _map_ms_run(self, mztab: MzTabFile, ms_run: MzTabMsRun) -> None:
        location = ms_run.cleaned_location
        key = self._result_key(mztab)
        if key is not None:
            peak_lists = self.mapping.peak_list_mapping(key)
            referenced = longest_suffix_match(location, peak_lists)
            if referenced is not None:
                mangled = peak_lists[referenced]
                ms_run.mangled_peak_list_filename = mangled
                ms_run.mapped_peak_list_path = self.mapping.source_mapping(key)[referenced]
                ms_run.uploaded_peak_list_path = self.mapping.upload_path(mangled)
                return

        upload = self._match_peak_list_upload(location)
        if upload is None:
            logger.debug(
                "ms_run[%d] of %s (%s) could not be matched to an uploaded peak list file",
                ms_run.index,
                mztab.name,
                ms_run.location,
            )
            return
        ms_run.mangled_peak_list_filename = upload.mangled_filename
        ms_run.uploaded_peak_list_path = upload.upload_path

    def _match_peak_list_upload(self, location: str) -> UploadMapping | None:
        uploads = [upload for upload in self.mapping.uploads if not upload.is_result]
        location = normalize_path(location)
        for upload in uploads:
            if (
                location.endswith(upload.mangled_filename)
                or _stem(location).endswith(_stem(upload.mangled_filename))
                or normalize_path(upload.upload_path).endswith(location.lstrip("/"))
            ):
                return upload

        # last resort: a single upload sharing the location's leaf filename
        leaf = _basename(location)
        matches = [upload for upload in uploads if _basename(upload.upload_path) == leaf]
        if len(matches) == 1:
            return matches[0]
        return None

    def _set_mztab_descriptor(self, mztab: MzTabFile) -> None:
        if self.dataset_id is not None:
            relative = self.mztab_relative_path or DEFAULT_RESULT_DIRECTORY
            path = mztab.mapped_result_path or mztab.uploaded_result_path or mztab.name
            mztab.descriptor = f"f.{self.dataset_id}/{relative}/{path}"
        elif self.user is not None and self.task is not None:
            parts = [self.user, self.task]
            if self.mztab_relative_path:
                parts.append(self.mztab_relative_path)
            parts.append(mztab.name)
            mztab.descriptor = "u." + "/".join(parts)

    def _set_ms_run_descriptor(self, ms_run: MzTabMsRun) -> None:
        if self.dataset_id is not None:
            relative = self.peak_list_relative_path or DEFAULT_PEAK_DIRECTORY
            path = ms_run.mapped_peak_list_path or ms_run.cleaned_location.lstrip("/")
            ms_run.descriptor = f"f.{self.dataset_id}/{relative}/{path}"
        elif ms_run.uploaded_peak_list_path is None:
            if self.peak_list_relative_path and ms_run.mangled_peak_list_filename:
                ms_run.descriptor = (
                    f"u.{self.user}/{self.task}/{self.peak_list_relative_path}/"
                    f"{ms_run.mangled_peak_list_filename}"
                )
            else:
                ms_run.descriptor = ms_run.cleaned_location

    def unresolved_ms_runs(self) -> list[tuple[MzTabFile, MzTabMsRun]]:
        return [
            (mztab, ms_run)
            for mztab in self.mztab_files
            for ms_run in mztab.ms_runs.values()
            if not ms_run.is_resolved
        ]
