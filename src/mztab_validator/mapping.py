"""Submission filename reconciliation.

A workflow's ``params.xml`` carries two families of file mappings:

* ``upload_file_mapping`` values ``<mangled>|<uploaded path>``, where the raw
  value starts with ``PEAK-`` for peak list files and ``RESULT-`` for result
  files;
* ``result_file_mapping`` values ``<result file>#<referenced name>|<source>``
  declaring which spectrum file a result file's ``ms_run`` refers to.

:meth:`FilenameMapping.build` folds both into
``mangled result filename -> {referenced name -> mangled peak list filename}``.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import PurePosixPath
from types import MappingProxyType

from mztab_validator.errors import FilenameMappingError
from mztab_validator.logging import get_logger
from mztab_validator.params import ParameterDocument


logger = get_logger(__file__)

PEAK_PREFIX = "PEAK-"
RESULT_PREFIX = "RESULT-"
MZTAB_EXTENSION = ".mzTab"


@dataclass(frozen=True)
class UploadMapping:
    mangled_filename: str
    upload_path: str
    category: str | None = None

    @property
    def is_peak_list(self) -> bool:
        return self.category == "PEAK"

    @property
    def is_result(self) -> bool:
        return self.category == "RESULT"


def normalize_path(path: str) -> str:
    return path.replace("\\", "/")


def longest_suffix_match(target: str, candidates: Iterable[str]) -> str | None:
    """Return the longest candidate that ``target`` ends with.

    Candidates of equal length are resolved in iteration order (first wins).
    """

    target = normalize_path(target)
    best: str | None = None
    for candidate in candidates:
        if not candidate or not target.endswith(normalize_path(candidate)):
            continue
        if best is None or len(candidate) > len(best):
            best = candidate
    return best


def to_mztab_filename(filename: str) -> str:
    """Swap the extension of ``filename`` for ``.mzTab`` unless it already is one."""

    path = PurePosixPath(normalize_path(filename))
    if path.suffix.lower() == MZTAB_EXTENSION.lower():
        return str(path)
    return str(path.with_suffix(MZTAB_EXTENSION))


def parse_upload_mapping(value: str) -> UploadMapping:
    category = None
    if value.startswith(PEAK_PREFIX):
        category = "PEAK"
    elif value.startswith(RESULT_PREFIX):
        category = "RESULT"

    tokens = value.split("|")
    if len(tokens) != 2:
        raise FilenameMappingError(
            f'"upload_file_mapping" parameter value [{value}] is invalid: '
            f'it should contain exactly two tokens separated by a pipe ("|") character.'
        )
    return UploadMapping(mangled_filename=tokens[0], upload_path=tokens[1], category=category)


def parse_result_mapping(value: str) -> tuple[str, str, str]:
    """Split a ``result_file_mapping`` value into (result, referenced, source)."""

    tokens = value.split("|")
    if len(tokens) != 2:
        raise FilenameMappingError(
            f'"result_file_mapping" parameter value [{value}] is invalid: '
            f'it should contain exactly two tokens separated by a pipe ("|") character.'
        )
    mapped = tokens[0].split("#")
    if len(mapped) != 2:
        raise FilenameMappingError(
            f'"result_file_mapping" parameter value [{value}] is invalid: '
            f'the first token should contain exactly two tokens separated by a hash ("#") character.'
        )
    return mapped[0], mapped[1], tokens[1]


class FilenameMapping:
    """Immutable two-level filename map for one submission."""

    def __init__(
        self,
        peak_lists: dict[str, dict[str, str]],
        sources: dict[str, dict[str, str]],
        mapped_result_paths: dict[str, str],
        uploads: tuple[UploadMapping, ...],
    ):
        self._peak_lists = MappingProxyType(
            {key: MappingProxyType(dict(inner)) for key, inner in peak_lists.items()}
        )
        self._sources = MappingProxyType(
            {key: MappingProxyType(dict(inner)) for key, inner in sources.items()}
        )
        self._mapped_result_paths = MappingProxyType(dict(mapped_result_paths))
        self.uploads = uploads
        self._uploads_by_mangled = MappingProxyType(
            {upload.mangled_filename: upload for upload in uploads}
        )

    @classmethod
    def build(cls, params: ParameterDocument) -> "FilenameMapping":
        # result file -> {referenced name -> source filename}
        declared: dict[str, dict[str, str]] = {}
        for value in params.get_parameter("result_file_mapping"):
            result, referenced, source = parse_result_mapping(value)
            declared.setdefault(result, {})[referenced] = source

        uploads = tuple(parse_upload_mapping(value) for value in params.get_parameter("upload_file_mapping"))
        peak_list_files = {
            upload.upload_path: upload.mangled_filename for upload in uploads if upload.is_peak_list
        }

        rekeyed = cls._rekey_result_files(declared, [upload for upload in uploads if upload.is_result])
        bindings = cls._bind_leaves(rekeyed, peak_list_files)

        peak_lists: dict[str, dict[str, str]] = {}
        sources: dict[str, dict[str, str]] = {}
        mapped_result_paths: dict[str, str] = {}
        for key, (original, inner) in rekeyed.items():
            mapped_result_paths[key] = original
            sources[key] = dict(inner)
            resolved: dict[str, str] = {}
            for referenced, source in inner.items():
                mangled = bindings.get(source)
                if mangled is None:
                    raise FilenameMappingError(
                        f"No uploaded peak list file could be found matching file [{source}], "
                        f"referenced as [{referenced}] by result file [{original}]."
                    )
                resolved[referenced] = mangled
            peak_lists[key] = resolved

        mapping = cls(peak_lists, sources, mapped_result_paths, uploads)
        logger.info(
            "Filename mapping summary: %s",
            {
                "result_files": len(peak_lists),
                "peak_list_uploads": len(peak_list_files),
                "references": sum(len(inner) for inner in peak_lists.values()),
            },
        )
        return mapping

    @staticmethod
    def _rekey_result_files(
        declared: dict[str, dict[str, str]],
        result_uploads: list[UploadMapping],
    ) -> dict[str, tuple[str, dict[str, str]]]:
        renamed: dict[str, str] = {}
        for upload in result_uploads:
            matched = longest_suffix_match(upload.upload_path, declared)
            if matched is None:
                logger.warning(
                    "Uploaded result file [%s] does not match any \"result_file_mapping\" entry; skipping.",
                    upload.upload_path,
                )
                continue
            if matched in renamed:
                logger.debug(
                    "Result file [%s] already bound to [%s]; ignoring [%s].",
                    matched,
                    renamed[matched],
                    upload.mangled_filename,
                )
                continue
            renamed[matched] = to_mztab_filename(upload.mangled_filename)

        # fresh map: new key -> (declared result filename, inner mapping)
        rekeyed: dict[str, tuple[str, dict[str, str]]] = {}
        for result, inner in declared.items():
            rekeyed[renamed.get(result, result)] = (result, inner)
        return rekeyed

    @staticmethod
    def _bind_leaves(
        rekeyed: Mapping[str, tuple[str, dict[str, str]]],
        peak_list_files: Mapping[str, str],
    ) -> dict[str, str]:
        leaves: list[str] = []
        for _, inner in rekeyed.values():
            for source in inner.values():
                if source not in leaves:
                    leaves.append(source)

        bindings: dict[str, str] = {}
        for upload_path, mangled in peak_list_files.items():
            leaf = longest_suffix_match(upload_path, leaves)
            if leaf is not None and leaf not in bindings:
                bindings[leaf] = mangled

        # leaves shadowed by a longer leaf of the same upload
        for leaf in leaves:
            if leaf in bindings:
                continue
            for upload_path, mangled in peak_list_files.items():
                if normalize_path(upload_path).endswith(normalize_path(leaf)):
                    bindings[leaf] = mangled
                    break
        return bindings

    def result_filenames(self) -> list[str]:
        return list(self._peak_lists)

    def peak_list_mapping(self, result_filename: str) -> Mapping[str, str] | None:
        """``referenced name -> mangled peak list filename`` for a result file."""

        return self._peak_lists.get(result_filename)

    def source_mapping(self, result_filename: str) -> Mapping[str, str] | None:
        """``referenced name -> declared source filename`` for a result file."""

        return self._sources.get(result_filename)

    def mapped_result_path(self, result_filename: str) -> str | None:
        return self._mapped_result_paths.get(result_filename)

    def upload(self, mangled_filename: str) -> UploadMapping | None:
        return self._uploads_by_mangled.get(mangled_filename)

    def upload_path(self, mangled_filename: str) -> str | None:
        upload = self.upload(mangled_filename)
        return None if upload is None else upload.upload_path

    def as_dict(self) -> dict[str, dict[str, str]]:
        return {key: dict(inner) for key, inner in self._peak_lists.items()}

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FilenameMapping):
            return NotImplemented
        return (
            self.as_dict() == other.as_dict()
            and {k: dict(v) for k, v in self._sources.items()}
            == {k: dict(v) for k, v in other._sources.items()}
            and self.uploads == other.uploads
        )

    __hash__ = None

    def __len__(self) -> int:
        return len(self._peak_lists)

    def __repr__(self) -> str:
        return f"FilenameMapping({self.as_dict()!r})"
