"""Spectrum identifiers (``spectra_ref`` nativeIDs) and their resolution.

Recognized forms are ``scan=N``, ``index=N`` and ``file=N`` (one spectrum per
file, treated as an index). A bare integer is ambiguous; for mzTab files
converted from mzIdentML, the original ``.mzid`` upload is consulted to decide
whether it is a scan number or an index.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from lxml import etree

from mztab_validator.logging import get_logger
from mztab_validator.mapping import normalize_path
from mztab_validator.outcome import Invalid


logger = get_logger(__file__)

SCAN_PATTERN = re.compile(r"scan=(\d+)")
INDEX_PATTERN = re.compile(r"index=(\d+)")
FILE_PATTERN = re.compile(r"file=(\d+)")
BARE_INTEGER_PATTERN = re.compile(r"^\d+$")

# The mzTab converter used upstream writes mzIdentML "index=N" ids as N + 1.
MZID_INDEX_OFFSET = 1
MZID_EXTENSION = ".mzid"


@dataclass(frozen=True)
class NativeID:
    is_scan: bool
    value: int

    @property
    def kind(self) -> str:
        return "scan" if self.is_scan else "index"

    def render(self) -> str:
        return f"{self.kind}={self.value}"

    def __str__(self) -> str:
        return self.render()


def is_bare_integer(native_id: str) -> bool:
    return BARE_INTEGER_PATTERN.match(native_id.strip()) is not None


def resolve_native_id(native_id: str) -> NativeID | Invalid:
    match = SCAN_PATTERN.search(native_id)
    if match:
        return NativeID(True, int(match.group(1)))
    match = INDEX_PATTERN.search(native_id)
    if match:
        return NativeID(False, int(match.group(1)))
    match = FILE_PATTERN.search(native_id)
    if match:
        return NativeID(False, int(match.group(1)))
    return Invalid(
        f"Invalid NativeID-formatted spectrum identifier [{native_id}]: unrecognized "
        "NativeID format; either an index or a scan number must be provided "
        '(e.g. "scan=5" or "index=4").'
    )


def index_peptide_spectra(root) -> dict[str, dict[str, list[str]]]:
    """Walk an mzIdentML tree once: ``sequence -> {peptide_ref -> [spectrumID, ...]}``."""

    sequences: dict[str, str] = {}
    spectra_by_peptide: dict[str, list[str]] = {}
    for element in root.iter("{*}Peptide", "{*}SpectrumIdentificationResult"):
        if etree.QName(element).localname == "Peptide":
            peptide_ref = element.get("id")
            for child in element.iterchildren("{*}PeptideSequence"):
                if peptide_ref and child.text:
                    sequences[peptide_ref] = child.text.strip()
            continue
        spectrum_id = element.get("spectrumID")
        if not spectrum_id:
            continue
        for item in element.iterchildren("{*}SpectrumIdentificationItem"):
            peptide_ref = item.get("peptide_ref")
            if not peptide_ref:
                continue
            spectrum_ids = spectra_by_peptide.setdefault(peptide_ref, [])
            if spectrum_id not in spectrum_ids:
                spectrum_ids.append(spectrum_id)

    index: dict[str, dict[str, list[str]]] = {}
    for peptide_ref, sequence in sequences.items():
        index.setdefault(sequence, {})[peptide_ref] = spectra_by_peptide.get(peptide_ref, [])
    return index


class MzIdentMLDocument:
    """A parsed mzIdentML file, queried by peptide sequence."""

    def __init__(self, tree, path: Path | None = None):
        self._tree = tree
        self.path = path
        self._peptide_spectra: dict[str, dict[str, list[str]]] | None = None

    @classmethod
    def parse(cls, path: str | Path) -> "MzIdentMLDocument":
        path = Path(path)
        parser = etree.XMLParser(huge_tree=True, resolve_entities=False)
        return cls(etree.parse(str(path), parser), path)

    def get_peptide_spectra(self, sequence: str) -> dict[str, list[str]]:
        """``peptide_ref -> [spectrumID, ...]`` for peptides with ``sequence``."""

        if self._peptide_spectra is None:
            self._peptide_spectra = index_peptide_spectra(self._tree.getroot())
        return self._peptide_spectra.get(sequence.strip(), {})


class MzIdentMLNativeIDMap:
    """Decide whether bare-integer nativeIDs are scan numbers or indices.

    Parsed documents, with their sequence index, are memoized on the
    instance, keyed by mzIdentML filename.
    """

    def __init__(self, uploaded_result_directory: str | Path | None = None):
        if uploaded_result_directory is not None:
            uploaded_result_directory = Path(uploaded_result_directory)
            if not uploaded_result_directory.is_dir():
                raise NotADirectoryError(
                    f"Uploaded result files directory [{uploaded_result_directory}] must be a directory."
                )
        self.uploaded_result_directory = uploaded_result_directory
        self._documents: dict[str, MzIdentMLDocument | Invalid] = {}

    @staticmethod
    def mzid_filename(mztab_file) -> str:
        name = mztab_file.mangled_result_filename or mztab_file.path.name
        return PurePosixPath(normalize_path(name)).stem + MZID_EXTENSION

    def _document(self, path: Path, value: int) -> MzIdentMLDocument | Invalid:
        cached = self._documents.get(path.name)
        if cached is not None:
            return cached
        try:
            document: MzIdentMLDocument | Invalid = MzIdentMLDocument.parse(path)
            logger.debug("Parsed mzIdentML file %s", path)
        except (OSError, etree.XMLSyntaxError) as exc:
            logger.warning("Could not parse mzIdentML file %s: %s", path, exc)
            document = Invalid(
                f"Invalid NativeID-formatted spectrum identifier [{value}]: submitted "
                f"mzIdentML file [{path.name}] could not be parsed to verify whether this "
                "identifier represents an index or scan number."
            )
        self._documents[path.name] = document
        return document

    def resolve(self, mztab_file, sequence: str | None, value: int) -> NativeID | Invalid:
        if self.uploaded_result_directory is None:
            return Invalid(
                f"Invalid NativeID-formatted spectrum identifier [{value}]: no submitted "
                "result file could be found to verify whether this identifier represents "
                "an index or scan number."
            )
        path = self.uploaded_result_directory / self.mzid_filename(mztab_file)
        if not path.is_file():
            return Invalid(
                f"Invalid NativeID-formatted spectrum identifier [{value}]: no submitted "
                "mzIdentML file could be found to verify whether this identifier "
                "represents an index or scan number."
            )
        document = self._document(path, value)
        if isinstance(document, Invalid):
            return document
        if not sequence:
            return Invalid(
                f"Invalid NativeID-formatted spectrum identifier [{value}]: no peptide "
                "sequence is available to look up in the submitted mzIdentML file."
            )

        spectra = document.get_peptide_spectra(sequence)
        if not spectra:
            return Invalid(
                f"Invalid NativeID-formatted spectrum identifier [{value}]: could not find "
                f"an entry for peptide sequence [{sequence}] in submitted mzIdentML file "
                f"[{path.name}] to verify whether this identifier represents an index or "
                "scan number."
            )

        scan_id = f"scan={value}"
        index_id = f"index={value - MZID_INDEX_OFFSET}"
        seen: list[str] = []
        for spectrum_ids in spectra.values():
            for spectrum_id in spectrum_ids:
                if spectrum_id == scan_id:
                    return NativeID(True, value)
                if spectrum_id == index_id:
                    return NativeID(False, value)
                seen.append(spectrum_id)

        if not seen:
            return Invalid(
                f"Invalid NativeID-formatted spectrum identifier [{value}]: no spectrum "
                f"evidence was found for peptide sequence [{sequence}] in submitted "
                f"mzIdentML file [{path.name}]."
            )
        return Invalid(
            f"Invalid NativeID-formatted spectrum identifier [{value}]: none of the "
            f"spectrum identifiers found for peptide sequence [{sequence}] in submitted "
            f"mzIdentML file [{path.name}] ({', '.join(seen[:5])}) matches it as either a "
            "scan number or an index."
        )
