"""Search modifications declared as ``[cvLabel, accession, name, modID]`` tuples.

A :class:`ModificationRecord` knows which residues a modification affects and
how it is written inline in a search engine's peptide string
(e.g. ``PEPM+15.995TIDE``), so that the inline markup can be stripped and the
modified positions reported in mzTab form.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable

AMINO_ACID_MASSES = {
    "A": 71.037113787,
    "R": 156.101111026,
    "D": 115.026943031,
    "N": 114.042927446,
    "C": 103.009184477,
    "E": 129.042593095,
    "Q": 128.058577510,
    "G": 57.021463723,
    "H": 137.058911861,
    "I": 113.084063979,
    "L": 113.084063979,
    "K": 128.094963016,
    "M": 131.040484605,
    "F": 147.068413915,
    "P": 97.052763851,
    "S": 87.032028409,
    "T": 101.047678473,
    "W": 186.079312952,
    "Y": 163.063328537,
    "V": 99.068413915,
}

UNKNOWN_MODIFICATION_ACCESSION = "MS:1001460"

PARAM_PATTERN = re.compile(
    r'^\[\s*([^,]*),\s*([^,]*),\s*"?([^"]*)"?,\s*"?([^"]*)"?\s*\]$'
)
FLOAT_PATTERN = re.compile(r"((?:[+-]?\d+\.?\d*)|(?:[+-]?\d*\.?\d+))")
SIGNED_FLOAT_PATTERN = r"[+-](?:\d+\.?\d*|\d*\.?\d+)"
AMINO_ACID_RUN = re.compile(r"^[ARDNCEQGHILKMFPSTWYV]+$")


@dataclass(frozen=True)
class OntologyEntry:
    name: str
    mass: float | None
    sites: tuple[str, ...]


_ONTOLOGY = {
    "UNIMOD:1": OntologyEntry("Acetyl", 42.010565, ("N-term", "K")),
    "UNIMOD:4": OntologyEntry("Carbamidomethyl", 57.021464, ("C",)),
    "UNIMOD:7": OntologyEntry("Deamidated", 0.984016, ("N", "Q")),
    "UNIMOD:21": OntologyEntry("Phospho", 79.966331, ("S", "T", "Y")),
    "UNIMOD:28": OntologyEntry("Gln->pyro-Glu", -17.026549, ("Q",)),
    "UNIMOD:34": OntologyEntry("Methyl", 14.01565, ("K", "R")),
    "UNIMOD:35": OntologyEntry("Oxidation", 15.994915, ("M",)),
    "UNIMOD:737": OntologyEntry("TMT6plex", 229.162932, ("N-term", "K")),
    UNKNOWN_MODIFICATION_ACCESSION: OntologyEntry("unknown modification", None, ()),
}


def lookup_modification(accession: str | None) -> OntologyEntry | None:
    """Ontology entry for a modification accession, if known."""

    if not accession:
        return None
    return _ONTOLOGY.get(accession.strip())


OntologyLookup = Callable[[str | None], "OntologyEntry | None"]


def format_mass(mass: float | None) -> str | None:
    if mass is None:
        return None
    if mass == int(mass):
        formatted = str(int(mass))
    else:
        formatted = repr(mass)
    if mass >= 0.0 and not formatted.startswith("+"):
        formatted = "+" + formatted
    return formatted


class ModificationRecord:
    def __init__(
        self,
        descriptor: str,
        fixed: bool = False,
        ontology: OntologyLookup = lookup_modification,
    ):
        if descriptor is None:
            raise ValueError("Modification parameter string cannot be None.")
        match = PARAM_PATTERN.match(descriptor.strip())
        if match is None:
            raise ValueError(
                f"Modification parameter string [{descriptor}] does not conform to the "
                "required format of a square bracket-enclosed parameter tuple: "
                "[cvLabel, accession, name, value]"
            )
        self.descriptor = descriptor
        self.fixed = fixed
        self.mod_id = match.group(4).strip()
        self._ontology = ontology

        label = match.group(1).strip() or None
        accession = match.group(2).strip() or None
        name = match.group(3).strip() or None
        if accession is not None:
            if label is None:
                tokens = accession.split(":")
                if len(tokens) != 2:
                    raise ValueError(
                        f'The "accession" element [{accession}] of modification parameter '
                        f"string [{descriptor}] is not of the form <cvLabel>:<accession>."
                    )
                label = tokens[0]
            if name is None:
                entry = ontology(accession)
                if entry is None:
                    raise ValueError(
                        f'No CV entry could be found for "accession" element [{accession}] '
                        f"of modification parameter string [{descriptor}]."
                    )
                name = entry.name
        self.cv_label = label
        self.accession = accession
        self.name = name

        self.generic = False
        self.mass = self._resolve_mass()
        self.sites: frozenset[str] | None = None
        self.pattern = self._build_pattern()

    @property
    def is_variable(self) -> bool:
        return not self.fixed

    def _resolve_mass(self) -> float | None:
        entry = self._ontology(self.accession)
        if entry is not None and entry.mass is not None:
            return entry.mass

        found = FLOAT_PATTERN.findall(self.mod_id)
        if not found:
            # mass is read from each occurrence instead
            self.generic = True
            return None
        if len(found) > 1:
            raise ValueError(
                f"Multiple numerical mass values were extracted from mod ID string [{self.mod_id}]."
            )
        return float(found[0])

    def _set_sites(self, sites) -> None:
        if self.sites is not None:
            raise ValueError(
                f"Found multiple regions of amino acid references in mod ID string [{self.mod_id}]."
            )
        self.sites = frozenset(sites)

    def _build_pattern(self) -> re.Pattern:
        found: list[str] = []
        parts: list[str] = []
        for position, current in enumerate(self.mod_id):
            if current == "*":
                if found:
                    raise ValueError(
                        f'Found an asterisk ("*") at position {position} in mod ID string '
                        f"[{self.mod_id}], even though other site references had already "
                        "been found in the same string."
                    )
                found.extend(AMINO_ACID_MASSES)
                continue
            if current in AMINO_ACID_MASSES:
                if current in found:
                    raise ValueError(
                        f'Found site "{current}" at position {position} in mod ID string '
                        f"[{self.mod_id}], even though a reference to this site had "
                        "already been found in the same string."
                    )
                found.append(current)
                continue
            if found:
                self._set_sites(found)
                parts.append("[" + "".join(found) + "]")
                found = []
            parts.append(re.escape(current))

        if found:
            self._set_sites(found)
            parts.append("[" + "".join(found) + "]")
        elif self.sites is None:
            self._set_sites(self._ontology_sites())

        if self.generic:
            if not parts:
                parts.append("[" + "".join(sorted(self.sites)) + "]")
            parts.append(f"({SIGNED_FLOAT_PATTERN})")
        return re.compile("".join(parts))

    def _ontology_sites(self) -> list[str]:
        entry = self._ontology(self.accession)
        residues: list[str] = []
        if entry is not None:
            for site in entry.sites:
                if len(site) == 1 and site in AMINO_ACID_MASSES:
                    residues.append(site)
                else:
                    # terminal sites can sit on any residue
                    residues = []
                    break
        return residues or list(AMINO_ACID_MASSES)

    def parse_psm(self, psm: str | None) -> tuple[str, list[int] | None] | None:
        """Strip this modification from ``psm``.

        Returns the cleaned peptide string and the 1-based positions of the
        affected residues, or ``None`` positions when the modification does
        not occur.
        """

        if psm is None:
            return None
        cleaned = psm
        occurrences: dict[int, None] = {}
        while True:
            match = self.pattern.search(cleaned)
            if match is None:
                break
            captured = match.group(0)
            if not captured.strip() or AMINO_ACID_RUN.match(captured):
                break
            position, cleaned = _extract(cleaned, match.start(), match.end())
            occurrences[position] = None

        if self.fixed and self.sites:
            position = 0
            for current in cleaned:
                if current in AMINO_ACID_MASSES:
                    position += 1
                if current in self.sites:
                    occurrences[position] = None

        return cleaned, (list(occurrences) or None)

    def format_occurrences(self, occurrences: list[int] | None) -> str | None:
        if not occurrences:
            return None
        return ",".join(f"{position}-{self}" for position in occurrences)

    def __str__(self) -> str:
        if not self.accession or self.accession == UNKNOWN_MODIFICATION_ACCESSION:
            return f"CHEMMOD:{format_mass(self.mass) if self.mass is not None else '*'}"
        return self.accession

    def __repr__(self) -> str:
        return f"ModificationRecord({self.descriptor!r}, fixed={self.fixed!r})"


def _extract(psm: str, start: int, end: int) -> tuple[int, str]:
    position = 0
    for index in range(end):
        if psm[index] in AMINO_ACID_MASSES:
            position += 1
            if index >= start:
                break
    residues = "".join(char for char in psm[start:end] if char in AMINO_ACID_MASSES)
    return position, psm[:start] + residues + psm[end:]


def clean_sequence(sequence: str, modifications) -> str:
    """Remove inline markup of every configured modification from ``sequence``."""

    cleaned = sequence
    for modification in modifications:
        parsed = modification.parse_psm(cleaned)
        if parsed is not None:
            cleaned = parsed[0]
    return cleaned
