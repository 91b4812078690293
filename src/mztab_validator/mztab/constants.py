from __future__ import annotations

import re
from enum import Enum


class MzTabSection(str, Enum):
    PRT = "PRT"
    PEP = "PEP"
    PSM = "PSM"
    SML = "SML"


HEADER_SECTIONS = {
    "PRH": MzTabSection.PRT,
    "PEH": MzTabSection.PEP,
    "PSH": MzTabSection.PSM,
    "SMH": MzTabSection.SML,
}

METADATA_PREFIXES = ("MTD", "COM")

FILE_LINE_PATTERN = re.compile(r"^MTD\s+ms_run\[(\d+)\]-location\s+(.+)$")
SPECTRA_REF_MS_RUN_PATTERN = re.compile(r"^ms_run\[(\d+)\]$")

# ms_run-location cleanup
DOUBLE_PROTOCOL_PATTERN = re.compile(r"^[^:/]+:/{2,3}([^:/]+://.*)$")
FILE_URI_PROTOCOL_PATTERN = re.compile(r"^[^/]+://(.*)$")

# PSM columns
SEQUENCE_COLUMN = "sequence"
ACCESSION_COLUMN = "accession"
MODIFICATIONS_COLUMN = "modifications"
SPECTRA_REF_COLUMN = "spectra_ref"
VALID_COLUMN = "opt_global_valid"
INVALID_REASON_COLUMN = "opt_global_invalid_reason"

VALID = "VALID"
INVALID = "INVALID"
NULL_VALUE = "null"
DEFAULT_INVALID_REASON = "This PSM was marked as invalid by its source."
