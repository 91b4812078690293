"""Exceptions that abort a validation or cleaning run.

Row-level problems are not exceptions; see :class:`mztab_validator.validation.Invalid`.
"""

from __future__ import annotations

from pathlib import Path


class MzTabValidatorError(Exception):
    """Base class for fatal errors."""


class ConfigError(MzTabValidatorError, ValueError):
    """Environment settings failed validation."""


class ParameterError(MzTabValidatorError, ValueError):
    """The workflow parameters document is unreadable or incomplete."""


class FilenameMappingError(MzTabValidatorError, ValueError):
    """Submission file mappings are malformed or cannot be resolved."""


class MzTabFormatError(MzTabValidatorError, ValueError):
    """An mzTab file is structurally malformed."""

    def __init__(self, message: str, path: str | Path | None = None, line_number: int | None = None):
        self.path = None if path is None else Path(path)
        self.line_number = line_number
        location = ""
        if path is not None:
            location = f" in mzTab file [{Path(path).name}]"
            if line_number is not None:
                location += f" (line {line_number})"
        super().__init__(f"{message}{location}")


class ScansFileError(MzTabValidatorError, ValueError):
    """A spectrum scans summary file is malformed."""

    def __init__(self, message: str, path: str | Path, line_number: int):
        self.path = Path(path)
        self.line_number = line_number
        super().__init__(
            f"Line {line_number} of scans file [{self.path.name}] is invalid: {message}"
        )


class ValidationThresholdError(MzTabValidatorError):
    """Too many PSM rows in one result file failed validation."""

    def __init__(self, filename: str, invalid_percentage: float, threshold: float):
        self.filename = filename
        self.invalid_percentage = invalid_percentage
        self.threshold = threshold
        super().__init__(
            f"Result file [{filename}] contains {invalid_percentage:.1f}% invalid PSM rows "
            f"(allowed: {threshold:g}%). Please correct the file and ensure that its "
            "spectrum references are correct, and that the submitted peak list files "
            "contain the referenced spectra, before resubmitting."
        )
