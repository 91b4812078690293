"""Per-row validation outcomes."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Valid:
    native_id: object | None = None
    ms_run: int | None = None
    # set when the row's spectra_ref should be written back in explicit form
    spectra_ref: str | None = None


@dataclass(frozen=True)
class Invalid:
    reason: str


Outcome = Valid | Invalid
