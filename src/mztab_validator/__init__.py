"""Validation and cleaning of mzTab files submitted to a proteomics repository."""

__version__ = "0.1.0"
