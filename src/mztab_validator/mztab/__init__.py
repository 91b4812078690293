from .file import MzTabFile, MzTabMsRun, clean_file_url, parse_ms_runs
from .header import MzTabSectionHeader

__all__ = [
    "MzTabFile",
    "MzTabMsRun",
    "MzTabSectionHeader",
    "clean_file_url",
    "parse_ms_runs",
]
