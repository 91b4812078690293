import os
import sys
from pathlib import Path

import pytest

# Ensure the src directory is on the path for imports
root = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(root / "src"))
sys.path.insert(0, str(root / "tests"))

log_dir = root / "logs"
log_dir.mkdir(parents=True, exist_ok=True)
os.environ.setdefault("MZTAB_VALIDATOR_LOG_DIR", str(log_dir))
os.environ.setdefault("MZTAB_VALIDATOR_LOG_CONFIG", str(log_dir / "logging.json"))

from mztab_samples import (  # noqa: E402
    SUBMISSION_RESULTS,
    SUBMISSION_UPLOADS,
    mztab_text,
    params_xml,
    psm_row,
)


@pytest.fixture
def submission(tmp_path):
    """Build a one-result, one-peak-list submission under ``tmp_path``.

    Returns a callable taking the PSM ``spectra_ref`` values and returning a
    dict of the paths involved.
    """

    def build(spectra_refs=(), scans=(101, 102, 103), location="file:///data/run1.mzML", rows=None):
        params = tmp_path / "params.xml"
        params.write_text(
            params_xml(uploads=SUBMISSION_UPLOADS, results=SUBMISSION_RESULTS),
            encoding="utf-8",
        )

        mztab_dir = tmp_path / "mztab"
        mztab_dir.mkdir(exist_ok=True)
        if rows is None:
            rows = [psm_row(number, ref) for number, ref in enumerate(spectra_refs, start=1)]
        mztab = mztab_dir / "RESULT-00000.mzTab"
        mztab.write_text(mztab_text({1: location}, rows), encoding="utf-8")

        scans_dir = tmp_path / "scans"
        scans_dir.mkdir(exist_ok=True)
        (scans_dir / "PEAK-00000.scans").write_text(
            "".join(f"PEPTIDEK {scan} {position}\n" for position, scan in enumerate(scans)),
            encoding="utf-8",
        )

        result_dir = tmp_path / "result"
        result_dir.mkdir(exist_ok=True)

        return {
            "params": params,
            "mztab_dir": mztab_dir,
            "mztab": mztab,
            "scans_dir": scans_dir,
            "result_dir": result_dir,
            "output": tmp_path / "statistics.tsv",
        }

    return build
