import pytest

from mztab_validator.errors import MzTabFormatError
from mztab_validator.mztab.file import MzTabFile, MzTabMsRun, clean_file_url, parse_ms_runs

from mztab_samples import mztab_text, psm_row


def _write(tmp_path, text, name="RESULT-00000.mzTab"):
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    return path


def test_parse_ms_runs_reads_metadata_only(tmp_path):
    text = mztab_text(
        {2: "file:///data/run2.mzML", 1: "file:///data/run1.mzML"},
        [psm_row(1, "ms_run[1]:scan=5")],
    )
    # ms_run lines after the metadata section are not part of it
    text += "MTD\tms_run[3]-location\tfile:///data/run3.mzML\n"
    runs = parse_ms_runs(_write(tmp_path, text))
    assert list(runs) == [1, 2]
    assert runs[1].location == "file:///data/run1.mzML"


def test_parse_ms_runs_tolerates_comments_and_spaces(tmp_path):
    text = "COM\tconverted\nMTD  ms_run[1]-location   /data/run1.mgf\n\nPSH\tsequence\n"
    runs = parse_ms_runs(_write(tmp_path, text))
    assert runs[1].location == "/data/run1.mgf"


def test_parse_ms_runs_rejects_duplicate_index(tmp_path):
    text = "MTD\tms_run[1]-location\ta.mzML\nMTD\tms_run[1]-location\tb.mzML\n"
    with pytest.raises(MzTabFormatError, match=r"line 2"):
        parse_ms_runs(_write(tmp_path, text))


def test_parse_ms_runs_rejects_index_zero(tmp_path):
    with pytest.raises(MzTabFormatError):
        parse_ms_runs(_write(tmp_path, "MTD\tms_run[0]-location\ta.mzML\n"))


@pytest.mark.parametrize(
    "url, expected",
    [
        ("file:///data/run1.mzML", "/data/run1.mzML"),
        ("file:///file://data/run1.mzML", "data/run1.mzML"),
        ("ftp://MSV000000001@massive.ucsd.edu/peak/run1.mzML", "MSV000000001@massive.ucsd.edu/peak/run1.mzML"),
        ("file:C:/data/run1.mzML", "C:/data/run1.mzML"),
        ("run1.mzML", "run1.mzML"),
    ],
)
def test_clean_file_url(url, expected):
    assert clean_file_url(url) == expected


def test_ms_run_requires_index_and_location():
    with pytest.raises(ValueError):
        MzTabMsRun(0, "run1.mzML")
    with pytest.raises(ValueError):
        MzTabMsRun(1, "  ")


def test_ms_run_paths_and_descriptor():
    ms_run = MzTabMsRun(1, "file:///data/run1.mzML")
    assert ms_run.peak_list_path == "/data/run1.mzML"
    assert ms_run.descriptor == "/data/run1.mzML"
    ms_run.mangled_peak_list_filename = "PEAK-00000.mzML"
    assert ms_run.peak_list_path == "PEAK-00000.mzML"
    ms_run.uploaded_peak_list_path = "jdoe/spectra/run1.mzML"
    assert ms_run.peak_list_path == "jdoe/spectra/run1.mzML"
    assert ms_run.descriptor == "f.jdoe/spectra/run1.mzML"
    ms_run.mapped_peak_list_path = "spectra/run1.mzML"
    assert ms_run.peak_list_path == "spectra/run1.mzML"


def test_mztab_file_names(tmp_path):
    mztab = MzTabFile(_write(tmp_path, mztab_text({1: "run1.mzML"}, [])))
    assert mztab.mangled_mztab_filename == "RESULT-00000.mzTab"
    assert mztab.descriptor == "f.RESULT-00000.mzTab"
    mztab.mangled_result_filename = "RESULT-00000.mzid"
    mztab.uploaded_result_path = "jdoe/results/search.mzid"
    assert mztab.mangled_mztab_filename == "RESULT-00000.mzTab"
    assert mztab.descriptor == "f.jdoe/results/search.mzid"
    assert mztab.ms_run(1).location == "run1.mzML"
    assert mztab.ms_run(2) is None


def test_mztab_file_ms_runs_are_read_only(tmp_path):
    mztab = MzTabFile(_write(tmp_path, mztab_text({1: "run1.mzML"}, [])))
    with pytest.raises(TypeError):
        mztab.ms_runs[2] = MzTabMsRun(2, "run2.mzML")
