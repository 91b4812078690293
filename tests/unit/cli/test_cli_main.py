import json
import sys

import pytest

from mztab_validator.cli.main import build_parser, main

from mztab_samples import psm_row


def _validate_argv(paths, *extra):
    return [
        "validate",
        "--params",
        str(paths["params"]),
        "--mztab",
        str(paths["mztab_dir"]),
        "--scans",
        str(paths["scans_dir"]),
        "--result",
        str(paths["result_dir"]),
        "--output",
        str(paths["output"]),
        *extra,
    ]


@pytest.fixture(autouse=True)
def _default_threshold(monkeypatch):
    monkeypatch.delenv("MZTAB_VALIDATOR_FAILURE_THRESHOLD", raising=False)


def test_parser_requires_command():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_validate_all_valid(submission, tmp_path):
    paths = submission(["ms_run[1]:scan=101", "ms_run[1]:scan=103"])
    main(_validate_argv(paths, "--json", str(tmp_path / "summary.json")))

    lines = paths["output"].read_text(encoding="utf-8").splitlines()
    assert lines[0].startswith("MzTab_file\tUploaded_file")
    assert lines[1].split("\t")[:5] == [
        "RESULT-00000.mzTab",
        "jdoe/study/results/search.mzid",
        "u.jdoe/abc123/RESULT-00000.mzTab",
        "2",
        "0",
    ]
    summary = json.loads((tmp_path / "summary.json").read_text(encoding="utf-8"))
    assert summary["passed"] is True
    assert summary["threshold"] == 10.0


def test_validate_over_threshold_exits_with_error(submission, tmp_path, capsys):
    paths = submission(["ms_run[1]:scan=101", "ms_run[1]:scan=999", "ms_run[1]:scan=102"])
    with pytest.raises(SystemExit) as excinfo:
        main(_validate_argv(paths, "--json", str(tmp_path / "summary.json")))
    assert excinfo.value.code == 1
    assert "Error: Result file [jdoe/study/results/search.mzid] contains 33.3% invalid PSM rows" in (
        capsys.readouterr().err
    )

    summary = json.loads((tmp_path / "summary.json").read_text(encoding="utf-8"))
    assert summary["passed"] is False
    assert "33.3%" in summary["failure"]
    # statistics are written before the threshold check
    assert len(paths["output"].read_text(encoding="utf-8").splitlines()) == 2


def test_validate_threshold_flag(submission):
    paths = submission(["ms_run[1]:scan=101", "ms_run[1]:scan=999", "ms_run[1]:scan=102"])
    main(_validate_argv(paths, "--threshold", "50"))


def test_validate_threshold_from_env_file(submission, tmp_path, monkeypatch):
    monkeypatch.setenv("MZTAB_VALIDATOR_FAILURE_THRESHOLD", "10")
    env_file = tmp_path / "validator.env"
    env_file.write_text("MZTAB_VALIDATOR_FAILURE_THRESHOLD=40\n", encoding="utf-8")
    paths = submission(["ms_run[1]:scan=101", "ms_run[1]:scan=999", "ms_run[1]:scan=102"])
    main(["--env-file", str(env_file), *_validate_argv(paths)])


def test_validate_count_only_never_fails(submission):
    paths = submission(["ms_run[1]:scan=999"])
    before = paths["mztab"].read_text(encoding="utf-8")
    main(_validate_argv(paths, "--count-only"))
    assert paths["mztab"].read_text(encoding="utf-8") == before


def test_variable_mod_markup_is_ignored_when_counting_psms(submission):
    rows = [
        psm_row(1, "ms_run[1]:scan=101", sequence="PEPM+15.995TIDEK"),
        psm_row(2, "ms_run[1]:scan=101", sequence="PEPMTIDEK"),
    ]
    paths = submission(rows=rows)
    main(_validate_argv(paths, "--variable-mod", "[UNIMOD, UNIMOD:35, Oxidation, M+15.995]"))
    row = paths["output"].read_text(encoding="utf-8").splitlines()[1].split("\t")
    assert row[3:6] == ["2", "0", "1"]


def test_invalid_threshold_environment_is_reported(submission, monkeypatch, capsys):
    monkeypatch.setenv("MZTAB_VALIDATOR_FAILURE_THRESHOLD", "lots")
    paths = submission(["ms_run[1]:scan=101"])
    with pytest.raises(SystemExit) as excinfo:
        main(_validate_argv(paths))
    assert excinfo.value.code == 1
    assert "MZTAB_VALIDATOR_FAILURE_THRESHOLD: Must be a number." in capsys.readouterr().err


def test_missing_params_file_is_reported(tmp_path, capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(["validate", "--params", str(tmp_path / "missing.xml"), "--output", str(tmp_path / "out.tsv")])
    assert excinfo.value.code == 1
    err = capsys.readouterr().err
    assert "Error: " in err
    assert "missing.xml" in err


def test_clean_dataset(submission, tmp_path, monkeypatch):
    monkeypatch.delenv("MZTAB_VALIDATOR_FTP_HOST", raising=False)
    dataset_file = tmp_path / "dataset.txt"
    dataset_file.write_text("MSV000000001\n", encoding="utf-8")
    paths = submission(["ms_run[1]:scan=101"])
    monkeypatch.setattr(
        sys,
        "argv",
        [
            "mztab-validator",
            "clean",
            "--params",
            str(paths["params"]),
            "--mztab",
            str(paths["mztab_dir"]),
            "--dataset",
            str(dataset_file),
            "--output",
            str(tmp_path / "clean"),
        ],
    )
    main()
    text = (tmp_path / "clean" / "RESULT-00000.mzTab").read_text(encoding="utf-8")
    assert "ftp://MSV000000001@massive.ucsd.edu/peak/spectra/run1.mzML" in text
