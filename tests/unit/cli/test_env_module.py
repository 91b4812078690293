import os

import pytest

from mztab_validator.cli.env import extract_env_files, load_env_files, parse_env_file_text


def test_extract_env_files_supports_both_forms():
    env_files, argv = extract_env_files(
        [
            "validate",
            "--params",
            "params.xml",
            "--env-file",
            ".env.local",
            "--output",
            "stats.tsv",
            "--env-file=extra.env",
        ]
    )
    assert env_files == [".env.local", "extra.env"]
    assert argv == ["validate", "--params", "params.xml", "--output", "stats.tsv"]


def test_extract_env_files_errors_on_missing_value():
    with pytest.raises(SystemExit):
        extract_env_files(["validate", "--env-file"])


def test_parse_env_file_text_handles_comments_and_quotes():
    parsed = parse_env_file_text(
        """
        # comment
        MZTAB_VALIDATOR_FAILURE_THRESHOLD=5
        MZTAB_VALIDATOR_FTP_HOST=ftp.example.org # trailing comment
        QUOTED="a # not a comment"
        export EXPORTED=ok
        not a setting
        """
    )
    assert parsed == {
        "MZTAB_VALIDATOR_FAILURE_THRESHOLD": "5",
        "MZTAB_VALIDATOR_FTP_HOST": "ftp.example.org",
        "QUOTED": "a # not a comment",
        "EXPORTED": "ok",
    }


def test_load_env_files_overrides_in_order(tmp_path, monkeypatch):
    monkeypatch.setenv("MZTAB_VALIDATOR_FTP_HOST", "old")
    monkeypatch.setenv("MZTAB_VALIDATOR_FAILURE_THRESHOLD", "10")
    one = tmp_path / "one.env"
    two = tmp_path / "two.env"
    one.write_text("MZTAB_VALIDATOR_FTP_HOST=first\nMZTAB_VALIDATOR_FAILURE_THRESHOLD=20\n", encoding="utf-8")
    two.write_text("MZTAB_VALIDATOR_FTP_HOST=second\n", encoding="utf-8")

    loaded = load_env_files([one, two], override=True)
    assert loaded["MZTAB_VALIDATOR_FTP_HOST"] == "second"
    assert os.environ["MZTAB_VALIDATOR_FTP_HOST"] == "second"
    assert os.environ["MZTAB_VALIDATOR_FAILURE_THRESHOLD"] == "20"


def test_load_env_files_without_override_keeps_environment(tmp_path, monkeypatch):
    monkeypatch.setenv("MZTAB_VALIDATOR_FTP_HOST", "kept")
    env_file = tmp_path / "settings.env"
    env_file.write_text("MZTAB_VALIDATOR_FTP_HOST=ignored\n", encoding="utf-8")
    load_env_files([env_file], override=False)
    assert os.environ["MZTAB_VALIDATOR_FTP_HOST"] == "kept"


def test_load_env_files_missing_file(tmp_path):
    with pytest.raises(SystemExit):
        load_env_files([tmp_path / "missing.env"])
