import json
import types
from io import StringIO

from rich.console import Console

from mztab_validator.cli import config as config_cli


def test_show_json_reports_values_and_sources(monkeypatch, capsys):
    monkeypatch.setenv("MZTAB_VALIDATOR_FAILURE_THRESHOLD", "5")
    monkeypatch.delenv("MZTAB_VALIDATOR_FTP_HOST", raising=False)
    config_cli.dispatch(types.SimpleNamespace(subcommand="show", json=True))

    payload = {entry["key"]: entry for entry in json.loads(capsys.readouterr().out)}
    assert payload["MZTAB_VALIDATOR_FAILURE_THRESHOLD"]["value"] == "5"
    assert payload["MZTAB_VALIDATOR_FAILURE_THRESHOLD"]["from_environment"] is True
    assert payload["MZTAB_VALIDATOR_FTP_HOST"]["value"] == "massive.ucsd.edu"
    assert payload["MZTAB_VALIDATOR_FTP_HOST"]["from_environment"] is False


def test_show_table_marks_invalid_values(monkeypatch):
    monkeypatch.setenv("MZTAB_VALIDATOR_FAILURE_THRESHOLD", "lots")
    buffer = StringIO()
    config_cli._render_settings(Console(file=buffer, width=250, color_system=None))
    output = buffer.getvalue()
    assert "MZTAB_VALIDATOR_FAILURE_THRESHOLD" in output
    assert "Must be a number." in output
