import argparse
import logging
import types
from pathlib import Path
from unittest.mock import MagicMock

from mztab_validator.cli import logging as logging_cli


def _parser():
    parser = argparse.ArgumentParser()
    subparsers = parser.add_subparsers(dest="subcommand", required=True)
    logging_cli.register_subcommands(subparsers)
    return parser


def test_register_subcommands_parses_set_level():
    args = _parser().parse_args(["set-level", "DEBUG"])
    assert args.subcommand == "set-level"
    assert args.level == "DEBUG"


def test_register_subcommands_parses_show_level():
    args = _parser().parse_args(["show-level"])
    assert args.subcommand == "show-level"


def test_dispatch_set_level_invokes_logging_helpers(monkeypatch):
    save_mock = MagicMock()
    reset_mock = MagicMock()
    get_mock = MagicMock()
    monkeypatch.setattr(logging_cli, "save_log_level", save_mock)
    monkeypatch.setattr(logging_cli, "reset_logger", reset_mock)
    monkeypatch.setattr(logging_cli, "get_logger", get_mock)
    args = types.SimpleNamespace(subcommand="set-level", level="WARNING")
    logging_cli.dispatch(args)
    save_mock.assert_called_once_with("WARNING")
    reset_mock.assert_called_once_with()
    assert get_mock.call_args.kwargs["level"] == logging.WARNING


def test_dispatch_show_path_prints_resolved_path(monkeypatch, capsys):
    expected = Path("/tmp/mztab_validator-test.log")
    monkeypatch.setattr(logging_cli, "_resolve_log_file", lambda: expected)
    logging_cli.dispatch(types.SimpleNamespace(subcommand="show-path"))
    assert capsys.readouterr().out.strip() == str(expected.resolve())


def test_dispatch_show_level_prints_configured_level(monkeypatch, capsys):
    monkeypatch.setattr(logging_cli, "get_configured_level", lambda: "WARNING")
    logging_cli.dispatch(types.SimpleNamespace(subcommand="show-level"))
    assert capsys.readouterr().out.strip() == "WARNING"
