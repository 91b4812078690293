"""``mztab-validator config`` subcommands."""

from __future__ import annotations

import json
import os

from rich.console import Console
from rich.table import Table

from mztab_validator.config.contract import default_contract, spec_to_dict
from mztab_validator.config.settings import resolve_values, validate_value


def register_subcommands(subparsers):
    show_parser = subparsers.add_parser("show", help="Show environment settings and their values")
    show_parser.add_argument("--json", action="store_true", help="Print the settings as JSON")


def dispatch(args):
    if args.subcommand == "show":
        if getattr(args, "json", False):
            print(json.dumps(_settings_payload(), indent=2))
        else:
            _render_settings()


def _settings_payload() -> list[dict]:
    env = dict(os.environ)
    values = resolve_values(env)
    payload = []
    for spec in default_contract():
        entry = spec_to_dict(spec)
        entry["value"] = values[spec.key]
        entry["from_environment"] = bool((env.get(spec.key) or "").strip())
        entry["errors"] = validate_value(spec, env.get(spec.key))
        payload.append(entry)
    return payload


def _render_settings(console: Console | None = None) -> None:
    """Pretty-print the environment contract using ``rich``."""

    if console is None:
        console = Console()

    table = Table(title="mztab-validator settings", show_lines=True)
    table.add_column("Variable", style="bold cyan")
    table.add_column("Group", style="magenta")
    table.add_column("Value", style="green")
    table.add_column("Source", justify="center", style="yellow")
    table.add_column("Description", style="bright_black")

    for entry in _settings_payload():
        value = "" if entry["value"] is None else str(entry["value"])
        if entry["errors"]:
            value = f"[bold red]{value}[/bold red] ({'; '.join(entry['errors'])})"
        table.add_row(
            entry["key"],
            entry["group"],
            value,
            "env" if entry["from_environment"] else "default",
            entry["description"],
        )
    console.print(table)
