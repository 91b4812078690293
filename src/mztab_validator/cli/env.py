"""``--env-file`` support for the CLI.

Workflow wrappers often keep settings such as
``MZTAB_VALIDATOR_FAILURE_THRESHOLD`` in ``KEY=value`` files without exporting
them. The flag may appear anywhere on the command line, so it is pulled out of
argv before argparse sees it.
"""

from __future__ import annotations

import os
import shlex
from collections.abc import Iterable, Sequence
from pathlib import Path

ENV_FILE_FLAG = "--env-file"


def extract_env_files(argv: Sequence[str]) -> tuple[list[str], list[str]]:
    """Split argv into (env file paths, remaining arguments)."""

    env_files: list[str] = []
    remaining: list[str] = []
    tokens = iter(argv)
    for token in tokens:
        if token == ENV_FILE_FLAG:
            path = next(tokens, None)
            if path is None:
                raise SystemExit(f"{ENV_FILE_FLAG} requires a file path")
            env_files.append(path)
        elif token.startswith(ENV_FILE_FLAG + "="):
            env_files.append(token.split("=", 1)[1])
        else:
            remaining.append(token)
    return env_files, remaining


def parse_env_file_text(text: str) -> dict[str, str]:
    """Parse ``KEY=value`` lines; ``export`` prefixes, quotes and ``#`` comments are allowed."""

    parsed: dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        if line.startswith("export "):
            line = line[len("export "):].lstrip()

        key, raw_value = line.split("=", 1)
        key = key.strip()
        if not key:
            continue
        try:
            words = shlex.split(raw_value, comments=True)
        except ValueError:
            words = [raw_value.strip()]
        parsed[key] = " ".join(words)
    return parsed


def load_env_files(paths: Iterable[str | Path], *, override: bool = True) -> dict[str, str]:
    """Load env files into ``os.environ`` in order; later files win."""

    merged: dict[str, str] = {}
    for path in paths:
        resolved = Path(path).expanduser()
        if not resolved.is_file():
            raise SystemExit(f"{ENV_FILE_FLAG} does not exist: {resolved}")
        merged.update(parse_env_file_text(resolved.read_text(encoding="utf-8")))

    for key, value in merged.items():
        if override or key not in os.environ:
            os.environ[key] = value
    return merged
