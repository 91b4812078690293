from __future__ import annotations

import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, TextIO


@contextmanager
def atomic_rewrite(
    path: str | Path,
    *,
    discard: bool = False,
    encoding: str = "utf-8",
) -> Iterator[TextIO]:
    """Write a replacement for ``path`` through a sibling temporary file.

    On success the temporary file replaces ``path`` (or is deleted when
    ``discard`` is set); on any error it is deleted and ``path`` is untouched.
    """

    path = Path(path)
    handle = tempfile.NamedTemporaryFile(
        "w",
        encoding=encoding,
        newline="",
        dir=path.parent,
        prefix=f".{path.name}.",
        suffix=".tmp",
        delete=False,
    )
    temporary = Path(handle.name)
    try:
        with handle:
            yield handle
        if discard:
            temporary.unlink()
        else:
            os.replace(temporary, path)
    except BaseException:
        temporary.unlink(missing_ok=True)
        raise


def read_dataset_id(value: str | Path | None) -> str | None:
    """Dataset ID given literally or as the first line of a file."""

    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    candidate = Path(text).expanduser()
    if candidate.is_file():
        with candidate.open("r", encoding="utf-8") as handle:
            for line in handle:
                if line.strip():
                    return line.strip()
        raise ValueError(f"Dataset ID file [{candidate}] is empty.")
    return text
