from __future__ import annotations

import sys

from mztab_validator.logging import get_logger


logger = get_logger(__file__)


def die(message: str, error: BaseException | None = None) -> None:
    """Report a fatal error and exit with status 1."""

    if error is not None:
        logger.error("%s", message, exc_info=(type(error), error, error.__traceback__))
    else:
        logger.error("%s", message)
    print(f"Error: {message}", file=sys.stderr)
    raise SystemExit(1)
