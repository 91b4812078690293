from __future__ import annotations

import os
from dataclasses import dataclass

from mztab_validator.config.contract import VarSpec, default_contract
from mztab_validator.errors import ConfigError


def _normalize_raw(value: str | None) -> str | None:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


def validate_value(spec: VarSpec, raw: str | None) -> list[str]:
    errors: list[str] = []
    value = _normalize_raw(raw)
    if value is None:
        return errors

    if spec.kind == "float":
        try:
            parsed = float(value)
        except ValueError:
            errors.append("Must be a number.")
            return errors
        if spec.min_value is not None and parsed < spec.min_value:
            errors.append(f"Must be >= {spec.min_value:g}.")
        if spec.max_value is not None and parsed > spec.max_value:
            errors.append(f"Must be <= {spec.max_value:g}.")
        return errors

    if spec.kind == "path":
        if "://" in value:
            errors.append("Expected a filesystem path.")

    return errors


@dataclass(frozen=True)
class Settings:
    failure_threshold: float
    ftp_host: str


def resolve_values(
    env: dict[str, str] | None = None,
    *,
    contract: tuple[VarSpec, ...] | None = None,
) -> dict[str, str | None]:
    """Return ``key -> effective value`` (environment, else default)."""

    if env is None:
        env = dict(os.environ)
    contract = contract or default_contract()
    return {spec.key: _normalize_raw(env.get(spec.key)) or spec.default for spec in contract}


def load_settings(env: dict[str, str] | None = None) -> Settings:
    """Validate the environment contract and build :class:`Settings`.

    Raises :class:`ConfigError` listing every offending variable.
    """

    if env is None:
        env = dict(os.environ)

    contract = default_contract()
    problems: list[str] = []
    for spec in contract:
        for message in validate_value(spec, env.get(spec.key)):
            problems.append(f"{spec.key}: {message}")
    if problems:
        raise ConfigError("Invalid environment settings: " + "; ".join(problems))

    values = resolve_values(env, contract=contract)
    return Settings(
        failure_threshold=float(values["MZTAB_VALIDATOR_FAILURE_THRESHOLD"]),
        ftp_host=str(values["MZTAB_VALIDATOR_FTP_HOST"]),
    )
