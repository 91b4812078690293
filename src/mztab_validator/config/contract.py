from __future__ import annotations

from dataclasses import dataclass
from typing import Any
from typing import Literal


VarKind = Literal["string", "float", "path"]


@dataclass(frozen=True)
class VarSpec:
    key: str
    kind: VarKind
    group: str
    description: str
    default: str | None = None
    min_value: float | None = None
    max_value: float | None = None


def spec_to_dict(spec: VarSpec) -> dict[str, Any]:
    return {
        "key": spec.key,
        "kind": spec.kind,
        "group": spec.group,
        "description": spec.description,
        "default": spec.default,
        "min_value": spec.min_value,
        "max_value": spec.max_value,
    }


def default_contract() -> tuple[VarSpec, ...]:
    """Environment variables read by the validator and cleaner."""

    return (
        VarSpec(
            key="MZTAB_VALIDATOR_FAILURE_THRESHOLD",
            kind="float",
            group="Validation",
            description="Percentage of invalid PSM rows above which a result file fails the run.",
            default="10.0",
            min_value=0.0,
            max_value=100.0,
        ),
        VarSpec(
            key="MZTAB_VALIDATOR_FTP_HOST",
            kind="string",
            group="Cleaning",
            description="Host used in dataset ms_run-location URLs (ftp://<dataset>@<host>/peak/...).",
            default="massive.ucsd.edu",
        ),
        VarSpec(
            key="MZTAB_VALIDATOR_LOG_DIR",
            kind="path",
            group="Logging",
            description="Directory holding mztab_validator.log.",
            default="~/.mztab_validator/logs",
        ),
        VarSpec(
            key="MZTAB_VALIDATOR_LOG_CONFIG",
            kind="path",
            group="Logging",
            description="JSON file persisting the configured log level.",
            default="~/.mztab_validator/logging.json",
        ),
    )
