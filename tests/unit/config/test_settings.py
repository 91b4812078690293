import pytest

from mztab_validator.config import load_settings
from mztab_validator.config.contract import default_contract, spec_to_dict
from mztab_validator.config.settings import resolve_values, validate_value
from mztab_validator.errors import ConfigError


def _spec(key):
    for spec in default_contract():
        if spec.key == key:
            return spec
    raise AssertionError(f"Missing contract entry for {key}")


def test_load_settings_defaults():
    settings = load_settings({})
    assert settings.failure_threshold == 10.0
    assert settings.ftp_host == "massive.ucsd.edu"


def test_load_settings_reads_environment(tmp_path):
    settings = load_settings(
        {
            "MZTAB_VALIDATOR_FAILURE_THRESHOLD": " 25.5 ",
            "MZTAB_VALIDATOR_FTP_HOST": "ftp.example.org",
            "MZTAB_VALIDATOR_LOG_DIR": str(tmp_path),
        }
    )
    assert settings.failure_threshold == 25.5
    assert settings.ftp_host == "ftp.example.org"


def test_blank_values_fall_back_to_defaults():
    values = resolve_values({"MZTAB_VALIDATOR_FTP_HOST": "   "})
    assert values["MZTAB_VALIDATOR_FTP_HOST"] == "massive.ucsd.edu"


def test_load_settings_reports_every_problem():
    with pytest.raises(ConfigError) as excinfo:
        load_settings(
            {
                "MZTAB_VALIDATOR_FAILURE_THRESHOLD": "150",
                "MZTAB_VALIDATOR_LOG_DIR": "s3://bucket/logs",
            }
        )
    message = str(excinfo.value)
    assert "MZTAB_VALIDATOR_FAILURE_THRESHOLD: Must be <= 100." in message
    assert "MZTAB_VALIDATOR_LOG_DIR: Expected a filesystem path." in message


@pytest.mark.parametrize(
    "raw, errors",
    [
        (None, []),
        ("", []),
        ("0", []),
        ("abc", ["Must be a number."]),
        ("-1", ["Must be >= 0."]),
    ],
)
def test_validate_threshold_value(raw, errors):
    assert validate_value(_spec("MZTAB_VALIDATOR_FAILURE_THRESHOLD"), raw) == errors


def test_spec_to_dict():
    entry = spec_to_dict(_spec("MZTAB_VALIDATOR_FTP_HOST"))
    assert entry["group"] == "Cleaning"
    assert entry["default"] == "massive.ucsd.edu"
    assert set(entry) == {"key", "kind", "group", "description", "default", "min_value", "max_value"}
