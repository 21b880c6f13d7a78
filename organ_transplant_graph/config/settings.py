"""
Configuration settings for the Organ Transplant Compatibility Graph
Values come from dataclass defaults, overridden by TRANSPLANT_* environment
variables (a local .env file is honoured)
"""

import os
from pathlib import Path
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Mapping, Optional

from dotenv import load_dotenv

from organ_transplant_graph.core.error_handling import ConfigurationError

# Load environment variables from .env file
load_dotenv()

# Base paths
BASE_DIR = Path(__file__).parent.parent

# Default capacity of each side of the graph
MAX_PATIENTS = 100

ENV_PREFIX = "TRANSPLANT_"

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class TransplantSettings:
    """
    Runtime settings for the transplant graph and its console driver

    max_patients bounds both the donor list and the recipient list.
    The three file paths are resolved relative to the working directory.
    """
    max_patients: int = MAX_PATIENTS
    donor_file: str = "donors.txt"
    recipient_file: str = "recipients.txt"
    snapshot_file: str = "transplant.obj"
    log_level: str = "INFO"
    log_format: str = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        if isinstance(self.max_patients, bool) or not isinstance(self.max_patients, int):
            raise ConfigurationError(
                f"max_patients must be an integer, got {self.max_patients!r}",
                config_key="max_patients"
            )
        if self.max_patients < 1:
            raise ConfigurationError(
                f"max_patients must be positive, got {self.max_patients}",
                config_key="max_patients"
            )
        level = str(self.log_level).upper()
        if level not in VALID_LOG_LEVELS:
            raise ConfigurationError(
                f"Unknown log level: {self.log_level}",
                config_key="log_level"
            )
        self.log_level = level

    def with_overrides(self, **overrides: Any) -> 'TransplantSettings':
        """Return a copy with the non-None overrides applied"""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'max_patients': self.max_patients,
            'donor_file': self.donor_file,
            'recipient_file': self.recipient_file,
            'snapshot_file': self.snapshot_file,
            'log_level': self.log_level
        }


def _env_int(env: Mapping[str, str], key: str) -> Optional[int]:
    raw = env.get(ENV_PREFIX + key)
    if raw is None or raw.strip() == "":
        return None
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(
            f"{ENV_PREFIX + key} must be an integer, got {raw!r}",
            config_key=ENV_PREFIX + key
        ) from None


def load_settings(env: Optional[Mapping[str, str]] = None) -> TransplantSettings:
    """
    Build settings from the environment

    Args:
        env: Mapping to read from (defaults to os.environ)

    Returns:
        TransplantSettings with every TRANSPLANT_* variable applied
    """
    if env is None:
        env = os.environ

    return TransplantSettings().with_overrides(
        max_patients=_env_int(env, "MAX_PATIENTS"),
        donor_file=env.get(ENV_PREFIX + "DONOR_FILE"),
        recipient_file=env.get(ENV_PREFIX + "RECIPIENT_FILE"),
        snapshot_file=env.get(ENV_PREFIX + "SNAPSHOT_FILE"),
        log_level=env.get(ENV_PREFIX + "LOG_LEVEL"),
    )


DEFAULT_SETTINGS = TransplantSettings()
