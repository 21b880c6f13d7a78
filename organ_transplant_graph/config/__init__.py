"""Package initialization for config module"""

from .settings import (
    TransplantSettings,
    load_settings,
    DEFAULT_SETTINGS,
    MAX_PATIENTS
)

__all__ = [
    'TransplantSettings',
    'load_settings',
    'DEFAULT_SETTINGS',
    'MAX_PATIENTS'
]
