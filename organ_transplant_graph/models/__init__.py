"""Package initialization for models module"""

from .blood_type import (
    BloodType,
    BLOOD_TYPES,
    COMPATIBLE_DONORS,
    is_compatible,
    compatible_donor_types,
    compatible_recipient_types
)
from .patient import Patient, Role

__all__ = [
    'BloodType',
    'BLOOD_TYPES',
    'COMPATIBLE_DONORS',
    'is_compatible',
    'compatible_donor_types',
    'compatible_recipient_types',
    'Patient',
    'Role'
]
