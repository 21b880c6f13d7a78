"""
Blood Type Compatibility
Determines which donor blood types a recipient blood type can receive
"""

from typing import List, Union

# ABO codes recognised by the compatibility rules
BLOOD_TYPES = ('O', 'A', 'B', 'AB')

# Recipient blood type -> donor blood types it can receive
COMPATIBLE_DONORS = {
    'O': ('O',),
    'A': ('O', 'A'),
    'B': ('O', 'B'),
    'AB': ('O', 'A', 'B', 'AB'),  # Universal recipient
}


class BloodType:
    """
    ABO blood type code, normalized to uppercase on every assignment

    Unknown codes are kept as given (uppercased); they are simply
    incompatible with everything.
    """

    __slots__ = ('_type',)

    def __init__(self, blood_type: str):
        self.type = blood_type

    @property
    def type(self) -> str:
        return self._type

    @type.setter
    def type(self, value: str):
        self._type = str(value).strip().upper()

    @staticmethod
    def is_compatible(recipient: Union['BloodType', str], donor: Union['BloodType', str]) -> bool:
        """Check whether the donor's blood type can go to the recipient"""
        return is_compatible(recipient, donor)

    def __getstate__(self):
        return {'type': self._type}

    def __setstate__(self, state):
        self._type = state['type']

    def __eq__(self, other) -> bool:
        if isinstance(other, BloodType):
            return self._type == other._type
        if isinstance(other, str):
            return self._type == other.strip().upper()
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._type)

    def __str__(self) -> str:
        return self._type

    def __repr__(self) -> str:
        return f"BloodType('{self._type}')"


def _code(value: Union[BloodType, str]) -> str:
    if isinstance(value, BloodType):
        return value.type
    return str(value).strip().upper()


def is_compatible(recipient: Union[BloodType, str], donor: Union[BloodType, str]) -> bool:
    """
    Check if a recipient can receive from a donor

    Args:
        recipient: Recipient's blood type (e.g. 'A')
        donor: Donor's blood type (e.g. 'O')

    Returns:
        True if the transfusion rules allow it, False otherwise
        (including any unrecognised code)
    """
    accepted = COMPATIBLE_DONORS.get(_code(recipient))
    if accepted is None:
        return False
    return _code(donor) in accepted


def compatible_donor_types(recipient: Union[BloodType, str]) -> List[str]:
    """Blood types that can donate to the recipient"""
    return list(COMPATIBLE_DONORS.get(_code(recipient), ()))


def compatible_recipient_types(donor: Union[BloodType, str]) -> List[str]:
    """Blood types that can receive from the donor"""
    code = _code(donor)
    return [recipient for recipient, donors in COMPATIBLE_DONORS.items() if code in donors]
