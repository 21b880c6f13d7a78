"""
Patient records for the transplant graph

A Patient is either an organ donor or an organ recipient. Its role,
positional id and stable uid belong to the owning TransplantGraph;
everything else is free for collaborators to edit.
"""

from enum import Enum
from typing import Any, Dict, Optional, Union

from .blood_type import BloodType


class Role(Enum):
    """Which side of the graph a patient belongs to"""
    DONOR = "Donor"
    RECIPIENT = "Recipient"


class Patient:
    """
    Identified person record: name, age, organ, blood type and role

    Patients order by their positional id. The id passed to the
    constructor is only a placeholder until a graph adopts the patient.
    """

    def __init__(
        self,
        id: int = 0,
        name: str = "",
        age: int = 0,
        organ: str = "",
        blood_type: Union[BloodType, str] = "O",
        role: Role = Role.DONOR
    ):
        self._id = id
        self._uid: Optional[int] = None
        self.name = name
        self.age = age
        self.organ = organ
        self.blood_type = blood_type
        self._role = Role(role)

    @classmethod
    def donor(cls, name: str, age: int, organ: str, blood_type: Union[BloodType, str]) -> 'Patient':
        return cls(0, name, age, organ, blood_type, Role.DONOR)

    @classmethod
    def recipient(cls, name: str, age: int, organ: str, blood_type: Union[BloodType, str]) -> 'Patient':
        return cls(0, name, age, organ, blood_type, Role.RECIPIENT)

    # ==================== Identity (graph-owned) ====================

    @property
    def id(self) -> int:
        """Current position in the owning list"""
        return self._id

    @property
    def uid(self) -> Optional[int]:
        """Stable identifier, None until added to a graph"""
        return self._uid

    @property
    def role(self) -> Role:
        """Which list of the owning graph holds the patient"""
        return self._role

    def _assign_position(self, position: int) -> None:
        self._id = position

    def _assign_uid(self, uid: Optional[int]) -> None:
        self._uid = uid

    def _assign_role(self, role: Role) -> None:
        self._role = Role(role)

    # ==================== Mutable fields ====================

    @property
    def blood_type(self) -> BloodType:
        return self._blood_type

    @blood_type.setter
    def blood_type(self, value: Union[BloodType, str]):
        # Copy so two patients never share one mutable BloodType
        code = value.type if isinstance(value, BloodType) else value
        self._blood_type = BloodType(code)

    @property
    def is_donor(self) -> bool:
        return self.role is Role.DONOR

    def organ_matches(self, other: 'Patient') -> bool:
        """Case-insensitive organ comparison"""
        return self.organ.lower() == other.organ.lower()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self._id,
            'uid': self._uid,
            'name': self.name,
            'age': self.age,
            'organ': self.organ,
            'blood_type': self._blood_type.type,
            'role': self.role.value
        }

    # ==================== Ordering ====================

    def __lt__(self, other: 'Patient') -> bool:
        if not isinstance(other, Patient):
            return NotImplemented
        return self._id < other._id

    def __str__(self) -> str:
        return f"{self.name} | {self.age} | {self.organ} | {self._blood_type.type}"

    def __repr__(self) -> str:
        return (
            f"Patient(id={self._id}, name='{self.name}', age={self.age}, "
            f"organ='{self.organ}', blood_type='{self._blood_type.type}', role={self.role.name})"
        )
