"""
Transplant Compatibility Graph - Core Graph Implementation
Maintains donor and recipient lists and the compatibility relation between them

Architecture:
- Donors and recipients live in ordered lists; a patient's id is its position
- Every patient also gets a stable uid from a monotonic counter
- The relation is a sparse bipartite NetworkX graph keyed by uid, where an
  edge means "the organs match and the recipient can receive the donor's blood"
- Positional queries (is_compatible, degree, relation_matrix) translate
  positions to uids through the lists, so removals only need to drop one
  node and renumber the list tail
"""

import networkx as nx
from networkx.algorithms import bipartite
import numpy as np
from typing import Any, Dict, List, Optional, Union
from datetime import datetime
from pathlib import Path
import pickle
import threading
import logging

from organ_transplant_graph.config.settings import MAX_PATIENTS
from organ_transplant_graph.core.error_handling import (
    TransplantGraphError,
    PatientNotFoundError,
    PositionOutOfBoundsError,
    CapacityExceededError,
    SnapshotError
)
from organ_transplant_graph.models.blood_type import is_compatible as blood_compatible
from organ_transplant_graph.models.patient import Patient, Role

logger = logging.getLogger(__name__)

SNAPSHOT_FORMAT_VERSION = 2


class TransplantGraph:
    """
    Transplant Graph - donors, recipients and their pairwise compatibility

    Invariants after every mutating operation:
    - donors[i].id == i and recipients[j].id == j
    - is_compatible(i, j) equals a fresh recompute from the current organ
      and blood type fields of donors[i] and recipients[j]
    - neither list grows past max_patients

    All public operations run under one re-entrant lock.
    """

    def __init__(self, max_patients: int = MAX_PATIENTS):
        if max_patients < 1:
            raise ValueError(f"max_patients must be positive, got {max_patients}")
        self.max_patients = max_patients
        self.donors: List[Patient] = []
        self.recipients: List[Patient] = []
        self.graph = nx.Graph()
        self._next_uid = 0
        self._lock = threading.RLock()
        self.created_at = datetime.now()
        self.updated_at = datetime.now()

        logger.debug(f"Initialized TransplantGraph with capacity {max_patients}")

    # ==================== Compatibility Rule ====================

    @staticmethod
    def compatible(donor: Patient, recipient: Patient) -> bool:
        """Organs match (case-insensitive) and the recipient accepts the donor's blood"""
        return (
            donor.organ_matches(recipient)
            and blood_compatible(recipient.blood_type, donor.blood_type)
        )

    # ==================== Add Operations ====================

    def add_donor(self, patient: Patient) -> int:
        """
        Append a donor and connect it to every compatible recipient

        Args:
            patient: Patient record built by a collaborator; any id it
                carries is replaced

        Returns:
            The positional id assigned to the donor

        Raises:
            CapacityExceededError: the donor list is already full
        """
        with self._lock:
            self._check_capacity(self.donors, Role.DONOR)
            self._adopt(patient, Role.DONOR, len(self.donors))
            self.donors.append(patient)

            for recipient in self.recipients:
                if self.compatible(patient, recipient):
                    self.graph.add_edge(patient.uid, recipient.uid)

            self.updated_at = datetime.now()
            logger.debug(f"Added donor {patient.name!r} with ID {patient.id}")
            return patient.id

    def add_recipient(self, patient: Patient) -> int:
        """
        Append a recipient and connect it to every compatible donor

        Returns:
            The positional id assigned to the recipient

        Raises:
            CapacityExceededError: the recipient list is already full
        """
        with self._lock:
            self._check_capacity(self.recipients, Role.RECIPIENT)
            self._adopt(patient, Role.RECIPIENT, len(self.recipients))
            self.recipients.append(patient)

            for donor in self.donors:
                if self.compatible(donor, patient):
                    self.graph.add_edge(donor.uid, patient.uid)

            self.updated_at = datetime.now()
            logger.debug(f"Added recipient {patient.name!r} with ID {patient.id}")
            return patient.id

    def _check_capacity(self, patients: List[Patient], role: Role) -> None:
        if len(patients) >= self.max_patients:
            raise CapacityExceededError(
                f"Cannot add {role.value.lower()}: list is full ({self.max_patients} patients)",
                role=role.value,
                capacity=self.max_patients
            )

    def _adopt(self, patient: Patient, role: Role, position: int) -> None:
        # A set uid means some graph still holds the patient
        if patient.uid is not None:
            raise TransplantGraphError(
                f"{patient.name!r} already belongs to a transplant graph",
                error_code="TG010",
                details={'uid': patient.uid, 'name': patient.name}
            )
        patient._assign_role(role)
        patient._assign_position(position)
        patient._assign_uid(self._next_uid)
        self._next_uid += 1
        self.graph.add_node(patient.uid, role=role.value)

    # ==================== Remove Operations ====================

    def remove_donor(self, name: str, missing_ok: bool = True) -> Optional[Patient]:
        """
        Remove the first donor whose name matches case-insensitively

        Donors after the removed one move up one position and get their
        ids renumbered.

        Args:
            name: Donor name to look for
            missing_ok: When False, a missing name raises PatientNotFoundError

        Returns:
            The removed Patient, or None if no donor matched (nothing changes)
        """
        return self._remove(self.donors, name, Role.DONOR, missing_ok)

    def remove_recipient(self, name: str, missing_ok: bool = True) -> Optional[Patient]:
        """Remove the first recipient whose name matches; see remove_donor"""
        return self._remove(self.recipients, name, Role.RECIPIENT, missing_ok)

    def _remove(
        self,
        patients: List[Patient],
        name: str,
        role: Role,
        missing_ok: bool
    ) -> Optional[Patient]:
        with self._lock:
            index = self._index_of(patients, name)
            if index is None:
                label = "donors" if role is Role.DONOR else "recipients"
                message = f"No such patient named {name} in list of {label}."
                logger.warning(f"Failed to remove {role.value.lower()}: {message}")
                if not missing_ok:
                    raise PatientNotFoundError(message, name=name, role=role.value)
                return None

            patient = patients.pop(index)
            # Dropping the node drops its whole row (or column) of the relation
            self.graph.remove_node(patient.uid)
            patient._assign_uid(None)

            for position in range(index, len(patients)):
                patients[position]._assign_position(position)

            self.updated_at = datetime.now()
            logger.debug(f"Removed {role.value.lower()} {patient.name!r} from position {index}")
            return patient

    @staticmethod
    def _index_of(patients: List[Patient], name: str) -> Optional[int]:
        wanted = name.lower()
        for index, patient in enumerate(patients):
            if patient.name.lower() == wanted:
                return index
        return None

    # ==================== Lookups ====================

    def list_donors(self) -> List[Patient]:
        """Current donors in positional order"""
        with self._lock:
            return list(self.donors)

    def list_recipients(self) -> List[Patient]:
        """Current recipients in positional order"""
        with self._lock:
            return list(self.recipients)

    @property
    def donor_count(self) -> int:
        return len(self.donors)

    @property
    def recipient_count(self) -> int:
        return len(self.recipients)

    def find_donor(self, name: str) -> Patient:
        """Get a donor by name (case-insensitive)"""
        return self._find(self.donors, name, Role.DONOR)

    def find_recipient(self, name: str) -> Patient:
        """Get a recipient by name (case-insensitive)"""
        return self._find(self.recipients, name, Role.RECIPIENT)

    def _find(self, patients: List[Patient], name: str, role: Role) -> Patient:
        with self._lock:
            index = self._index_of(patients, name)
            if index is None:
                raise PatientNotFoundError(
                    f"No {role.value.lower()} named {name}",
                    name=name,
                    role=role.value
                )
            return patients[index]

    def get_donor(self, donor_id: int) -> Patient:
        with self._lock:
            self._check_position(donor_id, self.donors, Role.DONOR)
            return self.donors[donor_id]

    def get_recipient(self, recipient_id: int) -> Patient:
        with self._lock:
            self._check_position(recipient_id, self.recipients, Role.RECIPIENT)
            return self.recipients[recipient_id]

    @staticmethod
    def _check_position(position: int, patients: List[Patient], role: Role) -> None:
        if isinstance(position, bool) or not isinstance(position, (int, np.integer)):
            raise PositionOutOfBoundsError(
                f"{role.value} ID must be an integer, got {position!r}",
                role=role.value,
                size=len(patients)
            )
        if not 0 <= position < len(patients):
            raise PositionOutOfBoundsError(
                f"{role.value} ID {position} is out of range (0..{len(patients) - 1})",
                position=int(position),
                size=len(patients),
                role=role.value
            )

    # ==================== Relation Queries ====================

    def is_compatible(self, donor_id: int, recipient_id: int) -> bool:
        """
        Check if the donor at donor_id can give to the recipient at recipient_id

        Raises:
            PositionOutOfBoundsError: either id is outside its current list
        """
        with self._lock:
            self._check_position(donor_id, self.donors, Role.DONOR)
            self._check_position(recipient_id, self.recipients, Role.RECIPIENT)
            return self.graph.has_edge(
                self.donors[donor_id].uid,
                self.recipients[recipient_id].uid
            )

    def _locate(self, patient: Patient, role: Role) -> None:
        """
        Check that the patient still sits at its id in the list for role

        Raises:
            PositionOutOfBoundsError: the id is outside the current list
            PatientNotFoundError: a different patient holds that position
        """
        patients = self.donors if role is Role.DONOR else self.recipients
        self._check_position(patient.id, patients, role)
        if patients[patient.id] is not patient:
            raise PatientNotFoundError(
                f"{patient.name!r} is not the {role.value.lower()} at position {patient.id}",
                name=patient.name,
                role=role.value,
                details={'position': patient.id}
            )

    def degree(self, patient: Patient) -> int:
        """
        Number of compatible partners on the other side

        Uses the patient's current id as the row (donor) or column
        (recipient) of the relation.
        """
        with self._lock:
            self._locate(patient, patient.role)
            return self.graph.degree(patient.uid)

    def compatible_recipient_ids(self, donor: Patient) -> List[int]:
        """Ascending ids of recipients compatible with the donor"""
        with self._lock:
            self._locate(donor, Role.DONOR)
            return [
                recipient.id for recipient in self.recipients
                if self.graph.has_edge(donor.uid, recipient.uid)
            ]

    def compatible_donor_ids(self, recipient: Patient) -> List[int]:
        """Ascending ids of donors compatible with the recipient"""
        with self._lock:
            self._locate(recipient, Role.RECIPIENT)
            return [
                donor.id for donor in self.donors
                if self.graph.has_edge(donor.uid, recipient.uid)
            ]

    def compatible_ids(self, patient: Patient) -> List[int]:
        """Ascending ids of compatible partners, whichever side the patient is on"""
        if patient.is_donor:
            return self.compatible_recipient_ids(patient)
        return self.compatible_donor_ids(patient)

    def refresh(self, patient: Patient) -> int:
        """
        Recompute a patient's relation entries after its organ or blood
        type was edited in place

        Returns:
            The patient's new degree
        """
        with self._lock:
            self._locate(patient, patient.role)
            self.graph.remove_edges_from(list(self.graph.edges(patient.uid)))
            if patient.is_donor:
                for recipient in self.recipients:
                    if self.compatible(patient, recipient):
                        self.graph.add_edge(patient.uid, recipient.uid)
            else:
                for donor in self.donors:
                    if self.compatible(donor, patient):
                        self.graph.add_edge(donor.uid, patient.uid)
            self.updated_at = datetime.now()
            return self.graph.degree(patient.uid)

    def relation_matrix(self, padded: bool = False) -> np.ndarray:
        """
        Dense boolean view of the relation, indexed [donor_id][recipient_id]

        Args:
            padded: Return the full max_patients x max_patients table; rows
                and columns beyond the current list sizes are all False
        """
        with self._lock:
            if padded:
                shape = (self.max_patients, self.max_patients)
            else:
                shape = (len(self.donors), len(self.recipients))
            matrix = np.zeros(shape, dtype=bool)

            recipient_positions = {r.uid: r.id for r in self.recipients}
            for donor in self.donors:
                for neighbor in self.graph.neighbors(donor.uid):
                    matrix[donor.id, recipient_positions[neighbor]] = True
            return matrix

    # ==================== Graph Statistics ====================

    def get_statistics(self) -> Dict[str, Any]:
        """Get graph statistics"""
        with self._lock:
            stats = {
                'donors': len(self.donors),
                'recipients': len(self.recipients),
                'compatible_pairs': self.graph.number_of_edges(),
                'max_patients': self.max_patients,
                'created_at': self.created_at.isoformat(),
                'updated_at': self.updated_at.isoformat()
            }
            if self.donors and self.recipients:
                stats['density'] = bipartite.density(
                    self.graph, [donor.uid for donor in self.donors]
                )
            return stats

    # ==================== Persistence Operations ====================

    def __getstate__(self) -> Dict[str, Any]:
        state = self.__dict__.copy()
        del state['_lock']
        state['format_version'] = SNAPSHOT_FORMAT_VERSION
        return state

    def __setstate__(self, state: Dict[str, Any]) -> None:
        state = dict(state)
        version = state.pop('format_version', None)
        if version != SNAPSHOT_FORMAT_VERSION:
            raise SnapshotError(
                f"Unsupported snapshot format version: {version}",
                details={'expected': SNAPSHOT_FORMAT_VERSION}
            )
        self.__dict__.update(state)
        self._lock = threading.RLock()

    def to_bytes(self) -> bytes:
        """Serialize the entire graph state to an opaque blob"""
        with self._lock:
            return pickle.dumps(self, protocol=pickle.HIGHEST_PROTOCOL)

    @classmethod
    def from_bytes(cls, blob: bytes) -> 'TransplantGraph':
        """
        Restore a graph from a blob produced by to_bytes

        Only load blobs this program wrote: unpickling runs arbitrary code.
        """
        try:
            instance = pickle.loads(blob)
        except SnapshotError:
            raise
        except Exception as e:
            raise SnapshotError(f"Snapshot is unreadable: {e}") from e

        if not isinstance(instance, cls):
            raise SnapshotError(
                f"Snapshot holds {type(instance).__name__}, not {cls.__name__}"
            )
        instance._verify_positions()
        return instance

    def _verify_positions(self) -> None:
        for patients, role in ((self.donors, Role.DONOR), (self.recipients, Role.RECIPIENT)):
            for position, patient in enumerate(patients):
                if patient.id != position or patient.role is not role or patient.uid not in self.graph:
                    raise SnapshotError(
                        f"Snapshot is inconsistent at {role.value.lower()} position {position}"
                    )

    def save(self, filepath: Union[str, Path]) -> Path:
        """Write a snapshot of the graph to disk"""
        filepath = Path(filepath)
        try:
            filepath.parent.mkdir(parents=True, exist_ok=True)
            filepath.write_bytes(self.to_bytes())
        except OSError as e:
            raise SnapshotError(f"Failed to save snapshot: {e}", path=str(filepath)) from e

        logger.info(f"Saved transplant graph to {filepath}")
        return filepath

    @classmethod
    def load(cls, filepath: Union[str, Path]) -> 'TransplantGraph':
        """Load a graph snapshot from disk"""
        filepath = Path(filepath)
        try:
            blob = filepath.read_bytes()
        except OSError as e:
            raise SnapshotError(f"Failed to read snapshot: {e}", path=str(filepath)) from e

        try:
            instance = cls.from_bytes(blob)
        except SnapshotError as e:
            e.details['path'] = str(filepath)
            raise

        logger.info(f"Loaded transplant graph from {filepath}")
        return instance

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the graph to a dictionary"""
        with self._lock:
            return {
                'statistics': self.get_statistics(),
                'donors': [
                    {**donor.to_dict(), 'compatible_ids': self.compatible_recipient_ids(donor)}
                    for donor in self.donors
                ],
                'recipients': [
                    {**recipient.to_dict(), 'compatible_ids': self.compatible_donor_ids(recipient)}
                    for recipient in self.recipients
                ]
            }

    def __repr__(self) -> str:
        return (
            f"TransplantGraph(donors={len(self.donors)}, recipients={len(self.recipients)}, "
            f"compatible_pairs={self.graph.number_of_edges()})"
        )
