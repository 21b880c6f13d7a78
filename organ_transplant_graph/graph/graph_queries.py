"""
Graph Query Engine for the Transplant Compatibility Graph
Read-only views over a TransplantGraph used by reporting collaborators

Key Capabilities:
- Sorted views of donors or recipients (id, connections, blood type, organ)
- Compatible-partner id listings
- pandas DataFrame export of the donor/recipient tables
- Fixed-width text tables for the console
"""

import pandas as pd
from typing import Callable, List, Optional, Sequence
from enum import Enum
import logging

from .transplant_graph import TransplantGraph
from organ_transplant_graph.models.patient import Patient

logger = logging.getLogger(__name__)

DONOR_HEADER = "Index | Donor Name         | Age | Organ Donated | Blood Type | Recipient IDs"
RECIPIENT_HEADER = "Index | Recipient Name     | Age | Organ Needed  | Blood Type | Donor IDs"


class SortKey(Enum):
    """Orderings offered by the sort submenu"""
    ID = "I"
    CONNECTIONS = "N"
    BLOOD_TYPE = "B"
    ORGAN = "O"


class GraphQueryEngine:
    """
    Query engine for a TransplantGraph

    Never mutates the graph; every listing reflects the current positional ids.
    """

    def __init__(self, graph: TransplantGraph):
        self.graph = graph

    # ==================== Sorting ====================

    def _sort_key(self, key: SortKey) -> Callable[[Patient], object]:
        if key is SortKey.ID:
            return lambda p: p.id
        if key is SortKey.CONNECTIONS:
            return self.graph.degree
        if key is SortKey.BLOOD_TYPE:
            return lambda p: p.blood_type.type
        if key is SortKey.ORGAN:
            return lambda p: p.organ.lower()
        raise ValueError(f"Unknown sort key: {key!r}")

    def sort_patients(self, patients: Sequence[Patient], key: SortKey) -> List[Patient]:
        """
        Return a sorted copy of the patients (stable, ascending)

        Args:
            patients: Donors or recipients of this graph
            key: SortKey (or its menu letter)
        """
        key = SortKey(key)
        logger.debug(f"Sorting {len(patients)} patients by {key.name}")
        return sorted(patients, key=self._sort_key(key))

    def sorted_donors(self, key: SortKey) -> List[Patient]:
        return self.sort_patients(self.graph.list_donors(), key)

    def sorted_recipients(self, key: SortKey) -> List[Patient]:
        return self.sort_patients(self.graph.list_recipients(), key)

    # ==================== Tabular Views ====================

    def _table(self, patients: Sequence[Patient], ids_column: str) -> pd.DataFrame:
        rows = [
            {
                'Index': p.id,
                'Name': p.name,
                'Age': p.age,
                'Organ': p.organ,
                'Blood Type': p.blood_type.type,
                ids_column: self.graph.compatible_ids(p)
            }
            for p in patients
        ]
        return pd.DataFrame(rows, columns=['Index', 'Name', 'Age', 'Organ', 'Blood Type', ids_column])

    def donor_table(self, patients: Optional[Sequence[Patient]] = None) -> pd.DataFrame:
        """Donors with their compatible recipient ids as a DataFrame"""
        if patients is None:
            patients = self.graph.list_donors()
        return self._table(patients, 'Recipient IDs')

    def recipient_table(self, patients: Optional[Sequence[Patient]] = None) -> pd.DataFrame:
        """Recipients with their compatible donor ids as a DataFrame"""
        if patients is None:
            patients = self.graph.list_recipients()
        return self._table(patients, 'Donor IDs')

    # ==================== Console Tables ====================

    def _format(self, header: str, patients: Sequence[Patient]) -> str:
        lines = [header, "=" * len(header)]
        for p in patients:
            ids = ", ".join(str(i) for i in self.graph.compatible_ids(p))
            line = (
                f"   {p.id}  | {p.name:<18} | {p.age:2d}  | {p.organ:<13} |     "
                f"{p.blood_type.type:<6} | {ids}"
            )
            lines.append(line.rstrip())
        return "\n".join(lines)

    def format_donors(self, patients: Optional[Sequence[Patient]] = None) -> str:
        """Fixed-width donor table with compatible recipient ids"""
        if patients is None:
            patients = self.graph.list_donors()
        return self._format(DONOR_HEADER, patients)

    def format_recipients(self, patients: Optional[Sequence[Patient]] = None) -> str:
        """Fixed-width recipient table with compatible donor ids"""
        if patients is None:
            patients = self.graph.list_recipients()
        return self._format(RECIPIENT_HEADER, patients)
