"""
Transplant Graph Builder - Turns donor/recipient files and records into a graph

Both inputs are fully parsed and checked against the capacity before the
first patient is added, so a bad file never leaves a half-built graph.
"""

from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Union
import logging

from .transplant_graph import TransplantGraph
from organ_transplant_graph.config.settings import TransplantSettings, DEFAULT_SETTINGS
from organ_transplant_graph.core.data_ingestion import PatientFileIngester, records_to_patients
from organ_transplant_graph.core.error_handling import CapacityExceededError
from organ_transplant_graph.models.patient import Patient, Role

logger = logging.getLogger(__name__)


class TransplantGraphBuilder:
    """
    Builds a TransplantGraph from text files or row-oriented records

    Records keep their file order; the graph assigns ids 0..n-1 in that
    order on each side.
    """

    def __init__(self, settings: Optional[TransplantSettings] = None, base_path: Union[str, Path] = None):
        self.settings = settings or DEFAULT_SETTINGS
        self.ingester = PatientFileIngester(base_path)
        self._stats = {
            'donors_added': 0,
            'recipients_added': 0,
            'compatible_pairs': 0
        }

    def build_from_files(
        self,
        donor_file: Union[str, Path] = None,
        recipient_file: Union[str, Path] = None
    ) -> TransplantGraph:
        """
        Build the graph from the donor and recipient text files

        Args:
            donor_file: Defaults to settings.donor_file
            recipient_file: Defaults to settings.recipient_file
        """
        donor_file = donor_file or self.settings.donor_file
        recipient_file = recipient_file or self.settings.recipient_file

        logger.info(f"Loading data from '{donor_file}'...")
        donors = self.ingester.load_donors(donor_file)
        logger.info(f"Loading data from '{recipient_file}'...")
        recipients = self.ingester.load_recipients(recipient_file)

        return self.build(donors, recipients)

    def from_records(
        self,
        donor_rows: Iterable[Sequence] = (),
        recipient_rows: Iterable[Sequence] = ()
    ) -> TransplantGraph:
        """Build the graph from (id, name, age, organ, blood_type[, role]) rows"""
        donors = records_to_patients(donor_rows, Role.DONOR)
        recipients = records_to_patients(recipient_rows, Role.RECIPIENT)
        return self.build(donors, recipients)

    def build(self, donors: List[Patient], recipients: List[Patient]) -> TransplantGraph:
        """Add already-constructed patients to a fresh graph"""
        capacity = self.settings.max_patients
        for patients, role in ((donors, Role.DONOR), (recipients, Role.RECIPIENT)):
            if len(patients) > capacity:
                raise CapacityExceededError(
                    f"{len(patients)} {role.value.lower()}s exceed the capacity of {capacity}",
                    role=role.value,
                    capacity=capacity
                )

        graph = TransplantGraph(max_patients=capacity)
        for donor in donors:
            graph.add_donor(donor)
        for recipient in recipients:
            graph.add_recipient(recipient)

        self._stats['donors_added'] += len(donors)
        self._stats['recipients_added'] += len(recipients)
        self._stats['compatible_pairs'] += graph.graph.number_of_edges()

        logger.info(f"Graph build complete: {graph!r}")
        return graph

    def get_stats(self) -> Dict[str, int]:
        return dict(self._stats)


def build_graph_from_files(
    donor_file: Union[str, Path] = None,
    recipient_file: Union[str, Path] = None,
    settings: Optional[TransplantSettings] = None
) -> TransplantGraph:
    """
    Convenience function to build a transplant graph from text files
    """
    builder = TransplantGraphBuilder(settings)
    return builder.build_from_files(donor_file, recipient_file)
