# Transplant Compatibility Graph - Core Processing
"""Package initialization for core module"""

from .error_handling import (
    TransplantGraphError,
    PatientNotFoundError,
    PositionOutOfBoundsError,
    CapacityExceededError,
    DataIngestionError,
    SnapshotError,
    ConfigurationError,
    describe_error
)
from .data_ingestion import PatientFileIngester, records_to_patients, PATIENT_COLUMNS
