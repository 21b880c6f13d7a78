"""
Error Handling for the Transplant Compatibility Graph
=====================================================

Custom exception hierarchy shared by the graph, the ingestion layer,
snapshot persistence and the console driver.

Every error carries a stable error code, a details dictionary and a
recoverable flag so callers can report it without inspecting the type.
"""

import logging
from typing import Any, Dict, Optional
from datetime import datetime

logger = logging.getLogger(__name__)


# =============================================================================
# Custom Exception Hierarchy
# =============================================================================

class TransplantGraphError(Exception):
    """Base exception for all transplant graph errors"""

    def __init__(
        self,
        message: str,
        error_code: str = "TG000",
        details: Dict = None,
        recoverable: bool = True
    ):
        super().__init__(message)
        self.error_code = error_code
        self.details = details or {}
        self.recoverable = recoverable
        self.timestamp = datetime.now()

    def to_dict(self) -> Dict:
        return {
            'error_type': self.__class__.__name__,
            'error_code': self.error_code,
            'message': str(self),
            'details': self.details,
            'recoverable': self.recoverable,
            'timestamp': self.timestamp.isoformat()
        }


class PatientNotFoundError(TransplantGraphError, LookupError):
    """No donor or recipient matched a name lookup"""

    def __init__(self, message: str, name: str = None, role: str = None, details: Dict = None):
        super().__init__(
            message,
            error_code="TG100",
            details={'name': name, 'role': role, **(details or {})},
            recoverable=True
        )


class PositionOutOfBoundsError(TransplantGraphError, IndexError):
    """A positional id lies outside the current list size"""

    def __init__(
        self,
        message: str,
        position: Optional[int] = None,
        size: Optional[int] = None,
        role: str = None,
        details: Dict = None
    ):
        super().__init__(
            message,
            error_code="TG200",
            details={'position': position, 'size': size, 'role': role, **(details or {})},
            recoverable=True
        )


class CapacityExceededError(TransplantGraphError):
    """An add would grow a patient list past its configured capacity"""

    def __init__(self, message: str, role: str = None, capacity: int = None, details: Dict = None):
        super().__init__(
            message,
            error_code="TG300",
            details={'role': role, 'capacity': capacity, **(details or {})},
            recoverable=True
        )


class DataIngestionError(TransplantGraphError):
    """Errors while reading donor/recipient text files"""

    def __init__(self, message: str, source: str = None, details: Dict = None):
        super().__init__(
            message,
            error_code="TG400",
            details={'source': source, **(details or {})},
            recoverable=True
        )


class SnapshotError(TransplantGraphError):
    """Errors while saving or restoring a graph snapshot"""

    def __init__(self, message: str, path: str = None, details: Dict = None):
        super().__init__(
            message,
            error_code="TG500",
            details={'path': path, **(details or {})},
            recoverable=True
        )


class ConfigurationError(TransplantGraphError):
    """Configuration errors"""

    def __init__(self, message: str, config_key: str = None, details: Dict = None):
        super().__init__(
            message,
            error_code="TG600",
            details={'config_key': config_key, **(details or {})},
            recoverable=False
        )


def describe_error(error: Exception) -> Dict[str, Any]:
    """
    Normalize any exception into the reporting dictionary

    Errors outside the hierarchy are logged and reported as unrecoverable.
    """
    if isinstance(error, TransplantGraphError):
        return error.to_dict()
    logger.warning(f"Unexpected {error.__class__.__name__} outside the transplant error hierarchy: {error}")
    return {
        'error_type': error.__class__.__name__,
        'error_code': "TG999",
        'message': str(error),
        'details': {},
        'recoverable': False,
        'timestamp': datetime.now().isoformat()
    }
