"""
Data Ingestion Layer for the Transplant Compatibility Graph
Handles loading and parsing donor/recipient text files

Each file holds one patient per line, comma separated, no header:

    id, name, age, organ, blood_type

The id column is kept for compatibility with existing files but ignored;
the graph assigns positional ids when patients are added.
"""

import pandas as pd
from pathlib import Path
from typing import Iterable, List, Sequence, Union
import logging

from .error_handling import DataIngestionError
from organ_transplant_graph.models.patient import Patient, Role

logger = logging.getLogger(__name__)

PATIENT_COLUMNS = ['id', 'name', 'age', 'organ', 'blood_type']


class PatientFileIngester:
    """
    Reads donor and recipient text files into Patient records
    """

    def __init__(self, base_path: Union[str, Path] = None):
        self.base_path = Path(base_path) if base_path is not None else None

    def _resolve(self, path: Union[str, Path]) -> Path:
        path = Path(path)
        if self.base_path is not None and not path.is_absolute():
            return self.base_path / path
        return path

    def read_frame(self, path: Union[str, Path]) -> pd.DataFrame:
        """
        Load a patient file into a DataFrame with standardized columns

        Raises:
            DataIngestionError: the file is missing or malformed
        """
        path = self._resolve(path)
        source = str(path)

        try:
            df = pd.read_csv(
                path,
                header=None,
                dtype=str,
                skipinitialspace=True,
                keep_default_na=False,
                skip_blank_lines=True
            )
        except FileNotFoundError as e:
            raise DataIngestionError(f"Patient file not found: {path}", source=source) from e
        except pd.errors.EmptyDataError:
            logger.info(f"{path} is empty")
            return pd.DataFrame(columns=PATIENT_COLUMNS)
        except (pd.errors.ParserError, UnicodeDecodeError, OSError) as e:
            raise DataIngestionError(f"Could not parse {path}: {e}", source=source) from e

        if df.shape[1] != len(PATIENT_COLUMNS):
            raise DataIngestionError(
                f"Expected {len(PATIENT_COLUMNS)} columns in {path}, found {df.shape[1]}",
                source=source,
                details={'columns': int(df.shape[1])}
            )
        df.columns = PATIENT_COLUMNS
        df = df.apply(lambda column: column.str.strip())

        # Short lines leave NaN in the trailing columns
        incomplete = df.isna().any(axis=1)
        if incomplete.any():
            raise DataIngestionError(
                f"Incomplete records in {path}",
                source=source,
                details={'rows': [int(i) + 1 for i in df.index[incomplete]]}
            )

        bad_age = ~df['age'].str.fullmatch(r'[+-]?\d+')
        if bad_age.any():
            raise DataIngestionError(
                f"Non-integer age in {path}",
                source=source,
                details={'rows': [int(i) + 1 for i in df.index[bad_age]]}
            )
        df['age'] = df['age'].astype(int)

        logger.info(f"Loaded {len(df)} records from {path}")
        return df

    def load_patients(self, path: Union[str, Path], role: Role) -> List[Patient]:
        """Load a patient file as Patient records of the given role"""
        df = self.read_frame(path)
        return [
            Patient(0, row.name, int(row.age), row.organ, row.blood_type, role)
            for row in df.itertuples(index=False)
        ]

    def load_donors(self, path: Union[str, Path]) -> List[Patient]:
        return self.load_patients(path, Role.DONOR)

    def load_recipients(self, path: Union[str, Path]) -> List[Patient]:
        return self.load_patients(path, Role.RECIPIENT)


def _coerce_role(value, default: Role) -> Role:
    if value is None:
        return default
    if isinstance(value, Role):
        return value
    if isinstance(value, bool):
        return Role.DONOR if value else Role.RECIPIENT
    return Role(str(value).strip().capitalize())


def records_to_patients(rows: Iterable[Sequence], role: Role) -> List[Patient]:
    """
    Convert row-oriented records into Patient objects

    Each row is (id, name, age, organ, blood_type) with an optional sixth
    role field (Role, 'Donor'/'Recipient' or an is-donor flag). The id is
    a placeholder and is ignored.
    """
    patients = []
    for number, row in enumerate(rows, start=1):
        if len(row) not in (5, 6):
            raise DataIngestionError(
                f"Record {number} has {len(row)} fields, expected 5 or 6",
                source="records"
            )
        try:
            age = int(row[2])
            row_role = _coerce_role(row[5] if len(row) == 6 else None, role)
        except (TypeError, ValueError) as e:
            raise DataIngestionError(f"Record {number} is invalid: {e}", source="records") from e
        patients.append(Patient(0, str(row[1]), age, str(row[3]), str(row[4]), row_role))
    return patients
