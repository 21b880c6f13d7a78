# Organ Transplant Compatibility Graph
"""
Organ Transplant Compatibility Graph - donor/recipient eligibility tracking

This package implements:
- ABO blood-type transfusion rules
- Donor and recipient records with positional ids and stable uids
- The compatibility graph with incremental add and re-indexing removal
- Text-file ingestion, binary snapshots and console table listings
- An interactive console menu
"""

__version__ = "1.0.0"
__author__ = "Transplant Graph Team"

from .models import BloodType, Patient, Role, is_compatible
from .graph import TransplantGraph, GraphQueryEngine, SortKey, TransplantGraphBuilder, build_graph_from_files

__all__ = [
    'BloodType',
    'Patient',
    'Role',
    'is_compatible',
    'TransplantGraph',
    'GraphQueryEngine',
    'SortKey',
    'TransplantGraphBuilder',
    'build_graph_from_files'
]
