"""
Graph Module for the Transplant Compatibility Graph
Donor/recipient compatibility relation kept in a NetworkX bipartite graph
"""

from .transplant_graph import TransplantGraph, SNAPSHOT_FORMAT_VERSION
from .graph_queries import GraphQueryEngine, SortKey
from .graph_builder import TransplantGraphBuilder, build_graph_from_files

__all__ = [
    # Core Graph
    'TransplantGraph',
    'SNAPSHOT_FORMAT_VERSION',
    # Query Engine
    'GraphQueryEngine',
    'SortKey',
    # Builder
    'TransplantGraphBuilder',
    'build_graph_from_files'
]
