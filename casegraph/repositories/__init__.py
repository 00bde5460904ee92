"""Repository layer modules."""

from casegraph.repositories.graph_store import GraphStore
from casegraph.repositories.memory_store import InMemoryGraphStore

__all__ = [
    "GraphStore",
    "InMemoryGraphStore",
]
