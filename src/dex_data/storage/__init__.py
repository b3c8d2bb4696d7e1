"""Storage layer: query translation, relation resolution and entity adapters."""

from .relations import Relation, RelationResolver
from .repositories import PonderDb

__all__ = ["PonderDb", "Relation", "RelationResolver"]
