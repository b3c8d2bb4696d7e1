from .enums import CacheTier, EntityKind, RelationMode, SortDirection

__all__ = ["CacheTier", "EntityKind", "RelationMode", "SortDirection"]
