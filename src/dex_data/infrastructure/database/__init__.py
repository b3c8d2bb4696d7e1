from .ports import DatabaseAdapter, IDatabaseAdapter, Row

__all__ = ["DatabaseAdapter", "IDatabaseAdapter", "Row"]
