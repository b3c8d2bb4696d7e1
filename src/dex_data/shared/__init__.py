"""Shared enums, sentinels and exceptions used across the data access layer."""
