"""Cross-cutting infrastructure: database, cache, observability."""
