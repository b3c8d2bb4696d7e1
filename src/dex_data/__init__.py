"""
Data access layer for the DEX analytics API.
Translates ORM-shaped read requests into parameterized PostgreSQL and
batches point lookups per request.

Modules:
- storage: identifier translation, statement building, entity adapters
- loaders: request-scoped batched loaders with cache and computed fallbacks
- pricing: derived values used as loader fallbacks
- infrastructure: config, database, cache, logging
"""
