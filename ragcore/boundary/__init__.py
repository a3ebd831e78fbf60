"""
Boundary layer for external system integrations.

Handles all interactions with external systems (database, embedding and
rerank providers, asset extractors).
"""
