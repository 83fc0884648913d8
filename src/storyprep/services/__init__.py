"""Service layer — the preparation pipeline.

Services may import from domain and config.
They must never import from plugins.
"""
