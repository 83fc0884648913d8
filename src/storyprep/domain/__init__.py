"""Domain layer — annotation layers, contexts, arg rules, and the prepared story.

This layer depends only on stdlib and pydantic.
It must never import from services, plugins, or config.
"""
