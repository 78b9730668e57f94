"""
Pydantic schemas for SlideCast.

Submodules are imported directly (``slidecast.schemas.timing``,
``slidecast.schemas.composition``) to keep the timing package free of cycles.
"""
