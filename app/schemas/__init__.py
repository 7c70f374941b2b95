"""Pydantic schemas for API validation and serialization.

Import from the submodules directly; ``app.schemas.response`` and
``app.schemas.analytics`` are shared with the field client and must not pull
in the database layer.
"""
