"""Database Declarations — SQLAlchemy Base shared by every table model.

Invariants:
    - One metadata object for the whole schema (used by alembic and tests)
"""
