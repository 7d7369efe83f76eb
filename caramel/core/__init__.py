"""Core — pure domain helpers with no IO.

Invariants:
    - Nothing in core/ imports FastAPI, SQLAlchemy sessions or settings
"""
