"""API Layer — FastAPI routes, middleware and error handlers.

Invariants:
    - Routes registered explicitly in main.py (no auto-discovery)
    - All endpoints return JSON with a top-level success flag (health excepted)

Design Decisions:
    - Thin routes delegate SQL to services/
"""
