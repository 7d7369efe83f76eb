"""Pydantic Schemas — request/response validation for API endpoints.

Invariants:
    - Schemas validate at the system boundary; services only see typed models
    - Wire names are camelCase (aliases), Python names snake_case

Design Decisions:
    - Separate from models: schemas are API contracts, models are persistence
"""
