"""Infrastructure Layer — database pool and logging setup.

Invariants:
    - Infrastructure never imports from api/ or services/
    - Driver exceptions are mapped to core.errors types before leaving this layer
"""
