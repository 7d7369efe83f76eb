"""Services — the query layer behind each route.

Invariants:
    - Every statement is built with SQLAlchemy expressions; user values only
      ever travel as bound parameters
    - Services raise DatabaseError (via the pool) and never build HTTP responses
"""
