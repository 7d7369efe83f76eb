"""Route Modules — one file per resource/concern.

Invariants:
    - Each module defines its own APIRouter with prefix and tags
    - Routes validate input, call one service, and map DatabaseError to the
      endpoint's OperationFailedError; no SQL here
"""
