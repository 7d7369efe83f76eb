"""Service Info — static metadata served by GET / and the 404 fallback.

Invariants:
    - AVAILABLE_ENDPOINTS lists every public route, in registration order
    - build_service_info() is pure apart from the clock (no DB access)
"""

from datetime import datetime, timezone

AVAILABLE_ENDPOINTS: list[str] = [
    "GET /",
    "GET /api/health",
    "GET /api/products",
    "GET /api/categories",
    "POST /api/orders",
    "POST /api/preorders",
    "GET /api/settings",
]


def build_service_info(
    name: str, version: str, platform: str, now: datetime | None = None,
) -> dict:
    """Metadata payload for the root endpoint."""
    now = now or datetime.now(timezone.utc)
    return {
        "name": name,
        "version": version,
        "status": "running",
        "platform": platform,
        "timestamp": now.isoformat(),
        "endpoints": list(AVAILABLE_ENDPOINTS),
    }
