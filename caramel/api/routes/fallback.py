"""Fallback — 404 for every method on every unmatched path.

Invariants:
    - Registered last, so it only sees requests no other route fully matched
      (including known paths called with an unsupported method)
"""

from fastapi import APIRouter, Request

from caramel.core.errors import EndpointNotFoundError
from caramel.core.service_info import AVAILABLE_ENDPOINTS

router = APIRouter(include_in_schema=False)

ALL_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]


@router.api_route("/{path:path}", methods=ALL_METHODS)
async def endpoint_not_found(request: Request, path: str):
    raise EndpointNotFoundError(
        _original_url(request), list(AVAILABLE_ENDPOINTS),
    )


def _original_url(request: Request) -> str:
    query = request.url.query
    return f"{request.url.path}?{query}" if query else request.url.path
