"""Root — service metadata, no database access."""

from fastapi import APIRouter, Request

from caramel.core.service_info import build_service_info

router = APIRouter(tags=["meta"])


@router.get("/")
async def service_info(request: Request):
    """Static metadata and the list of available endpoints."""
    settings = request.app.state.settings
    return build_service_info(
        settings.service_name, settings.service_version, settings.platform,
    )
