"""Site Settings — flat key/value rows re-keyed into a lookup mapping."""

from typing import Any, Iterable

from sqlalchemy import select

from caramel.infrastructure.database import DatabaseSessionManager
from caramel.models import SiteSetting


def rekey_settings(rows: Iterable[dict[str, Any]]) -> dict[str, dict]:
    """{setting_key: {"value": ..., "description": ...}}; later keys win."""
    return {
        row["setting_key"]: {
            "value": row["setting_value"],
            "description": row["description"],
        }
        for row in rows
    }


async def fetch_settings(db: DatabaseSessionManager) -> dict[str, dict]:
    rows = await db.fetch_all(
        select(
            SiteSetting.setting_key,
            SiteSetting.setting_value,
            SiteSetting.description,
        ).order_by(SiteSetting.setting_key),
    )
    return rekey_settings(rows)
