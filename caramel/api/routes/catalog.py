"""Catalog — categories and active products.

Invariants:
    - Read-only; rows are returned verbatim plus derived/joined columns
    - limit defaults to 50 and must be a positive integer
"""

import logging

from fastapi import APIRouter, Depends, Query

from caramel.core.errors import DatabaseError, OperationFailedError
from caramel.infrastructure.database import DatabaseSessionManager, get_db
from caramel.services.catalog import (
    DEFAULT_PRODUCT_LIMIT, list_categories, list_products,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["catalog"])


@router.get("/categories")
async def get_categories(db: DatabaseSessionManager = Depends(get_db)):
    """All categories with their active product counts, by name."""
    try:
        categories = await list_categories(db)
    except DatabaseError as e:
        logger.error(f"Error fetching categories: {e.message}")
        raise OperationFailedError(
            "Error fetching categories", e.details,
        ) from e
    return {
        "success": True,
        "count": len(categories),
        "categories": categories,
    }


@router.get("/products")
async def get_products(
    category: str | None = None,
    search: str | None = None,
    limit: int = Query(DEFAULT_PRODUCT_LIMIT, ge=1),
    db: DatabaseSessionManager = Depends(get_db),
):
    """Active products, newest first, optionally filtered by slug/search."""
    try:
        products = await list_products(db, category, search, limit)
    except DatabaseError as e:
        logger.error(f"Error fetching products: {e.message}")
        raise OperationFailedError(
            "Error fetching products", e.details,
        ) from e
    return {
        "success": True,
        "count": len(products),
        "products": products,
    }
