"""Catalog Queries — categories with live product counts, filtered product listing.

Invariants:
    - Only is_active products are counted or returned
    - category == "all" (or empty) means no category filter
    - search matches name OR description, case-insensitive, as a literal
      substring (LIKE wildcards in the input are escaped)
    - Products are ordered newest first and capped at `limit`
"""

from typing import Any

from sqlalchemy import Select, and_, func, or_, select

from caramel.infrastructure.database import DatabaseSessionManager
from caramel.models import Category, Product

ALL_CATEGORIES = "all"
DEFAULT_PRODUCT_LIMIT = 50
_LIKE_ESCAPE = "\\"


def categories_query() -> Select:
    return (
        select(
            *Category.__table__.c,
            func.count(Product.id).label("product_count"),
        )
        .select_from(Category)
        .outerjoin(
            Product,
            and_(
                Product.category_id == Category.id,
                Product.is_active.is_(True),
            ),
        )
        .group_by(Category.id)
        .order_by(Category.name)
    )


def products_query(
    category: str | None = None,
    search: str | None = None,
    limit: int = DEFAULT_PRODUCT_LIMIT,
) -> Select:
    query = (
        select(
            *Product.__table__.c,
            Category.name.label("category_name"),
            Category.slug.label("category_slug"),
        )
        .select_from(Product)
        .outerjoin(Category, Product.category_id == Category.id)
        .where(Product.is_active.is_(True))
    )
    if category and category != ALL_CATEGORIES:
        query = query.where(Category.slug == category)
    if search:
        pattern = f"%{_escape_like(search)}%"
        query = query.where(or_(
            Product.name.ilike(pattern, escape=_LIKE_ESCAPE),
            Product.description.ilike(pattern, escape=_LIKE_ESCAPE),
        ))
    return query.order_by(Product.created_at.desc()).limit(limit)


async def list_categories(db: DatabaseSessionManager) -> list[dict[str, Any]]:
    return await db.fetch_all(categories_query())


async def list_products(
    db: DatabaseSessionManager,
    category: str | None = None,
    search: str | None = None,
    limit: int = DEFAULT_PRODUCT_LIMIT,
) -> list[dict[str, Any]]:
    return await db.fetch_all(products_query(category, search, limit))


def _escape_like(value: str) -> str:
    return (
        value.replace(_LIKE_ESCAPE, _LIKE_ESCAPE * 2)
        .replace("%", _LIKE_ESCAPE + "%")
        .replace("_", _LIKE_ESCAPE + "_")
    )
