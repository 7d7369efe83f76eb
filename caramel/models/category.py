"""Category table — catalogue grouping, read-only from the API.

Invariants:
    - slug is unique and is the public filter key for products
    - product_count is never stored; it is computed from active products
"""

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from caramel.db.base import Base


class Category(Base):
    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    slug: Mapped[str] = mapped_column(
        String(100), nullable=False, unique=True,
    )
