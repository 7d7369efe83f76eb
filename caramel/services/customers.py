"""Customer Upsert — insert-or-merge keyed on phone number.

Invariants:
    - One row per phone: conflicts on customers.phone update the existing row
    - updated_at is touched on every merge
    - Only the columns named in `merge_columns` are overwritten on conflict
    - Statement returns the customer id in both the insert and merge case

Design Decisions:
    - Dialect insert (ON CONFLICT ... DO UPDATE) over SELECT-then-write: the
      database resolves concurrent submissions for the same phone atomically
"""

from sqlalchemy import func
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.sql.dml import Insert

from caramel.models import Customer

_DIALECT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}

ORDER_MERGE_COLUMNS = ("name", "email", "address")
PREORDER_MERGE_COLUMNS = ("name",)


def customer_upsert(
    dialect_name: str,
    values: dict,
    merge_columns: tuple[str, ...],
) -> Insert:
    """Build INSERT ... ON CONFLICT (phone) DO UPDATE ... RETURNING id."""
    if not values.get("phone"):
        raise ValueError("customer upsert requires a phone number")
    insert = _DIALECT_INSERTS.get(dialect_name, postgresql.insert)
    stmt = insert(Customer).values(**values)
    merged = {col: stmt.excluded[col] for col in merge_columns}
    merged["updated_at"] = func.now()
    return stmt.on_conflict_do_update(
        index_elements=["phone"], set_=merged,
    ).returning(Customer.id)
