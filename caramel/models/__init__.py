"""Table Models — SQLAlchemy declarative mappings of the catalogue schema.

Invariants:
    - All models inherit from Base (db/base.py)
    - Models describe the externally-owned schema; queries use them through
      SQLAlchemy Core (select / dialect insert), never lazy ORM loading

Design Decisions:
    - One file per aggregate for locality
    - All models imported here so Base.metadata is complete on package import
"""

from caramel.models.category import Category  # noqa: F401
from caramel.models.product import Product  # noqa: F401
from caramel.models.customer import Customer  # noqa: F401
from caramel.models.order import Order, OrderItem  # noqa: F401
from caramel.models.preorder import Preorder  # noqa: F401
from caramel.models.site_setting import SiteSetting  # noqa: F401
