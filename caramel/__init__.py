"""CARAMEL API — catalogue, orders and preorders over PostgreSQL."""

__version__ = "1.0.0"
