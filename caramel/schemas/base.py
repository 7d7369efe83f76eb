"""Shared schema base — camelCase wire aliases and blank-string normalization."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Accepts and emits camelCase, also accepts snake_case field names."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


def blank_to_none(v):
    """Treat "" and whitespace-only strings as absent."""
    if isinstance(v, str) and not v.strip():
        return None
    return v
