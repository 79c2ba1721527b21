# app/schemas/base.py
"""Shared pydantic base: camelCase on the wire, snake_case in Python."""
from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Accepts both camelCase and snake_case input, emits camelCase"""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True
