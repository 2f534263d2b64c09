"""Base schema class with camelCase alias generation.

Response schemas inherit from this instead of BaseModel directly.
Python code stays snake_case; API JSON is camelCase.
"""
from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelORMModel(BaseModel):
    """Base for response schemas. Reads from snapshots/ORM objects, outputs camelCase."""
    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "from_attributes": True,
    }
