from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Request body accepting camelCase (wire format) or snake_case keys."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        str_strip_whitespace = True
