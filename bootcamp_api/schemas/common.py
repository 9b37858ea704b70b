# bootcamp_api/schemas/common.py
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire and in MongoDB."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    def to_document(self, partial: bool = False) -> dict:
        # partial: only the fields the client actually sent, nulls ignored
        return self.model_dump(by_alias=True, exclude_unset=partial, exclude_none=partial)
