"""
Shared schema building blocks.
"""
from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, ConfigDict, PlainSerializer
from pydantic.alias_generators import to_camel


# Money is exact in Python and a plain JSON number on the wire and on disk.
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class CamelModel(BaseModel):
    """Snake_case attributes, camelCase JSON (paymentAmount, totalRevenue, ...)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_document(self) -> dict:
        """JSON-ready dict in the persisted shape."""
        return self.model_dump(mode="json", by_alias=True)


class MessageResponse(BaseModel):
    message: str
