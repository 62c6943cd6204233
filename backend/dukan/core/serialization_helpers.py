"""
Serialization helpers shared by the route schemas.
No business logic here, only formatting.
"""
from decimal import ROUND_HALF_UP, Decimal
from typing import Annotated

from pydantic import BaseModel, ConfigDict, PlainSerializer
from pydantic.alias_generators import to_camel


CENT = Decimal("0.01")


def quantize_money(value) -> Decimal:
    if value is None:
        return Decimal("0.00")
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def serialize_decimal(value):
    """Decimal to float for JSON, rounded to cents at presentation time"""
    if value is None:
        return None
    return float(quantize_money(value))


# Decimal inside the app, JSON number on the wire
Money = Annotated[Decimal, PlainSerializer(serialize_decimal, return_type=float, when_used="json")]


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )
