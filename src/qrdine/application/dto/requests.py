from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from qrdine.domain.order.entities import OrderAction


def _to_camel(value: str) -> str:
    parts = value.split("_")
    return parts[0] + "".join(part.capitalize() for part in parts[1:])


class CamelBaseModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=_to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


class ClaimTableRequest(CamelBaseModel):
    session_id: str = Field(min_length=1, max_length=128)


class PlaceOrderLineRequest(CamelBaseModel):
    item_id: str = Field(min_length=1)
    quantity: int = Field(ge=1)


class PlaceOrderRequest(CamelBaseModel):
    table: str = Field(min_length=1, max_length=50)
    session_id: str = Field(min_length=1, max_length=128)
    products: list[PlaceOrderLineRequest] = Field(min_length=1)


class CancelOrderRequest(CamelBaseModel):
    session_id: str = Field(min_length=1, max_length=128)


class OrderActionRequest(CamelBaseModel):
    action: OrderAction


class CallStaffRequest(CamelBaseModel):
    reason: str | None = Field(default=None, max_length=500)


class SubmitReviewRequest(CamelBaseModel):
    rating: int = Field(ge=1, le=5)
    comment: str | None = Field(default=None, max_length=2000)
    session_id: str | None = Field(default=None, max_length=128)


class CreateTableRequest(CamelBaseModel):
    username: str = Field(min_length=1, max_length=50, pattern=r"^[A-Za-z0-9_-]+$")
    name: str = Field(min_length=1, max_length=255)


class SetTableActiveRequest(CamelBaseModel):
    is_active: bool
