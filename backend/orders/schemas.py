"""Pydantic request / response models for the order endpoints."""

from datetime import datetime
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, Field

from database import MAX_ID


# -- Requests --------------------------------------------------------------


class OrderLineRequest(BaseModel):
    product: int = Field(..., le=MAX_ID)
    # Upper bound is the INTEGER column range
    quantity: int = Field(..., gt=0, le=2**31 - 1)


class CreateOrderRequest(BaseModel):
    # Optional so that a missing list reaches the handler's "empty order" 400
    products: Optional[List[OrderLineRequest]] = None
    total_price: float = Field(..., validation_alias=AliasChoices("totalPrice", "total_price"))


# -- Responses -------------------------------------------------------------
# Response fields accept both the ORM attribute name and the wire name:
# FastAPI dumps a returned model by alias and validates the result again.


class OrderLine(BaseModel):
    product: Optional[int] = Field(None, validation_alias=AliasChoices("product_id", "product"))
    quantity: int

    model_config = {"from_attributes": True}


class OrderRow(BaseModel):
    """An order with its references left as ids."""

    id: int
    user: int = Field(..., validation_alias=AliasChoices("user_id", "user"))
    products: List[OrderLine] = Field(..., validation_alias=AliasChoices("items", "products"))
    total_price: float = Field(
        ...,
        validation_alias=AliasChoices("total_price", "totalPrice"),
        serialization_alias="totalPrice",
    )
    created_at: datetime = Field(
        ...,
        validation_alias=AliasChoices("created_at", "createdAt"),
        serialization_alias="createdAt",
    )

    model_config = {"from_attributes": True}


class OrderCreatedResponse(BaseModel):
    message: str
    order: OrderRow


# -- Populated (admin listing) ---------------------------------------------


class OrderUserRef(BaseModel):
    id: int
    email: str

    model_config = {"from_attributes": True}


class OrderProductRef(BaseModel):
    id: int
    name: str

    model_config = {"from_attributes": True}


class PopulatedOrderLine(BaseModel):
    # None when the product has since been deleted from the catalog
    product: Optional[OrderProductRef] = None
    quantity: int

    model_config = {"from_attributes": True}


class PopulatedOrderRow(BaseModel):
    """An order with user email and product names resolved."""

    id: int
    user: Optional[OrderUserRef] = None
    products: List[PopulatedOrderLine] = Field(..., validation_alias=AliasChoices("items", "products"))
    total_price: float = Field(
        ...,
        validation_alias=AliasChoices("total_price", "totalPrice"),
        serialization_alias="totalPrice",
    )
    created_at: datetime = Field(
        ...,
        validation_alias=AliasChoices("created_at", "createdAt"),
        serialization_alias="createdAt",
    )

    model_config = {"from_attributes": True}
