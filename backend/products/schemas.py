"""Pydantic request / response models for the product endpoints."""

from pydantic import AliasChoices, BaseModel, Field


# -- Requests --------------------------------------------------------------


class ProductRequest(BaseModel):
    name: str
    price: float
    image_url: str = Field("", validation_alias=AliasChoices("imageUrl", "image_url"))


# -- Responses -------------------------------------------------------------


class ProductResponse(BaseModel):
    id: int
    name: str
    price: float
    image_url: str = Field(
        "",
        validation_alias=AliasChoices("image_url", "imageUrl"),
        serialization_alias="imageUrl",
    )

    model_config = {"from_attributes": True}
