"""Pydantic request/response models."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class ProductResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: str = ""
    category: str
    price: float
    image_url: str | None = None
    created_at: datetime | None = None


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str
    created_at: datetime | None = None


class RecommendationItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    product: ProductResponse
    explanation: str


class RecommendationsResponse(BaseModel):
    recommendations: list[RecommendationItem]


class InteractionRequest(BaseModel):
    """Fields are optional so missing values surface as a 400, not a 422."""

    user_id: str | None = None
    product_id: str | None = None
    action_type: str | None = None
    name: str | None = None
    email: str | None = None


class InteractionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: str
    product_id: str
    action_type: str
    timestamp: datetime | None = None


class InteractionCreatedResponse(BaseModel):
    success: bool = True
    interaction: InteractionResponse


class CatalogResponse(BaseModel):
    products: list[ProductResponse]
    users: list[UserResponse]


class ErrorResponse(BaseModel):
    error: str
