from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict
from src.domain.schemas.product import ProductResponse


class FavoriteResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    product_id: UUID
    product: ProductResponse
    created_datetime: datetime


class FavoriteStatusResponse(BaseModel):
    is_favorited: bool
