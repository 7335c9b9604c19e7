from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from src.core.helpers.schema import optional


class PromotionBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    image: str | None = Field(None, max_length=2048)
    banner_text: str | None = Field(None, max_length=255)
    discount: int | None = Field(None, ge=0, le=100, description="Advertised discount percentage")
    is_active: bool = True


class PromotionCreate(PromotionBase):
    pass


@optional
class PromotionUpdate(PromotionBase):
    pass


class PromotionResponse(PromotionBase):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    created_datetime: datetime
