from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from src.core.helpers.schema import optional


class ProductBase(BaseModel):
    """Base product schema with common fields"""

    name: str = Field(..., min_length=1, max_length=255)
    slug: str | None = Field(None, max_length=255, description="Derived from the name when omitted")
    description: str | None = None
    short_description: str | None = Field(None, max_length=500)
    brand: str | None = Field(None, max_length=255)
    price: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    compare_price: Decimal | None = Field(None, gt=0, max_digits=12, decimal_places=2)
    stock: int = Field(0, ge=0)
    images: list[str] = Field(default_factory=list)
    is_active: bool = True
    is_best_selling: bool = False
    category_id: UUID | None = None


class ProductCreate(ProductBase):
    """Schema for creating a product"""

    pass


@optional
class ProductUpdate(ProductBase):
    """Schema for updating a product"""

    pass


class ProductCategoryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    slug: str


class ProductResponse(ProductBase):
    """Schema for product response"""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    slug: str
    category: ProductCategoryResponse | None = None
    created_datetime: datetime
    updated_datetime: datetime | None = None
