from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from src.core.helpers.schema import optional


class CategoryBase(BaseModel):
    """Base category schema with common fields"""

    name: str = Field(..., min_length=1, max_length=255, description="The name of the category")
    slug: str | None = Field(None, max_length=255, description="URL-friendly name, derived from the name when omitted")
    description: str | None = Field(None, description="Description of the category")
    image_url: str | None = Field(None, max_length=2048, description="Cover image URL")
    is_active: bool = Field(True, description="Whether the category is active")
    sort_order: int = Field(0, description="Sort order for display")


class CategoryCreate(CategoryBase):
    """Schema for creating a new category"""

    pass


@optional
class CategoryUpdate(CategoryBase):
    """Schema for updating a category"""

    pass


class CategoryResponse(CategoryBase):
    """Schema for category response"""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    slug: str
    product_count: int = Field(0, description="Number of active products in the category")
    created_datetime: datetime
