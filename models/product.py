from typing import Optional

from pydantic import BaseModel, Field, HttpUrl, field_validator, model_validator


def _two_decimals(value: Optional[float]) -> Optional[float]:
    if value is not None and round(value, 2) != value:
        raise ValueError("Price can have at most 2 decimal places")
    return value


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=10, max_length=500)
    price: float = Field(..., ge=0)
    category: str = Field(..., min_length=1, max_length=50)
    stock: int = Field(..., ge=0)
    image_url: Optional[HttpUrl] = None

    @field_validator("name", "description", "category", mode="before")
    @classmethod
    def strip_text(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("price")
    @classmethod
    def check_price(cls, value):
        return _two_decimals(value)

    def to_document(self) -> dict:
        doc = self.model_dump()
        doc["image_url"] = str(self.image_url) if self.image_url else None
        return doc


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, min_length=10, max_length=500)
    price: Optional[float] = Field(None, ge=0)
    category: Optional[str] = Field(None, min_length=1, max_length=50)
    stock: Optional[int] = Field(None, ge=0)
    image_url: Optional[HttpUrl] = None

    @field_validator("name", "description", "price", "category", "stock", mode="before")
    @classmethod
    def not_null(cls, value):
        # Omit a field to leave it unchanged; only image_url may be cleared.
        if value is None:
            raise ValueError("Field cannot be null")
        return value

    @field_validator("name", "description", "category", mode="before")
    @classmethod
    def strip_text(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("price")
    @classmethod
    def check_price(cls, value):
        return _two_decimals(value)

    @model_validator(mode="after")
    def at_least_one_field(self):
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided for update")
        return self

    def to_update(self) -> dict:
        changes = self.model_dump(exclude_unset=True)
        if "image_url" in changes and changes["image_url"] is not None:
            changes["image_url"] = str(changes["image_url"])
        return changes
