from decimal import Decimal
from typing import List

from pydantic import BaseModel, Field, field_validator

# Amounts arrive already rounded to cents and must fit Numeric(10, 2)


class ProductCreate(BaseModel):
    name: str
    price: Decimal = Field(..., max_digits=10, decimal_places=2)

    @field_validator("price")
    def non_negative(cls, v: Decimal):
        if v < 0:
            raise ValueError("price must be non-negative")
        return v


class OrderCreate(BaseModel):
    user_id: int
    # Product ids are opaque strings and total_price is trusted as sent
    products: List[str]
    total_price: Decimal = Field(..., max_digits=10, decimal_places=2)
