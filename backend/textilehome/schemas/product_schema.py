from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Category = Literal["bedsheets", "pillow-covers", "table-covers"]


class CamelModel(BaseModel):
    # the storefront client speaks camelCase (imageUrl, inStock, ...)
    model_config = ConfigDict(
        from_attributes=True, alias_generator=to_camel, populate_by_name=True
    )


class ProductOut(CamelModel):
    id: int
    name: str
    description: str
    price: Decimal
    category: str
    material: str
    image_url: str
    in_stock: bool
    featured: bool


class ProductCreate(CamelModel):
    name: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1)
    price: Decimal = Field(ge=0, max_digits=10)
    category: Category
    material: str = Field(min_length=1, max_length=100)
    image_url: str = Field(min_length=1)
    in_stock: bool = True
    featured: bool = False


class ProductUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, min_length=1)
    price: Optional[Decimal] = Field(None, ge=0, max_digits=10)
    category: Optional[Category] = None
    material: Optional[str] = Field(None, min_length=1, max_length=100)
    image_url: Optional[str] = Field(None, min_length=1)
    in_stock: Optional[bool] = None
    featured: Optional[bool] = None
