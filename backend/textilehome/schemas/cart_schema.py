from decimal import Decimal

from pydantic import Field

from textilehome.schemas.product_schema import CamelModel, ProductOut


class AddCartItemIn(CamelModel):
    product_id: int
    quantity: int = Field(1, ge=1)


class UpdateCartItemIn(CamelModel):
    quantity: int


class CartItemOut(CamelModel):
    id: int
    product_id: int
    quantity: int
    session_id: str


class CartItemWithProductOut(CartItemOut):
    product: ProductOut


class CartSummaryOut(CamelModel):
    session_id: str
    item_count: int
    total: Decimal
