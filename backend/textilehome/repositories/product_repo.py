from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from textilehome.models.cart_item import CartItem
from textilehome.models.product import Product

TWO_PLACES = Decimal("0.01")


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class ProductRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, product_id: int) -> Optional[Product]:
        return self.db.get(Product, product_id)

    def list_all(self) -> List[Product]:
        return self.db.query(Product).order_by(Product.id).all()

    def list_featured(self) -> List[Product]:
        return (
            self.db.query(Product)
            .filter(Product.featured == True)
            .order_by(Product.id)
            .all()
        )

    def list_by_category(self, category: str) -> List[Product]:
        return (
            self.db.query(Product)
            .filter(Product.category == category)
            .order_by(Product.id)
            .all()
        )

    def search(self, q: str) -> List[Product]:
        """Case-insensitive literal substring match over name, description and material."""
        like = f"%{_escape_like(q)}%"
        return (
            self.db.query(Product)
            .filter(
                or_(
                    Product.name.ilike(like, escape="\\"),
                    Product.description.ilike(like, escape="\\"),
                    Product.material.ilike(like, escape="\\"),
                )
            )
            .order_by(Product.id)
            .all()
        )

    def recommend(self, category: str, limit: int = 4) -> List[Product]:
        return (
            self.db.query(Product)
            .filter(Product.category == category, Product.in_stock == True)
            .order_by(Product.featured.desc(), Product.id)
            .limit(limit)
            .all()
        )

    def create(self, data: Dict) -> Product:
        if data.get("price") is not None:
            data["price"] = Decimal(data["price"]).quantize(TWO_PLACES)
        p = Product(**data)
        self.db.add(p)
        self.db.flush()
        return p

    def update(self, product: Product, data: Dict) -> Product:
        for field, value in data.items():
            if field == "price" and value is not None:
                value = Decimal(value).quantize(TWO_PLACES)
            setattr(product, field, value)
        self.db.flush()
        return product

    def delete(self, product: Product):
        # SQLite does not enforce ON DELETE CASCADE unless asked to
        self.db.query(CartItem).filter(CartItem.product_id == product.id).delete(
            synchronize_session=False
        )
        self.db.delete(product)
        self.db.flush()

    def count(self) -> int:
        return self.db.query(Product).count()
