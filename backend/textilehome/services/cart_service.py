import logging
import uuid
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from textilehome.models.cart_item import CartItem
from textilehome.repositories.cart_repo import CartRepository
from textilehome.repositories.product_repo import ProductRepository

log = logging.getLogger("textilehome.cart")


class CartException(Exception):
    pass


class CartNotFound(CartException):
    pass


def new_session_id() -> str:
    return uuid.uuid4().hex


class CartService:
    def __init__(self, db: Session):
        self.db = db
        self.cart_repo = CartRepository(db)
        self.product_repo = ProductRepository(db)

    def items(self, session_id: str) -> List[CartItem]:
        return self.cart_repo.list_for_session(session_id)

    def add_item(self, session_id: str, product_id: int, qty: int = 1) -> CartItem:
        if qty <= 0:
            raise CartException("Quantity must be positive")
        if not self.product_repo.get(product_id):
            raise CartNotFound("Product not found")
        try:
            item = self.cart_repo.add_or_merge(product_id, session_id, qty)
            self.db.commit()
        except IntegrityError:
            # a concurrent add inserted the same (product, session) row first
            self.db.rollback()
            log.info("Cart row for product=%s already present, merging", product_id)
            item = self.cart_repo.add_or_merge(product_id, session_id, qty)
            self.db.commit()
        self.db.refresh(item)
        return item

    def update_quantity(self, session_id: str, item_id: int, qty: int) -> CartItem:
        if qty < 1:
            raise CartException("Quantity must be a positive number")
        item = self.cart_repo.get_for_session(item_id, session_id)
        if not item:
            raise CartNotFound("Cart item not found")
        self.cart_repo.set_quantity(item, qty)
        self.db.commit()
        self.db.refresh(item)
        return item

    def remove_item(self, session_id: str, item_id: int):
        item = self.cart_repo.get_for_session(item_id, session_id)
        if not item:
            raise CartNotFound("Cart item not found")
        self.cart_repo.remove(item)
        self.db.commit()

    def clear(self, session_id: str) -> int:
        removed = self.cart_repo.clear(session_id)
        self.db.commit()
        return removed

    def summary(self, session_id: Optional[str]) -> dict:
        items = self.items(session_id) if session_id else []
        total = sum((it.product.price * it.quantity for it in items), Decimal("0.00"))
        return {
            "session_id": session_id,
            "item_count": sum(it.quantity for it in items),
            "total": total,
        }
