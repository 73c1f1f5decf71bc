from typing import List, Optional

from sqlalchemy.orm import Session

from textilehome.models.cart_item import CartItem


class CartRepository:
    def __init__(self, db: Session):
        self.db = db

    def list_for_session(self, session_id: str) -> List[CartItem]:
        return (
            self.db.query(CartItem)
            .filter(CartItem.session_id == session_id)
            .order_by(CartItem.id)
            .all()
        )

    def get_for_session(self, item_id: int, session_id: str) -> Optional[CartItem]:
        return (
            self.db.query(CartItem)
            .filter(CartItem.id == item_id, CartItem.session_id == session_id)
            .first()
        )

    def find(self, product_id: int, session_id: str) -> Optional[CartItem]:
        return (
            self.db.query(CartItem)
            .filter(CartItem.product_id == product_id, CartItem.session_id == session_id)
            .first()
        )

    def add_or_merge(self, product_id: int, session_id: str, qty: int) -> CartItem:
        item = self.find(product_id, session_id)
        if item:
            item.quantity += qty
        else:
            item = CartItem(product_id=product_id, session_id=session_id, quantity=qty)
            self.db.add(item)
        self.db.flush()
        return item

    def set_quantity(self, item: CartItem, qty: int) -> CartItem:
        item.quantity = qty
        self.db.flush()
        return item

    def remove(self, item: CartItem):
        self.db.delete(item)
        self.db.flush()

    def clear(self, session_id: str) -> int:
        removed = (
            self.db.query(CartItem)
            .filter(CartItem.session_id == session_id)
            .delete(synchronize_session=False)
        )
        self.db.flush()
        return removed
