from sqlalchemy import Column, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from textilehome.db import Base


class CartItem(Base):
    __tablename__ = "cart_items"
    __table_args__ = (
        # one row per product per cart; adding again merges quantities
        UniqueConstraint("product_id", "session_id", name="uq_cart_items_product_session"),
    )

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(
        Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True
    )
    quantity = Column(Integer, nullable=False, default=1)
    session_id = Column(String(128), nullable=False, index=True)

    product = relationship("Product", lazy="joined")
