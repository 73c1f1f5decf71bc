from sqlalchemy import Boolean, Column, Integer, Numeric, String, Text

from textilehome.db import Base

CATEGORIES = ("bedsheets", "pillow-covers", "table-covers")


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(Text, nullable=False)
    description = Column(Text, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    category = Column(String(32), nullable=False, index=True)
    material = Column(Text, nullable=False)
    image_url = Column(Text, nullable=False)
    in_stock = Column(Boolean, default=True, nullable=False)
    featured = Column(Boolean, default=False, nullable=False)

    def __repr__(self):
        return f"<Product id={self.id} name={self.name}>"
