"""
Sample catalogue: 8 bedsheets, 6 pillow covers, 6 table covers.

Used by ``init_db(seed=True)``, ``scripts/seed_products.py`` and the tests.
"""
import logging
from decimal import Decimal, InvalidOperation
from typing import Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from textilehome.models.product import CATEGORIES
from textilehome.repositories.product_repo import ProductRepository

log = logging.getLogger("textilehome.db")

_UNSPLASH = "https://images.unsplash.com/photo-{}?ixlib=rb-4.0.3&auto=format&fit=crop&w=800&h=600"


def _p(name, description, price, category, material, photo, featured=False):
    return {
        "name": name,
        "description": description,
        "price": price,
        "category": category,
        "material": material,
        "image_url": _UNSPLASH.format(photo),
        "in_stock": True,
        "featured": featured,
    }


SAMPLE_PRODUCTS: List[Dict] = [
    # bedsheets
    _p("Premium Cotton Sheets", "100% Egyptian cotton, 800 thread count for ultimate comfort",
       "89.99", "bedsheets", "Cotton", "1555041469-a586c61ea9bc", featured=True),
    _p("Navy Luxury Set", "Percale weave with cooling comfort technology",
       "109.99", "bedsheets", "Cotton", "1578662996442-48f60103fc96"),
    _p("Blush Stripe Sheets", "Soft cotton blend, machine washable and durable",
       "69.99", "bedsheets", "Cotton Blend", "1540932239986-30128078f3c5"),
    _p("Pure Linen Sheets", "100% European linen, naturally breathable and temperature regulating",
       "129.99", "bedsheets", "Linen", "1521783988139-89397d761dce"),
    _p("Organic Cotton Set", "GOTS certified organic cotton, eco-friendly and hypoallergenic",
       "94.99", "bedsheets", "Organic Cotton", "1586023492125-27b2c045efd7"),
    _p("Bamboo Silk Sheets", "Luxurious bamboo silk blend, naturally antimicrobial",
       "149.99", "bedsheets", "Bamboo Silk", "1505693416388-ac5ce068fe85", featured=True),
    _p("Microfiber Sheets", "Ultra-soft microfiber, wrinkle-resistant and easy care",
       "39.99", "bedsheets", "Microfiber", "1522771739844-6a9f6d5f14af"),
    _p("Flannel Winter Sheets", "Cozy brushed flannel for warmth and comfort",
       "79.99", "bedsheets", "Flannel", "1578662996442-48f60103fc96"),
    # pillow covers
    _p("Geometric Pillow Covers", "Modern geometric patterns on premium fabric blend",
       "24.99", "pillow-covers", "Cotton Blend", "1586023492125-27b2c045efd7", featured=True),
    _p("Silk Pillowcase", "100% mulberry silk, gentle on hair and skin",
       "49.99", "pillow-covers", "Silk", "1522771739844-6a9f6d5f14af", featured=True),
    _p("Linen Pillow Shams", "Natural linen with envelope closure, set of 2",
       "34.99", "pillow-covers", "Linen", "1540932239986-30128078f3c5"),
    _p("Velvet Accent Pillows", "Luxurious velvet texture with hidden zipper",
       "39.99", "pillow-covers", "Velvet", "1505693416388-ac5ce068fe85"),
    _p("Embroidered Cushion Covers", "Hand-embroidered designs on soft cotton",
       "29.99", "pillow-covers", "Cotton", "1521783988139-89397d761dce"),
    _p("Memory Foam Pillow Set", "Cooling gel memory foam with bamboo cover",
       "59.99", "pillow-covers", "Bamboo", "1555041469-a586c61ea9bc"),
    # table covers
    _p("Linen Table Runner", "Natural linen table runner with sophisticated style",
       "39.99", "table-covers", "Linen", "1600494603989-9650cf6ddd3d", featured=True),
    _p("Elegant Tablecloth", "Premium cotton tablecloth with stain resistance",
       "54.99", "table-covers", "Cotton", "1578662996442-48f60103fc96"),
    _p("Placemat Set", "Woven placemats with matching napkins, set of 6",
       "29.99", "table-covers", "Cotton Blend", "1540932239986-30128078f3c5"),
    _p("Waterproof Table Cover", "Durable waterproof material with elegant design",
       "44.99", "table-covers", "Vinyl", "1521783988139-89397d761dce"),
    _p("Holiday Table Runner", "Festive patterns perfect for special occasions",
       "34.99", "table-covers", "Cotton", "1505693416388-ac5ce068fe85"),
    _p("Dining Table Protector", "Clear protective cover with non-slip backing",
       "24.99", "table-covers", "Clear Vinyl", "1522771739844-6a9f6d5f14af"),
]


def normalize_entry(entry: Dict) -> Optional[Dict]:
    """Accept camelCase or snake_case product JSON; None when the entry is unusable."""
    name = entry.get("name") or entry.get("title")
    category = entry.get("category")
    if not name or category not in CATEGORIES:
        return None
    try:
        price = Decimal(str(entry.get("price", "0")))
    except InvalidOperation:
        return None
    image = entry.get("image_url") or entry.get("imageUrl") or entry.get("image")
    if not image:
        imgs = entry.get("images") or []
        image = imgs[0] if isinstance(imgs, (list, tuple)) and imgs else ""
    return {
        "name": name,
        "description": entry.get("description") or "",
        "price": price,
        "category": category,
        "material": entry.get("material") or "",
        "image_url": image,
        "in_stock": bool(entry.get("in_stock", entry.get("inStock", True))),
        "featured": bool(entry.get("featured", False)),
    }


def seed_products(db: Session, products: Optional[Iterable[Dict]] = None) -> int:
    """Insert ``products`` (default: the sample catalogue) when the table is empty."""
    repo = ProductRepository(db)
    if repo.count():
        return 0
    created = 0
    try:
        for entry in products if products is not None else SAMPLE_PRODUCTS:
            data = normalize_entry(entry)
            if not data:
                log.warning("Skipping unusable product entry: %r", entry)
                continue
            repo.create(data)
            created += 1
        db.commit()
    except Exception:
        db.rollback()
        raise
    return created
