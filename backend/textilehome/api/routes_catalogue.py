import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from textilehome.api.params import parse_id
from textilehome.db import get_db
from textilehome.repositories.product_repo import ProductRepository
from textilehome.schemas.product_schema import ProductOut

log = logging.getLogger("textilehome.catalogue")

router = APIRouter(tags=["catalogue"])


@router.get("", summary="List products", response_model=List[ProductOut])
def list_products(db: Session = Depends(get_db)):
    try:
        return ProductRepository(db).list_all()
    except SQLAlchemyError:
        log.exception("Failed to fetch products")
        raise HTTPException(status_code=500, detail="Failed to fetch products")


@router.get("/featured", summary="Featured products", response_model=List[ProductOut])
def featured_products(db: Session = Depends(get_db)):
    try:
        return ProductRepository(db).list_featured()
    except SQLAlchemyError:
        log.exception("Failed to fetch featured products")
        raise HTTPException(status_code=500, detail="Failed to fetch featured products")


@router.get(
    "/category/{category}",
    summary="Products in a category",
    response_model=List[ProductOut],
)
def products_by_category(category: str, db: Session = Depends(get_db)):
    try:
        return ProductRepository(db).list_by_category(category)
    except SQLAlchemyError:
        log.exception("Failed to fetch products for category %s", category)
        raise HTTPException(status_code=500, detail="Failed to fetch products by category")


@router.get("/search", summary="Search products", response_model=List[ProductOut])
def search_products(
    q: Optional[str] = Query(None, description="search term"),
    db: Session = Depends(get_db),
):
    if not q or not q.strip():
        raise HTTPException(status_code=400, detail="Search query is required")
    try:
        return ProductRepository(db).search(q.strip())
    except SQLAlchemyError:
        log.exception("Failed to search products")
        raise HTTPException(status_code=500, detail="Failed to search products")


@router.get("/{product_id}", summary="Get product by id", response_model=ProductOut)
def get_product(product_id: str, db: Session = Depends(get_db)):
    p = ProductRepository(db).get(parse_id(product_id, "Invalid product ID"))
    if not p:
        raise HTTPException(status_code=404, detail="Product not found")
    return p
