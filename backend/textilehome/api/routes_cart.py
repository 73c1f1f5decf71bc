from typing import List, Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Response
from sqlalchemy.orm import Session

from textilehome.api.params import parse_id
from textilehome.db import get_db
from textilehome.schemas.cart_schema import (
    AddCartItemIn,
    CartItemOut,
    CartItemWithProductOut,
    CartSummaryOut,
    UpdateCartItemIn,
)
from textilehome.services.cart_service import (
    CartException,
    CartNotFound,
    CartService,
    new_session_id,
)

router = APIRouter(prefix="/api/cart", tags=["cart"])

SESSION_HEADER = "x-session-id"


def _ensure_session(session_id: Optional[str], response: Response) -> str:
    # guests get a fresh cart id, echoed back so the client can keep it
    if not session_id:
        session_id = new_session_id()
        response.headers[SESSION_HEADER] = session_id
    return session_id


def _require_session(session_id: Optional[str]) -> str:
    if not session_id:
        raise HTTPException(status_code=400, detail="Session ID required")
    return session_id


@router.get("", summary="Get cart", response_model=List[CartItemWithProductOut])
def get_cart(
    response: Response,
    x_session_id: Optional[str] = Header(None),
    db: Session = Depends(get_db),
):
    session_id = _ensure_session(x_session_id, response)
    return CartService(db).items(session_id)


@router.get("/summary", summary="Cart totals", response_model=CartSummaryOut)
def cart_summary(
    response: Response,
    x_session_id: Optional[str] = Header(None),
    db: Session = Depends(get_db),
):
    session_id = _ensure_session(x_session_id, response)
    return CartService(db).summary(session_id)


@router.post("", summary="Add item to cart", status_code=201, response_model=CartItemOut)
def add_item(
    payload: AddCartItemIn,
    response: Response,
    x_session_id: Optional[str] = Header(None),
    db: Session = Depends(get_db),
):
    session_id = _ensure_session(x_session_id, response)
    svc = CartService(db)
    try:
        return svc.add_item(session_id, payload.product_id, payload.quantity)
    except CartNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except CartException as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.put("/{item_id}", summary="Change item quantity", response_model=CartItemOut)
def update_item(
    item_id: str,
    payload: UpdateCartItemIn,
    x_session_id: Optional[str] = Header(None),
    db: Session = Depends(get_db),
):
    session_id = _require_session(x_session_id)
    cart_item_id = parse_id(item_id, "Invalid cart item ID")
    svc = CartService(db)
    try:
        return svc.update_quantity(session_id, cart_item_id, payload.quantity)
    except CartNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except CartException as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.delete("/{item_id}", summary="Remove item", status_code=204)
def remove_item(
    item_id: str,
    x_session_id: Optional[str] = Header(None),
    db: Session = Depends(get_db),
):
    session_id = _require_session(x_session_id)
    cart_item_id = parse_id(item_id, "Invalid cart item ID")
    try:
        CartService(db).remove_item(session_id, cart_item_id)
    except CartNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    return Response(status_code=204)


@router.delete("", summary="Clear cart", status_code=204)
def clear_cart(
    x_session_id: Optional[str] = Header(None),
    db: Session = Depends(get_db),
):
    session_id = _require_session(x_session_id)
    CartService(db).clear(session_id)
    return Response(status_code=204)
