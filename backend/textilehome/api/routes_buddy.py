from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from textilehome.db import get_db
from textilehome.schemas.buddy_schema import BuddyMessage, BuddyRecommendation
from textilehome.services.buddy_service import BuddyNotFound, BuddyService

router = APIRouter(prefix="/api/buddy", tags=["buddy"])


@router.get("/message", summary="Contextual mascot message", response_model=BuddyMessage)
def buddy_message(
    page: Optional[str] = Query(None, description="storefront page the shopper is on"),
    cart_count: int = Query(0, ge=0, alias="cartCount"),
):
    return BuddyService().message_for(page, cart_count)


@router.get("/messages/{message_id}", summary="Follow-up message", response_model=BuddyMessage)
def buddy_follow_up(message_id: str):
    try:
        return BuddyService().follow_up(message_id)
    except BuddyNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get(
    "/recommendation/{sleep_type}",
    summary="Sleep-style recommendation",
    response_model=BuddyRecommendation,
)
def buddy_recommendation(sleep_type: str, db: Session = Depends(get_db)):
    try:
        return BuddyService(db).recommendation(sleep_type)
    except BuddyNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
