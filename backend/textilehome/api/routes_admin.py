from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Request
from sqlalchemy.orm import Session

from textilehome.api.params import parse_id
from textilehome.db import get_db
from textilehome.models.admin import Admin
from textilehome.schemas.admin_schema import AdminOut, LoginIn, LoginOut
from textilehome.schemas.product_schema import ProductCreate, ProductOut, ProductUpdate
from textilehome.services.admin_service import (
    AdminAuthException,
    AdminService,
    MissingCredentials,
)

router = APIRouter(prefix="/api/admin", tags=["admin"])


def require_admin(
    admin_session: Optional[str] = Header(None),
    db: Session = Depends(get_db),
) -> Admin:
    if not admin_session:
        raise HTTPException(status_code=401, detail="Admin authentication required")
    admin = AdminService(db).validate_session(admin_session)
    if not admin:
        raise HTTPException(status_code=401, detail="Invalid admin session")
    return admin


@router.post("/login", summary="Admin login", response_model=LoginOut)
def login(payload: LoginIn, request: Request, db: Session = Depends(get_db)):
    svc = AdminService(db, request.app.state.settings.ADMIN_SESSION_TTL_HOURS)
    try:
        session = svc.login(payload.username, payload.password)
    except MissingCredentials as e:
        raise HTTPException(status_code=400, detail=str(e))
    except AdminAuthException as e:
        raise HTTPException(status_code=401, detail=str(e))
    return {"success": True, "session_id": session.id, "admin": session.admin}


@router.post("/logout", summary="Admin logout")
def logout(admin_session: Optional[str] = Header(None), db: Session = Depends(get_db)):
    AdminService(db).logout(admin_session)
    return {"success": True}


@router.get("/me", summary="Current admin", response_model=AdminOut)
def me(admin: Admin = Depends(require_admin)):
    return admin


@router.post("/products", summary="Create product", status_code=201, response_model=ProductOut)
def create_product(
    payload: ProductCreate,
    admin: Admin = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return AdminService(db).create_product(payload.model_dump())


@router.put("/products/{product_id}", summary="Update product", response_model=ProductOut)
def update_product(
    product_id: str,
    payload: ProductUpdate,
    admin: Admin = Depends(require_admin),
    db: Session = Depends(get_db),
):
    pid = parse_id(product_id, "Invalid product ID")
    p = AdminService(db).update_product(pid, payload.model_dump(exclude_unset=True, exclude_none=True))
    if not p:
        raise HTTPException(status_code=404, detail="Product not found")
    return p


@router.delete("/products/{product_id}", summary="Delete product")
def delete_product(
    product_id: str,
    admin: Admin = Depends(require_admin),
    db: Session = Depends(get_db),
):
    pid = parse_id(product_id, "Invalid product ID")
    if not AdminService(db).delete_product(pid):
        raise HTTPException(status_code=404, detail="Product not found")
    return {"success": True}


@router.get("/security/status", summary="Full security status")
def security_status(request: Request, admin: Admin = Depends(require_admin)):
    return request.app.state.security.status_report(redact=False)
