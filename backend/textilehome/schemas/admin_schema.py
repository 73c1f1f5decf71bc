from datetime import datetime
from typing import Optional

from textilehome.schemas.product_schema import CamelModel


class LoginIn(CamelModel):
    username: Optional[str] = None
    password: Optional[str] = None


class AdminOut(CamelModel):
    id: int
    username: str
    email: Optional[str] = None
    last_login: Optional[datetime] = None


class LoginOut(CamelModel):
    success: bool
    session_id: str
    admin: AdminOut
