import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from werkzeug.security import check_password_hash, generate_password_hash

from textilehome.config import settings
from textilehome.models.admin import Admin, AdminSession
from textilehome.models.product import Product
from textilehome.repositories.admin_repo import AdminRepository
from textilehome.repositories.product_repo import ProductRepository

log = logging.getLogger("textilehome.admin")


class AdminAuthException(Exception):
    pass


class MissingCredentials(AdminAuthException):
    pass


class AdminExists(Exception):
    pass


def utcnow() -> datetime:
    # stored naive; every timestamp column holds UTC
    return datetime.now(timezone.utc).replace(tzinfo=None)


class AdminService:
    def __init__(self, db: Session, session_ttl_hours: Optional[int] = None):
        self.db = db
        self.repo = AdminRepository(db)
        self.products = ProductRepository(db)
        if session_ttl_hours is None:
            session_ttl_hours = settings.ADMIN_SESSION_TTL_HOURS
        self.session_ttl = timedelta(hours=session_ttl_hours)

    def create_admin(self, username: str, password: str, email: Optional[str] = None) -> Admin:
        if self.repo.get_by_username(username):
            raise AdminExists(f"Admin {username!r} already exists")
        try:
            admin = self.repo.create(username, generate_password_hash(password), email)
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise AdminExists(f"Admin {username!r} already exists")
        return admin

    def validate_credentials(self, username: str, password: str) -> Optional[Admin]:
        admin = self.repo.get_by_username(username)
        if not admin or not admin.is_active:
            return None
        if not check_password_hash(admin.password_hash, password):
            return None
        admin.last_login = utcnow()
        self.db.commit()
        return admin

    def login(self, username: Optional[str], password: Optional[str]) -> AdminSession:
        if not username or not password:
            raise MissingCredentials("Username and password required")
        admin = self.validate_credentials(username, password)
        if not admin:
            log.warning("Failed admin login for username=%r", username)
            raise AdminAuthException("Invalid credentials")
        session = self.repo.create_session(
            secrets.token_hex(32), admin, utcnow() + self.session_ttl
        )
        self.db.commit()
        log.info("Admin %s logged in", admin.username)
        return session

    def logout(self, session_id: Optional[str]) -> bool:
        if not session_id:
            return False
        removed = self.repo.delete_session(session_id)
        self.db.commit()
        return removed

    def validate_session(self, session_id: str) -> Optional[Admin]:
        """Return the active admin behind a session token, dropping the token if it expired."""
        s = self.repo.get_session(session_id)
        if not s:
            return None
        if s.expires_at <= utcnow():
            self.repo.delete_session(session_id)
            self.db.commit()
            return None
        if not s.admin or not s.admin.is_active:
            return None
        return s.admin

    def purge_expired_sessions(self) -> int:
        removed = self.repo.purge_expired(utcnow())
        self.db.commit()
        return removed

    # product management

    def create_product(self, data: dict) -> Product:
        p = self.products.create(data)
        self.db.commit()
        self.db.refresh(p)
        return p

    def update_product(self, product_id: int, data: dict) -> Optional[Product]:
        p = self.products.get(product_id)
        if not p:
            return None
        self.products.update(p, data)
        self.db.commit()
        self.db.refresh(p)
        return p

    def delete_product(self, product_id: int) -> bool:
        p = self.products.get(product_id)
        if not p:
            return False
        self.products.delete(p)
        self.db.commit()
        return True
