from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from textilehome.models.admin import Admin, AdminSession


class AdminRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_by_username(self, username: str) -> Optional[Admin]:
        return self.db.query(Admin).filter(Admin.username == username).first()

    def create(self, username: str, password_hash: str, email: Optional[str] = None) -> Admin:
        admin = Admin(username=username, password_hash=password_hash, email=email)
        self.db.add(admin)
        self.db.flush()
        return admin

    def get_session(self, session_id: str) -> Optional[AdminSession]:
        return self.db.get(AdminSession, session_id)

    def create_session(self, session_id: str, admin: Admin, expires_at: datetime) -> AdminSession:
        s = AdminSession(id=session_id, admin_id=admin.id, expires_at=expires_at)
        self.db.add(s)
        self.db.flush()
        return s

    def delete_session(self, session_id: str) -> bool:
        removed = (
            self.db.query(AdminSession)
            .filter(AdminSession.id == session_id)
            .delete(synchronize_session=False)
        )
        self.db.flush()
        return removed > 0

    def purge_expired(self, now: datetime) -> int:
        removed = (
            self.db.query(AdminSession)
            .filter(AdminSession.expires_at <= now)
            .delete(synchronize_session=False)
        )
        self.db.flush()
        return removed
