"""
Admin model with secure password storage.
"""

from sqlalchemy import Column, String, Boolean

from ticketing.db.base import Base, TimestampMixin, new_id


class Admin(Base, TimestampMixin):
    __tablename__ = "admins"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    is_admin = Column(Boolean, default=True, nullable=False)

    def __repr__(self) -> str:
        return f"<Admin(id={self.id}, email={self.email})>"
