"""User profile and role models.

Accounts are created by the hosted auth provider; these tables mirror the
profile and role rows the API reads for authorization.
"""

from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import relationship
from datetime import datetime
import uuid

from clipdash.database import Base


ROLE_ADMIN = "admin"
ROLE_USER = "user"
ROLE_CLIENT = "client"
ROLES = (ROLE_ADMIN, ROLE_USER, ROLE_CLIENT)


class User(Base):
    """Profile of an authenticated user."""

    __tablename__ = "profiles"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    email = Column(String(255), unique=True, nullable=False, index=True)
    username = Column(String(100), index=True)
    full_name = Column(String(255))
    avatar_url = Column(String(500))

    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    role_entry = relationship("UserRole", back_populates="user", uselist=False, cascade="all, delete-orphan")
    instagram_accounts = relationship("InstagramAccount", back_populates="user", cascade="all, delete-orphan")
    tiktok_accounts = relationship("TikTokAccount", back_populates="user", cascade="all, delete-orphan")
    youtube_accounts = relationship("YouTubeAccount", back_populates="user", cascade="all, delete-orphan")

    @property
    def role(self) -> str:
        """Role name, defaulting to a regular creator."""
        return self.role_entry.role if self.role_entry else ROLE_USER

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    @property
    def is_client(self) -> bool:
        return self.role == ROLE_CLIENT

    def __repr__(self):
        return f"<User(id={self.id}, username={self.username}, email={self.email})>"


class UserRole(Base):
    """Role assignment (admin, user or client)."""

    __tablename__ = "user_roles"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), unique=True, nullable=False, index=True)
    role = Column(String(20), nullable=False, default=ROLE_USER)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    user = relationship("User", back_populates="role_entry")

    def __repr__(self):
        return f"<UserRole(user_id={self.user_id}, role='{self.role}')>"
