"""
Account Database Models

- Profile: one per Supabase auth user (creators), carries approval state
- Admin: platform administrators with a local password
- SiteUser: guest account scoped to a single site
- GuestUser: platform-wide guest account
"""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import UUID

from amor_presente.db.models.base import Base


class Profile(Base):
    """
    A creator profile.

    The id is the Supabase auth user id; rows are created on sign-up.

    Attributes:
        approval_status: "pending", "approved" or "rejected"
        approved_at: set when an admin approves the creator
    """

    __tablename__ = "profiles"

    id = Column(UUID(as_uuid=True), primary_key=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=True)
    avatar_url = Column(Text, nullable=True)
    user_type = Column(String(20), nullable=False, default="creator")
    approval_status = Column(String(20), nullable=False, default="pending", index=True)
    approved_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<Profile {self.email} ({self.approval_status})>"


class Admin(Base):
    __tablename__ = "admins"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<Admin {self.email}>"


class SiteUser(Base):
    """Guest account that only exists inside one site."""

    __tablename__ = "site_users"
    __table_args__ = (UniqueConstraint("site_id", "email", name="uq_site_users_site_email"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    site_id = Column(
        UUID(as_uuid=True),
        ForeignKey("sites.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    email = Column(String(255), nullable=False)
    name = Column(String(255), nullable=False)
    password_hash = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)


class GuestUser(Base):
    __tablename__ = "guest_users"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    password_hash = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
