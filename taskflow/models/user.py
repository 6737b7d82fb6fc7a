"""User model."""

from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Integer, String
from sqlalchemy.orm import deferred

from taskflow.database import Base

ROLE_USER = "user"
ROLE_ADMIN = "admin"
ROLES = (ROLE_USER, ROLE_ADMIN)


class User(Base):
    """Application user.

    ``password_hash`` and ``refresh_token`` are deferred: a plain query never
    loads them, callers that need them must ask explicitly.
    """

    __tablename__ = "user"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(50), nullable=False)
    email = Column(String(256), unique=True, nullable=False, index=True)
    password_hash = deferred(Column(String(256), nullable=False))
    role = Column(String(16), nullable=False, default=ROLE_USER)
    is_active = Column(Boolean, nullable=False, default=True)
    refresh_token = deferred(Column(String(1024), nullable=True))
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
