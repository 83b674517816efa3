"""
userpatch/models/user.py

Represents a user record. 'id' and 'email' are fixed when the row is created;
every other column may be changed through PUT or PATCH.
"""

from __future__ import annotations
from typing import Optional
from sqlalchemy import Boolean, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from userpatch.constants import (
    DEFAULT_ROLE,
    EMAIL_MAX_LENGTH,
    NAME_MAX_LENGTH,
    PHONE_MAX_LENGTH,
    ROLE_MAX_LENGTH,
)
from userpatch.database import Base


class User(Base):
    """
    The main user table. Each user has:
      - An ID (PK)
      - A unique email, set once at creation
      - Profile fields (name, age, phone, bio)
      - Status fields (active, role, score)
    """

    __tablename__ = "users"

    # Primary key
    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)

    name: Mapped[str] = mapped_column(String(NAME_MAX_LENGTH), nullable=False)

    # Unique and immutable
    email: Mapped[str] = mapped_column(String(EMAIL_MAX_LENGTH), unique=True, index=True, nullable=False)

    age: Mapped[int] = mapped_column(Integer, nullable=False)

    # The only column that can hold NULL
    phone: Mapped[Optional[str]] = mapped_column(String(PHONE_MAX_LENGTH), nullable=True)

    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    bio: Mapped[str] = mapped_column(Text, nullable=False, default="")

    # One of constants.USER_ROLES, or "" once cleared
    role: Mapped[str] = mapped_column(String(ROLE_MAX_LENGTH), nullable=False, default=DEFAULT_ROLE)

    score: Mapped[float] = mapped_column(Numeric(10, 2, asdecimal=False), nullable=False, default=0.0)

    def __repr__(self) -> str:
        """
        String representation for debugging, showing user ID and email.
        """
        return f"<User(id={self.id}, email={self.email})>"
