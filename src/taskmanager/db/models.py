"""SQLAlchemy ORM models — single source of truth for the database schema.

Learn: Declarative ORM mapping with SQLAlchemy 2.0 style (Mapped[] + mapped_column).
Each class = one table. Alembic migrations are generated from these models.

Two tables:
- users: the credential store, keyed by a unique email
- tasks: owned by a user through user_email; every task query is
  filtered on it, so ownership doubles as an existence check

Only portable column types are used so the same models run on
PostgreSQL (production) and SQLite (tests).
"""

from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """A registered user. The email is the identity carried in tokens."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), default=utcnow
    )

    tasks: Mapped[list["Task"]] = relationship(back_populates="owner")


# Largest id an Integer (int4) primary key can hold
MAX_TASK_ID = 2**31 - 1


class Task(Base):
    """A to-do item belonging to exactly one user."""

    __tablename__ = "tasks"
    __table_args__ = (
        Index("idx_tasks_user_email", "user_email"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    user_email: Mapped[str] = mapped_column(
        String(255), ForeignKey("users.email"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), default=utcnow
    )

    owner: Mapped["User"] = relationship(back_populates="tasks")
