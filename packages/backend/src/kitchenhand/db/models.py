"""SQLAlchemy ORM models — single source of truth for the database schema.

Learn: Declarative ORM mapping with SQLAlchemy 2.0 style (Mapped[] + mapped_column).
Each class = one table. Alembic migrations mirror these models.

Key concepts:
- UUID primary keys, generated client-side (uuid4)
- picture_url columns hold an opaque URL returned by upload storage
  ("" when no image was uploaded)
- CHECK constraints pin prep_type and shift to their fixed vocabularies
- server_default for DB-level defaults (work even for raw SQL inserts)
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
    func,
    true,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

PREP_TYPES = ("fruit", "bread", "veg", "meat", "seafood")
SHIFTS = ("brekkie", "lunch", "both")


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_uuid() -> uuid.UUID:
    return uuid.uuid4()


class Product(Base):
    """A stocked item: who supplies it, where it lives, how to handle it."""

    __tablename__ = "products"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=new_uuid)
    supplier_name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    product_name: Mapped[str] = mapped_column(String(255), nullable=False)
    location: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    picture_url: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    description: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=utcnow
    )


class Preparation(Base):
    """A food-prep procedure with an overview and ordered steps.

    Learn: `steps` is the free-text summary typed into the form; the
    structured, per-step rows (each with its own optional picture) live
    in preparation_steps.
    """

    __tablename__ = "preparations"
    __table_args__ = (
        CheckConstraint(
            "prep_type IN ('fruit', 'bread', 'veg', 'meat', 'seafood')",
            name="ck_preparations_prep_type",
        ),
        CheckConstraint(
            "shift IN ('brekkie', 'lunch', 'both')",
            name="ck_preparations_shift",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=new_uuid)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    prep_type: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    shift: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    location: Mapped[str] = mapped_column(String(255), nullable=False)
    picture_url: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    steps: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=utcnow
    )

    step_rows: Mapped[list["PreparationStep"]] = relationship(
        back_populates="preparation",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="PreparationStep.step_number",
    )


class PreparationStep(Base):
    """One numbered step of a preparation."""

    __tablename__ = "preparation_steps"
    __table_args__ = (
        UniqueConstraint("preparation_id", "step_number", name="uq_preparation_steps_number"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=new_uuid)
    preparation_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("preparations.id", ondelete="CASCADE"), nullable=False, index=True
    )
    step_number: Mapped[int] = mapped_column(Integer, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    picture_url: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )

    preparation: Mapped["Preparation"] = relationship(back_populates="step_rows")


class User(Base):
    """A staff member who can log in and edit the catalog."""

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=new_uuid)
    username: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=true()
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=utcnow
    )
