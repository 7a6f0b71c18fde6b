"""ORM Models for the furniture configurator — SQLAlchemy 2.0"""
import uuid
from datetime import datetime
from typing import Optional
from sqlalchemy import (
    String, Text, Boolean, Integer, Numeric, DateTime,
    ForeignKey, UniqueConstraint, Index
)
from sqlalchemy.dialects.postgresql import UUID, JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func
from app.db import Base


def gen_uuid():
    return str(uuid.uuid4())


# ── CATALOG ───────────────────────────────────────────────────────────────────
class ProductType(Base):
    __tablename__ = "product_types"
    id: Mapped[str] = mapped_column(UUID(as_uuid=False), primary_key=True, default=gen_uuid)
    name: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)   # kitchen | wardrobe
    display_name: Mapped[str] = mapped_column(String(255), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    categories: Mapped[list["OptionCategory"]] = relationship(
        "OptionCategory", back_populates="product_type", order_by="OptionCategory.step_order"
    )
    order_requests: Mapped[list["OrderRequest"]] = relationship("OrderRequest", back_populates="product_type")


class OptionCategory(Base):
    __tablename__ = "option_categories"
    __table_args__ = (
        UniqueConstraint("product_type_id", "name", name="uq_option_category_name"),
        Index("ix_option_categories_step", "product_type_id", "step_order"),
    )
    id: Mapped[str] = mapped_column(UUID(as_uuid=False), primary_key=True, default=gen_uuid)
    product_type_id: Mapped[str] = mapped_column(UUID(as_uuid=False), ForeignKey("product_types.id"), nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)       # selections key
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    step_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_required: Mapped[bool] = mapped_column(Boolean, default=True)
    allows_multiple: Mapped[bool] = mapped_column(Boolean, default=False)
    # admin-configured {"showIf": [...], "hideIf": [...]}
    conditional_display: Mapped[Optional[dict]] = mapped_column(JSONB)
    status: Mapped[str] = mapped_column(String(50), default="active")   # active | archived
    product_type: Mapped["ProductType"] = relationship("ProductType", back_populates="categories")
    options: Mapped[list["OptionValue"]] = relationship(
        "OptionValue", back_populates="category", order_by="OptionValue.display_order"
    )


class OptionValue(Base):
    __tablename__ = "option_values"
    id: Mapped[str] = mapped_column(UUID(as_uuid=False), primary_key=True, default=gen_uuid)
    category_id: Mapped[str] = mapped_column(UUID(as_uuid=False), ForeignKey("option_categories.id"), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    image_url: Mapped[Optional[str]] = mapped_column(Text)
    price_factor: Mapped[Optional[float]] = mapped_column(Numeric(6, 3), default=1.0)
    specifications: Mapped[Optional[dict]] = mapped_column(JSONB)
    display_order: Mapped[int] = mapped_column(Integer, default=0)
    is_available: Mapped[bool] = mapped_column(Boolean, default=True)
    category: Mapped["OptionCategory"] = relationship("OptionCategory", back_populates="options")


# ── ORDER REQUESTS ────────────────────────────────────────────────────────────
class OrderRequest(Base):
    __tablename__ = "order_requests"
    id: Mapped[str] = mapped_column(UUID(as_uuid=False), primary_key=True, default=gen_uuid)
    product_type_id: Mapped[str] = mapped_column(UUID(as_uuid=False), ForeignKey("product_types.id"), nullable=False)
    status: Mapped[str] = mapped_column(String(50), default="SUBMITTED")
    client_data: Mapped[dict] = mapped_column(JSONB, nullable=False)
    # {"productType": ..., "selections": {...}, "notes": ...}
    configuration_data: Mapped[dict] = mapped_column(JSONB, nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text)
    created_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    submitted_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    product_type: Mapped["ProductType"] = relationship("ProductType", back_populates="order_requests")
