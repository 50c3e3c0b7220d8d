from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from emr.database import Base


# ---------------------------------------------------------------------------
# Shared columns
# ---------------------------------------------------------------------------
class EntityMixin:
    """Primary key plus the tenancy/audit columns every record carries."""

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    tenant_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True, index=True)
    created_by: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True)
    created_on: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    updated_by: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True)
    updated_on: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)


# Columns the service layer stamps itself; never taken from a payload.
SYSTEM_COLUMNS: frozenset[str] = frozenset(
    {"id", "tenant_id", "created_by", "created_on", "updated_by", "updated_on"}
)


# ---------------------------------------------------------------------------
# Reference data
# ---------------------------------------------------------------------------
class Currency(EntityMixin, Base):
    __tablename__ = "currencies"

    code: Mapped[Optional[str]] = mapped_column(String(10), nullable=True, index=True)
    name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    symbol: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    is_default: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True)


class Comorbidity(EntityMixin, Base):
    __tablename__ = "comorbidities"

    name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True, index=True)
    code: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class Uom(EntityMixin, Base):
    __tablename__ = "uoms"

    code: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)


class Generic(EntityMixin, Base):
    __tablename__ = "generics"

    item_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)


# ---------------------------------------------------------------------------
# Catalogue
# ---------------------------------------------------------------------------
class ProductCategory(EntityMixin, Base):
    __tablename__ = "product_categories"

    name: Mapped[Optional[str]] = mapped_column(String(150), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class Product(EntityMixin, Base):
    __tablename__ = "products"

    name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True, index=True)
    code: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    unit_price: Mapped[Optional[Decimal]] = mapped_column(Numeric(18, 2), nullable=True)
    is_active: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True)
    category_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("product_categories.id"), nullable=True, index=True
    )
    uom_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("uoms.id"), nullable=True
    )

    # Relationships: lazy="noload", services eager-load what they need
    category: Mapped[Optional["ProductCategory"]] = relationship(lazy="noload")
    uom: Mapped[Optional["Uom"]] = relationship(lazy="noload")


# ---------------------------------------------------------------------------
# Clinical
# ---------------------------------------------------------------------------
class Patient(EntityMixin, Base):
    __tablename__ = "patients"

    first_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    last_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True, index=True)
    date_of_birth: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    gender: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    medical_record_number: Mapped[Optional[str]] = mapped_column(
        String(50), nullable=True, unique=True
    )
    comorbidity_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("comorbidities.id"), nullable=True
    )

    comorbidity: Mapped[Optional["Comorbidity"]] = relationship(lazy="noload")


class Visit(EntityMixin, Base):
    __tablename__ = "visits"

    patient_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("patients.id"), nullable=True, index=True
    )
    visit_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    visit_type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)

    patient: Mapped[Optional["Patient"]] = relationship(lazy="noload")


class DayVisit(EntityMixin, Base):
    __tablename__ = "day_visits"

    patient_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("patients.id"), nullable=True, index=True
    )
    visit_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("visits.id"), nullable=True
    )
    visit_day: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    token_number: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    status: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)

    patient: Mapped[Optional["Patient"]] = relationship(lazy="noload")
    visit: Mapped[Optional["Visit"]] = relationship(lazy="noload")


# ---------------------------------------------------------------------------
# Billing
# ---------------------------------------------------------------------------
class Invoice(EntityMixin, Base):
    __tablename__ = "invoices"

    invoice_number: Mapped[Optional[str]] = mapped_column(String(50), nullable=True, index=True)
    invoice_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    patient_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("patients.id"), nullable=True, index=True
    )
    visit_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("visits.id"), nullable=True
    )
    day_visit_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("day_visits.id"), nullable=True
    )
    currency_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("currencies.id"), nullable=True
    )
    total_amount: Mapped[Optional[Decimal]] = mapped_column(Numeric(18, 2), nullable=True)
    status: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    patient: Mapped[Optional["Patient"]] = relationship(lazy="noload")
    visit: Mapped[Optional["Visit"]] = relationship(lazy="noload")
    day_visit: Mapped[Optional["DayVisit"]] = relationship(lazy="noload")
    currency: Mapped[Optional["Currency"]] = relationship(lazy="noload")


class InvoiceLine(EntityMixin, Base):
    __tablename__ = "invoice_lines"

    invoice_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("invoices.id", ondelete="CASCADE"), nullable=True, index=True
    )
    product_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("products.id"), nullable=True
    )
    description: Mapped[Optional[str]] = mapped_column(String(300), nullable=True)
    quantity: Mapped[Optional[Decimal]] = mapped_column(Numeric(18, 3), nullable=True)
    unit_price: Mapped[Optional[Decimal]] = mapped_column(Numeric(18, 2), nullable=True)
    amount: Mapped[Optional[Decimal]] = mapped_column(Numeric(18, 2), nullable=True)

    invoice: Mapped[Optional["Invoice"]] = relationship(lazy="noload")
    product: Mapped[Optional["Product"]] = relationship(lazy="noload")
