from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# --- Filtering ---

class FilterOperator(str, Enum):
    EQUAL = "Equal"
    NOT_EQUAL = "NotEqual"
    GREATER_THAN = "GreaterThan"
    GREATER_THAN_OR_EQUAL = "GreaterThanOrEqual"
    LESS_THAN = "LessThan"
    LESS_THAN_OR_EQUAL = "LessThanOrEqual"
    CONTAINS = "Contains"
    STARTS_WITH = "StartsWith"
    ENDS_WITH = "EndsWith"
    IN = "In"
    IS_NULL = "IsNull"
    IS_NOT_NULL = "IsNotNull"


class FilterCriterion(BaseModel):
    """One ``{"PropertyName", "Operator", "Value"}`` filter clause."""

    property_name: str = Field(alias="PropertyName")
    operator: FilterOperator = Field(FilterOperator.EQUAL, alias="Operator")
    value: Any = Field(None, alias="Value")

    model_config = ConfigDict(populate_by_name=True)


# --- Entities ---
#
# Every field is optional: payloads may leave any column out, and the
# same schema is used to serialise list results.

class EntitySchema(BaseModel):
    id: uuid.UUID | None = None
    tenant_id: uuid.UUID | None = None
    created_by: uuid.UUID | None = None
    created_on: datetime | None = None
    updated_by: uuid.UUID | None = None
    updated_on: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class CurrencySchema(EntitySchema):
    code: str | None = Field(None, max_length=10)
    name: str | None = Field(None, max_length=100)
    symbol: str | None = Field(None, max_length=10)
    is_default: bool | None = None


class ComorbiditySchema(EntitySchema):
    name: str | None = Field(None, max_length=200)
    code: str | None = Field(None, max_length=20)
    description: str | None = None


class UomSchema(EntitySchema):
    code: str | None = Field(None, max_length=20)
    name: str | None = Field(None, max_length=100)


class GenericSchema(EntitySchema):
    item_name: str | None = Field(None, max_length=200)


class ProductCategorySchema(EntitySchema):
    name: str | None = Field(None, max_length=150)
    description: str | None = None


class ProductSchema(EntitySchema):
    name: str | None = Field(None, max_length=200)
    code: str | None = Field(None, max_length=50)
    description: str | None = None
    unit_price: Decimal | None = None
    is_active: bool | None = None
    category_id: uuid.UUID | None = None
    uom_id: uuid.UUID | None = None


class PatientSchema(EntitySchema):
    first_name: str | None = Field(None, max_length=100)
    last_name: str | None = Field(None, max_length=100)
    date_of_birth: date | None = None
    gender: str | None = Field(None, max_length=20)
    email: str | None = Field(None, max_length=255)
    phone: str | None = Field(None, max_length=30)
    medical_record_number: str | None = Field(None, max_length=50)
    comorbidity_id: uuid.UUID | None = None


class VisitSchema(EntitySchema):
    patient_id: uuid.UUID | None = None
    visit_date: datetime | None = None
    visit_type: str | None = Field(None, max_length=50)
    reason: str | None = None
    status: str | None = Field(None, max_length=30)


class DayVisitSchema(EntitySchema):
    patient_id: uuid.UUID | None = None
    visit_id: uuid.UUID | None = None
    visit_day: date | None = None
    token_number: int | None = None
    status: str | None = Field(None, max_length=30)


class InvoiceSchema(EntitySchema):
    invoice_number: str | None = Field(None, max_length=50)
    invoice_date: date | None = None
    patient_id: uuid.UUID | None = None
    visit_id: uuid.UUID | None = None
    day_visit_id: uuid.UUID | None = None
    currency_id: uuid.UUID | None = None
    total_amount: Decimal | None = None
    status: str | None = Field(None, max_length=30)
    notes: str | None = None


class InvoiceLineSchema(EntitySchema):
    invoice_id: uuid.UUID | None = None
    product_id: uuid.UUID | None = None
    description: str | None = Field(None, max_length=300)
    quantity: Decimal | None = None
    unit_price: Decimal | None = None
    amount: Decimal | None = None


# --- Responses ---

class IdResponse(BaseModel):
    id: uuid.UUID


class StatusResponse(BaseModel):
    status: bool


class MetricsResponse(BaseModel):
    entities: dict[str, int]
    total_rows: int
