from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Annotated, Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from offerdesk.models.offer import OfferStatus


class RegisteredCustomerIn(BaseModel):
    kind: Literal["registered"] = "registered"
    customer_id: UUID
    email: EmailStr
    name: str | None = Field(default=None, max_length=255)


class GuestCustomerIn(BaseModel):
    kind: Literal["guest"] = "guest"
    email: str = Field(default="", max_length=255)
    name: str | None = Field(default=None, max_length=255)


class OfferCreate(BaseModel):
    product_id: UUID
    offered_price: Decimal = Field(decimal_places=2)
    phone: str = Field(default="", max_length=40)
    comments: str | None = Field(default=None, max_length=500)
    customer: Annotated[RegisteredCustomerIn | GuestCustomerIn, Field(discriminator="kind")]


class OfferReview(BaseModel):
    notes: str | None = Field(default=None, max_length=2000)


class OfferRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    product_id: UUID
    product_price: Decimal
    product_reference: str | None = None
    customer_id: UUID | None = None
    customer_email: str
    customer_name: str | None = None
    customer_phone: str
    is_guest: bool
    offered_price: Decimal
    discount_percentage: Decimal
    comments: str | None = None
    status: OfferStatus
    within_margin: bool
    max_discount_allowed: Decimal
    coupon_code: str | None = None
    coupon_used: bool
    coupon_used_at: datetime | None = None
    reviewed_by: UUID | None = None
    reviewed_at: datetime | None = None
    review_notes: str | None = None
    created_at: datetime | None = None


class OfferCreated(BaseModel):
    id: UUID
    status: OfferStatus
    discount_percentage: Decimal
    coupon_code: str | None = None
    message: str


class CouponView(BaseModel):
    valid: bool = True
    coupon_code: str
    product_id: UUID
    product_reference: str | None = None
    product_title: str | None = None
    product_price: Decimal
    offered_price: Decimal
    discount_percentage: Decimal


class OfferStatusStats(BaseModel):
    status: OfferStatus
    count: int
    avg_discount: Decimal | None = None


class OfferStats(BaseModel):
    total: int
    within_margin: int
    outside_margin: int
    by_status: list[OfferStatusStats]
