import enum
import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import Boolean, CheckConstraint, DateTime, Enum, Numeric, String, Text, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.ext.hybrid import hybrid_property
from sqlalchemy.orm import Mapped, mapped_column

from offerdesk.db.base import Base
from offerdesk.services import margin
from offerdesk.services.customers import Customer, GuestCustomer, RegisteredCustomer


class OfferStatus(str, enum.Enum):
    pending = "pending"
    accepted = "accepted"
    rejected = "rejected"
    expired = "expired"


class Offer(Base):
    __tablename__ = "offers"
    __table_args__ = (
        CheckConstraint("product_price > 0", name="ck_offers_product_price_positive"),
        CheckConstraint("offered_price > 0 AND offered_price <= product_price", name="ck_offers_offered_price_range"),
    )

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    product_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False, index=True)
    product_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    product_reference: Mapped[str | None] = mapped_column(String(64), nullable=True)

    customer_id: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), nullable=True, index=True)
    customer_email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    customer_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    customer_phone: Mapped[str] = mapped_column(String(40), nullable=False)
    is_guest: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    offered_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    comments: Mapped[str | None] = mapped_column(String(500), nullable=True)

    status: Mapped[OfferStatus] = mapped_column(
        Enum(OfferStatus, native_enum=False),
        nullable=False,
        default=OfferStatus.pending,
        index=True,
    )
    within_margin: Mapped[bool] = mapped_column(Boolean, nullable=False)
    max_discount_allowed: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False)

    coupon_code: Mapped[str | None] = mapped_column(String(80), unique=True, nullable=True, index=True)
    coupon_used: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    coupon_used_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    reviewed_by: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), nullable=True)
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    review_notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    @hybrid_property
    def discount_percentage(self) -> Decimal | None:
        if self.product_price is None or self.offered_price is None:
            return None
        return margin.discount_percentage(Decimal(self.product_price), Decimal(self.offered_price))

    @discount_percentage.inplace.expression
    @classmethod
    def _discount_percentage_expression(cls):
        # Float literal keeps SQLite from truncating integer-valued numerics.
        return (cls.product_price - cls.offered_price) * 100.0 / cls.product_price

    @property
    def customer(self) -> Customer:
        if self.is_guest or self.customer_id is None:
            return GuestCustomer(email=self.customer_email, name=self.customer_name)
        return RegisteredCustomer(customer_id=self.customer_id, email=self.customer_email, name=self.customer_name)
