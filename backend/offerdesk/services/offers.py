from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
import logging
from typing import Any
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from offerdesk.core import metrics
from offerdesk.core.config import settings
from offerdesk.models.offer import Offer, OfferStatus
from offerdesk.schemas.offer import CouponView, OfferStats, OfferStatusStats
from offerdesk.services import coupons, margin, offer_state
from offerdesk.services.catalog import ProductCatalog, ProductSnapshot
from offerdesk.services.coupon_codes import CouponContext, generate_coupon_code
from offerdesk.services.customers import Customer, GuestCustomer, RegisteredCustomer, normalize_customer
from offerdesk.services.offer_errors import (
    CouponCodeUnavailable,
    IllegalTransition,
    InvalidPrice,
    OfferNotFound,
    ProductNotFound,
)
from offerdesk.services.offer_events import (
    CouponRedeemed,
    OfferAcceptedManually,
    OfferAutoAccepted,
    OfferEvent,
    OfferQueued,
    OfferRejected,
    fallback_product,
    snapshot_offer,
)
from offerdesk.services.offer_state import OfferAction

logger = logging.getLogger(__name__)

MAX_COMMENTS_LENGTH = 500


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class OfferRequest:
    product_id: UUID
    offered_price: Decimal
    customer: Customer
    phone: str | None
    comments: str | None = None


@dataclass(frozen=True)
class OfferOutcome:
    """Committed offer plus the events its transition produced."""

    offer: Offer
    events: tuple[OfferEvent, ...]


async def _next_coupon_code(
    session: AsyncSession,
    *,
    product_reference: str | None,
    product_id: UUID,
    customer: Customer,
    attempt: int,
) -> str | None:
    context = CouponContext(product_id=product_id, attempt=attempt, guest_suffix_length=settings.guest_suffix_length)
    candidate = generate_coupon_code(product_reference, customer, context)
    if await coupons.code_in_use(session, code=candidate):
        metrics.record_coupon_code_collision()
        logger.info("coupon code already taken, retrying", extra={"attempt": attempt})
        return None
    return candidate


async def _first_attempt(
    session: AsyncSession,
    *,
    product_reference: str | None,
    product_id: UUID,
    customer: Customer,
) -> int:
    """Attempt index of the first registered-customer code not issued yet.

    Guest suffixes are random, so guests always start at zero.
    """
    if not isinstance(customer, RegisteredCustomer):
        return 0
    base = generate_coupon_code(product_reference, customer, CouponContext(product_id=product_id))
    return await coupons.count_codes_with_base(session, base=base)


async def _product_for(offer: Offer, catalog: ProductCatalog | None) -> ProductSnapshot:
    if catalog is not None:
        product = await catalog.get_product(offer.product_id)
        if product is not None:
            return product
    return fallback_product(offer)


def _build_offer(
    *,
    request: OfferRequest,
    customer: Customer,
    phone: str,
    offered_price: Decimal,
    product: ProductSnapshot,
    verdict: margin.MarginVerdict,
    coupon_code: str | None,
) -> Offer:
    comments = (request.comments or "").strip()[:MAX_COMMENTS_LENGTH] or None
    return Offer(
        product_id=product.id,
        product_price=product.price,
        product_reference=product.reference,
        customer_id=customer.customer_id if isinstance(customer, RegisteredCustomer) else None,
        customer_email=customer.email,
        customer_name=customer.name,
        customer_phone=phone,
        is_guest=isinstance(customer, GuestCustomer),
        offered_price=offered_price,
        comments=comments,
        status=offer_state.initial_status(within_margin=verdict.within_margin),
        within_margin=verdict.within_margin,
        max_discount_allowed=verdict.max_discount_percent,
        coupon_code=coupon_code,
        coupon_used=False,
    )


async def create_offer(
    session: AsyncSession,
    *,
    request: OfferRequest,
    max_discount_percent: Decimal,
    catalog: ProductCatalog,
) -> OfferOutcome:
    customer, phone = normalize_customer(request.customer, request.phone)
    if Decimal(request.offered_price) <= 0:
        raise InvalidPrice("Offered price must be greater than 0")

    product = await catalog.get_product(request.product_id)
    if product is None:
        raise ProductNotFound()

    offered_price = margin.check_offered_price(product.price, request.offered_price)
    verdict = margin.evaluate(product.price, offered_price, max_discount_percent)
    attempts = settings.coupon_code_max_attempts if verdict.within_margin else 1
    first = 0
    if verdict.within_margin:
        first = await _first_attempt(
            session, product_reference=product.reference, product_id=product.id, customer=customer
        )

    for attempt in range(first, first + attempts):
        code: str | None = None
        if verdict.within_margin:
            code = await _next_coupon_code(
                session,
                product_reference=product.reference,
                product_id=product.id,
                customer=customer,
                attempt=attempt,
            )
            if code is None:
                continue

        offer = _build_offer(
            request=request,
            customer=customer,
            phone=phone,
            offered_price=offered_price,
            product=product,
            verdict=verdict,
            coupon_code=code,
        )
        session.add(offer)
        try:
            await session.commit()
        except IntegrityError:
            await session.rollback()
            if code is None:
                raise
            metrics.record_coupon_code_collision()
            logger.warning("coupon code collided on insert", extra={"attempt": attempt})
            continue

        await session.refresh(offer)
        metrics.record_offer_created(offer.status.value)
        logger.info(
            "offer created",
            extra={
                "offer_id": str(offer.id),
                "offer_status": offer.status.value,
                "discount_percentage": str(margin.quantize_percentage(verdict.discount_percentage)),
            },
        )
        event_cls = OfferAutoAccepted if offer.status == OfferStatus.accepted else OfferQueued
        return OfferOutcome(offer=offer, events=(event_cls(offer=snapshot_offer(offer), product=product),))

    raise CouponCodeUnavailable()


async def get_offer(session: AsyncSession, *, offer_id: UUID) -> Offer:
    offer = await session.get(Offer, offer_id)
    if offer is None:
        raise OfferNotFound()
    return offer


async def _apply_transition(
    session: AsyncSession,
    *,
    offer: Offer,
    action: OfferAction,
    values: dict[str, Any],
) -> None:
    """Apply ``action`` with a single conditional UPDATE on the source status.

    Zero affected rows means another transition won the race; the offer is
    re-read and the resulting ``IllegalTransition`` reports its real status.
    """
    from_status = offer_state.source_status(action)
    stmt = (
        update(Offer)
        .where(Offer.id == offer.id, Offer.status == from_status)
        .values(status=offer_state.transition(from_status, action), **values)
        .execution_options(synchronize_session=False)
    )
    result = await session.execute(stmt)
    if result.rowcount != 1:
        await session.rollback()
        await session.refresh(offer)
        raise IllegalTransition(OfferStatus(offer.status).value, action.value)
    await session.commit()
    await session.refresh(offer)


async def accept_manually(
    session: AsyncSession,
    *,
    offer_id: UUID,
    admin_id: UUID,
    notes: str | None,
    catalog: ProductCatalog | None = None,
) -> OfferOutcome:
    offer = await get_offer(session, offer_id=offer_id)
    offer_state.transition(offer.status, OfferAction.accept)

    customer = offer.customer
    first = await _first_attempt(
        session, product_reference=offer.product_reference, product_id=offer.product_id, customer=customer
    )
    for attempt in range(first, first + settings.coupon_code_max_attempts):
        code = await _next_coupon_code(
            session,
            product_reference=offer.product_reference,
            product_id=offer.product_id,
            customer=customer,
            attempt=attempt,
        )
        if code is None:
            continue
        values = {"coupon_code": code, "reviewed_by": admin_id, "reviewed_at": _now(), "review_notes": notes}
        try:
            await _apply_transition(session, offer=offer, action=OfferAction.accept, values=values)
        except IntegrityError:
            await session.rollback()
            await session.refresh(offer)
            metrics.record_coupon_code_collision()
            logger.warning("coupon code collided on accept", extra={"offer_id": str(offer_id), "attempt": attempt})
            continue
        break
    else:
        raise CouponCodeUnavailable()

    metrics.record_offer_reviewed(offer.status.value)
    logger.info("offer accepted manually", extra={"offer_id": str(offer.id), "admin_id": str(admin_id)})
    product = await _product_for(offer, catalog)
    return OfferOutcome(offer=offer, events=(OfferAcceptedManually(offer=snapshot_offer(offer), product=product),))


async def reject(
    session: AsyncSession,
    *,
    offer_id: UUID,
    admin_id: UUID,
    notes: str | None,
    catalog: ProductCatalog | None = None,
) -> OfferOutcome:
    offer = await get_offer(session, offer_id=offer_id)
    offer_state.transition(offer.status, OfferAction.reject)

    values = {"reviewed_by": admin_id, "reviewed_at": _now(), "review_notes": notes}
    await _apply_transition(session, offer=offer, action=OfferAction.reject, values=values)

    metrics.record_offer_reviewed(offer.status.value)
    logger.info("offer rejected", extra={"offer_id": str(offer.id), "admin_id": str(admin_id)})
    product = await _product_for(offer, catalog)
    return OfferOutcome(offer=offer, events=(OfferRejected(offer=snapshot_offer(offer), product=product),))


async def validate_coupon(session: AsyncSession, *, code: str, catalog: ProductCatalog | None = None) -> CouponView:
    offer = coupons.ensure_redeemable(await coupons.get_offer_by_code(session, code=code))
    product = await _product_for(offer, catalog)
    return CouponView(
        coupon_code=offer.coupon_code or "",
        product_id=offer.product_id,
        product_reference=offer.product_reference,
        product_title=product.title,
        product_price=offer.product_price,
        offered_price=offer.offered_price,
        discount_percentage=margin.quantize_percentage(offer.discount_percentage),
    )


async def redeem_coupon(session: AsyncSession, *, code: str, catalog: ProductCatalog | None = None) -> OfferOutcome:
    offer = await coupons.mark_used(session, code=code)
    metrics.record_coupon_redeemed()
    product = await _product_for(offer, catalog)
    return OfferOutcome(offer=offer, events=(CouponRedeemed(offer=snapshot_offer(offer), product=product),))


async def offer_stats(session: AsyncSession) -> OfferStats:
    rows = (
        await session.execute(
            select(Offer.status, func.count(), func.avg(Offer.discount_percentage)).group_by(Offer.status).order_by(Offer.status)
        )
    ).all()
    by_status = [
        OfferStatusStats(
            status=row_status,
            count=int(count),
            avg_discount=margin.quantize_percentage(Decimal(str(avg))) if avg is not None else None,
        )
        for row_status, count, avg in rows
    ]
    within = int(
        (await session.execute(select(func.count()).select_from(Offer).where(Offer.within_margin.is_(True)))).scalar_one()
    )
    total = sum(item.count for item in by_status)
    return OfferStats(total=total, within_margin=within, outside_margin=total - within, by_status=by_status)
