from __future__ import annotations

from datetime import datetime, timezone
import logging

from sqlalchemy import func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from offerdesk.models.offer import Offer, OfferStatus
from offerdesk.services.offer_errors import CouponAlreadyUsed, CouponInvalidState, CouponNotFound
from offerdesk.services.offer_state import OfferAction, source_status, transition

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def normalize_code(code: str | None) -> str:
    return (code or "").strip().upper()


async def get_offer_by_code(session: AsyncSession, *, code: str) -> Offer | None:
    cleaned = normalize_code(code)
    if not cleaned:
        return None
    res = await session.execute(select(Offer).where(Offer.coupon_code == cleaned))
    return res.scalar_one_or_none()


async def code_in_use(session: AsyncSession, *, code: str) -> bool:
    count = (await session.execute(select(func.count()).select_from(Offer).where(Offer.coupon_code == code))).scalar_one()
    return int(count) > 0


async def count_codes_with_base(session: AsyncSession, *, base: str) -> int:
    """Count issued codes equal to ``base`` or extending it with a ``-N`` disambiguator."""
    stmt = (
        select(func.count())
        .select_from(Offer)
        .where(or_(Offer.coupon_code == base, Offer.coupon_code.startswith(f"{base}-", autoescape=True)))
    )
    return int((await session.execute(stmt)).scalar_one())


def ensure_redeemable(offer: Offer | None) -> Offer:
    """Raise the error that explains why ``offer`` cannot be redeemed.

    Order matters: a used coupon reports ``CouponAlreadyUsed`` even though its
    offer has already moved to ``expired``.
    """
    if offer is None:
        raise CouponNotFound()
    if offer.coupon_used:
        raise CouponAlreadyUsed()
    if offer.status != source_status(OfferAction.redeem):
        raise CouponInvalidState(f"Coupon is not valid for an offer that is {OfferStatus(offer.status).value}")
    return offer


async def mark_used(session: AsyncSession, *, code: str) -> Offer:
    """Redeem ``code`` at most once.

    The status and ``coupon_used`` checks are part of the UPDATE itself, so of
    two concurrent callers only one can change the row; the other sees zero
    affected rows and gets the reason from a fresh read.
    """
    cleaned = normalize_code(code)
    if not cleaned:
        raise CouponNotFound()
    from_status = source_status(OfferAction.redeem)
    stmt = (
        update(Offer)
        .where(
            Offer.coupon_code == cleaned,
            Offer.status == from_status,
            Offer.coupon_used.is_(False),
        )
        .values(
            coupon_used=True,
            coupon_used_at=_now(),
            status=transition(from_status, OfferAction.redeem),
        )
        .execution_options(synchronize_session=False)
    )
    result = await session.execute(stmt)
    if result.rowcount != 1:
        await session.rollback()
        current = await get_offer_by_code(session, code=cleaned)
        if current is not None:
            await session.refresh(current)
        ensure_redeemable(current)
        # The row changed between the UPDATE and the re-read; report it as used.
        raise CouponAlreadyUsed()
    await session.commit()

    offer = await get_offer_by_code(session, code=cleaned)
    if offer is None:  # pragma: no cover - row was just updated
        raise CouponNotFound()
    await session.refresh(offer)
    logger.info("coupon redeemed", extra={"offer_id": str(offer.id), "coupon_code": cleaned})
    return offer
