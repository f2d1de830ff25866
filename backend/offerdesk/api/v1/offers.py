from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from offerdesk.core.config import settings
from offerdesk.core.dependencies import get_catalog, require_admin
from offerdesk.db.session import get_session
from offerdesk.models.offer import OfferStatus
from offerdesk.schemas.offer import (
    CouponView,
    OfferCreate,
    OfferCreated,
    OfferRead,
    OfferReview,
    OfferStats,
    RegisteredCustomerIn,
)
from offerdesk.services import offers as offers_service
from offerdesk.services.catalog import SqlProductCatalog
from offerdesk.services.customers import Customer, GuestCustomer, RegisteredCustomer
from offerdesk.services.margin import quantize_percentage
from offerdesk.services.notifications import dispatcher


router = APIRouter(prefix="/offers", tags=["offers"])


def _customer_from_payload(payload: OfferCreate) -> Customer:
    customer = payload.customer
    if isinstance(customer, RegisteredCustomerIn):
        return RegisteredCustomer(customer_id=customer.customer_id, email=str(customer.email), name=customer.name)
    return GuestCustomer(email=customer.email, name=customer.name)


def _schedule(background_tasks: BackgroundTasks, outcome: offers_service.OfferOutcome) -> None:
    if outcome.events:
        background_tasks.add_task(dispatcher.dispatch, outcome.events)


@router.post("", response_model=OfferCreated, status_code=status.HTTP_201_CREATED)
async def create_offer(
    payload: OfferCreate,
    background_tasks: BackgroundTasks,
    session: AsyncSession = Depends(get_session),
    catalog: SqlProductCatalog = Depends(get_catalog),
) -> OfferCreated:
    outcome = await offers_service.create_offer(
        session,
        request=offers_service.OfferRequest(
            product_id=payload.product_id,
            offered_price=payload.offered_price,
            customer=_customer_from_payload(payload),
            phone=payload.phone,
            comments=payload.comments,
        ),
        max_discount_percent=settings.max_discount_percent,
        catalog=catalog,
    )
    _schedule(background_tasks, outcome)
    offer = outcome.offer
    if offer.status == OfferStatus.accepted:
        message = "Your offer has been accepted! Check your email for your discount code."
    else:
        message = "Your offer has been sent. We will get back to you soon."
    return OfferCreated(
        id=offer.id,
        status=offer.status,
        discount_percentage=quantize_percentage(offer.discount_percentage),
        coupon_code=offer.coupon_code,
        message=message,
    )


@router.get("/stats", response_model=OfferStats)
async def offer_stats(
    session: AsyncSession = Depends(get_session),
    _: UUID = Depends(require_admin),
) -> OfferStats:
    return await offers_service.offer_stats(session)


@router.get("/coupon/{code}", response_model=CouponView)
async def validate_coupon(
    code: str,
    session: AsyncSession = Depends(get_session),
    catalog: SqlProductCatalog = Depends(get_catalog),
) -> CouponView:
    return await offers_service.validate_coupon(session, code=code, catalog=catalog)


@router.post("/coupon/{code}/use", response_model=OfferRead)
async def use_coupon(
    code: str,
    background_tasks: BackgroundTasks,
    session: AsyncSession = Depends(get_session),
    catalog: SqlProductCatalog = Depends(get_catalog),
) -> OfferRead:
    outcome = await offers_service.redeem_coupon(session, code=code, catalog=catalog)
    _schedule(background_tasks, outcome)
    return OfferRead.model_validate(outcome.offer, from_attributes=True)


@router.get("/{offer_id}", response_model=OfferRead)
async def get_offer(
    offer_id: UUID,
    session: AsyncSession = Depends(get_session),
    _: UUID = Depends(require_admin),
) -> OfferRead:
    offer = await offers_service.get_offer(session, offer_id=offer_id)
    return OfferRead.model_validate(offer, from_attributes=True)


@router.put("/{offer_id}/accept", response_model=OfferRead)
async def accept_offer(
    offer_id: UUID,
    payload: OfferReview,
    background_tasks: BackgroundTasks,
    session: AsyncSession = Depends(get_session),
    catalog: SqlProductCatalog = Depends(get_catalog),
    admin_id: UUID = Depends(require_admin),
) -> OfferRead:
    outcome = await offers_service.accept_manually(
        session, offer_id=offer_id, admin_id=admin_id, notes=payload.notes, catalog=catalog
    )
    _schedule(background_tasks, outcome)
    return OfferRead.model_validate(outcome.offer, from_attributes=True)


@router.put("/{offer_id}/reject", response_model=OfferRead)
async def reject_offer(
    offer_id: UUID,
    payload: OfferReview,
    background_tasks: BackgroundTasks,
    session: AsyncSession = Depends(get_session),
    catalog: SqlProductCatalog = Depends(get_catalog),
    admin_id: UUID = Depends(require_admin),
) -> OfferRead:
    outcome = await offers_service.reject(session, offer_id=offer_id, admin_id=admin_id, notes=payload.notes, catalog=catalog)
    _schedule(background_tasks, outcome)
    return OfferRead.model_validate(outcome.offer, from_attributes=True)
