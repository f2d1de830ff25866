from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable
import logging

from offerdesk.core import metrics
from offerdesk.services import email as email_service
from offerdesk.services.offer_events import (
    CouponRedeemed,
    OfferAcceptedManually,
    OfferAutoAccepted,
    OfferEvent,
    OfferQueued,
    OfferRejected,
)

logger = logging.getLogger(__name__)

Sender = Callable[[OfferEvent], Awaitable[bool]]


async def _customer_accepted(event: OfferEvent) -> bool:
    return await email_service.send_offer_accepted(event.offer, event.product)


async def _customer_received(event: OfferEvent) -> bool:
    return await email_service.send_offer_received(event.offer, event.product)


async def _customer_rejected(event: OfferEvent) -> bool:
    return await email_service.send_offer_rejected(event.offer, event.product)


def _admin_notice(headline: str) -> Sender:
    async def _send(event: OfferEvent) -> bool:
        return await email_service.send_admin_offer_notice(event.offer, event.product, headline=headline)

    return _send


ROUTES: dict[type[OfferEvent], tuple[Sender, ...]] = {
    OfferAutoAccepted: (_customer_accepted, _admin_notice("Offer accepted automatically (within margin)")),
    OfferQueued: (_admin_notice("Offer needs review (outside margin)"), _customer_received),
    OfferAcceptedManually: (_customer_accepted,),
    OfferRejected: (_customer_rejected,),
    CouponRedeemed: (_admin_notice("Offer coupon redeemed"),),
}


class NotificationDispatcher:
    """Delivers notifications for committed offer transitions.

    Delivery is best-effort: a failing sender is logged and counted, and the
    remaining senders still run. Nothing here raises back to the caller.
    """

    def __init__(self, routes: dict[type[OfferEvent], tuple[Sender, ...]] | None = None) -> None:
        self.routes = routes if routes is not None else ROUTES

    async def dispatch(self, events: Iterable[OfferEvent]) -> int:
        failures = 0
        for event in events:
            senders = self.routes.get(type(event), ())
            if not senders:
                logger.warning("No notification route for event", extra={"event": event.name})
            for sender in senders:
                try:
                    await sender(event)
                except Exception:
                    failures += 1
                    metrics.record_notification_failure()
                    logger.exception(
                        "Notification delivery failed",
                        extra={"event": event.name, "offer_id": str(event.offer.id)},
                    )
        return failures


dispatcher = NotificationDispatcher()
