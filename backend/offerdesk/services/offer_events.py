from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

from offerdesk.models.offer import Offer
from offerdesk.schemas.offer import OfferRead
from offerdesk.services.catalog import ProductSnapshot


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class OfferEvent:
    offer: OfferRead
    product: ProductSnapshot
    occurred_at: datetime = field(default_factory=_now)

    @property
    def name(self) -> str:
        return type(self).__name__


@dataclass(frozen=True)
class OfferAutoAccepted(OfferEvent):
    pass


@dataclass(frozen=True)
class OfferQueued(OfferEvent):
    pass


@dataclass(frozen=True)
class OfferAcceptedManually(OfferEvent):
    pass


@dataclass(frozen=True)
class OfferRejected(OfferEvent):
    pass


@dataclass(frozen=True)
class CouponRedeemed(OfferEvent):
    pass


def snapshot_offer(offer: Offer) -> OfferRead:
    return OfferRead.model_validate(offer, from_attributes=True)


def fallback_product(offer: Offer) -> ProductSnapshot:
    """Product snapshot rebuilt from the values captured on the offer."""
    return ProductSnapshot(id=offer.product_id, price=offer.product_price, reference=offer.product_reference)
