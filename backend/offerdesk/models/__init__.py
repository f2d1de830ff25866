from offerdesk.db.base import Base  # noqa: F401
from offerdesk.models.catalog import Product  # noqa: F401
from offerdesk.models.offer import Offer, OfferStatus  # noqa: F401

__all__ = [
    "Base",
    "Product",
    "Offer",
    "OfferStatus",
]
