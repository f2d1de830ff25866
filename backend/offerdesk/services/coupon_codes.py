from __future__ import annotations

from dataclasses import dataclass
import secrets
import string
from uuid import UUID

from offerdesk.services.customers import Customer, RegisteredCustomer


CODE_PREFIX = "OFFER"
GUEST_MARKER = "G"
FRAGMENT_WIDTH = 6
MAX_REFERENCE_LENGTH = 40
_ALPHABET = string.ascii_uppercase + string.digits


@dataclass(frozen=True)
class CouponContext:
    product_id: UUID
    attempt: int = 0
    guest_suffix_length: int = FRAGMENT_WIDTH


def _reference_fragment(product_reference: str | None, product_id: UUID) -> str:
    ref = (product_reference or "").strip()
    if not ref:
        ref = product_id.hex[-FRAGMENT_WIDTH:]
    return ref[:MAX_REFERENCE_LENGTH]


def _registered_suffix(customer_id: UUID, attempt: int) -> str:
    suffix = customer_id.hex[-FRAGMENT_WIDTH:]
    if attempt > 0:
        suffix = f"{suffix}-{attempt + 1}"
    return suffix


def _guest_suffix(length: int) -> str:
    return GUEST_MARKER + "".join(secrets.choice(_ALPHABET) for _ in range(length))


def generate_coupon_code(product_reference: str | None, customer: Customer, context: CouponContext) -> str:
    """Build ``OFFER-<ref>-<suffix>`` for an accepted offer.

    Registered customers get a deterministic suffix from their id, plus a
    ``-N`` disambiguator for later attempts. Guests get ``G`` followed by random
    characters. The guest marker lives in the suffix only; the upper-cased
    reference may contain ``G`` for anyone. Uniqueness is enforced by the
    storage layer, not here.
    """
    ref = _reference_fragment(product_reference, context.product_id)
    if isinstance(customer, RegisteredCustomer):
        suffix = _registered_suffix(customer.customer_id, context.attempt)
    else:
        suffix = _guest_suffix(context.guest_suffix_length)
    return f"{CODE_PREFIX}-{ref}-{suffix}".upper()

