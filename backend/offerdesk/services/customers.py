from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from offerdesk.services.offer_errors import MissingContactInfo


DEFAULT_GUEST_NAME = "Customer"


@dataclass(frozen=True)
class RegisteredCustomer:
    customer_id: UUID
    email: str
    name: str | None = None


@dataclass(frozen=True)
class GuestCustomer:
    email: str
    name: str | None = None


Customer = RegisteredCustomer | GuestCustomer


def _clean(value: str | None) -> str:
    return (value or "").strip()


def normalize_customer(customer: Customer, phone: str | None) -> tuple[Customer, str]:
    """Validate contact details and return the cleaned customer plus phone.

    Phone is mandatory for every customer; email is mandatory for guests and
    for registered customers alike since it is where the coupon goes.
    """
    cleaned_phone = _clean(phone)
    if not cleaned_phone:
        raise MissingContactInfo("Phone number is required")
    email = _clean(customer.email).lower()
    if not email:
        raise MissingContactInfo("Email is required")
    if isinstance(customer, RegisteredCustomer):
        return RegisteredCustomer(customer_id=customer.customer_id, email=email, name=_clean(customer.name) or None), cleaned_phone
    return GuestCustomer(email=email, name=_clean(customer.name) or DEFAULT_GUEST_NAME), cleaned_phone
