from __future__ import annotations

from fastapi import status


class OfferError(Exception):
    """Base class for offer and coupon domain errors.

    ``code`` is the stable machine-readable identifier returned to API clients;
    ``status_code`` is what the HTTP adapter answers with.
    """

    code: str = "offer_error"
    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail or self.__class__.__doc__ or self.code
        super().__init__(self.detail)


class InvalidPrice(OfferError):
    """Price inputs are out of range"""

    code = "invalid_price"


class MissingContactInfo(OfferError):
    """Customer contact information is incomplete"""

    code = "missing_contact_info"


class ProductNotFound(OfferError):
    """Product not found"""

    code = "product_not_found"
    status_code = status.HTTP_404_NOT_FOUND


class OfferNotFound(OfferError):
    """Offer not found"""

    code = "offer_not_found"
    status_code = status.HTTP_404_NOT_FOUND


class IllegalTransition(OfferError):
    """Action is not allowed for the offer's current status"""

    code = "illegal_transition"
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, current: str, action: str) -> None:
        self.current = current
        self.action = action
        super().__init__(f"Cannot {action} an offer that is {current}")


class CouponNotFound(OfferError):
    """Coupon not found"""

    code = "coupon_not_found"
    status_code = status.HTTP_404_NOT_FOUND


class CouponAlreadyUsed(OfferError):
    """Coupon has already been used"""

    code = "coupon_already_used"
    status_code = status.HTTP_409_CONFLICT


class CouponInvalidState(OfferError):
    """Coupon is not valid"""

    code = "coupon_invalid_state"
    status_code = status.HTTP_409_CONFLICT


class CouponCodeUnavailable(OfferError):
    """Failed to generate a unique coupon code"""

    code = "coupon_code_unavailable"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
