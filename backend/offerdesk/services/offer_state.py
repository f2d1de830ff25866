from __future__ import annotations

import enum
from typing import Final

from offerdesk.models.offer import OfferStatus
from offerdesk.services.offer_errors import IllegalTransition


class OfferAction(str, enum.Enum):
    accept = "accept"
    reject = "reject"
    redeem = "redeem"


TRANSITIONS: Final[dict[tuple[OfferStatus, OfferAction], OfferStatus]] = {
    (OfferStatus.pending, OfferAction.accept): OfferStatus.accepted,
    (OfferStatus.pending, OfferAction.reject): OfferStatus.rejected,
    (OfferStatus.accepted, OfferAction.redeem): OfferStatus.expired,
}


def initial_status(*, within_margin: bool) -> OfferStatus:
    return OfferStatus.accepted if within_margin else OfferStatus.pending


def transition(current: OfferStatus, action: OfferAction) -> OfferStatus:
    target = TRANSITIONS.get((OfferStatus(current), action))
    if target is None:
        raise IllegalTransition(OfferStatus(current).value, action.value)
    return target


def source_status(action: OfferAction) -> OfferStatus:
    """Return the only status ``action`` may start from.

    Used as the guard of the conditional UPDATE that applies the transition.
    """
    sources = [src for (src, act) in TRANSITIONS if act == action]
    if len(sources) != 1:
        raise RuntimeError(f"Transition table has {len(sources)} sources for {action.value}")
    return sources[0]
