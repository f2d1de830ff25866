import pytest

from offerdesk.models.offer import OfferStatus
from offerdesk.services import offer_state
from offerdesk.services.offer_errors import IllegalTransition
from offerdesk.services.offer_state import OfferAction


def test_initial_status_follows_margin_verdict() -> None:
    assert offer_state.initial_status(within_margin=True) == OfferStatus.accepted
    assert offer_state.initial_status(within_margin=False) == OfferStatus.pending


@pytest.mark.parametrize(
    ("current", "action", "expected"),
    [
        (OfferStatus.pending, OfferAction.accept, OfferStatus.accepted),
        (OfferStatus.pending, OfferAction.reject, OfferStatus.rejected),
        (OfferStatus.accepted, OfferAction.redeem, OfferStatus.expired),
    ],
)
def test_allowed_transitions(current: OfferStatus, action: OfferAction, expected: OfferStatus) -> None:
    assert offer_state.transition(current, action) == expected


@pytest.mark.parametrize(
    ("current", "action"),
    [
        (OfferStatus.pending, OfferAction.redeem),
        (OfferStatus.accepted, OfferAction.accept),
        (OfferStatus.accepted, OfferAction.reject),
        (OfferStatus.rejected, OfferAction.accept),
        (OfferStatus.rejected, OfferAction.redeem),
        (OfferStatus.expired, OfferAction.accept),
        (OfferStatus.expired, OfferAction.reject),
        (OfferStatus.expired, OfferAction.redeem),
    ],
)
def test_everything_else_is_illegal(current: OfferStatus, action: OfferAction) -> None:
    with pytest.raises(IllegalTransition) as excinfo:
        offer_state.transition(current, action)
    assert excinfo.value.current == current.value
    assert excinfo.value.action == action.value
    assert excinfo.value.status_code == 409


def test_transition_accepts_raw_status_strings() -> None:
    assert offer_state.transition("pending", OfferAction.accept) == OfferStatus.accepted


def test_source_status_per_action() -> None:
    assert offer_state.source_status(OfferAction.accept) == OfferStatus.pending
    assert offer_state.source_status(OfferAction.reject) == OfferStatus.pending
    assert offer_state.source_status(OfferAction.redeem) == OfferStatus.accepted