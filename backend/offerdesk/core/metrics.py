from collections import Counter
from threading import Lock
from typing import Counter as CounterType, Dict

_metrics: CounterType[str] = Counter()
_lock = Lock()


def _inc(key: str) -> None:
    with _lock:
        _metrics[key] += 1


def record_offer_created(status: str) -> None:
    if status == "accepted":
        _inc("offers_auto_accepted")
    else:
        _inc("offers_queued")


def record_offer_reviewed(status: str) -> None:
    if status == "accepted":
        _inc("offers_accepted_manually")
    else:
        _inc("offers_rejected")


def record_coupon_redeemed() -> None:
    _inc("coupons_redeemed")


def record_coupon_code_collision() -> None:
    _inc("coupon_code_collisions")


def record_notification_failure() -> None:
    _inc("notification_failures")


def snapshot() -> Dict[str, int]:
    with _lock:
        return dict(_metrics)


def reset() -> None:
    with _lock:
        _metrics.clear()
