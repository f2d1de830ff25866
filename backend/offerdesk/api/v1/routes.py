from fastapi import APIRouter

from offerdesk.api.v1 import offers
from offerdesk.core.metrics import snapshot as metrics_snapshot

api_router = APIRouter()

api_router.include_router(offers.router)


@api_router.get("/health", tags=["health"])
def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@api_router.get("/metrics", tags=["metrics"])
def metrics() -> dict[str, int]:
    return metrics_snapshot()
