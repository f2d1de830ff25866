from uuid import UUID

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from offerdesk.db.session import get_session
from offerdesk.services.catalog import SqlProductCatalog


async def require_admin(x_admin_id: str | None = Header(default=None)) -> UUID:
    """Admin identity as asserted by the upstream authentication layer."""
    if not x_admin_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Admin access required")
    try:
        return UUID(x_admin_id.strip())
    except ValueError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid admin identity")


async def get_catalog(session: AsyncSession = Depends(get_session)) -> SqlProductCatalog:
    return SqlProductCatalog(session)
