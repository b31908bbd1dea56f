from typing import List, Optional
from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession
from config import ApplicationConfig
from libs.result import Error
from src.adapter.repositories import (
    SqlAlchemyAllocationRepository,
    SqlAlchemyInvoiceAuditRepository,
    SqlAlchemyInvoiceRepository,
)
from src.api.error import ClientError
from src.app.services.access import AccessScope, Role
from src.app.services.allocation_engine import AllocationEngine
from src.app.services.audit_trail import AuditTrail

engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)


async def get_session() -> AsyncSession:
    async with AsyncSessionLocal() as session:
        yield session


def build_allocation_engine(session: AsyncSession) -> AllocationEngine:
    return AllocationEngine(
        invoice_repo=SqlAlchemyInvoiceRepository(session),
        allocation_repo=SqlAlchemyAllocationRepository(session),
        audit_trail=AuditTrail(SqlAlchemyInvoiceAuditRepository(session)),
    )


def _parse_ids(raw: Optional[str]) -> List[int]:
    ids = []
    for part in (raw or "").split(","):
        part = part.strip()
        if not part:
            continue
        if not part.isdigit():
            raise ClientError(
                Error(code="VALIDATION_ERROR", message=f"X-Hotel-Ids: invalid hotel id {part!r}"),
                status_code=400,
            )
        ids.append(int(part))
    return ids


async def get_access_scope(
    session: AsyncSession = Depends(get_session),
    x_actor_id: Optional[str] = Header(default=None),
    x_role: Optional[str] = Header(default=None),
    x_hotel_ids: Optional[str] = Header(default=None),
) -> AccessScope:
    """
    Resolve the caller's capability once per request

    The session provider in front of this service supplies the actor, role
    and hotel memberships as headers. Admins see every hotel they list; the
    invoice set is resolved from those hotels.
    """
    if ApplicationConfig.AUTH_DISABLED:
        return AccessScope.system(actor_id=x_actor_id or "system")

    if not x_actor_id:
        raise ClientError(
            Error(code="UNAUTHENTICATED", message="Missing X-Actor-Id header"),
            status_code=401,
        )

    hotel_ids = _parse_ids(x_hotel_ids)
    invoice_ids = await SqlAlchemyInvoiceRepository(session).list_ids_by_hotels(hotel_ids)
    return AccessScope.for_hotels(
        actor_id=x_actor_id,
        role=Role.normalize(x_role),
        hotel_ids=hotel_ids,
        invoice_ids=invoice_ids,
    )
