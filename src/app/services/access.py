"""Access Scope

The capability object handed to every ledger operation. It is resolved once
per request by the identity collaborator; the ledger never looks up identity
state itself.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Iterable, Optional

from src.domain.errors import Forbidden


class Role(str, Enum):
    FRONT_DESK = "front_desk"
    STAFF = "staff"
    MANAGER = "manager"
    ADMIN = "admin"

    @classmethod
    def normalize(cls, raw: Optional[str]) -> "Role":
        value = (raw or "").strip().lower().replace("-", "_").replace(" ", "_")
        try:
            return cls(value)
        except ValueError:
            return cls.STAFF


AUDIT_READERS = frozenset({Role.MANAGER, Role.ADMIN})


@dataclass(frozen=True)
class AccessScope:
    """
    Who is acting and what they may touch

    ``unrestricted`` scopes (auth disabled, background jobs) bypass the hotel
    and invoice sets.
    """

    actor_id: Optional[str]
    role: Role = Role.STAFF
    hotel_ids: FrozenSet[int] = field(default_factory=frozenset)
    invoice_ids: FrozenSet[int] = field(default_factory=frozenset)
    unrestricted: bool = False

    @classmethod
    def system(cls, actor_id: str = "system") -> "AccessScope":
        return cls(actor_id=actor_id, role=Role.ADMIN, unrestricted=True)

    @classmethod
    def for_hotels(
        cls,
        actor_id: Optional[str],
        role: Role,
        hotel_ids: Iterable[int],
        invoice_ids: Iterable[int],
    ) -> "AccessScope":
        return cls(
            actor_id=actor_id,
            role=role,
            hotel_ids=frozenset(hotel_ids),
            invoice_ids=frozenset(invoice_ids),
        )

    def can_access_invoice(self, invoice_id: int) -> bool:
        return self.unrestricted or invoice_id in self.invoice_ids

    def can_access_hotel(self, hotel_id: Optional[int]) -> bool:
        if self.unrestricted:
            return True
        return hotel_id is not None and hotel_id in self.hotel_ids

    def require_invoice(self, invoice_id: int) -> None:
        if not self.can_access_invoice(invoice_id):
            raise Forbidden(
                f"Invoice {invoice_id} is outside your access scope",
                reason=f"actor={self.actor_id}",
            )

    def require_hotel(self, hotel_id: Optional[int]) -> None:
        if not self.can_access_hotel(hotel_id):
            raise Forbidden(
                f"Hotel {hotel_id} is outside your access scope",
                reason=f"actor={self.actor_id}",
            )

    def require_payment(self, payment_id: Optional[int], hotel_id: Optional[int]) -> None:
        """Payments follow their hotel; hotel-less payments need an unrestricted scope"""
        if self.can_access_hotel(hotel_id):
            return
        label = "Payment" if payment_id is None else f"Payment {payment_id}"
        if hotel_id is None:
            raise Forbidden(
                f"{label} has no hotel and is outside your access scope",
                reason=f"actor={self.actor_id}",
            )
        raise Forbidden(
            f"{label} belongs to hotel {hotel_id}, outside your access scope",
            reason=f"actor={self.actor_id}",
        )

    def require_audit_reader(self) -> None:
        if self.role not in AUDIT_READERS:
            raise Forbidden(
                "Only managers and admins can read the audit log",
                reason=f"role={self.role.value}",
            )

    @property
    def hotel_filter(self) -> Optional[FrozenSet[int]]:
        """Hotel IDs to filter on, or None when every hotel is visible"""
        return None if self.unrestricted else self.hotel_ids

    @property
    def invoice_filter(self) -> Optional[FrozenSet[int]]:
        return None if self.unrestricted else self.invoice_ids
