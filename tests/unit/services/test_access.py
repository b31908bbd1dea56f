"""Unit tests for AccessScope"""

import pytest

from src.app.services.access import AccessScope, Role
from src.domain.errors import Forbidden


class TestRoleNormalize:

    @pytest.mark.parametrize(
        "raw,expected",
        [("Manager", Role.MANAGER), ("front-desk", Role.FRONT_DESK), ("ADMIN", Role.ADMIN)],
    )
    def test_known_roles(self, raw, expected):
        assert Role.normalize(raw) == expected

    def test_unknown_role_is_staff(self):
        assert Role.normalize("auditor") == Role.STAFF
        assert Role.normalize(None) == Role.STAFF


class TestAccessScope:

    def test_system_scope_is_unrestricted(self):
        scope = AccessScope.system()

        assert scope.can_access_invoice(999)
        assert scope.can_access_hotel(None)
        assert scope.invoice_filter is None
        assert scope.hotel_filter is None

    def test_hotel_scope_limits_invoices(self, manager_scope):
        assert manager_scope.can_access_invoice(2)
        assert not manager_scope.can_access_invoice(4)
        assert manager_scope.invoice_filter == frozenset({1, 2, 3})

        with pytest.raises(Forbidden):
            manager_scope.require_invoice(4)

    def test_hotel_scope_rejects_unknown_or_missing_hotel(self, manager_scope):
        manager_scope.require_hotel(1)
        with pytest.raises(Forbidden):
            manager_scope.require_hotel(2)
        with pytest.raises(Forbidden):
            manager_scope.require_hotel(None)

    def test_payments_follow_their_hotel(self, manager_scope):
        manager_scope.require_payment(5, 1)
        AccessScope.system().require_payment(5, None)

        with pytest.raises(Forbidden) as exc_info:
            manager_scope.require_payment(5, 2)
        assert exc_info.value.message == "Payment 5 belongs to hotel 2, outside your access scope"
        with pytest.raises(Forbidden) as exc_info:
            manager_scope.require_payment(5, None)
        assert exc_info.value.message == "Payment 5 has no hotel and is outside your access scope"

    def test_only_managers_and_admins_read_audit(self, manager_scope):
        manager_scope.require_audit_reader()

        staff = AccessScope.for_hotels("u1", Role.FRONT_DESK, [1], [1])
        with pytest.raises(Forbidden) as exc_info:
            staff.require_audit_reader()
        assert exc_info.value.code == "FORBIDDEN"
