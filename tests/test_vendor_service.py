"""
test_vendor_service.py — Tests for app/services/vendor_service.py

Covers registration conflicts, partial updates, activation toggle and
listing filters against the in-memory DB.

Called by: pytest
Depends on: app/services/vendor_service.py, tests/conftest.py
"""

import pytest

from app.exceptions import ConflictError, NotFoundError
from app.models import Vendor
from app.schemas.vendors import VendorCreate, VendorUpdate
from app.services import vendor_service


def _register(db, **kw):
    fields = dict(name="Acme Supplies", email="sales@acme.com")
    fields.update(kw)
    return vendor_service.register_vendor(db, VendorCreate(**fields))


class TestRegister:
    def test_persists_normalized_vendor(self, db_session):
        v = _register(db_session, email=" Sales@Acme.com ")
        assert v.id is not None
        assert v.email == "sales@acme.com"
        assert v.category == ["Other"]

    def test_duplicate_email_conflicts_with_existing(self, db_session):
        first = _register(db_session)
        with pytest.raises(ConflictError) as exc:
            _register(db_session, name="Other Name", email="SALES@acme.com")
        assert exc.value.message == "A vendor with this email already exists"
        assert exc.value.data["id"] == first.id
        assert db_session.query(Vendor).count() == 1

    def test_unique_index_backs_the_precheck(self, db_session, monkeypatch):
        first = _register(db_session)
        # Simulate a racing writer that slipped past the pre-check
        monkeypatch.setattr(vendor_service, "_find_by_email", lambda db, email, exclude_id=None: None)
        with pytest.raises(ConflictError):
            _register(db_session, name="Racer")
        assert db_session.query(Vendor).count() == 1
        assert db_session.get(Vendor, first.id).name == "Acme Supplies"


class TestUpdate:
    def test_only_present_fields_change(self, db_session, vendor):
        updated = vendor_service.update_vendor(db_session, vendor.id, VendorUpdate(rating=5))
        assert updated.rating == 5
        assert updated.name == "Acme Supplies"
        assert updated.email == "sales@acme.com"

    def test_null_required_field_is_ignored(self, db_session, vendor):
        patch = VendorUpdate.model_validate({"name": None, "notes": None})
        updated = vendor_service.update_vendor(db_session, vendor.id, patch)
        assert updated.name == "Acme Supplies"
        assert updated.notes is None

    def test_email_change_to_taken_address_conflicts(self, db_session, vendor, make_vendor):
        other = make_vendor(email="other@example.com")
        with pytest.raises(ConflictError) as exc:
            vendor_service.update_vendor(db_session, other.id, VendorUpdate(email="sales@acme.com"))
        assert exc.value.data["id"] == vendor.id

    def test_keeping_own_email_is_fine(self, db_session, vendor):
        updated = vendor_service.update_vendor(
            db_session, vendor.id, VendorUpdate(email="SALES@acme.com", name="Acme Ltd")
        )
        assert updated.name == "Acme Ltd"

    def test_unknown_vendor(self, db_session):
        with pytest.raises(NotFoundError, match="Vendor not found"):
            vendor_service.update_vendor(db_session, 999, VendorUpdate(rating=4))


class TestActivation:
    def test_deactivate_hides_from_default_listing(self, db_session, vendor):
        vendor_service.set_vendor_active(db_session, vendor.id, False)
        assert vendor_service.list_vendors(db_session) == []
        assert [v.id for v in vendor_service.list_vendors(db_session, active_only=False)] == [vendor.id]

    def test_deactivate_hides_from_email_matching(self, db_session, vendor):
        assert vendor_service.find_active_vendor_by_email(db_session, " SALES@acme.com") is vendor
        vendor_service.set_vendor_active(db_session, vendor.id, False)
        assert vendor_service.find_active_vendor_by_email(db_session, "sales@acme.com") is None


class TestList:
    def test_sorted_by_name(self, db_session, make_vendor):
        make_vendor(name="Zeta")
        make_vendor(name="Alpha")
        make_vendor(name="Mid")
        names = [v.name for v in vendor_service.list_vendors(db_session)]
        assert names == ["Alpha", "Mid", "Zeta"]

    def test_search_is_case_insensitive_over_three_fields(self, db_session, make_vendor):
        a = make_vendor(name="Northwind Traders")
        b = make_vendor(email="orders@northwind.io")
        c = make_vendor(contact_person="Nora NORTHWIND")
        make_vendor(name="Unrelated")
        found = {v.id for v in vendor_service.list_vendors(db_session, search="northwind")}
        assert found == {a.id, b.id, c.id}

    def test_search_treats_wildcards_literally(self, db_session, make_vendor):
        make_vendor(name="100% Office")
        make_vendor(name="Office Depot")
        found = [v.name for v in vendor_service.list_vendors(db_session, search="100%")]
        assert found == ["100% Office"]

    def test_category_filter(self, db_session, make_vendor):
        make_vendor(name="Soft", category=["Software", "Services"])
        make_vendor(name="Hard", category=["IT Equipment"])
        found = [v.name for v in vendor_service.list_vendors(db_session, category="Services")]
        assert found == ["Soft"]
