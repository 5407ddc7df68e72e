from __future__ import annotations

from sqlalchemy.orm import Session

from crm.domain.lifecycle import UserStatus
from crm.repositories.staff_directory import StaffDirectory, StaffPatch
from crm.security.roles import Role

from conftest import make_staff


def test_disabled_identity_is_absent_from_lookups(db_session: Session):
    make_staff(db_session, "agent-1", email="gone@bank.test", status=UserStatus.DISABLED)
    directory = StaffDirectory(db_session)

    assert directory.find_by_id("agent-1") is None
    assert directory.find_by_email("gone@bank.test") is None
    assert directory.list_visible() == []


def test_email_in_use_spans_disabled_rows_and_ignores_case(db_session: Session):
    make_staff(db_session, "agent-1", email="Taken@bank.test", status=UserStatus.DISABLED)
    directory = StaffDirectory(db_session)

    assert directory.email_in_use("taken@bank.test") is True
    assert directory.email_in_use("taken@bank.test", exclude_id="agent-1") is False
    assert directory.email_in_use("free@bank.test") is False


def test_disable_by_id_reports_failures_as_pairs(db_session: Session):
    make_staff(db_session, "admin-1", Role.ADMIN)
    directory = StaffDirectory(db_session)

    assert directory.disable_by_id(Role.SUPER_ADMIN, "missing") == (404, "User missing not found")
    assert directory.disable_by_id(Role.ADMIN, "admin-1") == (403, "Not allowed to delete admin-1")
    assert directory.disable_by_id(Role.SUPER_ADMIN, "admin-1") is None

    db_session.expire_all()
    assert directory.find_by_id("admin-1") is None
    assert directory.disable_by_id(Role.SUPER_ADMIN, "admin-1") == (404, "User admin-1 not found")


def test_apply_update_changes_only_supplied_fields(db_session: Session):
    make_staff(db_session, "agent-1", email="a1@bank.test")
    directory = StaffDirectory(db_session)

    assert directory.apply_update(Role.ADMIN, "agent-1", StaffPatch(last_name="Lim")) is None
    identity = directory.find_by_id("agent-1")
    assert identity.last_name == "Lim"
    assert identity.first_name == "Test"
    assert identity.email == "a1@bank.test"


def test_apply_update_duplicate_email_is_a_400_pair(db_session: Session):
    make_staff(db_session, "agent-1", email="a1@bank.test")
    make_staff(db_session, "agent-2", email="a2@bank.test")
    directory = StaffDirectory(db_session)

    failure = directory.apply_update(Role.ADMIN, "agent-2", StaffPatch(email="a1@bank.test"))
    assert failure is not None
    assert failure[0] == 400


def test_patch_changes_ignore_equal_and_missing_fields(db_session: Session):
    identity = make_staff(db_session, "agent-1", email="a1@bank.test")
    patch = StaffPatch(first_name="Test", email="new@bank.test")

    assert patch.changes_from(identity) == {"email": "new@bank.test"}
    assert StaffPatch().changes_from(identity) == {}


def test_find_by_email_ignores_case(db_session: Session):
    make_staff(db_session, "agent-1", email="Mixed.Case@bank.test")
    directory = StaffDirectory(db_session)

    assert directory.find_by_email("mixed.case@bank.test").user_id == "agent-1"
    assert directory.find_by_email("MIXED.CASE@BANK.TEST").user_id == "agent-1"
    assert directory.find_by_email("other@bank.test") is None


def test_is_enrolled_counts_disabled_rows(db_session: Session):
    make_staff(db_session, "agent-1", status=UserStatus.DISABLED)
    directory = StaffDirectory(db_session)

    assert directory.is_enrolled("agent-1") is True
    assert directory.find_by_id("agent-1") is None
    assert directory.is_enrolled("missing") is False
