from __future__ import annotations

from crm.core.errors import ProviderRejected, ProviderUnavailable
from crm.domain.lifecycle import UserStatus
from crm.models.staff_identity import StaffIdentity
from crm.security.roles import Role

from conftest import auth_header, make_staff


ROOT = auth_header("root", "SuperAdmin")
ADMIN = auth_header("admin-1", "Admin")
NEW_ADMIN = {"first_name": "Nora", "last_name": "Lee", "email": "nora@bank.test", "role": "Admin"}


def test_super_admin_creates_admin(api, db_session, identity_provider):
    r = api.post("/api/users", json={**NEW_ADMIN, "password": "Sup3r-Secret!"}, headers=ROOT)

    assert r.status_code == 201
    body = r.json()
    assert body["user_id"] == "sub-0001"
    assert body["role"] == "Admin"
    assert body["user_status"] == "Active"
    assert identity_provider.operations() == ["create_user", "add_user_to_group"]
    assert "password" not in body


def test_admin_cannot_create_admin(api, db_session, identity_provider):
    make_staff(db_session, "admin-1", Role.ADMIN)
    r = api.post("/api/users", json=NEW_ADMIN, headers=ADMIN)

    assert r.status_code == 403
    assert r.json()["error"] == "Forbidden"
    assert identity_provider.calls == []


def test_provider_errors_map_to_status(api, identity_provider):
    identity_provider.fail("create_user", ProviderRejected("UsernameExistsException"))
    r = api.post("/api/users", json=NEW_ADMIN, headers=ROOT)
    assert r.status_code == 400
    assert r.json()["error"] == "ProviderRejected"

    identity_provider.fail("create_user", ProviderUnavailable("timeout"))
    r = api.post("/api/users", json={**NEW_ADMIN, "email": "n2@bank.test"}, headers=ROOT)
    assert r.status_code == 500
    assert r.json()["error"] == "ProviderUnavailable"


def test_partial_failure_is_inconsistent_state(api, db_session, identity_provider):
    identity_provider.fail("add_user_to_group", ProviderUnavailable("throttled"))

    r = api.post("/api/users", json=NEW_ADMIN, headers=ROOT)

    assert r.status_code == 500
    assert r.json()["error"] == "InconsistentState"
    assert db_session.query(StaffIdentity).count() == 0


def test_list_update_and_deactivate(api, db_session, identity_provider):
    make_staff(db_session, "agent-1", email="a1@bank.test")
    make_staff(db_session, "admin-1", Role.ADMIN)
    make_staff(db_session, "admin-2", Role.ADMIN)

    r = api.get("/api/users", headers=ADMIN)
    assert r.status_code == 200
    assert {u["user_id"] for u in r.json()} == {"agent-1", "admin-1", "admin-2"}

    r = api.patch("/api/users/agent-1", json={"first_name": "Ana"}, headers=ADMIN)
    assert r.status_code == 200
    assert r.json() == {"result": "ok"}
    assert identity_provider.calls == [("update_user_attributes", "a1@bank.test", {"given_name": "Ana"})]

    r = api.patch("/api/users/admin-2", json={"first_name": "Ana"}, headers=ADMIN)
    assert r.status_code == 403

    r = api.patch("/api/users/agent-1", json={"role": "SuperAdmin"}, headers=ADMIN)
    assert r.status_code == 422

    r = api.delete("/api/users/agent-1", headers=ADMIN)
    assert r.status_code == 200

    r = api.delete("/api/users/agent-1", headers=ADMIN)
    assert r.status_code == 404
    assert r.json()["error"] == "NotFound"

    db_session.expire_all()
    assert db_session.get(StaffIdentity, "agent-1").user_status == UserStatus.DISABLED


def test_disabled_admin_with_valid_token_cannot_manage_staff(api, db_session, identity_provider):
    make_staff(db_session, "admin-1", Role.ADMIN, status=UserStatus.DISABLED)
    make_staff(db_session, "agent-1", email="a1@bank.test")

    assert api.get("/api/users", headers=ADMIN).status_code == 403
    r = api.post("/api/users", json={**NEW_ADMIN, "role": "Agent"}, headers=ADMIN)
    assert r.status_code == 403
    assert r.json()["error"] == "Forbidden"
    assert api.delete("/api/users/agent-1", headers=ADMIN).status_code == 403
    assert identity_provider.calls == []


def test_unenrolled_admin_is_refused_but_root_is_not(api, db_session):
    assert api.get("/api/users", headers=ADMIN).status_code == 403
    assert api.get("/api/users", headers=ROOT).status_code == 200


def test_disabled_super_admin_is_refused(api, db_session):
    make_staff(db_session, "root", Role.SUPER_ADMIN, status=UserStatus.DISABLED)
    assert api.get("/api/users", headers=ROOT).status_code == 403
