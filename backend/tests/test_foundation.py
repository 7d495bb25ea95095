# Overview: Pytest coverage for users, outlets, roles and permissions.

import bcrypt
import pytest

from pos_bengkel.extensions import db
from pos_bengkel.models import User
from pos_bengkel.services.user_service import hash_password


def matches(password, password_hash):
    return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))


class TestUsers:
    def test_password_is_hashed_and_never_rendered(self, api, outlet, db_session):
        status, body = api.post("/users", {
            "name": "Kasir Satu",
            "email": "kasir1@bengkel.id",
            "password": "rahasia123",
            "outlet_id": outlet["outlet_id"],
        })
        assert status == 201
        user = body["data"]
        assert "password" not in user
        assert "password_hash" not in user

        stored = db.session.get(User, user["user_id"])
        assert stored.password_hash != "rahasia123"
        assert matches("rahasia123", stored.password_hash)
        assert not matches("salah12345", stored.password_hash)

    def test_password_change(self, api, db_session):
        user = api.create("/users", {"name": "Mekanik", "email": "mek@bengkel.id", "password": "awal12345"})
        status, _ = api.put(f"/users/{user['user_id']}", {"password": "baru12345"})
        assert status == 200
        stored = db.session.get(User, user["user_id"])
        db.session.refresh(stored)
        assert matches("baru12345", stored.password_hash)

    @pytest.mark.parametrize("body, error", [
        ({"name": "Tanpa Sandi", "email": "a@bengkel.id"}, "Missing required fields: password"),
        ({"name": "Pendek", "email": "b@bengkel.id", "password": "123"},
         "password must be a string of at least 8 characters"),
        ({"name": "Panjang", "email": "c@bengkel.id", "password": "x" * 73}, "password must be at most 72 bytes"),
        ({"name": "Email", "email": "not-an-email", "password": "rahasia123"}, "email must be a valid email address"),
    ])
    def test_user_validation(self, api, body, error):
        status, envelope = api.post("/users", body)
        assert status == 400
        assert envelope["error"] == error

    def test_email_lookup_and_uniqueness(self, api):
        user = api.create("/users", {"name": "Admin", "email": "admin@bengkel.id", "password": "rahasia123"})
        status, body = api.get("/users/email?email=admin@bengkel.id")
        assert status == 200
        assert body["data"]["user_id"] == user["user_id"]

        status, _ = api.post("/users", {"name": "Admin 2", "email": "admin@bengkel.id", "password": "rahasia123"})
        assert status == 409

    def test_hash_and_verify(self, app):
        hashed = hash_password("s3cret-pass")
        assert hashed.startswith("$2")
        assert matches("s3cret-pass", hashed)
        assert not matches("other-pass", hashed)


class TestOutlets:
    def test_aliases_and_status_filter(self, api):
        status, body = api.post("/outlets", {
            "outlet_name": "Cabang Cimahi",
            "branch_type": "branch",
            "city": "Cimahi",
            "phone": "022-6654321",
        })
        assert status == 201
        outlet = body["data"]
        assert outlet["name"] == "Cabang Cimahi"
        assert outlet["phone_number"] == "0226654321"
        assert outlet["status"] == "active"

        api.put(f"/outlets/{outlet['outlet_id']}", {"status": "inactive"})
        _, body = api.get("/outlets/status?status=inactive")
        assert [o["outlet_id"] for o in body["data"]] == [outlet["outlet_id"]]

    def test_outlet_users_and_restrict(self, api, outlet):
        user = api.create("/users", {
            "name": "Kasir", "email": "kasir@bengkel.id", "password": "rahasia123", "outlet_id": outlet["outlet_id"],
        })
        _, body = api.get(f"/outlets/{outlet['outlet_id']}/users")
        assert [u["user_id"] for u in body["data"]] == [user["user_id"]]

        status, _ = api.delete(f"/outlets/{outlet['outlet_id']}")
        assert status == 409


class TestRolesAndPermissions:
    @pytest.fixture
    def permissions(self, api):
        return [api.create("/permissions", {"name": name}) for name in ("sales.create", "stock.adjust", "users.manage")]

    def test_replace_permission_set(self, api, permissions):
        role = api.create("/roles", {"name": "kasir"})
        role_id = role["role_id"]
        assert role["permissions"] == []

        wanted = [permissions[1]["permission_id"], permissions[0]["permission_id"]]
        status, body = api.put(f"/roles/{role_id}/permissions", {"permission_ids": wanted})
        assert status == 200
        assert body["message"] == "Role permissions updated successfully"
        assert [p["name"] for p in body["data"]["permissions"]] == ["sales.create", "stock.adjust"]

        status, body = api.get(f"/roles/{role_id}/permissions")
        assert status == 200
        assert [p["permission_id"] for p in body["data"]] == sorted(wanted)

        status, body = api.put(f"/roles/{role_id}/permissions", {"permission_ids": []})
        assert status == 200
        assert body["data"]["permissions"] == []

    def test_unknown_permission_rejected(self, api, permissions):
        role = api.create("/roles", {"name": "mekanik"})
        keep = permissions[0]["permission_id"]
        api.put(f"/roles/{role['role_id']}/permissions", {"permission_ids": [keep]})

        status, body = api.put(f"/roles/{role['role_id']}/permissions", {"permission_ids": [keep, 999999]})
        assert status == 400
        assert body["error"] == "unknown permission_ids: 999999"

        _, body = api.get(f"/roles/{role['role_id']}/permissions")
        assert [p["permission_id"] for p in body["data"]] == [keep]

    def test_malformed_body(self, api):
        role = api.create("/roles", {"name": "gudang"})
        status, _ = api.put(f"/roles/{role['role_id']}/permissions", {"permissions": [1]})
        assert status == 400
        status, body = api.put("/roles/999999/permissions", {"permission_ids": []})
        assert status == 404
        assert body["message"] == "Role not found"

    def test_deleting_permission_or_role_drops_membership(self, api, permissions):
        role = api.create("/roles", {"name": "supervisor"})
        ids = [p["permission_id"] for p in permissions]
        api.put(f"/roles/{role['role_id']}/permissions", {"permission_ids": ids})

        status, _ = api.delete(f"/permissions/{ids[2]}")
        assert status == 200
        _, body = api.get(f"/roles/{role['role_id']}/permissions")
        assert [p["permission_id"] for p in body["data"]] == ids[:2]

        status, _ = api.delete(f"/roles/{role['role_id']}")
        assert status == 200
        assert api.get(f"/permissions/{ids[0]}")[0] == 200

    def test_role_name_lookup(self, api):
        role = api.create("/roles", {"name": "owner"})
        status, body = api.get("/roles/name?name=owner")
        assert status == 200
        assert body["data"]["role_id"] == role["role_id"]
