"""Tests for core.flattener."""

import pytest

from core.flattener import (
    FIELDSET_V1,
    FIELDSET_V2,
    FIELDSET_V3,
    LATEST_FIELDSET_VERSION,
    flatten_user,
    flatten_users,
    get_fieldset,
)
from core.models import AcademicPartner, Role, User

ROLES = {"rol_admin": Role(id="rol_admin", name="Guild admin")}
PARTNERS = {"ap-1": AcademicPartner(id="ap-1", name="Example University")}


def _user(**overrides):
    data = {
        "user_id": "auth0|1",
        "email": "jane@example.com",
        "name": "Jane Doe",
        "created_at": "2023-09-01T12:00:00.000Z",
        "last_login": "2024-01-15T08:30:00.000Z",
        "logins_count": 3,
        "blocked": False,
        "app_metadata": {"role_id": "rol_admin", "academic_partner_id": "ap-1", "uuid": "u-1"},
        "user_metadata": {"given_name": "Jane", "family_name": "Doe"},
    }
    data.update(overrides)
    return User.from_api(data)


class TestFieldsets:
    def test_versions_extend_previous(self):
        assert FIELDSET_V2[:len(FIELDSET_V1)] == FIELDSET_V1
        assert FIELDSET_V3[:len(FIELDSET_V2)] == FIELDSET_V2

    def test_latest_is_v3(self):
        assert LATEST_FIELDSET_VERSION == 3

    def test_unknown_version(self):
        with pytest.raises(ValueError, match="fieldset version 9"):
            get_fieldset(9)


class TestFlattenUser:
    def test_row_columns_follow_fieldset_order(self):
        for version, fields in [(1, FIELDSET_V1), (2, FIELDSET_V2), (3, FIELDSET_V3)]:
            row, _ = flatten_user(_user(), ROLES, PARTNERS, version)
            assert list(row) == fields

    def test_resolved_names(self):
        row, misses = flatten_user(_user(), ROLES, PARTNERS)
        assert row["role_name"] == "Guild admin"
        assert row["academic_partner_name"] == "Example University"
        assert row["given_name"] == "Jane"
        assert row["uuid"] == "u-1"
        assert misses == []

    def test_missing_user_metadata_gives_empty_names(self):
        user = User.from_api({"user_id": "auth0|2", "app_metadata": {"role_id": "rol_admin"}})
        row, _ = flatten_user(user, ROLES, PARTNERS)
        assert row["family_name"] == ""
        assert row["given_name"] == ""
        assert row["email"] == ""

    def test_unresolved_partner_gives_empty_name_and_miss(self):
        user = _user(app_metadata={"role_id": "rol_admin", "academic_partner_id": "ap-404"})
        row, misses = flatten_user(user, ROLES, PARTNERS)
        assert row["academic_partner_id"] == "ap-404"
        assert row["academic_partner_name"] == ""
        assert misses == ["user auth0|1: academic partner ap-404 not resolved"]

    def test_unresolved_role_gives_empty_name_and_miss(self):
        user = _user(app_metadata={"role_id": "rol_gone"})
        row, misses = flatten_user(user, ROLES, PARTNERS, version=2)
        assert row["role_name"] == ""
        assert misses == ["user auth0|1: role rol_gone not resolved"]

    def test_v1_does_not_report_misses_for_unexported_names(self):
        user = _user(app_metadata={"role_id": "rol_gone", "academic_partner_id": "ap-404"})
        _, misses = flatten_user(user, {}, {}, version=1)
        assert misses == []


def test_flatten_users_preserves_order_and_collects_misses():
    users = [
        _user(user_id="auth0|1"),
        _user(user_id="auth0|2", app_metadata={"role_id": "rol_gone"}),
    ]
    rows, misses = flatten_users(users, ROLES, PARTNERS)
    assert [r["user_id"] for r in rows] == ["auth0|1", "auth0|2"]
    assert len(misses) == 1
