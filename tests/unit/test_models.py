"""Tests for the SQLAlchemy-backed ACL store."""
import pytest
from sqlalchemy import inspect, select

from acl.bindings import ResolvedRole, UnresolvedRole
from acl.errors import RoleNotFound
from acl.models import AclStore, RoleRecord, UserRecord
from acl.permissions import PermissionState
from acl.role import Role
from acl.user import User


def test_tables_created(store):
    tables = inspect(store.engine).get_table_names()
    assert "acl_roles" in tables
    assert "acl_users" in tables


def test_health_check(store):
    assert store.health_check() is True


def test_health_check_failure(store, monkeypatch):
    def broken():
        raise RuntimeError("db down")

    monkeypatch.setattr(store, "SessionLocal", broken)
    assert store.health_check() is False


def test_default_url_from_settings(monkeypatch):
    from acl.config import get_settings

    monkeypatch.setenv("DATABASE_URL", "sqlite:///:memory:")
    get_settings(reset=True)
    manager = AclStore()
    try:
        assert manager.engine.url.drivername == "sqlite"
        assert manager.engine.url.database == ":memory:"
    finally:
        manager.dispose()


class TestRoleStore:
    def test_save_and_load_role(self, store):
        role = Role(
            "editor",
            title=" Editor ",
            description="Edits things",
            permissions={"edit": True, "delete": False},
        )
        store.save_role(role)

        loaded = store.load_role("editor")
        assert loaded is not None
        assert loaded.title == "Editor"
        assert loaded.description == "Edits things"
        assert loaded.is_super is False
        assert loaded.state("edit") is PermissionState.GRANTED
        assert loaded.state("delete") is PermissionState.REVOKED

    def test_save_updates_existing_record(self, store):
        role = Role("editor")
        store.save_role(role)
        role.is_super = True
        store.save_role(role)

        with store.get_session_context() as session:
            records = session.scalars(select(RoleRecord)).all()
        assert len(records) == 1
        assert records[0].is_super is True

    def test_load_missing_role(self, store):
        assert store.load_role("ghost") is None
        with pytest.raises(RoleNotFound):
            store.load_role("ghost", strict=True)

    def test_loaded_role_persists_through_store(self, store):
        store.save_role(Role("editor"))
        loaded = store.load_role("editor")

        loaded.grant("edit")

        assert store.load_role("editor").granted("edit") is True

    def test_load_role_with_inherit_chain(self, store):
        base = Role("base")
        base.grant("read")
        store.save_role(base)
        store.save_role(Role("editor", inherit="base"))
        store.save_role(Role("admin", inherit="editor"))

        admin = store.load_role("admin")
        assert admin.parent().machine_name == "editor"
        assert admin.granted("read") is True

    def test_load_role_with_cycle_terminates(self, store):
        store.save_role(Role("a", inherit="b"))
        store.save_role(Role("b", inherit="a"))

        a = store.load_role("a")
        assert a.granted("x") is False

    def test_delete_role(self, store):
        store.save_role(Role("editor"))
        assert store.delete_role("editor") is True
        assert store.delete_role("editor") is False
        assert store.load_role("editor") is None


class TestUserStore:
    def test_save_and_load_user(self, store, hasher):
        user = User("user@example.com", display_name="User", hasher=hasher)
        user.set_password("password")
        store.save_user(user)

        loaded = store.load_user("user@example.com")
        assert loaded.display_name == "User"
        assert loaded.password_hash == user.password_hash
        assert loaded.roles == {}

    def test_load_missing_user(self, store):
        assert store.load_user("nobody@example.com") is None

    def test_roles_persist_as_references(self, store, hasher):
        user = User("user@example.com", password_hash="x", hasher=hasher)
        user.grant(Role("editor"))
        user.grant("viewer")
        store.save_user(user)

        with store.get_session_context() as session:
            record = session.scalars(select(UserRecord)).one()
        assert record.roles == {
            "editor": {"type": "acl-role", "subtype": None, "machineName": "editor"},
            "viewer": {"type": "acl-role", "subtype": None, "machineName": "viewer"},
        }

    def test_load_rehydrates_existing_roles(self, store):
        editor = Role("editor")
        editor.grant("edit")
        store.save_role(editor)

        user = User("user@example.com", password_hash="x")
        user.grant("editor")
        user.grant("ghost")
        assert user.granted("editor") is False
        store.save_user(user)

        loaded = store.load_user("user@example.com")
        assert isinstance(loaded.roles["editor"], ResolvedRole)
        assert isinstance(loaded.roles["ghost"], UnresolvedRole)
        assert loaded.granted("editor") is True
        assert loaded.granted("ghost") is False
        assert loaded.access("edit") is True

    def test_load_rehydrates_inherited_permissions(self, store):
        base = Role("editor")
        base.grant("edit")
        store.save_role(base)
        store.save_role(Role("admin", inherit="editor", permissions={"publish": True}))

        user = User("user@example.com", password_hash="x")
        user.grant("admin")
        store.save_user(user)

        loaded = store.load_user("user@example.com")
        assert loaded.access(["edit", "publish"]) is True

    def test_loaded_user_saves_through_store(self, store):
        store.save_user(User("user@example.com", password_hash="x"))
        loaded = store.load_user("user@example.com")

        loaded.grant("viewer")

        reloaded = store.load_user("user@example.com")
        assert "viewer" in reloaded.roles

    def test_load_skips_non_role_references(self, store):
        editor = Role("editor")
        editor.grant("edit")
        store.save_role(editor)
        store.save_user(User("user@example.com", password_hash="x"))

        with store.get_session_context() as session:
            record = session.scalars(select(UserRecord)).one()
            record.roles = {
                "editor": {"type": "acl-group", "subtype": None, "machineName": "editor"}
            }

        loaded = store.load_user("user@example.com")
        binding = loaded.roles["editor"]
        assert isinstance(binding, UnresolvedRole)
        assert binding.type == "acl-group"
        assert loaded.granted("editor") is False
        assert loaded.access("edit") is False

    def test_load_resolves_by_machine_name(self, store):
        editor = Role("editor")
        editor.grant("edit")
        store.save_role(editor)
        store.save_user(User("user@example.com", password_hash="x"))

        with store.get_session_context() as session:
            record = session.scalars(select(UserRecord)).one()
            record.roles = {
                "legacy-editor": {"type": "acl-role", "subtype": None, "machineName": "editor"}
            }

        loaded = store.load_user("user@example.com")
        assert isinstance(loaded.roles["legacy-editor"], ResolvedRole)
        assert loaded.roles["legacy-editor"].machine_name == "editor"
        assert loaded.access("edit") is True

    def test_timestamps_are_set(self, store):
        store.save_user(User("user@example.com", password_hash="x"))
        with store.get_session_context() as session:
            record = session.scalars(select(UserRecord)).one()
        assert record.created_at is not None
        assert record.updated_at is not None

    def test_delete_user(self, store):
        store.save_user(User("user@example.com", password_hash="x"))
        assert store.delete_user("user@example.com") is True
        assert store.delete_user("user@example.com") is False
