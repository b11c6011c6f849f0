import pytest

from campus_directory.db import RecordStore
from campus_directory.models import Role
from campus_directory.roles import LOGIN_ORDER, RoleRegistry, build_registry


@pytest.mark.parametrize("label", ["admin", "teacher", "student"])
def test_known_roles_resolve_to_their_store(registry, label):
    store = registry.resolve(label)
    assert store is not None
    assert store.role.value == label


@pytest.mark.parametrize("label", ["", "Admin", "STUDENT", " teacher", "instructor", None, 1])
def test_unknown_roles_do_not_resolve(registry, label):
    assert registry.resolve(label) is None


def test_enum_members_resolve(registry):
    assert registry.resolve(Role.TEACHER) is registry.store(Role.TEACHER)


def test_registry_requires_a_store_per_role(tmp_path):
    with pytest.raises(ValueError):
        RoleRegistry({Role.ADMIN: RecordStore(Role.ADMIN, str(tmp_path / "a.db"))})


def test_build_registry_uses_given_paths(tmp_path):
    paths = {"admin": "a.db", "teacher": "t.db", "student": "s.db"}
    reg = build_registry(paths)
    assert reg.store(Role.TEACHER).path == "t.db"
    assert {store.role for store in reg} == set(Role)


def test_login_order_is_admin_student_teacher():
    assert LOGIN_ORDER == (Role.ADMIN, Role.STUDENT, Role.TEACHER)
