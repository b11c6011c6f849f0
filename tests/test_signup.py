import pytest

from campus_directory.models import Role
from campus_directory.security import verify_password
from conftest import signup_body


def test_signup_creates_user(client, registry):
    res = client.post("/api/signup", json=signup_body(role="teacher"))
    assert res.status_code == 201
    assert res.json() == {"message": "teacher registered successfully"}

    stored = registry.store(Role.TEACHER).find_by_email_or_phone("test@example.com", "")
    assert stored is not None
    assert stored.role == "teacher"
    assert stored.university_key == "UNI-1"


def test_signup_stores_a_hash_not_the_password(client, registry):
    client.post("/api/signup", json=signup_body(password="Plain123"))
    stored = registry.store(Role.STUDENT).find_by_email_or_phone("test@example.com", "")
    assert stored.password != "Plain123"
    assert verify_password("Plain123", stored.password)


_MISSING = object()


@pytest.mark.parametrize("role", ["", "Admin", "STUDENT", "instructor", "superuser", None, 5, ["admin"], _MISSING])
def test_signup_rejects_unknown_roles(client, registry, role):
    body = signup_body(role=role)
    if role is _MISSING:
        del body["role"]
    res = client.post("/api/signup", json=body)
    assert res.status_code == 400
    assert res.json() == {"message": "Invalid role"}
    assert sum(store.count() for store in registry) == 0


def test_duplicate_email_is_rejected(client):
    assert client.post("/api/signup", json=signup_body()).status_code == 201
    res = client.post("/api/signup", json=signup_body(phone="9111111111", name="Other"))
    assert res.status_code == 409
    assert res.json() == {"message": "Email or phone already registered"}


def test_duplicate_phone_is_rejected(client):
    assert client.post("/api/signup", json=signup_body()).status_code == 201
    res = client.post("/api/signup", json=signup_body(email="other@example.com"))
    assert res.status_code == 409


def test_same_contact_details_allowed_in_another_role(client):
    assert client.post("/api/signup", json=signup_body(role="student")).status_code == 201
    assert client.post("/api/signup", json=signup_body(role="teacher")).status_code == 201
    assert client.post("/api/signup", json=signup_body(role="admin")).status_code == 201


def test_numeric_phone_is_accepted(client, registry):
    res = client.post("/api/signup", json=signup_body(phone=9876543210))
    assert res.status_code == 201
    assert registry.store(Role.STUDENT).find_by_email_or_phone("", "9876543210") is not None


def test_missing_password_is_a_validation_error(client):
    body = signup_body()
    del body["password"]
    assert client.post("/api/signup", json=body).status_code == 422


def test_access_lists_kept_only_where_the_role_has_them(client, registry):
    client.post("/api/signup", json=signup_body(role="student", accessToStudents=[1], accessToTeachers=[2]))
    client.post("/api/signup", json=signup_body(role="teacher", accessToStudents=[1], accessToTeachers=[2]))
    client.post("/api/signup", json=signup_body(role="admin", accessToStudents=[1], accessToTeachers=[2]))

    student = registry.store(Role.STUDENT).find_by_email_or_phone("test@example.com", "")
    teacher = registry.store(Role.TEACHER).find_by_email_or_phone("test@example.com", "")
    admin = registry.store(Role.ADMIN).find_by_email_or_phone("test@example.com", "")
    assert (student.access_to_students, student.access_to_teachers) == ([], [])
    assert (teacher.access_to_students, teacher.access_to_teachers) == ([1], [])
    assert (admin.access_to_students, admin.access_to_teachers) == ([1], [2])


def test_storage_failure_is_a_server_error(client, registry, monkeypatch):
    from campus_directory.errors import PersistenceError

    def boom(record):
        raise PersistenceError("disk full")

    monkeypatch.setattr(registry.store(Role.STUDENT), "insert_if_absent", boom)
    res = client.post("/api/signup", json=signup_body())
    assert res.status_code == 500
    assert res.json() == {"message": "Server error"}


def test_unexpected_error_is_a_generic_server_error(client, registry, monkeypatch):
    from fastapi.testclient import TestClient

    from campus_directory import main

    def boom(record):
        raise RuntimeError("bug")

    monkeypatch.setattr(registry.store(Role.STUDENT), "insert_if_absent", boom)
    quiet = TestClient(main.app, raise_server_exceptions=False)
    res = quiet.post("/api/signup", json=signup_body())
    assert res.status_code == 500
    assert res.json() == {"message": "Server error"}
