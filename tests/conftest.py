import io

import pytest
from fastapi.testclient import TestClient
from openpyxl import Workbook

from campus_directory import config, main
from campus_directory.models import Role
from campus_directory.roles import build_registry


@pytest.fixture()
def registry(tmp_path):
    # Isolated sqlite stores per test (never touch data/)
    reg = build_registry({role.value: str(tmp_path / f"{role.value}.db") for role in Role})
    reg.init_all()
    return reg


@pytest.fixture()
def upload_dir(tmp_path, monkeypatch):
    path = tmp_path / "uploads"
    monkeypatch.setattr(config, "UPLOAD_DIR", str(path))
    return path


@pytest.fixture()
def client(registry, upload_dir, monkeypatch):
    monkeypatch.setattr(main, "REGISTRY", registry)
    with TestClient(main.app) as c:
        yield c


# -------------------------
# Helpers
# -------------------------
def signup_body(
    name="Test User",
    email="test@example.com",
    phone="9000000001",
    university="State University",
    password="Test12345",
    role="student",
    university_key="UNI-1",
    **extra,
):
    body = {
        "name": name,
        "email": email,
        "phone": phone,
        "university": university,
        "password": password,
        "role": role,
        "universityKey": university_key,
    }
    body.update(extra)
    return body


def make_xlsx(rows) -> bytes:
    wb = Workbook()
    ws = wb.active
    for row in rows:
        ws.append(list(row))
    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


HEADER = ["Name", "Email", "Phone", "University", "Password", "Role", "UniversityKey"]
