import logging
import os
import shutil
import tempfile
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, FastAPI, File, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field, field_validator

from . import config
from .bulk_import import import_file
from .directory import DirectoryService
from .errors import (
    DirectoryError,
    DuplicateUser,
    ImportFailed,
    InvalidCredentials,
    InvalidRole,
    NotFound,
    PersistenceError,
)
from .logging_config import setup_logging
from .models import UserRecord
from .roles import RoleRegistry, build_registry

setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="Campus Directory - Role Based Registration")

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

REGISTRY: RoleRegistry = build_registry()


@app.on_event("startup")
def _startup():
    REGISTRY.init_all()
    os.makedirs(config.UPLOAD_DIR, exist_ok=True)
    logger.info("Stores ready: %s", ", ".join(repr(store) for store in REGISTRY))


def get_directory() -> DirectoryService:
    return DirectoryService(REGISTRY)


# -------------------------
# Error mapping
# -------------------------
_ERROR_STATUS = (
    (InvalidRole, 400, "Invalid role"),
    (DuplicateUser, 409, "Email or phone already registered"),
    (InvalidCredentials, 401, "Invalid credentials"),
    (NotFound, 404, None),
    (ImportFailed, 500, "Failed to process Excel file"),
    (PersistenceError, 500, "Server error"),
)


@app.exception_handler(DirectoryError)
def _directory_error(request: Request, exc: DirectoryError):
    for cls, status, message in _ERROR_STATUS:
        if isinstance(exc, cls):
            break
    else:
        status, message = 500, "Server error"

    if isinstance(exc, NotFound):
        message = f"{exc.role.capitalize()} not found"
    if status >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc, exc_info=exc)
    return JSONResponse(status_code=status, content={"message": message})


@app.exception_handler(Exception)
def _unexpected_error(request: Request, exc: Exception):
    logger.error("%s %s failed", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"message": "Server error"})


# -------------------------
# Directory Router
# -------------------------
router = APIRouter(prefix="/api", tags=["directory"])


def _as_text(v: Any) -> Any:
    # Phone numbers and numeric passwords often arrive as JSON numbers.
    if isinstance(v, (int, float)) and not isinstance(v, bool):
        return str(v)
    return v


class SignupBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = ""
    email: str = ""
    phone: str = ""
    university: str = ""
    password: str
    # Any value is accepted here; the role registry rejects unknown ones.
    role: Any = None
    university_key: str = Field(default="", alias="universityKey")
    access_to_students: List[int] = Field(default_factory=list, alias="accessToStudents")
    access_to_teachers: List[int] = Field(default_factory=list, alias="accessToTeachers")

    @field_validator("phone", "password", mode="before")
    @classmethod
    def coerce_numbers(cls, v: Any) -> Any:
        return _as_text(v)

    def to_record(self) -> UserRecord:
        data = self.model_dump()
        if not isinstance(data["role"], str):
            data["role"] = "" if data["role"] is None else repr(data["role"])
        return UserRecord(**data)


@router.post("/signup", status_code=201)
def signup(body: SignupBody, directory: DirectoryService = Depends(get_directory)):
    return {"message": directory.signup(body.to_record())}


class LoginBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    login_id: str = Field(alias="loginId")
    password: str

    @field_validator("login_id", "password", mode="before")
    @classmethod
    def coerce_numbers(cls, v: Any) -> Any:
        return _as_text(v)


@router.post("/login")
def login(body: LoginBody, directory: DirectoryService = Depends(get_directory)):
    user = directory.login(body.login_id, body.password)
    return {"message": "Login successful", "user": user.public_dict()}


@router.post("/upload-excel")
def upload_excel(
    file: Optional[UploadFile] = File(default=None),
    directory: DirectoryService = Depends(get_directory),
):
    """
    Create users from an uploaded .xlsx or .csv sheet.

    The upload is written to UPLOAD_DIR and removed once processed.
    """
    if file is None:
        raise ImportFailed("No file uploaded")

    try:
        os.makedirs(config.UPLOAD_DIR, exist_ok=True)
        suffix = os.path.splitext(file.filename or "")[1]
        fd, path = tempfile.mkstemp(dir=config.UPLOAD_DIR, suffix=suffix)
        with os.fdopen(fd, "wb") as out:
            shutil.copyfileobj(file.file, out)
    except OSError as exc:
        raise ImportFailed(f"Cannot store upload: {exc}") from exc

    summary = import_file(directory.registry, path, file.filename or "")
    return {"message": "Excel processed successfully", "summary": summary}


@router.get("/admin/{admin_id}/access")
def admin_access(admin_id: str, directory: DirectoryService = Depends(get_directory)):
    return directory.get_admin_access(admin_id)


@router.get("/teacher/{teacher_id}/students")
def teacher_students(teacher_id: str, directory: DirectoryService = Depends(get_directory)):
    return directory.get_teacher_access(teacher_id)


@router.get("/health")
def health() -> dict:
    return {"status": "ok"}


app.include_router(router)


def run() -> None:
    import uvicorn

    uvicorn.run(app, host=config.API_HOST, port=config.API_PORT)


if __name__ == "__main__":
    run()
