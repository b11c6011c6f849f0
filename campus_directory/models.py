from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Role(str, Enum):
    ADMIN = "admin"
    TEACHER = "teacher"
    STUDENT = "student"


class UserRecord(BaseModel):
    """A user as stored in one role's database.

    JSON uses the camelCase names of the public API (``universityKey``,
    ``accessToStudents``, ``accessToTeachers``); Python code uses snake_case.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: Optional[int] = None
    name: str = ""
    email: str = ""
    phone: str = ""
    university: str = ""
    password: str = ""
    role: str
    university_key: str = Field(default="", alias="universityKey")
    access_to_students: List[int] = Field(default_factory=list, alias="accessToStudents")
    access_to_teachers: List[int] = Field(default_factory=list, alias="accessToTeachers")

    def for_role(self, role: Role) -> "UserRecord":
        """Copy of this record with the access lists the role does not carry cleared."""
        update: Dict[str, Any] = {"role": role.value}
        if role is Role.STUDENT:
            update["access_to_students"] = []
        if role is not Role.ADMIN:
            update["access_to_teachers"] = []
        return self.model_copy(update=update)

    def public_dict(self) -> Dict[str, Any]:
        """JSON-ready representation without the password."""
        return self.model_dump(by_alias=True, exclude={"password"})
