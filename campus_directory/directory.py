"""Signup, login and access-list queries over the role stores.

Each role lives in its own store, so a reference from an admin to a teacher
or a student is resolved here with a second fetch against the target store.
"""

import logging
from typing import Any, Dict, Optional

from .errors import DuplicateUser, InvalidCredentials, InvalidRole, NotFound
from .models import Role, UserRecord
from .roles import LOGIN_ORDER, RoleRegistry
from .security import hash_password, verify_password

logger = logging.getLogger(__name__)


def _parse_id(user_id) -> Optional[int]:
    # Path ids arrive as text; anything that is not an integer cannot exist.
    try:
        return int(str(user_id).strip())
    except (TypeError, ValueError):
        return None


class DirectoryService:
    def __init__(self, registry: RoleRegistry):
        self.registry = registry

    def signup(self, candidate: UserRecord) -> str:
        """Register ``candidate`` in the store of its role.

        Returns:
            The confirmation message, tagged with the role.

        Raises:
            InvalidRole: The role is not admin, teacher or student.
            DuplicateUser: The email or phone is already registered for that role.
            PersistenceError: The store could not be read or written.
        """
        store = self.registry.resolve(candidate.role)
        if store is None:
            raise InvalidRole(candidate.role)

        record = candidate.for_role(store.role).model_copy(
            update={"id": None, "password": hash_password(candidate.password)}
        )
        created = store.insert_if_absent(record)
        if created is None:
            raise DuplicateUser(store.role.value, candidate.email, candidate.phone)

        logger.info("Registered %s id=%s", store.role.value, created.id)
        return f"{store.role.value} registered successfully"

    def login(self, login_id: str, password: str) -> UserRecord:
        """Find the account whose email or phone is ``login_id``.

        Stores are searched admin, then student, then teacher; the first
        record whose password verifies is returned, even if the same
        credentials also exist under a later role.
        """
        for role in LOGIN_ORDER:
            for candidate in self.registry.store(role).find_all_by_email_or_phone(login_id, login_id):
                if verify_password(password, candidate.password):
                    logger.info("Login succeeded for %s id=%s", role.value, candidate.id)
                    return candidate
        logger.info("Login failed for login id %r", login_id)
        raise InvalidCredentials(login_id)

    def get_admin_access(self, admin_id) -> Dict[str, Any]:
        admin = self._get(Role.ADMIN, admin_id)
        result = admin.public_dict()
        result["accessToTeachers"] = self._resolve(Role.TEACHER, admin.access_to_teachers)
        result["accessToStudents"] = self._resolve(Role.STUDENT, admin.access_to_students)
        return result

    def get_teacher_access(self, teacher_id) -> Dict[str, Any]:
        teacher = self._get(Role.TEACHER, teacher_id)
        result = teacher.public_dict()
        result["accessToStudents"] = self._resolve(Role.STUDENT, teacher.access_to_students)
        return result

    def _get(self, role: Role, user_id) -> UserRecord:
        parsed = _parse_id(user_id)
        record = self.registry.store(role).find_by_id(parsed) if parsed is not None else None
        if record is None:
            raise NotFound(role.value, user_id)
        return record

    def _resolve(self, role: Role, ids):
        return [record.public_dict() for record in self.registry.store(role).find_many(ids)]
