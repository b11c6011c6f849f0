"""Create users in bulk from spreadsheet rows.

Columns are positional: name, email, phone, university, password, role,
universityKey. The first row is a header and is always skipped.
"""

import logging
import os
from typing import Dict, Iterable, Sequence

from .errors import ImportFailed, PersistenceError
from .models import Role, UserRecord
from .roles import RoleRegistry
from .security import hash_password
from .spreadsheet import read_rows

logger = logging.getLogger(__name__)

COLUMNS = ("name", "email", "phone", "university", "password", "role", "university_key")


def row_to_record(row: Sequence[str]) -> UserRecord:
    values = [str(v) if v is not None else "" for v in list(row)[: len(COLUMNS)]]
    values += [""] * (len(COLUMNS) - len(values))
    return UserRecord(**dict(zip(COLUMNS, values)))


def import_rows(registry: RoleRegistry, rows: Iterable[Sequence[str]]) -> Dict[str, int]:
    """Insert every new user in ``rows`` and count creations per role.

    Rows with an unknown role, or whose email or phone already exists in
    their role's store, are skipped without error. Rows are handled one at a
    time so a row sees the users inserted by the rows above it.
    """
    created = {role.value: 0 for role in Role}
    for index, row in enumerate(rows):
        if index == 0:
            continue

        candidate = row_to_record(row)
        store = registry.resolve(candidate.role)
        if store is None:
            logger.debug("Row %d skipped: unknown role %r", index + 1, candidate.role)
            continue

        # Cheap lookup first so re-imported users skip the password hash.
        if store.find_by_email_or_phone(candidate.email, candidate.phone) is not None:
            logger.debug("Row %d skipped: %s already registered", index + 1, store.role.value)
            continue

        record = candidate.for_role(store.role).model_copy(
            update={"password": hash_password(candidate.password)}
        )
        if store.insert_if_absent(record) is None:
            logger.debug("Row %d skipped: %s already registered", index + 1, store.role.value)
            continue
        created[store.role.value] += 1
    return created


def import_file(registry: RoleRegistry, path: str, filename: str = "") -> Dict[str, int]:
    """Import an uploaded spreadsheet and remove it afterwards.

    The file is deleted whether the import succeeds or fails.

    Raises:
        ImportFailed: The file cannot be read, or a store failed mid-import.
            Users inserted before the failure are kept.
    """
    try:
        rows = read_rows(path, filename)
        try:
            summary = import_rows(registry, rows)
        except PersistenceError as exc:
            raise ImportFailed(f"Import aborted: {exc}") from exc
    finally:
        try:
            os.remove(path)
        except FileNotFoundError:
            pass
    logger.info("Imported %s: %s", filename or path, summary)
    return summary
