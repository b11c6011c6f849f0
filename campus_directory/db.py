import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Tuple

from .errors import PersistenceError
from .models import Role, UserRecord

_SCHEMA = """
CREATE TABLE IF NOT EXISTS users (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL DEFAULT '',
    email TEXT NOT NULL DEFAULT '',
    phone TEXT NOT NULL DEFAULT '',
    university TEXT NOT NULL DEFAULT '',
    password_hash TEXT NOT NULL,
    role TEXT NOT NULL CHECK(role IN ('admin','teacher','student')),
    university_key TEXT NOT NULL DEFAULT '',
    created_at TEXT NOT NULL DEFAULT (datetime('now'))
);

CREATE INDEX IF NOT EXISTS idx_users_email ON users(email);
CREATE INDEX IF NOT EXISTS idx_users_phone ON users(phone);

CREATE TABLE IF NOT EXISTS access_refs (
    owner_id INTEGER NOT NULL,
    target_role TEXT NOT NULL CHECK(target_role IN ('teacher','student')),
    position INTEGER NOT NULL,
    target_id INTEGER NOT NULL,
    PRIMARY KEY (owner_id, target_role, position),
    FOREIGN KEY (owner_id) REFERENCES users(id)
);
"""

_COLUMNS = "id, name, email, phone, university, password_hash, role, university_key"

# Stays under SQLite's bound-parameter limit (999 on older builds).
_ID_BATCH = 500


@contextmanager
def get_conn(path: str) -> Iterator[sqlite3.Connection]:
    """
    Open a connection to one store, commit on success and always close it.

    sqlite errors raised inside the block are re-raised as PersistenceError.
    """
    try:
        conn = sqlite3.connect(path, check_same_thread=False)
    except sqlite3.Error as exc:
        raise PersistenceError(f"Cannot open store {path}: {exc}") from exc
    conn.row_factory = sqlite3.Row
    try:
        conn.execute("PRAGMA foreign_keys = ON;")
        yield conn
        conn.commit()
    except sqlite3.Error as exc:
        conn.rollback()
        raise PersistenceError(str(exc)) from exc
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def _email_or_phone_clause(email: str, phone: str) -> Tuple[str, List[str]]:
    # Blank values never match, otherwise every record without a phone
    # would collide with every other one.
    clauses: List[str] = []
    params: List[str] = []
    if email:
        clauses.append("email = ?")
        params.append(email)
    if phone:
        clauses.append("phone = ?")
        params.append(phone)
    return " OR ".join(clauses), params


class RecordStore:
    """Lookups and inserts against the users of a single role.

    Every query is filtered by role, so the three stores may live in three
    files or share a single one.
    """

    def __init__(self, role: Role, path: str):
        self.role = role
        self.path = path

    def __repr__(self) -> str:
        return f"RecordStore(role={self.role.value!r}, path={self.path!r})"

    def init_schema(self) -> None:
        Path(self.path).parent.mkdir(parents=True, exist_ok=True)
        with get_conn(self.path) as conn:
            conn.executescript(_SCHEMA)

    # -------------------------
    # Reads
    # -------------------------
    def find_by_email_or_phone(self, email: str, phone: str) -> Optional[UserRecord]:
        with get_conn(self.path) as conn:
            return self._find_first(conn, email, phone)

    def find_all_by_email_or_phone(self, email: str, phone: str) -> List[UserRecord]:
        clause, params = _email_or_phone_clause(email, phone)
        if not clause:
            return []
        with get_conn(self.path) as conn:
            rows = conn.execute(
                f"SELECT {_COLUMNS} FROM users WHERE role = ? AND ({clause}) ORDER BY id",
                (self.role.value, *params),
            ).fetchall()
            return [self._to_record(conn, row) for row in rows]

    def find_by_id(self, user_id: int) -> Optional[UserRecord]:
        with get_conn(self.path) as conn:
            row = conn.execute(
                f"SELECT {_COLUMNS} FROM users WHERE role = ? AND id = ?",
                (self.role.value, user_id),
            ).fetchone()
            return self._to_record(conn, row) if row else None

    def find_many(self, ids: Iterable[int]) -> List[UserRecord]:
        """Fetch several records in batched queries, in the order of ``ids``.

        Ids with no record in this store are left out.
        """
        ids = list(ids)
        if not ids:
            return []
        unique = list(dict.fromkeys(ids))
        by_id = {}
        with get_conn(self.path) as conn:
            for start in range(0, len(unique), _ID_BATCH):
                batch = unique[start:start + _ID_BATCH]
                placeholders = ",".join("?" for _ in batch)
                rows = conn.execute(
                    f"SELECT {_COLUMNS} FROM users WHERE role = ? AND id IN ({placeholders})",
                    (self.role.value, *batch),
                ).fetchall()
                by_id.update((row["id"], self._to_record(conn, row)) for row in rows)
        return [by_id[i] for i in ids if i in by_id]

    def count(self) -> int:
        with get_conn(self.path) as conn:
            row = conn.execute(
                "SELECT COUNT(*) AS c FROM users WHERE role = ?", (self.role.value,)
            ).fetchone()
            return int(row["c"]) if row else 0

    # -------------------------
    # Writes
    # -------------------------
    def insert(self, record: UserRecord) -> UserRecord:
        """Persist ``record`` without any duplicate check."""
        with get_conn(self.path) as conn:
            return self._insert(conn, record)

    def insert_if_absent(self, record: UserRecord) -> Optional[UserRecord]:
        """Insert unless a record with the same email or phone exists.

        The check and the insert share one write transaction, so concurrent
        callers on the same store cannot both succeed.
        """
        with get_conn(self.path) as conn:
            conn.execute("BEGIN IMMEDIATE")
            if self._find_first(conn, record.email, record.phone) is not None:
                return None
            return self._insert(conn, record)

    # -------------------------
    # Helpers
    # -------------------------
    def _find_first(self, conn: sqlite3.Connection, email: str, phone: str) -> Optional[UserRecord]:
        clause, params = _email_or_phone_clause(email, phone)
        if not clause:
            return None
        row = conn.execute(
            f"SELECT {_COLUMNS} FROM users WHERE role = ? AND ({clause}) ORDER BY id LIMIT 1",
            (self.role.value, *params),
        ).fetchone()
        return self._to_record(conn, row) if row else None

    def _insert(self, conn: sqlite3.Connection, record: UserRecord) -> UserRecord:
        cursor = conn.execute(
            """
            INSERT INTO users (name, email, phone, university, password_hash, role, university_key)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                record.name,
                record.email,
                record.phone,
                record.university,
                record.password,
                self.role.value,
                record.university_key,
            ),
        )
        user_id = cursor.lastrowid
        refs = [
            (user_id, Role.STUDENT.value, pos, target)
            for pos, target in enumerate(record.access_to_students)
        ] + [
            (user_id, Role.TEACHER.value, pos, target)
            for pos, target in enumerate(record.access_to_teachers)
        ]
        if refs:
            conn.executemany(
                "INSERT INTO access_refs (owner_id, target_role, position, target_id) VALUES (?, ?, ?, ?)",
                refs,
            )
        return record.model_copy(update={"id": user_id, "role": self.role.value})

    def _to_record(self, conn: sqlite3.Connection, row: sqlite3.Row) -> UserRecord:
        refs = conn.execute(
            """
            SELECT target_role, target_id
            FROM access_refs
            WHERE owner_id = ?
            ORDER BY target_role, position
            """,
            (row["id"],),
        ).fetchall()
        return UserRecord(
            id=row["id"],
            name=row["name"],
            email=row["email"],
            phone=row["phone"],
            university=row["university"],
            password=row["password_hash"],
            role=row["role"],
            university_key=row["university_key"],
            access_to_students=[r["target_id"] for r in refs if r["target_role"] == Role.STUDENT.value],
            access_to_teachers=[r["target_id"] for r in refs if r["target_role"] == Role.TEACHER.value],
        )
