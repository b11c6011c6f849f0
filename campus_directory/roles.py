"""Role registry: which store holds the users of each role."""

from typing import Dict, Iterator, Mapping, Optional

from . import config
from .db import RecordStore
from .models import Role

# Login tries the stores in this order and the first match wins, so a
# login id registered under several roles always signs in as the earliest.
LOGIN_ORDER = (Role.ADMIN, Role.STUDENT, Role.TEACHER)


class RoleRegistry:
    """Maps role labels to their RecordStore.

    New roles are added as ``Role`` members plus an entry in the mapping
    given to the constructor.
    """

    def __init__(self, stores: Mapping[Role, RecordStore]):
        missing = [role.value for role in Role if role not in stores]
        if missing:
            raise ValueError(f"No store configured for role(s): {', '.join(missing)}")
        self._stores: Dict[Role, RecordStore] = dict(stores)

    def resolve(self, role) -> Optional[RecordStore]:
        """Return the store for ``role`` or None when it is not a known label.

        Matching is exact and case-sensitive: "Admin" is not "admin".
        """
        if not isinstance(role, str):
            return None
        try:
            return self._stores[Role(role)]
        except ValueError:
            return None

    def store(self, role: Role) -> RecordStore:
        return self._stores[role]

    def __iter__(self) -> Iterator[RecordStore]:
        return iter(self._stores.values())

    def init_all(self) -> None:
        for store in self:
            store.init_schema()


def build_registry(paths: Optional[Mapping[str, str]] = None) -> RoleRegistry:
    """Build a registry from role -> database path, defaulting to the config."""
    paths = paths or config.store_paths()
    return RoleRegistry({role: RecordStore(role, paths[role.value]) for role in Role})
