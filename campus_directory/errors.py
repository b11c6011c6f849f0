"""Exception classes for the campus directory.

Each failure the directory can report has its own class so the web layer can
map it to a status code without inspecting messages.
"""


class DirectoryError(Exception):
    """Base exception for all directory errors."""

    pass


class InvalidRole(DirectoryError):
    """Raised when a role label is not admin, teacher or student."""

    def __init__(self, role):
        """Initialize the exception.

        Args:
            role: The unrecognized role value, as received.
        """
        self.role = role
        super().__init__(f"Invalid role: {role!r}")


class DuplicateUser(DirectoryError):
    """Raised when the email or phone is already registered in the role's store."""

    def __init__(self, role: str, email: str, phone: str):
        self.role = role
        self.email = email
        self.phone = phone
        super().__init__(f"{role} with email {email!r} or phone {phone!r} already exists")


class InvalidCredentials(DirectoryError):
    """Raised when no store holds a record matching the login id and password."""

    def __init__(self, login_id: str):
        self.login_id = login_id
        super().__init__(f"No account matches login id {login_id!r}")


class NotFound(DirectoryError):
    """Raised when an identifier lookup misses."""

    def __init__(self, role: str, user_id):
        """Initialize the exception.

        Args:
            role: The role whose store was searched.
            user_id: The identifier that was not found.
        """
        self.role = role
        self.user_id = user_id
        super().__init__(f"{role.capitalize()} '{user_id}' not found")


class PersistenceError(DirectoryError):
    """Raised when an underlying store operation fails."""

    pass


class ImportFailed(DirectoryError):
    """Raised when a spreadsheet cannot be read or the import aborts."""

    pass
