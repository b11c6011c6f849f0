"""Role-scoped user directory for the campus application."""

__version__ = "1.0.0"
