"""SQLAlchemy ORM models - import all to register with Base.metadata."""

from usersync.db.models.user import UserRow

__all__ = ["UserRow"]
