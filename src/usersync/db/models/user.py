"""Users mirrored from the identity provider."""

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from usersync.db.base import Base, TimestampMixin


class UserRow(Base, TimestampMixin):
    __tablename__ = "users"

    # Provider-assigned user id (e.g. "user_2ab...")
    external_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    # Empty when the account was created without an address
    email: Mapped[str] = mapped_column(String(320), nullable=False, default="", index=True)
    display_name: Mapped[str] = mapped_column(String(200), nullable=False)
    avatar_url: Mapped[str | None] = mapped_column(Text, nullable=True)
