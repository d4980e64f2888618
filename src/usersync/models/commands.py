"""Mutation commands sent to the user store."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class UserUpsertCommand(BaseModel):
    model_config = ConfigDict(frozen=True)

    external_id: str = Field(..., min_length=1)
    email: str
    display_name: str
    avatar_url: str | None = None


class UserPatchCommand(BaseModel):
    """Partial update. A field left unset means "do not change", never "clear"."""

    model_config = ConfigDict(frozen=True)

    external_id: str = Field(..., min_length=1)
    display_name: str | None = None
    email: str | None = None
    avatar_url: str | None = None

    def to_changes(self) -> dict[str, Any]:
        """Return only the fields that were explicitly provided."""
        return self.model_dump(exclude_unset=True, exclude={"external_id"})


class UserDeleteCommand(BaseModel):
    model_config = ConfigDict(frozen=True)

    external_id: str = Field(..., min_length=1)
