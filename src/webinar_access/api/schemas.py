"""Request bodies accepted by the session endpoints."""

from pydantic import BaseModel, ConfigDict, Field


class ParticipantsRequest(BaseModel):
    """A batch of user ids to register or unregister."""

    model_config = ConfigDict(populate_by_name=True)

    user_ids: list[str] = Field(alias="userIds", min_length=1)


class ExitRequest(BaseModel):
    """Departure report from the conferencing layer."""

    model_config = ConfigDict(populate_by_name=True)

    watched_seconds: int = Field(alias="watchedSeconds", ge=0)
