"""
Timeline data model.

Status is the unit every feed is made of. Two statuses describe the same
logical post iff their ids are equal; the other fields may differ between
endpoints for the same id.
"""

from datetime import datetime
from functools import cached_property
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from statusfeed.timeline.timestamps import parse_timestamp


class Status(BaseModel):
    """One feed entry, decoded from the wire and immutable afterwards."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Identity key, unique within a source")
    created_at: str = Field(..., description="Raw wire timestamp")
    text: str = Field(default="", description="Message body")
    author_name: str = Field(default="", description="Author display name")
    author_screen_name: str = Field(..., description="Author mention handle")

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> str:
        """Ids arrive as numbers or strings; compare them as strings."""
        if isinstance(v, bool) or v is None:
            raise ValueError("status id must be a string or number")
        return str(v)

    @cached_property
    def posted_at(self) -> datetime:
        """
        Parsed created_at as an aware UTC datetime.

        Raises:
            MalformedTimestamp: If created_at is not in the wire format
        """
        return parse_timestamp(self.created_at)

    @classmethod
    def from_wire(cls, raw: dict[str, Any]) -> "Status":
        """
        Build a Status from a service status object.

        The author comes from the nested "user" record.

        Raises:
            KeyError: If a required field is missing
            ValueError: If "user" is present but not an object
        """
        user = raw.get("user") or {}
        if not isinstance(user, dict):
            raise ValueError(f"user must be an object, got {type(user).__name__}")
        return cls(
            id=raw["id"],
            created_at=raw["created_at"],
            text=raw.get("text") or "",
            author_name=user.get("name") or "",
            author_screen_name=user["screen_name"],
        )


class ServiceErrorPayload(BaseModel):
    """Application-level error object returned in place of a status collection."""

    error: str
    request: str | None = None

    @classmethod
    def from_body(cls, body: Any) -> "ServiceErrorPayload | None":
        """Return the decoded error if body is an error object, else None."""
        if isinstance(body, dict) and isinstance(body.get("error"), str):
            return cls(error=body["error"], request=body.get("request"))
        return None


class PostRequest(BaseModel):
    """Payload for publishing a new status, optionally as a reply."""

    model_config = ConfigDict(frozen=True)

    status: str = Field(..., min_length=1)
    source: str
    in_reply_to_status_id: str | None = None

    @field_validator("in_reply_to_status_id", mode="before")
    @classmethod
    def coerce_reply_id(cls, v: Any) -> str | None:
        if v is None or v == "":
            return None
        return str(v)

    def to_form(self) -> dict[str, str]:
        """Form fields for the update endpoint."""
        form = {"status": self.status, "source": self.source}
        if self.in_reply_to_status_id is not None:
            form["in_reply_to_status_id"] = self.in_reply_to_status_id
        return form
