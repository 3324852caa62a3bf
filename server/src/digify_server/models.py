"""Server-side request models."""

from typing import Any

from pydantic import BaseModel, Field, field_validator


# =============================================================================
# API Input Models
# =============================================================================


class NavigationBeacon(BaseModel):
    """Input for POST /api/digify/track (sent by the client route tracker)."""

    pathname: str = Field(min_length=1)
    ts: str | None = None

    @field_validator("ts", mode="before")
    @classmethod
    def _ignore_non_string_ts(cls, value: Any) -> str | None:
        return value if isinstance(value, str) else None


class ContactSubmission(BaseModel):
    """Input for POST /api/contact.

    Required fields are checked by the route so that a missing field yields
    the same error as an empty one.
    """

    name: str | None = None
    email: str | None = None
    message: str | None = None
    company: str | None = None
    phone: str | None = None
    attrib: dict | None = None

    @field_validator("attrib", mode="before")
    @classmethod
    def _ignore_non_mapping_attrib(cls, value: Any) -> dict | None:
        return value if isinstance(value, dict) else None

    @property
    def complete(self) -> bool:
        """Whether name, email and message are all present."""
        return bool(self.name and self.email and self.message)
