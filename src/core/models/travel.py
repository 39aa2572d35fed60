"""Pydantic models for travels and their members."""

from datetime import date
from typing import Any

from pydantic import BaseModel, Field


class Membership(BaseModel):
    user_id: str
    name: str


class Travel(BaseModel):
    travel_id: str
    title: str
    start_date: date | None = None
    end_date: date | None = None
    location: dict[str, Any] = Field(default_factory=dict)
    travelimg: str | None = None
    invited: list[Membership] = Field(default_factory=list)
    ivtoken: str
    creator_id: str | None = None

    @property
    def member_ids(self) -> list[str]:
        return [m.user_id for m in self.invited]

    @property
    def inviter_name(self) -> str | None:
        """Display name attributed to invites: the first-listed member."""
        return self.invited[0].name if self.invited else None


class User(BaseModel):
    user_id: str
    name: str
