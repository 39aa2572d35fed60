"""Request and response models for the travel API boundary."""

from datetime import date
from typing import Any

from pydantic import Base64Bytes, BaseModel, Field, model_validator

from core.models.travel import Travel


class ImageUpload(BaseModel):
    data: Base64Bytes
    content_type: str = Field(default="image/jpeg", pattern=r"^image/[A-Za-z0-9.+-]+$")


class TravelCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    start_date: date | None = None
    end_date: date | None = None
    location: dict[str, Any] = Field(default_factory=dict)
    image: ImageUpload | None = None

    @model_validator(mode="after")
    def end_not_before_start(self) -> "TravelCreate":
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class TravelUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    start_date: date | None = None
    end_date: date | None = None
    location: dict[str, Any] | None = None
    image: ImageUpload | None = None

    @model_validator(mode="after")
    def end_not_before_start(self) -> "TravelUpdate":
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self

    def field_changes(self) -> dict[str, Any]:
        """Scalar fields that were supplied, excluding location and image."""
        return {
            name: getattr(self, name)
            for name in ("title", "start_date", "end_date")
            if name in self.model_fields_set and getattr(self, name) is not None
        }


class InviteRedeem(BaseModel):
    ivtoken: str = Field(..., min_length=1)


class InviteAccept(BaseModel):
    travel_id: str = Field(..., min_length=1)


class InvitePreview(BaseModel):
    travel_id: str
    inviter_name: str | None


class RemovalResult(BaseModel):
    deleted: bool
    travel: Travel | None = None


class MemberProfile(BaseModel):
    user_id: str
    url: str | None


class TravelSummary(BaseModel):
    travel: Travel
    travel_url: str | None


class TravelView(BaseModel):
    travel: Travel
    travel_url: str | None
    invited_profile: list[MemberProfile]
