"""
Pydantic models for Trip Diary.
"""

from core.models.api import (
    ImageUpload,
    InviteAccept,
    InvitePreview,
    InviteRedeem,
    MemberProfile,
    RemovalResult,
    TravelCreate,
    TravelSummary,
    TravelUpdate,
    TravelView,
)
from core.models.travel import Membership, Travel, User

__all__ = [
    "ImageUpload",
    "InviteAccept",
    "InvitePreview",
    "InviteRedeem",
    "MemberProfile",
    "Membership",
    "RemovalResult",
    "Travel",
    "TravelCreate",
    "TravelSummary",
    "TravelUpdate",
    "TravelView",
    "User",
]
