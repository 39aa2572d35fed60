from abc import ABC, abstractmethod
from typing import Any

from core.models.travel import Membership, Travel, User


class TravelRepository(ABC):
    """Persistence for travel records.

    Implementations must enforce invite-token uniqueness at insert time and
    perform membership changes as single atomic conditional writes.
    """

    @abstractmethod
    def get(self, travel_id: str) -> Travel | None: ...

    @abstractmethod
    def find_by_token(self, ivtoken: str) -> Travel | None: ...

    @abstractmethod
    def token_exists(self, ivtoken: str) -> bool: ...

    @abstractmethod
    def create(self, travel: Travel) -> Travel:
        """Insert a travel and claim its token; raises TokenCollisionError if claimed."""

    @abstractmethod
    def add_member(self, travel_id: str, membership: Membership) -> bool:
        """Insert-if-absent. Returns False when the user is already a member."""

    @abstractmethod
    def remove_member(self, travel_id: str, user_id: str) -> Travel:
        """Remove the user and return the travel as it is after the removal."""

    @abstractmethod
    def update_fields(
        self,
        travel_id: str,
        user_id: str,
        changes: dict[str, Any],
        location: dict[str, Any] | None = None,
    ) -> Travel:
        """Apply field changes if user_id is still a member; location keys are merged."""

    @abstractmethod
    def delete(self, travel: Travel) -> None: ...

    @abstractmethod
    def list_for_member(self, user_id: str) -> list[Travel]: ...


class UserDirectory(ABC):
    @abstractmethod
    def get_user(self, user_id: str) -> User | None: ...
