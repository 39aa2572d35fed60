"""Travel membership: invite redemption, acceptance and removal."""

import logging

from core.db.interface import TravelRepository
from core.errors import ConflictError, ErrorCode, NotFoundError
from core.models.api import InvitePreview, RemovalResult
from core.models.travel import Membership, Travel
from core.services.cascade import TravelCascade

logger = logging.getLogger(__name__)


class MembershipManager:
    def __init__(self, repository: TravelRepository, cascade: TravelCascade):
        self._repository = repository
        self._cascade = cascade

    @staticmethod
    def is_member(travel: Travel, user_id: str) -> bool:
        return any(m.user_id == user_id for m in travel.invited)

    def redeem_invite(self, token: str, user_id: str) -> InvitePreview:
        """Validate an invite token for ``user_id`` without joining."""
        travel = self._repository.find_by_token(token)
        if travel is None or not travel.invited:
            raise NotFoundError("No travel for invite token", code=ErrorCode.INVITE_NOT_FOUND)
        if self.is_member(travel, user_id):
            raise ConflictError(
                f"User {user_id} already in travel {travel.travel_id}", code=ErrorCode.ALREADY_MEMBER
            )
        return InvitePreview(travel_id=travel.travel_id, inviter_name=travel.inviter_name)

    def accept_invite(self, travel_id: str, user_id: str, name: str) -> None:
        added = self._repository.add_member(travel_id, Membership(user_id=user_id, name=name))
        if added:
            logger.info("User %s joined travel %s", user_id, travel_id)
        else:
            logger.info("User %s already in travel %s, nothing to do", user_id, travel_id)

    def remove_member(self, travel_id: str, user_id: str) -> RemovalResult:
        current = self._repository.get(travel_id)
        if current is not None and not current.invited:
            logger.warning("Travel %s is drained but still stored, finishing its deletion", travel_id)
            self._cascade.run(current)
            return RemovalResult(deleted=True)

        travel = self._repository.remove_member(travel_id, user_id)
        logger.info("User %s left travel %s (%d member(s) left)", user_id, travel_id, len(travel.invited))

        if travel.invited:
            return RemovalResult(deleted=False, travel=travel)

        self._cascade.run(travel)
        return RemovalResult(deleted=True)
