"""Invite token issuance."""

import logging
import secrets
from typing import Callable, TypeVar

from core.db.interface import TravelRepository
from core.errors import ConflictError, ErrorCode, TokenCollisionError

logger = logging.getLogger(__name__)

TOKEN_BYTES = 8

T = TypeVar("T")


class InviteTokenIssuer:
    def __init__(self, repository: TravelRepository, max_attempts: int = 5):
        self._repository = repository
        self._max_attempts = max_attempts

    @staticmethod
    def generate() -> str:
        """16 hex characters from a CSPRNG."""
        return secrets.token_hex(TOKEN_BYTES)

    def issue(self, insert: Callable[[str], T]) -> T:
        """Call ``insert`` with a fresh unused token, retrying on collision.

        The existence check only skips obvious collisions; ``insert`` must
        raise TokenCollisionError when the store's uniqueness constraint
        rejects the token, which is what actually guarantees uniqueness
        under concurrent creation.
        """
        for attempt in range(1, self._max_attempts + 1):
            token = self.generate()
            if self._repository.token_exists(token):
                logger.info("Invite token collision on pre-check (attempt %d)", attempt)
                continue
            try:
                return insert(token)
            except TokenCollisionError:
                logger.info("Invite token collision on insert (attempt %d)", attempt)

        raise ConflictError(
            f"No unique invite token after {self._max_attempts} attempts",
            code=ErrorCode.TOKEN_EXHAUSTED,
        )
