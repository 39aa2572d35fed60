"""Deletion of a drained travel and everything stored under its media prefix."""

import logging

from core.db.interface import TravelRepository
from core.errors import MediaCleanupIncompleteError, UpstreamError
from core.models.travel import Travel
from core.services.media import travel_key
from core.storage.interface import BlobStore

logger = logging.getLogger(__name__)


class TravelCascade:
    def __init__(self, repository: TravelRepository, blob_store: BlobStore):
        self._repository = repository
        self._blob_store = blob_store

    def media_keys(self, travel_id: str) -> list[str]:
        key = travel_key(travel_id)
        return [k for k in self._blob_store.list_keys(key) if k == key or k.startswith(key + "/")]

    def run(self, travel: Travel) -> None:
        """Delete media first, then the record.

        Blob failures, including a failed listing, do not stop the record
        deletion; they are raised as MediaCleanupIncompleteError once the
        record is gone. A failed record delete propagates and leaves a
        drained travel that the next run finishes.
        """
        try:
            keys = self.media_keys(travel.travel_id)
        except UpstreamError:
            # Unlisted media is reported under its prefix; the record still goes.
            logger.exception("Failed to list media of travel %s", travel.travel_id)
            removed, failed = 0, [travel_key(travel.travel_id)]
        else:
            failed = self._blob_store.delete_keys(keys) if keys else []
            removed = len(keys) - len(failed)

        self._repository.delete(travel)
        logger.info(
            "Deleted travel %s (%d media object(s) removed, %d failed)",
            travel.travel_id,
            removed,
            len(failed),
        )

        if failed:
            raise MediaCleanupIncompleteError(travel.travel_id, failed)
