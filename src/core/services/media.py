"""Short-lived read URLs for private travel and profile images.

Clients fetch image bytes straight from the bucket with these URLs. They
are issued per request and never stored.
"""

from core.errors import ErrorCode, UpstreamError
from core.models.travel import Travel
from core.storage.interface import BlobStore

DEFAULT_TTL_SECONDS = 60


def travel_key(travel_id: str) -> str:
    return f"travel/{travel_id}"


def user_key(user_id: str) -> str:
    return f"user/{user_id}"


class MediaURLSigner:
    def __init__(self, blob_store: BlobStore, ttl_seconds: int = DEFAULT_TTL_SECONDS):
        self._blob_store = blob_store
        self._ttl_seconds = ttl_seconds

    def _sign(self, key: str) -> str:
        try:
            if self._blob_store.exists(key):
                return self._blob_store.presign_get(key, self._ttl_seconds)
        except UpstreamError as e:
            raise UpstreamError(e.message, code=ErrorCode.SIGN_FAILED) from e
        raise UpstreamError(f"Cannot sign missing object {key}", code=ErrorCode.SIGN_FAILED)

    def sign_travel_image(self, travel_id: str) -> str:
        return self._sign(travel_key(travel_id))

    def sign_user_profile(self, user_id: str) -> str:
        return self._sign(user_key(user_id))

    def travel_image_url(self, travel: Travel) -> str | None:
        if travel.travelimg is None:
            return None
        return self.sign_travel_image(travel.travel_id)
