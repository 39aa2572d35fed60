"""Travel collaboration service — the operations behind the travel API."""

import logging
import uuid
from functools import lru_cache

from core.auth.interface import AuthContext
from core.clients import get_dynamo_client, get_s3_client
from core.config import get_config
from core.db.interface import TravelRepository, UserDirectory
from core.db.travels import DynamoTravelRepository
from core.db.users import DynamoUserDirectory
from core.errors import (
    AuthenticationError,
    ErrorCode,
    ForbiddenError,
    NotFoundError,
    UpstreamError,
    ValidationError,
)
from core.models.api import (
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
from core.services.cascade import TravelCascade
from core.services.invite_token import InviteTokenIssuer
from core.services.media import MediaURLSigner, travel_key
from core.services.membership import MembershipManager
from core.storage.interface import BlobStore
from core.storage.s3 import S3BlobStore

logger = logging.getLogger(__name__)


def _require_auth(auth: AuthContext | None) -> AuthContext:
    if auth is None:
        raise AuthenticationError("Request has no authenticated user", code=ErrorCode.UNAUTHORIZED)
    return auth


class TravelCollaborationService:
    def __init__(
        self,
        repository: TravelRepository,
        users: UserDirectory,
        blob_store: BlobStore,
        token_issuer: InviteTokenIssuer,
        membership: MembershipManager,
        signer: MediaURLSigner,
    ):
        self._repository = repository
        self._users = users
        self._blob_store = blob_store
        self._token_issuer = token_issuer
        self._membership = membership
        self._signer = signer

    def _require_user(self, user_id: str) -> User:
        user = self._users.get_user(user_id)
        if user is None:
            raise NotFoundError(f"User {user_id} not found", code=ErrorCode.USER_NOT_FOUND)
        return user

    def _require_travel(self, travel_id: str) -> Travel:
        travel = self._repository.get(travel_id)
        if travel is None or not travel.invited:
            raise NotFoundError(f"Travel {travel_id} not found")
        return travel

    def _require_member(self, travel: Travel, user_id: str) -> None:
        if not self._membership.is_member(travel, user_id):
            raise ForbiddenError(f"User {user_id} is not a member of travel {travel.travel_id}")

    def _display_url(self, travel: Travel) -> str | None:
        """Cover image URL for listings; a missing object shows as no image."""
        try:
            return self._signer.travel_image_url(travel)
        except UpstreamError as e:
            logger.warning("No cover image URL for travel %s: %s", travel.travel_id, e.message)
            return None

    def _profile_url(self, user_id: str) -> str | None:
        try:
            return self._signer.sign_user_profile(user_id)
        except UpstreamError as e:
            logger.warning("No profile image URL for user %s: %s", user_id, e.message)
            return None

    def list_travels(self, auth: AuthContext | None) -> list[TravelSummary]:
        auth = _require_auth(auth)
        travels = self._repository.list_for_member(auth.user_id)
        if not travels:
            raise NotFoundError(f"No travels for user {auth.user_id}", code=ErrorCode.TRAVELS_NOT_FOUND)
        return [TravelSummary(travel=t, travel_url=self._display_url(t)) for t in travels]

    def get_travel(self, travel_id: str) -> TravelView:
        travel = self._require_travel(travel_id)
        return TravelView(
            travel=travel,
            travel_url=self._display_url(travel),
            invited_profile=[
                MemberProfile(user_id=m.user_id, url=self._profile_url(m.user_id)) for m in travel.invited
            ],
        )

    def create_travel(self, auth: AuthContext | None, request: TravelCreate) -> Travel:
        auth = _require_auth(auth)
        user = self._require_user(auth.user_id)

        travel_id = uuid.uuid4().hex
        travelimg = None
        if request.image is not None:
            self._blob_store.put(travel_key(travel_id), request.image.data, request.image.content_type)
            travelimg = travel_id

        def insert(token: str) -> Travel:
            return self._repository.create(
                Travel(
                    travel_id=travel_id,
                    title=request.title,
                    start_date=request.start_date,
                    end_date=request.end_date,
                    location=request.location,
                    travelimg=travelimg,
                    invited=[Membership(user_id=user.user_id, name=user.name)],
                    ivtoken=token,
                    creator_id=user.user_id,
                )
            )

        try:
            travel = self._token_issuer.issue(insert)
        except Exception:
            if travelimg is not None:
                self._discard_upload(travel_id)
            raise

        logger.info("User %s created travel %s", user.user_id, travel.travel_id)
        return travel

    def _discard_upload(self, travel_id: str) -> None:
        try:
            self._blob_store.delete(travel_key(travel_id))
        except UpstreamError:
            logger.exception("Failed to remove image of uncreated travel %s", travel_id)

    def preview_invite(self, auth: AuthContext | None, request: InviteRedeem) -> InvitePreview:
        auth = _require_auth(auth)
        return self._membership.redeem_invite(request.ivtoken, auth.user_id)

    def accept_invite(self, auth: AuthContext | None, request: InviteAccept) -> None:
        auth = _require_auth(auth)
        user = self._require_user(auth.user_id)
        self._membership.accept_invite(request.travel_id, user.user_id, user.name)

    def update_travel(self, auth: AuthContext | None, travel_id: str, request: TravelUpdate) -> Travel:
        auth = _require_auth(auth)
        travel = self._require_travel(travel_id)
        self._require_member(travel, auth.user_id)

        changes = request.field_changes()
        start = changes.get("start_date", travel.start_date)
        end = changes.get("end_date", travel.end_date)
        if start and end and end < start:
            raise ValidationError(f"Travel {travel_id} would end before it starts")

        if request.image is not None:
            self._blob_store.put(travel_key(travel_id), request.image.data, request.image.content_type)
            changes["travelimg"] = travel_id

        updated = self._repository.update_fields(travel_id, auth.user_id, changes, request.location)
        logger.info("User %s updated travel %s (%s)", auth.user_id, travel_id, sorted(changes))
        return updated

    def leave_travel(self, auth: AuthContext | None, travel_id: str) -> RemovalResult:
        auth = _require_auth(auth)
        travel = self._repository.get(travel_id)
        if travel is None:
            raise NotFoundError(f"Travel {travel_id} not found")
        # A drained travel has no members left to check; leaving finishes its deletion.
        if travel.invited:
            self._require_member(travel, auth.user_id)
        return self._membership.remove_member(travel_id, auth.user_id)


def build_travel_service(
    repository: TravelRepository,
    users: UserDirectory,
    blob_store: BlobStore,
    signed_url_ttl_seconds: int = 60,
    invite_token_max_attempts: int = 5,
) -> TravelCollaborationService:
    cascade = TravelCascade(repository, blob_store)
    return TravelCollaborationService(
        repository=repository,
        users=users,
        blob_store=blob_store,
        token_issuer=InviteTokenIssuer(repository, max_attempts=invite_token_max_attempts),
        membership=MembershipManager(repository, cascade),
        signer=MediaURLSigner(blob_store, ttl_seconds=signed_url_ttl_seconds),
    )


@lru_cache(maxsize=1)
def get_travel_service() -> TravelCollaborationService:
    config = get_config()
    dynamo_client = get_dynamo_client()
    return build_travel_service(
        repository=DynamoTravelRepository(dynamo_client, config.travels_table, config.invite_tokens_table),
        users=DynamoUserDirectory(dynamo_client, config.users_table),
        blob_store=S3BlobStore(get_s3_client(), config.media_bucket),
        signed_url_ttl_seconds=config.signed_url_ttl_seconds,
        invite_token_max_attempts=config.invite_token_max_attempts,
    )
