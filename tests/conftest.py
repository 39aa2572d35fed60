"""Shared test fixtures for Trip Diary."""

import os
import sys
import threading
from pathlib import Path

import pytest
from dotenv import load_dotenv

# Load .env file for test configuration
load_dotenv()

# Unset AWS_PROFILE for local testing (DynamoDB Local doesn't need it)
if "AWS_PROFILE" in os.environ:
    del os.environ["AWS_PROFILE"]

# Add src directory to Python path for imports
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from core.db.interface import TravelRepository, UserDirectory  # noqa: E402
from core.errors import ErrorCode, ForbiddenError, NotFoundError, TokenCollisionError  # noqa: E402
from core.models.travel import User  # noqa: E402
from core.services.travel import build_travel_service  # noqa: E402
from core.storage.interface import BlobStore  # noqa: E402


class InMemoryTravelRepository(TravelRepository):
    """Travel repository with the same atomicity contract as the DynamoDB one."""

    def __init__(self):
        self._lock = threading.Lock()
        self.travels = {}
        self.tokens = {}

    def get(self, travel_id):
        with self._lock:
            travel = self.travels.get(travel_id)
            return travel.model_copy(deep=True) if travel else None

    def find_by_token(self, ivtoken):
        with self._lock:
            travel_id = self.tokens.get(ivtoken)
        return self.get(travel_id) if travel_id else None

    def token_exists(self, ivtoken):
        with self._lock:
            return ivtoken in self.tokens

    def create(self, travel):
        with self._lock:
            if travel.ivtoken in self.tokens:
                raise TokenCollisionError(travel.ivtoken)
            self.travels[travel.travel_id] = travel.model_copy(deep=True)
            self.tokens[travel.ivtoken] = travel.travel_id
        return travel

    def _live(self, travel_id):
        travel = self.travels.get(travel_id)
        if travel is None or not travel.invited:
            raise NotFoundError(f"Travel {travel_id} not found")
        return travel

    def add_member(self, travel_id, membership):
        with self._lock:
            travel = self._live(travel_id)
            if membership.user_id in travel.member_ids:
                return False
            travel.invited.append(membership)
            return True

    def remove_member(self, travel_id, user_id):
        with self._lock:
            travel = self._live(travel_id)
            if user_id not in travel.member_ids:
                raise ForbiddenError(f"{user_id} not in {travel_id}", code=ErrorCode.NOT_A_MEMBER)
            travel.invited = [m for m in travel.invited if m.user_id != user_id]
            return travel.model_copy(deep=True)

    def update_fields(self, travel_id, user_id, changes, location=None):
        with self._lock:
            travel = self._live(travel_id)
            if user_id not in travel.member_ids:
                raise ForbiddenError(f"{user_id} may not update {travel_id}")
            for field, value in changes.items():
                setattr(travel, field, value)
            if location:
                travel.location = {**travel.location, **location}
            return travel.model_copy(deep=True)

    def delete(self, travel):
        with self._lock:
            stored = self.travels.pop(travel.travel_id, None)
            assert stored is None or not stored.invited
            self.tokens.pop(travel.ivtoken, None)

    def list_for_member(self, user_id):
        with self._lock:
            return [t.model_copy(deep=True) for t in self.travels.values() if user_id in t.member_ids]


class InMemoryBlobStore(BlobStore):
    def __init__(self):
        self.objects = {}
        self.fail_deletes = set()

    def put(self, key, data, content_type):
        self.objects[key] = (data, content_type)

    def exists(self, key):
        return key in self.objects

    def presign_get(self, key, expires_in):
        return f"https://media.test/{key}?X-Amz-Expires={expires_in}"

    def list_keys(self, prefix):
        return sorted(k for k in self.objects if k.startswith(prefix))

    def delete(self, key):
        self.objects.pop(key, None)

    def delete_keys(self, keys):
        failed = [k for k in keys if k in self.fail_deletes]
        for key in keys:
            if key not in self.fail_deletes:
                self.objects.pop(key, None)
        return failed


class InMemoryUserDirectory(UserDirectory):
    def __init__(self, users=()):
        self.users = {u.user_id: u for u in users}

    def get_user(self, user_id):
        return self.users.get(user_id)


@pytest.fixture
def travel_repo():
    return InMemoryTravelRepository()


@pytest.fixture
def blob_store():
    return InMemoryBlobStore()


@pytest.fixture
def user_directory():
    return InMemoryUserDirectory(
        [
            User(user_id="u1", name="Minji"),
            User(user_id="u2", name="Jisoo"),
            User(user_id="u3", name="Hana"),
        ]
    )


@pytest.fixture
def travel_service(travel_repo, user_directory, blob_store):
    return build_travel_service(travel_repo, user_directory, blob_store)


# DynamoDB fixtures
@pytest.fixture
def dynamo_client():
    """Provide a DynamoDB client for integration tests."""
    import boto3
    from core.config import get_config

    config = get_config()

    return boto3.client(
        "dynamodb",
        endpoint_url=config.dynamodb_endpoint,
        region_name=config.aws_region,
        aws_access_key_id="dummy",
        aws_secret_access_key="dummy",
    )


@pytest.fixture
def dynamo_travel_repo(dynamo_client):
    """Provide a DynamoTravelRepository; removes every travel and token afterwards."""
    from core.config import get_config
    from core.db.travels import DynamoTravelRepository

    config = get_config()
    repo = DynamoTravelRepository(dynamo_client, config.travels_table, config.invite_tokens_table)
    yield repo

    # Cleanup: scan and delete all items created during test
    for table, key in ((config.travels_table, "travelId"), (config.invite_tokens_table, "ivtoken")):
        response = dynamo_client.scan(TableName=table)
        for item in response.get("Items", []):
            dynamo_client.delete_item(TableName=table, Key={key: item[key]})
