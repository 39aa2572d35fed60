"""User directory backed by the users table (hash key ``userId``)."""

from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from core.db.interface import UserDirectory
from core.errors import UpstreamError
from core.models.travel import User


class DynamoUserDirectory(UserDirectory):
    def __init__(self, dynamo_client: Any, users_table: str):
        self._client = dynamo_client
        self._users_table = users_table

    def get_user(self, user_id: str) -> User | None:
        try:
            response = self._client.get_item(
                TableName=self._users_table,
                Key={"userId": {"S": user_id}},
            )
        except (BotoCoreError, ClientError) as e:
            raise UpstreamError(f"Failed to load user {user_id}: {e}") from e

        item = response.get("Item")
        if not item:
            return None
        return User(user_id=item["userId"]["S"], name=item.get("name", {}).get("S", ""))
