"""DynamoDB travel repository.

Item layout in the travels table (hash key ``travelId``)::

    travelId, title, startDate, endDate, location (M), travelimg,
    invited (L of {userId, name}), memberIds (SS), ivtoken, creatorId

``memberIds`` mirrors ``invited`` as a set so membership can be tested in
condition expressions. DynamoDB drops empty sets, so a drained travel has
no ``memberIds`` attribute at all.

The invite-tokens table (hash key ``ivtoken``) is the uniqueness
constraint for tokens; a travel and its token row are always written and
deleted in the same transaction.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Any

from boto3.dynamodb.types import TypeDeserializer, TypeSerializer
from botocore.exceptions import BotoCoreError, ClientError

from core.db.interface import TravelRepository
from core.errors import (
    ConflictError,
    ErrorCode,
    ForbiddenError,
    NotFoundError,
    TokenCollisionError,
    UpstreamError,
)
from core.models.travel import Membership, Travel

logger = logging.getLogger(__name__)

MAX_REMOVE_ATTEMPTS = 5

_serializer = TypeSerializer()
_deserializer = TypeDeserializer()

_FIELD_ATTRIBUTES = {
    "title": "title",
    "start_date": "startDate",
    "end_date": "endDate",
    "travelimg": "travelimg",
}


def _to_dynamo_value(value: Any) -> Any:
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: _to_dynamo_value(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_to_dynamo_value(v) for v in value]
    return value


def _from_dynamo_value(value: Any) -> Any:
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, dict):
        return {k: _from_dynamo_value(v) for k, v in value.items()}
    if isinstance(value, (list, set)):
        return [_from_dynamo_value(v) for v in value]
    return value


def _serialize(value: Any) -> dict[str, Any]:
    return _serializer.serialize(_to_dynamo_value(value))


def travel_to_item(travel: Travel) -> dict[str, Any]:
    item: dict[str, Any] = {
        "travelId": travel.travel_id,
        "title": travel.title,
        "startDate": travel.start_date,
        "endDate": travel.end_date,
        "location": travel.location,
        "travelimg": travel.travelimg,
        "invited": [{"userId": m.user_id, "name": m.name} for m in travel.invited],
        "ivtoken": travel.ivtoken,
        "creatorId": travel.creator_id,
    }
    if travel.invited:
        item["memberIds"] = set(travel.member_ids)
    return {key: _serialize(value) for key, value in item.items()}


def item_to_travel(item: dict[str, Any]) -> Travel:
    data = {key: _from_dynamo_value(_deserializer.deserialize(value)) for key, value in item.items()}
    return Travel(
        travel_id=data["travelId"],
        title=data.get("title") or "",
        start_date=data.get("startDate"),
        end_date=data.get("endDate"),
        location=data.get("location") or {},
        travelimg=data.get("travelimg"),
        invited=[Membership(user_id=m["userId"], name=m.get("name", "")) for m in data.get("invited") or []],
        ivtoken=data["ivtoken"],
        creator_id=data.get("creatorId"),
    )


def _error_code(exc: ClientError) -> str:
    return exc.response.get("Error", {}).get("Code", "")


class DynamoTravelRepository(TravelRepository):
    def __init__(self, dynamo_client: Any, travels_table: str, invite_tokens_table: str):
        self._client = dynamo_client
        self._travels_table = travels_table
        self._tokens_table = invite_tokens_table

    def _key(self, travel_id: str) -> dict[str, Any]:
        return {"travelId": {"S": travel_id}}

    def get(self, travel_id: str) -> Travel | None:
        try:
            response = self._client.get_item(
                TableName=self._travels_table,
                Key=self._key(travel_id),
                ConsistentRead=True,
            )
        except (BotoCoreError, ClientError) as e:
            raise UpstreamError(f"Failed to load travel {travel_id}: {e}") from e
        item = response.get("Item")
        return item_to_travel(item) if item else None

    def _get_token_row(self, ivtoken: str) -> dict[str, Any] | None:
        try:
            response = self._client.get_item(
                TableName=self._tokens_table,
                Key={"ivtoken": {"S": ivtoken}},
                ConsistentRead=True,
            )
        except (BotoCoreError, ClientError) as e:
            raise UpstreamError(f"Failed to look up invite token: {e}") from e
        return response.get("Item")

    def token_exists(self, ivtoken: str) -> bool:
        return self._get_token_row(ivtoken) is not None

    def find_by_token(self, ivtoken: str) -> Travel | None:
        row = self._get_token_row(ivtoken)
        if row is None:
            return None
        return self.get(row["travelId"]["S"])

    def create(self, travel: Travel) -> Travel:
        try:
            self._client.transact_write_items(
                TransactItems=[
                    {
                        "Put": {
                            "TableName": self._travels_table,
                            "Item": travel_to_item(travel),
                            "ConditionExpression": "attribute_not_exists(travelId)",
                        }
                    },
                    {
                        "Put": {
                            "TableName": self._tokens_table,
                            "Item": {
                                "ivtoken": {"S": travel.ivtoken},
                                "travelId": {"S": travel.travel_id},
                            },
                            "ConditionExpression": "attribute_not_exists(ivtoken)",
                        }
                    },
                ]
            )
        except ClientError as e:
            if _error_code(e) == "TransactionCanceledException" and self._token_rejected(e):
                raise TokenCollisionError(travel.ivtoken) from e
            raise UpstreamError(f"Failed to create travel {travel.travel_id}: {e}") from e
        except BotoCoreError as e:
            raise UpstreamError(f"Failed to create travel {travel.travel_id}: {e}") from e
        return travel

    @staticmethod
    def _token_rejected(exc: ClientError) -> bool:
        reasons = exc.response.get("CancellationReasons") or []
        return len(reasons) > 1 and reasons[1].get("Code") == "ConditionalCheckFailed"

    def add_member(self, travel_id: str, membership: Membership) -> bool:
        try:
            self._client.update_item(
                TableName=self._travels_table,
                Key=self._key(travel_id),
                UpdateExpression="SET invited = list_append(invited, :entry) ADD memberIds :uidSet",
                ConditionExpression="attribute_exists(memberIds) AND NOT contains(memberIds, :uid)",
                ExpressionAttributeValues={
                    ":entry": _serialize([{"userId": membership.user_id, "name": membership.name}]),
                    ":uidSet": {"SS": [membership.user_id]},
                    ":uid": {"S": membership.user_id},
                },
            )
        except ClientError as e:
            if _error_code(e) != "ConditionalCheckFailedException":
                raise UpstreamError(f"Failed to add member to travel {travel_id}: {e}") from e
            current = self.get(travel_id)
            if current is None or not current.invited:
                raise NotFoundError(f"Travel {travel_id} not found") from e
            if membership.user_id in current.member_ids:
                return False
            raise ConflictError(
                f"Membership of travel {travel_id} changed concurrently", code=ErrorCode.CONCURRENT_UPDATE
            ) from e
        except BotoCoreError as e:
            raise UpstreamError(f"Failed to add member to travel {travel_id}: {e}") from e
        return True

    def remove_member(self, travel_id: str, user_id: str) -> Travel:
        # REMOVE needs a list index; the condition pins it to the user we read,
        # so a concurrent shift of the list fails the write and we re-read.
        for _ in range(MAX_REMOVE_ATTEMPTS):
            current = self.get(travel_id)
            if current is None or not current.invited:
                raise NotFoundError(f"Travel {travel_id} not found")
            if user_id not in current.member_ids:
                raise ForbiddenError(
                    f"User {user_id} is not a member of travel {travel_id}", code=ErrorCode.NOT_A_MEMBER
                )
            index = current.member_ids.index(user_id)
            try:
                response = self._client.update_item(
                    TableName=self._travels_table,
                    Key=self._key(travel_id),
                    UpdateExpression=f"REMOVE invited[{index}] DELETE memberIds :uidSet",
                    ConditionExpression=f"invited[{index}].userId = :uid",
                    ExpressionAttributeValues={
                        ":uidSet": {"SS": [user_id]},
                        ":uid": {"S": user_id},
                    },
                    ReturnValues="ALL_NEW",
                )
            except ClientError as e:
                if _error_code(e) == "ConditionalCheckFailedException":
                    logger.info("Membership of travel %s shifted during removal, retrying", travel_id)
                    continue
                raise UpstreamError(f"Failed to remove member from travel {travel_id}: {e}") from e
            except BotoCoreError as e:
                raise UpstreamError(f"Failed to remove member from travel {travel_id}: {e}") from e
            return item_to_travel(response["Attributes"])

        raise ConflictError(
            f"Gave up removing {user_id} from travel {travel_id} after {MAX_REMOVE_ATTEMPTS} attempts",
            code=ErrorCode.CONCURRENT_UPDATE,
        )

    def update_fields(
        self,
        travel_id: str,
        user_id: str,
        changes: dict[str, Any],
        location: dict[str, Any] | None = None,
    ) -> Travel:
        set_parts: list[str] = []
        names: dict[str, str] = {}
        values: dict[str, Any] = {":uid": {"S": user_id}}

        for i, (field, value) in enumerate(changes.items()):
            names[f"#f{i}"] = _FIELD_ATTRIBUTES[field]
            values[f":f{i}"] = _serialize(value)
            set_parts.append(f"#f{i} = :f{i}")

        if location:
            names["#location"] = "location"
            for i, (key, value) in enumerate(location.items()):
                names[f"#l{i}"] = key
                values[f":l{i}"] = _serialize(value)
                set_parts.append(f"#location.#l{i} = :l{i}")

        if not set_parts:
            current = self.get(travel_id)
            if current is None:
                raise NotFoundError(f"Travel {travel_id} not found")
            return current

        try:
            response = self._client.update_item(
                TableName=self._travels_table,
                Key=self._key(travel_id),
                UpdateExpression="SET " + ", ".join(set_parts),
                ConditionExpression="contains(memberIds, :uid)",
                ExpressionAttributeNames=names,
                ExpressionAttributeValues=values,
                ReturnValues="ALL_NEW",
            )
        except ClientError as e:
            if _error_code(e) != "ConditionalCheckFailedException":
                raise UpstreamError(f"Failed to update travel {travel_id}: {e}") from e
            current = self.get(travel_id)
            if current is None or not current.invited:
                raise NotFoundError(f"Travel {travel_id} not found") from e
            raise ForbiddenError(f"User {user_id} may not update travel {travel_id}") from e
        except BotoCoreError as e:
            raise UpstreamError(f"Failed to update travel {travel_id}: {e}") from e
        return item_to_travel(response["Attributes"])

    def delete(self, travel: Travel) -> None:
        try:
            self._client.transact_write_items(
                TransactItems=[
                    {
                        "Delete": {
                            "TableName": self._travels_table,
                            "Key": self._key(travel.travel_id),
                            "ConditionExpression": "attribute_not_exists(memberIds)",
                        }
                    },
                    {
                        "Delete": {
                            "TableName": self._tokens_table,
                            "Key": {"ivtoken": {"S": travel.ivtoken}},
                        }
                    },
                ]
            )
        except (BotoCoreError, ClientError) as e:
            raise UpstreamError(f"Failed to delete travel {travel.travel_id}: {e}") from e

    def list_for_member(self, user_id: str) -> list[Travel]:
        travels: list[Travel] = []
        last_key = None

        while True:
            scan_kwargs: dict[str, Any] = {
                "TableName": self._travels_table,
                "FilterExpression": "contains(memberIds, :uid)",
                "ExpressionAttributeValues": {":uid": {"S": user_id}},
            }
            if last_key:
                scan_kwargs["ExclusiveStartKey"] = last_key

            try:
                response = self._client.scan(**scan_kwargs)
            except (BotoCoreError, ClientError) as e:
                raise UpstreamError(f"Failed to list travels for user {user_id}: {e}") from e

            travels.extend(item_to_travel(item) for item in response.get("Items", []))

            last_key = response.get("LastEvaluatedKey")
            if not last_key:
                break

        return travels
