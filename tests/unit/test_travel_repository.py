"""Unit tests for the DynamoDB travel repository."""

from datetime import date
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from core.db.travels import DynamoTravelRepository, item_to_travel, travel_to_item
from core.errors import (
    ConflictError,
    ErrorCode,
    ForbiddenError,
    NotFoundError,
    TokenCollisionError,
    UpstreamError,
)
from core.models.travel import Membership, Travel


def _client_error(code, operation="UpdateItem", **extra):
    return ClientError({"Error": {"Code": code, "Message": code}, **extra}, operation)


def _travel(*members, travelimg=None):
    return Travel(
        travel_id="t1",
        title="Jeju",
        start_date=date(2026, 5, 1),
        end_date=date(2026, 5, 4),
        location={"city": "Jeju", "lat": 33.49},
        travelimg=travelimg,
        invited=[Membership(user_id=uid, name=uid.upper()) for uid in members],
        ivtoken="0123456789abcdef",
        creator_id=members[0] if members else None,
    )


@pytest.fixture
def client():
    return MagicMock()


@pytest.fixture
def repo(client):
    return DynamoTravelRepository(client, "Travels", "InviteTokens")


def test_item_round_trip_keeps_order_and_floats():
    travel = _travel("u1", "u2")
    item = travel_to_item(travel)

    assert set(item["memberIds"]["SS"]) == {"u1", "u2"}
    assert item["location"]["M"]["lat"] == {"N": "33.49"}
    assert item["startDate"] == {"S": "2026-05-01"}
    assert item["travelimg"] == {"NULL": True}
    assert item_to_travel(item) == travel


def test_item_without_members_has_no_member_set():
    item = travel_to_item(_travel())
    assert "memberIds" not in item


def test_get_uses_consistent_read(repo, client):
    client.get_item.return_value = {"Item": travel_to_item(_travel("u1"))}

    travel = repo.get("t1")

    assert travel.member_ids == ["u1"]
    client.get_item.assert_called_once_with(
        TableName="Travels", Key={"travelId": {"S": "t1"}}, ConsistentRead=True
    )


def test_get_missing_returns_none(repo, client):
    client.get_item.return_value = {}
    assert repo.get("missing") is None


def test_get_wraps_client_errors(repo, client):
    client.get_item.side_effect = _client_error("ProvisionedThroughputExceededException", "GetItem")
    with pytest.raises(UpstreamError):
        repo.get("t1")


def test_find_by_token_follows_token_row(repo, client):
    client.get_item.side_effect = [
        {"Item": {"ivtoken": {"S": "0123456789abcdef"}, "travelId": {"S": "t1"}}},
        {"Item": travel_to_item(_travel("u1"))},
    ]

    travel = repo.find_by_token("0123456789abcdef")

    assert travel.travel_id == "t1"
    assert client.get_item.call_args_list[0].kwargs["TableName"] == "InviteTokens"
    assert client.get_item.call_args_list[1].kwargs["TableName"] == "Travels"


def test_find_by_token_unknown(repo, client):
    client.get_item.return_value = {}
    assert repo.find_by_token("ffffffffffffffff") is None
    assert repo.token_exists("ffffffffffffffff") is False


def test_create_claims_token_in_same_transaction(repo, client):
    repo.create(_travel("u1"))

    items = client.transact_write_items.call_args.kwargs["TransactItems"]
    assert items[0]["Put"]["TableName"] == "Travels"
    assert items[0]["Put"]["ConditionExpression"] == "attribute_not_exists(travelId)"
    assert items[1]["Put"]["TableName"] == "InviteTokens"
    assert items[1]["Put"]["Item"] == {"ivtoken": {"S": "0123456789abcdef"}, "travelId": {"S": "t1"}}
    assert items[1]["Put"]["ConditionExpression"] == "attribute_not_exists(ivtoken)"


def test_create_token_conflict_raises_collision(repo, client):
    client.transact_write_items.side_effect = _client_error(
        "TransactionCanceledException",
        "TransactWriteItems",
        CancellationReasons=[{"Code": "None"}, {"Code": "ConditionalCheckFailed"}],
    )
    with pytest.raises(TokenCollisionError):
        repo.create(_travel("u1"))


def test_create_other_cancellation_is_upstream(repo, client):
    client.transact_write_items.side_effect = _client_error(
        "TransactionCanceledException",
        "TransactWriteItems",
        CancellationReasons=[{"Code": "ConditionalCheckFailed"}, {"Code": "None"}],
    )
    with pytest.raises(UpstreamError):
        repo.create(_travel("u1"))


def test_add_member_is_conditional_insert(repo, client):
    assert repo.add_member("t1", Membership(user_id="u2", name="Jisoo")) is True

    kwargs = client.update_item.call_args.kwargs
    assert kwargs["UpdateExpression"] == "SET invited = list_append(invited, :entry) ADD memberIds :uidSet"
    assert kwargs["ConditionExpression"] == "attribute_exists(memberIds) AND NOT contains(memberIds, :uid)"
    assert kwargs["ExpressionAttributeValues"][":uidSet"] == {"SS": ["u2"]}
    assert kwargs["ExpressionAttributeValues"][":entry"] == {
        "L": [{"M": {"userId": {"S": "u2"}, "name": {"S": "Jisoo"}}}]
    }


def test_add_member_already_present_is_noop(repo, client):
    client.update_item.side_effect = _client_error("ConditionalCheckFailedException")
    client.get_item.return_value = {"Item": travel_to_item(_travel("u1", "u2"))}

    assert repo.add_member("t1", Membership(user_id="u2", name="Jisoo")) is False


def test_add_member_missing_travel(repo, client):
    client.update_item.side_effect = _client_error("ConditionalCheckFailedException")
    client.get_item.return_value = {}

    with pytest.raises(NotFoundError):
        repo.add_member("t1", Membership(user_id="u2", name="Jisoo"))


def test_add_member_drained_travel_is_not_found(repo, client):
    client.update_item.side_effect = _client_error("ConditionalCheckFailedException")
    client.get_item.return_value = {"Item": travel_to_item(_travel())}

    with pytest.raises(NotFoundError):
        repo.add_member("t1", Membership(user_id="u2", name="Jisoo"))


def test_remove_member_returns_post_update_state(repo, client):
    client.get_item.return_value = {"Item": travel_to_item(_travel("u1", "u2"))}
    client.update_item.return_value = {"Attributes": travel_to_item(_travel("u1"))}

    travel = repo.remove_member("t1", "u2")

    assert travel.member_ids == ["u1"]
    kwargs = client.update_item.call_args.kwargs
    assert kwargs["UpdateExpression"] == "REMOVE invited[1] DELETE memberIds :uidSet"
    assert kwargs["ConditionExpression"] == "invited[1].userId = :uid"
    assert kwargs["ReturnValues"] == "ALL_NEW"


def test_remove_member_retries_when_list_shifts(repo, client):
    client.get_item.side_effect = [
        {"Item": travel_to_item(_travel("u1", "u2", "u3"))},
        {"Item": travel_to_item(_travel("u2", "u3"))},
    ]
    client.update_item.side_effect = [
        _client_error("ConditionalCheckFailedException"),
        {"Attributes": travel_to_item(_travel("u2"))},
    ]

    travel = repo.remove_member("t1", "u3")

    assert travel.member_ids == ["u2"]
    second = client.update_item.call_args_list[1].kwargs
    assert second["UpdateExpression"] == "REMOVE invited[1] DELETE memberIds :uidSet"


def test_remove_member_gives_up_after_bounded_retries(repo, client):
    client.get_item.return_value = {"Item": travel_to_item(_travel("u1", "u2"))}
    client.update_item.side_effect = _client_error("ConditionalCheckFailedException")

    with pytest.raises(ConflictError) as exc_info:
        repo.remove_member("t1", "u2")

    assert exc_info.value.code == ErrorCode.CONCURRENT_UPDATE


def test_remove_member_not_a_member(repo, client):
    client.get_item.return_value = {"Item": travel_to_item(_travel("u1"))}

    with pytest.raises(ForbiddenError) as exc_info:
        repo.remove_member("t1", "u9")

    assert exc_info.value.code == ErrorCode.NOT_A_MEMBER
    client.update_item.assert_not_called()


def test_remove_member_missing_travel(repo, client):
    client.get_item.return_value = {}
    with pytest.raises(NotFoundError):
        repo.remove_member("t1", "u1")


def test_remove_last_member_returns_empty_travel(repo, client):
    drained = travel_to_item(_travel())
    client.get_item.return_value = {"Item": travel_to_item(_travel("u1"))}
    client.update_item.return_value = {"Attributes": drained}

    assert repo.remove_member("t1", "u1").invited == []


def test_update_fields_merges_location_keys(repo, client):
    client.update_item.return_value = {"Attributes": travel_to_item(_travel("u1"))}

    repo.update_fields("t1", "u1", {"title": "Jeju 2", "end_date": date(2026, 5, 5)}, {"city": "Seogwipo"})

    kwargs = client.update_item.call_args.kwargs
    assert kwargs["UpdateExpression"] == "SET #f0 = :f0, #f1 = :f1, #location.#l0 = :l0"
    assert kwargs["ConditionExpression"] == "contains(memberIds, :uid)"
    assert kwargs["ExpressionAttributeNames"] == {
        "#f0": "title",
        "#f1": "endDate",
        "#location": "location",
        "#l0": "city",
    }
    assert kwargs["ExpressionAttributeValues"][":f1"] == {"S": "2026-05-05"}
    assert kwargs["ExpressionAttributeValues"][":l0"] == {"S": "Seogwipo"}


def test_update_fields_nothing_to_change_reads_current(repo, client):
    client.get_item.return_value = {"Item": travel_to_item(_travel("u1"))}

    travel = repo.update_fields("t1", "u1", {})

    assert travel.title == "Jeju"
    client.update_item.assert_not_called()


def test_update_fields_by_non_member_is_forbidden(repo, client):
    client.update_item.side_effect = _client_error("ConditionalCheckFailedException")
    client.get_item.return_value = {"Item": travel_to_item(_travel("u1"))}

    with pytest.raises(ForbiddenError):
        repo.update_fields("t1", "u9", {"title": "Mine now"})


def test_delete_releases_token_and_requires_no_members(repo, client):
    repo.delete(_travel())

    items = client.transact_write_items.call_args.kwargs["TransactItems"]
    assert items[0]["Delete"]["ConditionExpression"] == "attribute_not_exists(memberIds)"
    assert items[1]["Delete"] == {"TableName": "InviteTokens", "Key": {"ivtoken": {"S": "0123456789abcdef"}}}


def test_list_for_member_handles_pagination(repo, client):
    client.scan.side_effect = [
        {
            "Items": [travel_to_item(_travel("u1"))],
            "LastEvaluatedKey": {"travelId": {"S": "t1"}},
        },
        {"Items": [travel_to_item(_travel("u1", "u2"))]},
    ]

    travels = repo.list_for_member("u1")

    assert len(travels) == 2
    assert client.scan.call_count == 2
    assert client.scan.call_args_list[1].kwargs["ExclusiveStartKey"] == {"travelId": {"S": "t1"}}
    assert client.scan.call_args_list[0].kwargs["FilterExpression"] == "contains(memberIds, :uid)"
