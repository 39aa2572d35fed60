"""POST /travel/invite — look up a travel by invite token without joining it."""

from typing import Any

from core.auth import auth_context_from_event
from core.http import api_handler, ok, parse_body
from core.models import InviteRedeem
from core.services.travel import get_travel_service


@api_handler
def handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    auth = auth_context_from_event(event)
    preview = get_travel_service().preview_invite(auth, parse_body(event, InviteRedeem))
    return ok(travelid=preview.travel_id, auth=preview.inviter_name)
