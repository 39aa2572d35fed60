"""PUT /travel/invite — join a travel."""

from typing import Any

from core.auth import auth_context_from_event
from core.http import api_handler, ok, parse_body
from core.models import InviteAccept
from core.services.travel import get_travel_service


@api_handler
def handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    auth = auth_context_from_event(event)
    get_travel_service().accept_invite(auth, parse_body(event, InviteAccept))
    return ok(message="Invitation accepted")
