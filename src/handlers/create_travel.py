"""POST /travel — create a travel with the caller as its first member."""

from typing import Any

from core.auth import auth_context_from_event
from core.http import api_handler, ok, parse_body
from core.models import TravelCreate
from core.services.travel import get_travel_service


@api_handler
def handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    auth = auth_context_from_event(event)
    travel = get_travel_service().create_travel(auth, parse_body(event, TravelCreate))
    return ok(travelInfo=travel.model_dump(mode="json"))
