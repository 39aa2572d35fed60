"""PUT /travel/{travelid} — edit a travel (members only)."""

from typing import Any

from core.auth import auth_context_from_event
from core.http import api_handler, ok, parse_body, path_param
from core.models import TravelUpdate
from core.services.travel import get_travel_service


@api_handler
def handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    auth = auth_context_from_event(event)
    travel_id = path_param(event, "travelid")
    travel = get_travel_service().update_travel(auth, travel_id, parse_body(event, TravelUpdate))
    return ok(travel=travel.model_dump(mode="json"))
