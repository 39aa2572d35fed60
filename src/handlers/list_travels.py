"""GET /travel — travels the caller is a member of."""

from typing import Any

from core.auth import auth_context_from_event
from core.http import api_handler, ok
from core.services.travel import get_travel_service


@api_handler
def handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    summaries = get_travel_service().list_travels(auth_context_from_event(event))
    return ok(
        travels=[s.travel.model_dump(mode="json") for s in summaries],
        travelUrls=[s.travel_url for s in summaries],
    )
