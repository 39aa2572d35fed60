"""DELETE /travel/{travelid} — leave a travel; the last member out deletes it."""

import logging
from typing import Any

from core.auth import auth_context_from_event
from core.errors import MediaCleanupIncompleteError
from core.http import api_handler, ok, path_param
from core.services.travel import get_travel_service

logger = logging.getLogger(__name__)


@api_handler
def handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    auth = auth_context_from_event(event)
    travel_id = path_param(event, "travelid")

    try:
        result = get_travel_service().leave_travel(auth, travel_id)
    except MediaCleanupIncompleteError as e:
        # The record is already gone; leftover objects are only logged.
        logger.warning("Travel %s deleted with %d media object(s) left", travel_id, len(e.failed_keys))
        return ok(deleted=True, message="Travel deleted", warning=e.code.value)

    message = "Travel deleted" if result.deleted else "Left travel"
    return ok(deleted=result.deleted, message=message)
