"""GET /travel/{travelid} — one travel with signed image URLs."""

from typing import Any

from core.auth import auth_context_from_event
from core.http import api_handler, ok, path_param
from core.services.membership import MembershipManager
from core.services.travel import get_travel_service


@api_handler
def handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    view = get_travel_service().get_travel(path_param(event, "travelid"))

    # The invite token admits anyone holding it; only members see it here.
    auth = auth_context_from_event(event)
    is_member = auth is not None and MembershipManager.is_member(view.travel, auth.user_id)
    travel = view.travel.model_dump(mode="json", exclude=None if is_member else {"ivtoken"})

    return ok(
        travel=travel,
        travelurl=view.travel_url,
        invited_profile=[{"user": p.user_id, "url": p.url} for p in view.invited_profile],
    )
