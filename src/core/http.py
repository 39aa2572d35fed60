"""API Gateway proxy helpers shared by the travel handlers."""

import base64
import binascii
import functools
import json
import logging
from typing import Any, Callable, TypeVar

import pydantic
from pydantic import BaseModel

from core.config import get_config
from core.errors import ErrorCode, TripDiaryError, USER_MESSAGES, ValidationError

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

Handler = Callable[[dict[str, Any], Any], dict[str, Any]]


def _cors_headers() -> dict[str, str]:
    origin = get_config().frontend_url
    headers = {
        "Content-Type": "application/json",
        "Access-Control-Allow-Origin": origin,
    }
    # Browsers refuse credentialed responses for a wildcard origin.
    if origin != "*":
        headers["Access-Control-Allow-Credentials"] = "true"
    return headers


def json_response(status_code: int, body: dict[str, Any]) -> dict[str, Any]:
    return {
        "statusCode": status_code,
        "headers": _cors_headers(),
        "body": json.dumps(body, default=str),
    }


def ok(**body: Any) -> dict[str, Any]:
    return json_response(200, {"success": True, **body})


def error_response(code: ErrorCode, status_code: int) -> dict[str, Any]:
    message = USER_MESSAGES.get(code, USER_MESSAGES[ErrorCode.INTERNAL_ERROR])
    return json_response(status_code, {"success": False, "code": code.value, "message": message})


def parse_body(event: dict[str, Any], model: type[M]) -> M:
    raw = event.get("body") or "{}"
    try:
        if event.get("isBase64Encoded"):
            raw = base64.b64decode(raw, validate=True).decode("utf-8")
        return model.model_validate_json(raw)
    except (binascii.Error, UnicodeDecodeError) as e:
        raise ValidationError(f"Undecodable {model.__name__} body: {e}", code=ErrorCode.INVALID_REQUEST) from e
    except pydantic.ValidationError as e:
        raise ValidationError(f"Invalid {model.__name__} body: {e}", code=ErrorCode.INVALID_REQUEST) from e


def path_param(event: dict[str, Any], name: str) -> str:
    value = (event.get("pathParameters") or {}).get(name)
    if not value:
        raise ValidationError(f"Missing path parameter {name}", code=ErrorCode.INVALID_REQUEST)
    return value


def api_handler(func: Handler) -> Handler:
    """Turn raised errors into JSON responses.

    Known errors are answered with their code and a generic message; the
    internal message only goes to the log.
    """

    @functools.wraps(func)
    def wrapper(event: dict[str, Any], context: Any) -> dict[str, Any]:
        try:
            return func(event, context)
        except TripDiaryError as e:
            logger.info("%s failed with %s: %s", func.__module__, e.code.value, e.message)
            return error_response(e.code, e.status_code)
        except Exception:
            logger.exception("Unhandled error in %s", func.__module__)
            return error_response(ErrorCode.INTERNAL_ERROR, 500)

    return wrapper
