"""API Gateway Lambda authorizer — validates the Clerk JWT on travel routes."""

import asyncio
import logging
from typing import Any

from core.auth import AuthProvider, get_auth_provider
from core.errors import AuthenticationError

logger = logging.getLogger(__name__)


def _bearer_token(event: dict[str, Any]) -> str:
    headers = {k.lower(): v for k, v in (event.get("headers") or {}).items()}
    scheme, _, token = headers["authorization"].partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise AuthenticationError("Authorization header is not a Bearer token")
    return token


def _unverified_subject(auth_provider: AuthProvider, token: str) -> object:
    try:
        return asyncio.run(auth_provider.decode_claims(token)).get("sub", "unknown")
    except AuthenticationError:
        return "unknown"


def handler(event: dict[str, Any], context: object) -> dict[str, Any]:
    try:
        token = _bearer_token(event)
    except (KeyError, AuthenticationError):
        logger.info("Denied request without a Bearer token")
        return _deny_policy(event["methodArn"])

    # AuthProvider methods are async; the Clerk SDK calls underneath are
    # synchronous, so asyncio.run() bridges them in this sync handler.
    auth_provider = get_auth_provider()
    try:
        auth_user = asyncio.run(auth_provider.verify_token(token))
    except AuthenticationError as e:
        logger.info("Denied token for subject %s: %s", _unverified_subject(auth_provider, token), e.message)
        return _deny_policy(event["methodArn"])

    return _allow_policy(event["methodArn"], auth_user.user_id)


def _allow_policy(method_arn: str, user_id: str) -> dict[str, Any]:
    return {
        "principalId": user_id,
        "policyDocument": {
            "Version": "2012-10-17",
            "Statement": [{"Action": "execute-api:Invoke", "Effect": "Allow", "Resource": method_arn}],
        },
        "context": {"userId": user_id},
    }


def _deny_policy(method_arn: str) -> dict[str, Any]:
    return {
        "principalId": "unauthorized",
        "policyDocument": {
            "Version": "2012-10-17",
            "Statement": [{"Action": "execute-api:Invoke", "Effect": "Deny", "Resource": method_arn}],
        },
    }
