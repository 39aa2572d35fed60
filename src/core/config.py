from os import environ

import boto3
from pydantic import BaseModel, ConfigDict, Field

_cached_clerk_secret: str | None = None


def _resolve_clerk_secret() -> str:
    """Fetch Clerk secret from Secrets Manager at runtime, with caching."""
    global _cached_clerk_secret
    if _cached_clerk_secret is not None:
        return _cached_clerk_secret

    # Local dev: use env var directly
    direct = environ.get("CLERK_SECRET_KEY", "")
    if direct:
        _cached_clerk_secret = direct
        return direct

    # Deployed: fetch from Secrets Manager by ARN
    arn = environ.get("CLERK_SECRET_ARN", "")
    if not arn:
        return ""

    client = boto3.client("secretsmanager")
    _cached_clerk_secret = client.get_secret_value(SecretId=arn)["SecretString"]
    return _cached_clerk_secret


class Config(BaseModel):
    model_config = ConfigDict(frozen=True)

    aws_region: str
    dynamodb_endpoint: str | None = None
    s3_endpoint: str | None = None
    travels_table: str
    invite_tokens_table: str
    users_table: str
    media_bucket: str
    signed_url_ttl_seconds: int = Field(default=60, ge=1, le=3600)
    invite_token_max_attempts: int = Field(default=5, ge=1)
    frontend_url: str = "*"
    clerk_secret_key: str = ""
    environment: str


_cached_config: Config | None = None


def _reset_config() -> None:
    """Reset cached config — for testing only."""
    global _cached_config, _cached_clerk_secret
    _cached_config = None
    _cached_clerk_secret = None


def get_config() -> Config:
    global _cached_config
    if _cached_config is not None:
        return _cached_config

    _cached_config = Config(
        aws_region=environ.get("AWS_REGION", "us-east-1"),
        dynamodb_endpoint=environ.get("DYNAMODB_ENDPOINT"),
        s3_endpoint=environ.get("S3_ENDPOINT"),
        travels_table=environ.get("TRAVELS_TABLE", "Travels"),
        invite_tokens_table=environ.get("INVITE_TOKENS_TABLE", "InviteTokens"),
        users_table=environ.get("USERS_TABLE", "Users"),
        media_bucket=environ.get("MEDIA_BUCKET", "trip-diary-media"),
        signed_url_ttl_seconds=int(environ.get("SIGNED_URL_TTL_SECONDS", "60")),
        invite_token_max_attempts=int(environ.get("INVITE_TOKEN_MAX_ATTEMPTS", "5")),
        frontend_url=environ.get("FRONT_URL", "*"),
        clerk_secret_key=_resolve_clerk_secret(),
        environment=environ.get("ENVIRONMENT", "local"),
    )
    return _cached_config
