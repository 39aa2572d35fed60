#!/usr/bin/env python3
"""Create DynamoDB tables and the media bucket for local development.

This script creates the three DynamoDB tables needed for local development and testing,
configured against DynamoDB Local, plus the media bucket on an S3-compatible endpoint
when S3_ENDPOINT is set.

Usage:
    python scripts/create_local_tables.py
"""

import sys
from pathlib import Path

import boto3
from botocore.exceptions import ClientError

# Add src to path for config import
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from core.config import get_config


def create_hash_key_table(dynamodb, table_name: str, key: str):
    """Create a PAY_PER_REQUEST table with a single string hash key."""
    try:
        dynamodb.create_table(
            TableName=table_name,
            KeySchema=[{"AttributeName": key, "KeyType": "HASH"}],
            AttributeDefinitions=[{"AttributeName": key, "AttributeType": "S"}],
            BillingMode="PAY_PER_REQUEST",
        )
        print(f"✓ Created {table_name} table")
    except ClientError as e:
        if e.response["Error"]["Code"] == "ResourceInUseException":
            print(f"✓ {table_name} table already exists")
        else:
            raise


def create_media_bucket(s3, bucket: str):
    try:
        s3.create_bucket(Bucket=bucket)
        print(f"✓ Created {bucket} bucket")
    except ClientError as e:
        if e.response["Error"]["Code"] in ("BucketAlreadyOwnedByYou", "BucketAlreadyExists"):
            print(f"✓ {bucket} bucket already exists")
        else:
            raise


def main():
    """Create all tables and the media bucket."""
    config = get_config()

    endpoint_url = config.dynamodb_endpoint or "http://localhost:8000"

    print(f"Creating DynamoDB tables at {endpoint_url}...")
    print()

    # For DynamoDB Local, use dummy credentials
    dynamodb = boto3.client(
        "dynamodb",
        endpoint_url=endpoint_url,
        region_name=config.aws_region,
        aws_access_key_id="dummy",
        aws_secret_access_key="dummy",
    )

    create_hash_key_table(dynamodb, config.travels_table, "travelId")
    create_hash_key_table(dynamodb, config.invite_tokens_table, "ivtoken")
    create_hash_key_table(dynamodb, config.users_table, "userId")

    if config.s3_endpoint:
        s3 = boto3.client(
            "s3",
            endpoint_url=config.s3_endpoint,
            region_name=config.aws_region,
            aws_access_key_id="dummy",
            aws_secret_access_key="dummy",
        )
        create_media_bucket(s3, config.media_bucket)

    print()
    print("✅ Local storage ready")


if __name__ == "__main__":
    main()
