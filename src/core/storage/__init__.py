"""Blob storage for travel and profile images."""

from core.storage.interface import BlobStore
from core.storage.s3 import S3BlobStore

__all__ = ["BlobStore", "S3BlobStore"]
