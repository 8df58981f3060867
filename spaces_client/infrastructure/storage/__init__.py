"""
Object store gateways for Spaces.

boto3-backed store for real buckets, plus an in-memory store for local
development without credentials.
"""

from .client import InMemoryObjectStore, S3ObjectStore, create_object_store

__all__ = ["InMemoryObjectStore", "S3ObjectStore", "create_object_store"]
