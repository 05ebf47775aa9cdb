"""
Object store abstraction for Azure Blob Storage, S3-compatible buckets and
in-memory testing.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional, Protocol

import boto3
from azure.core.exceptions import ResourceExistsError
from azure.storage.blob import BlobServiceClient, ContentSettings
from botocore.config import Config
from botocore.exceptions import ClientError

logger = logging.getLogger(__name__)


class ObjectStore(Protocol):
    """Defines the operations the services need from object storage."""

    def ensure_container(self, name: str) -> None:
        ...

    def put_object(
        self, container: str, path: str, data: bytes, content_type: str
    ) -> str:
        ...


@dataclass
class InMemoryObjectStore:
    """Test double for storage interactions."""

    base_url: str = "https://example.test/storage"
    stored_objects: dict = field(default_factory=dict)

    def ensure_container(self, name: str) -> None:
        return None

    def put_object(
        self, container: str, path: str, data: bytes, content_type: str
    ) -> str:
        self.stored_objects[(container, path)] = (bytes(data), content_type)
        return f"{self.base_url}/{container}/{path}"

    def get_bytes(self, container: str, path: str) -> bytes:
        stored = self.stored_objects.get((container, path))
        if stored is None:
            raise FileNotFoundError(path)
        return stored[0]

    def reset(self) -> None:
        self.stored_objects.clear()


@dataclass
class S3ObjectStore:
    """
    S3-compatible object store. The container name is the bucket.
    """

    region: str = ""
    endpoint: str = ""
    access_key_id: str = ""
    secret_access_key: str = ""
    public_base_url: Optional[str] = None

    def __post_init__(self):
        config = Config(signature_version="s3v4")
        self._client = boto3.client(
            "s3",
            endpoint_url=self.endpoint or None,
            region_name=self.region or None,
            aws_access_key_id=self.access_key_id or None,
            aws_secret_access_key=self.secret_access_key or None,
            config=config,
        )

    def ensure_container(self, name: str) -> None:
        kwargs = {"Bucket": name}
        if self.region and self.region != "us-east-1" and not self.endpoint:
            kwargs["CreateBucketConfiguration"] = {"LocationConstraint": self.region}
        try:
            self._client.create_bucket(**kwargs)
        except ClientError as exc:
            code = exc.response.get("Error", {}).get("Code")
            if code not in ("BucketAlreadyOwnedByYou", "BucketAlreadyExists"):
                raise
            logger.debug("Bucket %s already exists", name)

    def put_object(
        self, container: str, path: str, data: bytes, content_type: str
    ) -> str:
        self._client.put_object(
            Bucket=container,
            Key=path,
            Body=data,
            ContentType=content_type,
        )
        return self._object_url(container, path)

    def _object_url(self, container: str, path: str) -> str:
        if self.public_base_url:
            return f"{self.public_base_url.rstrip('/')}/{path}"
        if self.endpoint:
            return f"{self.endpoint.rstrip('/')}/{container}/{path}"
        return f"https://{container}.s3.amazonaws.com/{path}"


class AzureBlobObjectStore:
    """Azure Blob Storage client. Containers are created with public blob reads."""

    def __init__(self, connection_string: str):
        if not connection_string:
            raise RuntimeError("Azure Storage connection string is not set.")
        self._service = BlobServiceClient.from_connection_string(connection_string)

    def ensure_container(self, name: str) -> None:
        try:
            self._service.create_container(name, public_access="blob")
        except ResourceExistsError:
            logger.debug("Container %s already exists", name)

    def put_object(
        self, container: str, path: str, data: bytes, content_type: str
    ) -> str:
        blob_client = self._service.get_blob_client(container=container, blob=path)
        blob_client.upload_blob(
            data,
            overwrite=True,
            content_settings=ContentSettings(content_type=content_type),
        )
        return blob_client.url
