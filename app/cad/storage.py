"""
Blob storage for uploaded CAD images (logos).

Keys are relative, slash-separated paths such as `cad/logos/<id>.png`. The local
backend keeps them under STORAGE_ROOT; the S3 backend works against any
S3-compatible endpoint (DigitalOcean Spaces, MinIO, AWS).
"""
from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Any, BinaryIO

import boto3
from botocore.exceptions import ClientError

logger = logging.getLogger(__name__)


class StorageError(RuntimeError):
    pass


def normalize_key(key: str) -> str:
    parts = PurePosixPath(key.replace("\\", "/").lstrip("/")).parts
    if not parts or ".." in parts:
        raise StorageError(f"Invalid storage key: {key!r}")
    return "/".join(parts)


class Storage(ABC):
    @abstractmethod
    def put_bytes(self, key: str, data: bytes, *, content_type: str | None = None) -> None: ...

    @abstractmethod
    def open(self, key: str) -> BinaryIO: ...

    @abstractmethod
    def exists(self, key: str) -> bool: ...

    @abstractmethod
    def delete(self, key: str) -> None: ...


@dataclass(frozen=True)
class LocalStorage(Storage):
    root: Path

    def path_for(self, key: str) -> Path:
        return self.root.joinpath(*normalize_key(key).split("/"))

    def put_bytes(self, key: str, data: bytes, *, content_type: str | None = None) -> None:
        p = self.path_for(key)
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_bytes(data)

    def open(self, key: str) -> BinaryIO:
        p = self.path_for(key)
        if not p.is_file():
            raise StorageError(f"No such object: {key}")
        return p.open("rb")

    def exists(self, key: str) -> bool:
        return self.path_for(key).is_file()

    def delete(self, key: str) -> None:
        self.path_for(key).unlink(missing_ok=True)


@dataclass
class S3Storage(Storage):
    endpoint: str
    region: str
    bucket: str
    access_key_id: str
    secret_access_key: str
    _client: Any = field(default=None, init=False, repr=False)

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = boto3.client(
                "s3",
                endpoint_url=f"https://{self.endpoint}" if self.endpoint else None,
                region_name=self.region or None,
                aws_access_key_id=self.access_key_id,
                aws_secret_access_key=self.secret_access_key,
            )
        return self._client

    def put_bytes(self, key: str, data: bytes, *, content_type: str | None = None) -> None:
        extra = {"ContentType": content_type} if content_type else {}
        self.client.put_object(Bucket=self.bucket, Key=normalize_key(key), Body=data, **extra)

    def open(self, key: str) -> BinaryIO:
        try:
            obj = self.client.get_object(Bucket=self.bucket, Key=normalize_key(key))
        except ClientError as e:
            raise StorageError(f"Could not read {key}: {e}") from e
        return obj["Body"]

    def exists(self, key: str) -> bool:
        try:
            self.client.head_object(Bucket=self.bucket, Key=normalize_key(key))
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in ("404", "NoSuchKey", "NotFound"):
                return False
            raise
        return True

    def delete(self, key: str) -> None:
        self.client.delete_object(Bucket=self.bucket, Key=normalize_key(key))


def storage_from_config(config: dict) -> Storage:
    backend = (config.get("STORAGE_BACKEND") or "local").strip().lower()
    if backend == "s3":
        return S3Storage(
            endpoint=(config.get("S3_ENDPOINT") or "").strip(),
            region=(config.get("S3_REGION") or "nyc3").strip(),
            bucket=(config.get("S3_BUCKET") or "").strip(),
            access_key_id=(config.get("S3_ACCESS_KEY_ID") or "").strip(),
            secret_access_key=(config.get("S3_SECRET_ACCESS_KEY") or "").strip(),
        )
    if backend != "local":
        logger.warning("Unknown STORAGE_BACKEND %r, falling back to local storage", backend)
    root = (config.get("STORAGE_ROOT") or "").strip()
    return LocalStorage(root=Path(root).expanduser() if root else Path(os.getcwd()) / "storage")
