"""Key/value JSON storage on local disk or MinIO."""

from __future__ import annotations

import json
import logging
from io import BytesIO
from pathlib import Path
from typing import Any
from typing import Optional

from minio import Minio
from minio.error import S3Error

from ai_tools_directory import config

logger = logging.getLogger(__name__)

FEATURED_KEY = "featured_tools"
PROMPTS_KEY = "ai_prompts"
TOOLS_KEY = "tools"


def _copy(default: Any) -> Any:
    return json.loads(json.dumps(default))


class LocalStore:
    """One ``<key>.json`` file per key under a data directory."""

    def __init__(self, data_dir: Optional[Path] = None) -> None:
        self.data_dir = Path(data_dir) if data_dir else config.local_data_dir()

    def path(self, key: str) -> Path:
        return self.data_dir / f"{key}.json"

    def read(self, key: str, default: Any = None) -> Any:
        path = self.path(key)
        if not path.exists():
            return _copy(default)
        try:
            return json.loads(path.read_text())
        except json.JSONDecodeError as e:
            logger.error(f"Corrupt data in {path}: {e}")
            raise

    def write(self, key: str, payload: Any) -> None:
        path = self.path(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(payload, indent=2))
        except OSError as e:
            logger.error(f"Failed to write {path}: {e}")
            raise


class MinioStore:
    """One ``<key>.json`` object per key in a MinIO bucket."""

    def __init__(
        self,
        endpoint: str,
        access_key: str,
        secret_key: str,
        bucket_name: str,
        secure: bool = True,
        client: Optional[Minio] = None,
    ) -> None:
        self.bucket_name = bucket_name
        self.client = client or Minio(
            endpoint,
            access_key=access_key,
            secret_key=secret_key,
            secure=secure,
        )
        self._ensure_bucket()

    def _ensure_bucket(self) -> None:
        """Ensure the bucket exists, create if it doesn't."""
        try:
            if not self.client.bucket_exists(self.bucket_name):
                self.client.make_bucket(self.bucket_name)
                logger.info(f"Created bucket: {self.bucket_name}")
        except S3Error as e:
            logger.error(f"Failed to ensure bucket exists: {e}")
            raise

    def read(self, key: str, default: Any = None) -> Any:
        response = None
        try:
            response = self.client.get_object(self.bucket_name, f"{key}.json")
            return json.loads(response.read())
        except S3Error as e:
            if e.code == "NoSuchKey":
                logger.info(f"No {key}.json found, using default")
                return _copy(default)
            logger.error(f"Failed to get {key}.json: {e}")
            raise
        finally:
            if response is not None:
                response.close()
                response.release_conn()

    def write(self, key: str, payload: Any) -> None:
        try:
            data = BytesIO(json.dumps(payload, indent=2).encode())
            self.client.put_object(
                self.bucket_name,
                f"{key}.json",
                data,
                length=data.getbuffer().nbytes,
                content_type="application/json",
            )
            logger.debug(f"Saved {key}.json to MinIO")
        except S3Error as e:
            logger.error(f"Failed to update {key}.json: {e}")
            raise


# Lazy initialization of the configured store
_store = None


def get_store():
    """Get or create the store selected by AITOOLS_STORAGE_BACKEND."""
    global _store
    if _store is None:
        backend = config.storage_backend()
        if backend == "minio":
            _store = MinioStore(**config.minio_settings())
        elif backend == "local":
            _store = LocalStore()
        else:
            raise RuntimeError(f"Unknown storage backend: {backend}")
        logger.info(f"Using {backend} storage")
    return _store


def reset_store() -> None:
    global _store
    _store = None
