# core/storage.py

from typing import Optional

from fastapi import HTTPException, Request

from core.config import Settings
from core.logging_config import logger
from core.supabase_client import get_supabase_client


class StorageError(RuntimeError):
    """Object storage provider failed."""


class ObjectStorage:
    """
    Thin wrapper over one Supabase Storage bucket.

        upload(path, data)  -> stored path
        public_url(path)    -> URL
        download(path)      -> bytes
        delete(path)        -> None
    """

    def __init__(self, client, bucket: str):
        self.client = client
        self.bucket = bucket

    @classmethod
    def from_settings(cls, config: Settings) -> Optional["ObjectStorage"]:
        client = get_supabase_client(config)
        if client is None:
            return None
        return cls(client, config.STORAGE_BUCKET)

    def _bucket(self):
        return self.client.storage.from_(self.bucket)

    def upload(self, path: str, data: bytes, content_type: Optional[str] = None) -> str:
        options = {"cache-control": "3600", "upsert": "false"}
        if content_type:
            options["content-type"] = content_type

        try:
            result = self._bucket().upload(path, data, file_options=options)
        except Exception as e:
            raise StorageError(f"Upload of {path} failed: {e}") from e

        # Newer clients return an object carrying the stored path
        return getattr(result, "path", None) or path

    def public_url(self, path: str) -> str:
        try:
            url = self._bucket().get_public_url(path)
        except Exception as e:
            raise StorageError(f"Could not build public URL for {path}: {e}") from e
        return url.rstrip("?")

    def download(self, path: str) -> bytes:
        try:
            return self._bucket().download(path)
        except Exception as e:
            raise StorageError(f"Download of {path} failed: {e}") from e

    def delete(self, path: str) -> None:
        try:
            self._bucket().remove([path])
        except Exception as e:
            raise StorageError(f"Delete of {path} failed: {e}") from e


def get_storage(request: Request) -> ObjectStorage:
    storage = getattr(request.app.state, "storage", None)
    if storage is None:
        logger.error("Object storage not configured")
        raise HTTPException(500, "File storage not configured")
    return storage
