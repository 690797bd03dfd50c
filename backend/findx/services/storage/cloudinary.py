import hashlib
import logging
import re
import time
from functools import lru_cache
from typing import Dict, Optional

import httpx

from findx.config import get_settings
from findx.errors import ExternalServiceError
from findx.middleware.metrics import record_blob_latency
from findx.services.storage.base import BlobStorage, StoredBlob

logger = logging.getLogger(__name__)

settings = get_settings()

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_-]+")
_VERSION_PREFIX = re.compile(r"^v\d+/")


class CloudinaryStorage(BlobStorage):
    """Signed uploads and deletes against the Cloudinary REST API."""

    provider = "cloudinary"
    base_url = "https://api.cloudinary.com/v1_1"

    def __init__(
        self,
        cloud_name: Optional[str] = None,
        api_key: Optional[str] = None,
        api_secret: Optional[str] = None,
        folder: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.cloud_name = cloud_name or settings.cloudinary_cloud_name
        self.api_key = api_key or settings.cloudinary_api_key
        self.api_secret = api_secret or settings.cloudinary_api_secret
        self.folder = folder if folder is not None else settings.cloudinary_folder
        self.timeout = timeout or settings.storage_timeout_seconds
        self.transport = transport

    def _sign(self, params: Dict[str, str]) -> str:
        payload = "&".join(f"{key}={params[key]}" for key in sorted(params))
        return hashlib.sha1(f"{payload}{self.api_secret}".encode("utf-8")).hexdigest()

    def _signed(self, params: Dict[str, str]) -> Dict[str, str]:
        params = {**params, "timestamp": str(int(time.time()))}
        return {**params, "signature": self._sign(params), "api_key": self.api_key}

    @staticmethod
    def _public_id(filename: str) -> str:
        safe_name = _UNSAFE_CHARS.sub("_", filename.rsplit(".", 1)[0]).strip("_") or "file"
        return f"{int(time.time() * 1000)}_{safe_name}"

    async def upload(self, data: bytes, filename: str, kind: str = "raw") -> StoredBlob:
        params = {"public_id": self._public_id(filename)}
        if self.folder:
            params["folder"] = self.folder

        started = time.perf_counter()
        try:
            async with httpx.AsyncClient(transport=self.transport) as client:
                response = await client.post(
                    f"{self.base_url}/{self.cloud_name}/{kind}/upload",
                    data=self._signed(params),
                    files={"file": (filename, data)},
                    timeout=self.timeout,
                )
                response.raise_for_status()
                body = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Cloudinary upload of {filename} failed: {e}")
            raise ExternalServiceError("Failed to upload file")
        finally:
            record_blob_latency("upload", time.perf_counter() - started)

        if "secure_url" not in body or "public_id" not in body:
            logger.error(f"Unexpected Cloudinary upload response: {body}")
            raise ExternalServiceError("Failed to upload file")

        return StoredBlob(url=body["secure_url"], storage_id=body["public_id"])

    async def delete(self, storage_id: str, kind: str = "raw") -> bool:
        started = time.perf_counter()
        try:
            async with httpx.AsyncClient(transport=self.transport) as client:
                response = await client.post(
                    f"{self.base_url}/{self.cloud_name}/{kind}/destroy",
                    data=self._signed({"public_id": storage_id}),
                    timeout=self.timeout,
                )
                response.raise_for_status()
                body = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Cloudinary delete of {storage_id} failed: {e}")
            raise ExternalServiceError("Failed to delete file")
        finally:
            record_blob_latency("delete", time.perf_counter() - started)

        return body.get("result") == "ok"

    def storage_id_from_url(self, url: str) -> Optional[str]:
        """
        https://res.cloudinary.com/<cloud>/raw/upload/v1712/findx/resumes/17_cv.pdf
        -> findx/resumes/17_cv
        """
        if not url or "cloudinary.com" not in url or "/upload/" not in url:
            return None

        path = url.split("/upload/", 1)[1].split("?", 1)[0]
        path = _VERSION_PREFIX.sub("", path)
        if "." in path.rsplit("/", 1)[-1]:
            path = path.rsplit(".", 1)[0]
        return path or None


@lru_cache
def get_blob_storage() -> BlobStorage:
    return CloudinaryStorage()
