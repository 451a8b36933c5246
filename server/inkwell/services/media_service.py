# server/inkwell/services/media_service.py

import hashlib
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

import requests

from inkwell.errors import UpstreamError

logger = logging.getLogger(__name__)

AVATAR_FOLDER = "articles/avatars"
IMAGE_FOLDER = "articles/images"


@dataclass(frozen=True)
class MediaAsset:
    url: str
    asset_ref: str


class MediaService:
    """
    Client for the Cloudinary upload API.

    Uploads raise UpstreamError so the request fails before anything is
    written. Deletes are best-effort: failures are logged and reported as
    False, never raised.
    """

    API_BASE = "https://api.cloudinary.com/v1_1"

    def __init__(
        self,
        cloud_name: Optional[str],
        api_key: Optional[str],
        api_secret: Optional[str],
        timeout: int = 30,
        max_workers: int = 4,
        session: Optional[requests.Session] = None,
    ):
        self.cloud_name = cloud_name
        self.api_key = api_key
        self.api_secret = api_secret
        self.timeout = timeout
        self.session = session or requests.Session()
        self.executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="media")

    @classmethod
    def from_config(cls, config) -> "MediaService":
        return cls(
            cloud_name=config.get("CLOUDINARY_CLOUD_NAME"),
            api_key=config.get("CLOUDINARY_API_KEY"),
            api_secret=config.get("CLOUDINARY_API_SECRET"),
            timeout=config.get("MEDIA_TIMEOUT", 30),
            max_workers=config.get("MEDIA_MAX_WORKERS", 4),
        )

    @property
    def configured(self) -> bool:
        return bool(self.cloud_name and self.api_key and self.api_secret)

    def sign(self, params: Dict[str, str]) -> str:
        payload = "&".join(f"{k}={params[k]}" for k in sorted(params))
        return hashlib.sha1(f"{payload}{self.api_secret}".encode()).hexdigest()

    def _signed_params(self, **params) -> Dict[str, str]:
        params["timestamp"] = str(int(time.time()))
        signed = dict(params)
        signed["signature"] = self.sign(params)
        signed["api_key"] = self.api_key
        return signed

    def upload(self, data: bytes, folder: str, filename: Optional[str] = None) -> MediaAsset:
        if not self.configured:
            raise UpstreamError("Media storage is not configured", code="MEDIA_UNAVAILABLE")

        url = f"{self.API_BASE}/{self.cloud_name}/auto/upload"

        try:
            response = self.session.post(
                url,
                data=self._signed_params(folder=folder),
                files={"file": (filename or "upload", data)},
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout:
            logger.error(f"Media upload to {folder} timed out after {self.timeout}s")
            raise UpstreamError("Image upload timed out", code="MEDIA_TIMEOUT", details={"folder": folder})
        except requests.exceptions.RequestException as e:
            logger.error(f"Media upload to {folder} failed: {e}")
            raise UpstreamError("Image upload failed", code="MEDIA_UPLOAD_FAILED", details={"folder": folder})

        if response.status_code != 200:
            logger.error(f"Media upload to {folder} rejected: HTTP {response.status_code} {response.text[:200]}")
            raise UpstreamError(
                "Image upload failed",
                code="MEDIA_UPLOAD_FAILED",
                details={"folder": folder, "status_code": response.status_code},
            )

        try:
            body = response.json()
            asset = MediaAsset(url=body["secure_url"], asset_ref=body["public_id"])
        except (ValueError, KeyError, TypeError):
            logger.error(f"Media upload to {folder} returned an unexpected body")
            raise UpstreamError("Image upload returned an invalid response", code="MEDIA_UPLOAD_FAILED")

        logger.info(f"Uploaded media asset {asset.asset_ref}")
        return asset

    def delete(self, asset_ref: Optional[str]) -> bool:
        if not asset_ref:
            return False

        if not self.configured:
            logger.warning(f"Media storage not configured, cannot delete {asset_ref}")
            return False

        url = f"{self.API_BASE}/{self.cloud_name}/image/destroy"

        try:
            response = self.session.post(
                url,
                data=self._signed_params(public_id=asset_ref),
                timeout=self.timeout,
            )
            result = response.json().get("result") if response.status_code == 200 else None
        except (requests.exceptions.RequestException, ValueError) as e:
            logger.warning(f"Media delete failed for {asset_ref}: {e}")
            return False

        if result != "ok":
            logger.warning(f"Media delete for {asset_ref} returned {result or response.status_code}")
            return False

        logger.info(f"Deleted media asset {asset_ref}")
        return True

    def upload_many(self, items: Iterable[Tuple[bytes, str, Optional[str]]]) -> List[MediaAsset]:
        """
        Upload (data, folder, filename) items concurrently, preserving order.

        If any upload fails, the ones that succeeded are deleted again and the
        first error is raised.
        """
        futures = [self.executor.submit(self.upload, data, folder, filename) for data, folder, filename in items]

        assets = []
        first_error = None
        for future in futures:
            try:
                assets.append(future.result())
            except UpstreamError as e:
                first_error = first_error or e

        if first_error is not None:
            if assets:
                logger.warning(f"Rolling back {len(assets)} uploaded asset(s) after a failed upload")
                self.delete_many(asset.asset_ref for asset in assets)
            raise first_error

        return assets

    def submit_deletes(self, asset_refs: Iterable[Optional[str]]) -> list:
        return [self.executor.submit(self.delete, ref) for ref in asset_refs if ref]

    def delete_many(self, asset_refs: Iterable[Optional[str]]) -> List[bool]:
        return [future.result() for future in self.submit_deletes(asset_refs)]

    def health(self) -> dict:
        return {"status": "configured" if self.configured else "not_configured"}
