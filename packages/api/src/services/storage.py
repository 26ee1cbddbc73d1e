# This project was developed with assistance from AI tools.
"""S3-compatible artifact store backed by MinIO.

Persists uploaded KYC artifacts and hands back an opaque object key; the KYC
ledger stores only that key. Uses the boto3 synchronous client run in a
thread-pool executor for async compatibility. The module exposes a singleton
initialised at app startup via ``init_storage_service()``.
"""

import asyncio
import logging
import os
import secrets
import time
from functools import partial

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from ..core.config import Settings
from ..core.errors import StorageError

logger = logging.getLogger(__name__)


class StorageService:
    """Thin wrapper around a boto3 S3 client."""

    def __init__(
        self,
        endpoint: str,
        access_key: str,
        secret_key: str,
        bucket: str,
        region: str = "us-east-1",
    ):
        self._bucket = bucket
        self._client = boto3.client(
            "s3",
            endpoint_url=endpoint,
            aws_access_key_id=access_key,
            aws_secret_access_key=secret_key,
            region_name=region,
            config=BotoConfig(
                signature_version="s3v4",
                s3={
                    "addressing_style": "path",
                    "use_accelerate_endpoint": False,
                },
            ),
        )
        self._ensure_bucket()

    def _ensure_bucket(self) -> None:
        """Create the bucket if it doesn't already exist (dev convenience)."""
        try:
            self._client.head_bucket(Bucket=self._bucket)
        except ClientError:
            logger.info("Creating S3 bucket: %s", self._bucket)
            self._client.create_bucket(Bucket=self._bucket)

    async def store(
        self,
        file_data: bytes,
        category_hint: str,
        filename: str,
        content_type: str,
    ) -> str:
        """Upload bytes under a fresh key and return that key."""
        object_key = self.build_object_key(category_hint, filename)
        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(
                None,
                partial(
                    self._client.put_object,
                    Bucket=self._bucket,
                    Key=object_key,
                    Body=file_data,
                    ContentType=content_type,
                ),
            )
        except (BotoCoreError, ClientError) as exc:
            logger.error("Artifact upload failed for %s: %s", object_key, exc)
            raise StorageError("Could not store uploaded file; please retry") from exc
        return object_key

    async def exists(self, object_key: str) -> bool:
        """Return True if an object is stored under ``object_key``."""
        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(
                None,
                partial(self._client.head_object, Bucket=self._bucket, Key=object_key),
            )
        except ClientError as exc:
            code = exc.response.get("Error", {}).get("Code")
            if code in ("404", "NoSuchKey", "NotFound"):
                return False
            raise StorageError("Artifact store unavailable; please retry") from exc
        except BotoCoreError as exc:
            raise StorageError("Artifact store unavailable; please retry") from exc
        return True

    async def get_download_url(self, object_key: str, expires_in: int = 3600) -> str:
        """Return a presigned GET URL for reviewers."""
        loop = asyncio.get_running_loop()
        url: str = await loop.run_in_executor(
            None,
            partial(
                self._client.generate_presigned_url,
                "get_object",
                Params={"Bucket": self._bucket, "Key": object_key},
                ExpiresIn=expires_in,
            ),
        )
        return url

    @staticmethod
    def build_object_key(category_hint: str, filename: str) -> str:
        """Build the object key: kyc/{category}/{timestamp}-{random}{ext}.

        Only the extension of the client filename is kept, so path components
        in the upload cannot escape the prefix.
        """
        ext = os.path.splitext(os.path.basename(filename))[1].lower()
        unique = f"{int(time.time() * 1000)}-{secrets.token_hex(8)}"
        return f"kyc/{category_hint}/{unique}{ext}"


# ---------------------------------------------------------------------------
# Module-level singleton
# ---------------------------------------------------------------------------

_service: StorageService | None = None


def init_storage_service(cfg: Settings) -> StorageService:
    """Initialise the singleton (called once from app lifespan)."""
    global _service  # noqa: PLW0603
    _service = StorageService(
        endpoint=cfg.S3_ENDPOINT,
        access_key=cfg.S3_ACCESS_KEY,
        secret_key=cfg.S3_SECRET_KEY,
        bucket=cfg.S3_BUCKET,
        region=cfg.S3_REGION,
    )
    logger.info("StorageService initialised (bucket=%s)", cfg.S3_BUCKET)
    return _service


def get_storage_service() -> StorageService:
    """Return the initialised StorageService singleton."""
    if _service is None:
        raise RuntimeError("StorageService not initialised -- call init_storage_service() first")
    return _service
