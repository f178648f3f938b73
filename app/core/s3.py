"""
S3 storage for transaction attachments.

Attachments are write-once: every upload gets a fresh key, nothing is
overwritten, and downloads go through presigned URLs.
"""

import hashlib
import io
import re
import uuid
from typing import Optional, Dict, Any, Tuple
from datetime import datetime
import boto3
from botocore.client import BaseClient
from botocore.config import Config
from botocore.exceptions import ClientError, BotoCoreError
from app.core.config import config


class StorageError(Exception):
    """Raised when an S3 operation fails."""


class S3Service:
    """
    Thin, type-safe wrapper around the S3 client used for attachments.
    """

    _client: Optional[BaseClient] = None

    @classmethod
    def _get_client(cls) -> BaseClient:
        """
        Lazy-load S3 client with connection pooling.
        """
        if cls._client is None:
            boto_config = Config(
                region_name=config.aws_region or None,
                retries={
                    "max_attempts": 2,
                    "mode": "standard",
                },
                max_pool_connections=5,
                connect_timeout=5,
                read_timeout=10,
            )

            cls._client = boto3.client(
                "s3",
                aws_access_key_id=config.aws_access_key_id or None,
                aws_secret_access_key=config.aws_secret_access_key or None,
                config=boto_config,
            )

        return cls._client

    @staticmethod
    def build_attachment_key(filename: str) -> str:
        """
        Build a unique object key for an uploaded attachment.

        Format: <prefix><YYYYmmdd_HHMMSS>_<8 hex>_<sanitized filename>
        """
        safe_name = re.sub(r"[^A-Za-z0-9._-]+", "_", filename or "attachment").strip("_")
        timestamp = datetime.utcnow().strftime("%Y%m%d_%H%M%S")
        return f"{config.s3_attachment_prefix}{timestamp}_{uuid.uuid4().hex[:8]}_{safe_name or 'attachment'}"

    @classmethod
    def upload_file(
        cls,
        file_content: bytes,
        file_key: str,
        content_type: str = "application/octet-stream",
        metadata: Optional[Dict[str, str]] = None,
    ) -> Tuple[str, str]:
        """
        Upload a small file to S3 in a single PUT request.

        Returns:
            Tuple[str, str]: (file_key, md5 checksum)
        Raises:
            StorageError: On failure
        """
        if not config.s3_bucket_name:
            raise StorageError("S3 bucket is not configured")

        client = cls._get_client()
        checksum: str = hashlib.md5(file_content).hexdigest()

        upload_params: Dict[str, Any] = {
            "Bucket": config.s3_bucket_name,
            "Key": file_key,
            "Body": io.BytesIO(file_content),
            "ContentType": content_type,
            "ServerSideEncryption": "AES256",
        }

        if metadata:
            upload_params["Metadata"] = {
                k: str(v)[:100] for k, v in list(metadata.items())[:3]
            }

        try:
            client.put_object(**upload_params)
            return file_key, checksum
        except (ClientError, BotoCoreError) as e:
            raise StorageError(f"S3 upload failed: {e}") from e

    @classmethod
    def generate_presigned_url(cls, file_key: str, expiration: int = 3600) -> str:
        """
        Generate a temporary presigned URL for downloading an attachment.

        Raises:
            StorageError: On failure
        """
        client = cls._get_client()

        try:
            return client.generate_presigned_url(
                "get_object",
                Params={"Bucket": config.s3_bucket_name, "Key": file_key},
                ExpiresIn=expiration,
            )
        except (ClientError, BotoCoreError) as e:
            raise StorageError(f"Failed to generate presigned URL: {e}") from e
