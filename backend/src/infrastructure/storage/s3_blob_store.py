"""S3 Blob Store - Implementation of BlobStorePort using boto3.

Provides listing and size lookups against AWS S3, MinIO and other
S3-compatible services. boto3 is blocking, so every call runs in the event
loop's default executor; the client itself is thread-safe and shared.

Architecture: Hexagonal - Adapter implementation in infrastructure layer
"""

import asyncio
import functools
import logging
from typing import Optional
from urllib.parse import unquote, urlparse

import boto3
from botocore.exceptions import ClientError, NoCredentialsError

from domain.storage_usage.ports.blob_store_port import (
    BlobEntry,
    BlobListing,
    BlobStorePort,
    StorageError,
)
from .storage_config import StorageConfig

logger = logging.getLogger(__name__)

# Path prefix of public object URLs served by Supabase-style storage gateways
PUBLIC_OBJECT_PREFIX = "/storage/v1/object/public/"


class S3BlobStore(BlobStorePort):
    """S3-compatible blob store using boto3.

    Folders are S3 common prefixes: listings use Delimiter='/' so each page
    holds the direct children of a path, with file sizes returned inline.

    Example:
        config = load_storage_config()
        store = S3BlobStore.from_config(config)
        listing = await store.list_page("studios/foto-lumen/contacts/avatars")
    """

    def __init__(
        self,
        endpoint_url: Optional[str],
        access_key: str,
        secret_key: str,
        bucket_name: str,
        region: str = "us-east-1",
        public_base_url: Optional[str] = None,
    ):
        """Initialize S3 blob store.

        Raises:
            StorageError: If S3 client initialization fails
        """
        try:
            self.s3_client = boto3.client(
                "s3",
                endpoint_url=endpoint_url,
                aws_access_key_id=access_key,
                aws_secret_access_key=secret_key,
                region_name=region,
            )
            self.bucket_name = bucket_name
            self.region = region
            self.endpoint_url = endpoint_url
            self.public_base_url = public_base_url.rstrip("/") if public_base_url else None

            logger.info(
                f"Initialized S3 blob store: bucket={bucket_name}, "
                f"endpoint={endpoint_url or 'AWS S3'}, region={region}"
            )
        except NoCredentialsError as e:
            raise StorageError(f"Invalid S3 credentials: {e}")
        except Exception as e:
            raise StorageError(f"Failed to initialize S3 client: {e}")

    @classmethod
    def from_config(cls, config: StorageConfig) -> "S3BlobStore":
        return cls(
            endpoint_url=config.endpoint_url,
            access_key=config.access_key,
            secret_key=config.secret_key,
            bucket_name=config.bucket_name,
            region=config.region,
            public_base_url=config.public_base_url,
        )

    async def _call(self, method, **kwargs):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, functools.partial(method, **kwargs))

    async def list_page(
        self,
        path: str,
        page_token: Optional[str] = None,
        page_size: int = 1000,
    ) -> BlobListing:
        """List direct children of path (one list_objects_v2 page).

        Directory entries carry the exact common prefix (trailing slash
        included) as their path, and a path ending in "/" is used as the
        prefix verbatim. Keys with empty segments ("a//b.jpg") therefore
        list under "a//" instead of collapsing back onto "a/".

        Raises:
            StorageError: If the listing fails
        """
        if path.endswith("/") and path.strip("/"):
            prefix = path
        else:
            prefix = f"{path.strip('/')}/" if path.strip("/") else ""
        params = {
            "Bucket": self.bucket_name,
            "Prefix": prefix,
            "Delimiter": "/",
            "MaxKeys": page_size,
        }
        if page_token:
            params["ContinuationToken"] = page_token

        try:
            response = await self._call(self.s3_client.list_objects_v2, **params)
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            logger.error(
                f"S3 listing failed: prefix={prefix}, error={error_code}"
            )
            raise StorageError(f"Failed to list '{prefix}': {error_code}")
        except Exception as e:
            logger.error(f"Unexpected error during listing: prefix={prefix}, error={e}")
            raise StorageError(f"Failed to list '{prefix}': {e}")

        entries = []
        for common_prefix in response.get("CommonPrefixes", []):
            folder = common_prefix["Prefix"]
            entries.append(BlobEntry(
                name=folder[len(prefix):-1],
                path=folder,
                is_directory=True,
            ))
        for obj in response.get("Contents", []):
            key = obj["Key"]
            # Folder placeholder objects ("path/") are not files
            if key == prefix or key.endswith("/"):
                continue
            entries.append(BlobEntry(
                name=key.rsplit("/", 1)[-1],
                path=key,
                is_directory=False,
                size_bytes=obj.get("Size"),
            ))

        next_token = response.get("NextContinuationToken") if response.get("IsTruncated") else None
        return BlobListing(entries=entries, next_page_token=next_token)

    async def get_size(self, path: str) -> int:
        """Return the size of one object using a HEAD request.

        Raises:
            FileNotFoundError: If the object doesn't exist
            StorageError: If the lookup fails
        """
        try:
            response = await self._call(
                self.s3_client.head_object,
                Bucket=self.bucket_name,
                Key=path,
            )
            return int(response["ContentLength"])
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            if error_code in ("404", "NoSuchKey", "NotFound"):
                raise FileNotFoundError(f"File not found: {path}")
            logger.error(f"S3 size lookup failed: key={path}, error={error_code}")
            raise StorageError(f"Failed to read size of '{path}': {error_code}")
        except Exception as e:
            logger.error(f"Unexpected error during size lookup: key={path}, error={e}")
            raise StorageError(f"Failed to read size of '{path}': {e}")

    def resolve_path(self, reference: str) -> Optional[str]:
        """Map a stored media reference to an object key.

        Accepted forms:
            - raw key: 'studios/foto-lumen/offers/cover.jpg'
            - public gateway URL: '.../storage/v1/object/public/<bucket>/<key>'
            - configured public base URL: '<S3_PUBLIC_BASE_URL>/<key>'
            - path-style URL: '<endpoint>/<bucket>/<key>'

        Returns:
            Optional[str]: Object key, or None if the reference points elsewhere
        """
        if not reference:
            return None

        reference = reference.strip()
        if self.public_base_url and reference.startswith(self.public_base_url + "/"):
            return unquote(reference[len(self.public_base_url) + 1:]) or None

        if not reference.startswith(("http://", "https://")):
            return reference.lstrip("/") or None

        path = unquote(urlparse(reference).path)
        bucket_prefix = f"{self.bucket_name}/"

        if PUBLIC_OBJECT_PREFIX in path:
            remainder = path.split(PUBLIC_OBJECT_PREFIX, 1)[1]
            if remainder.startswith(bucket_prefix):
                return remainder[len(bucket_prefix):] or None
            return None

        path = path.lstrip("/")
        if path.startswith(bucket_prefix):
            return path[len(bucket_prefix):] or None
        return None
