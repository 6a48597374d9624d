"""Unit tests for S3BlobStore using moto

Tests cover paged listings with common prefixes, HEAD size lookups,
reference resolution and an end-to-end crawl against mocked S3.
"""

import pytest

from moto import mock_aws
import boto3

from config import Settings
from domain.storage_usage.crawler import BlobTreeCrawler
from domain.storage_usage.ports.blob_store_port import StorageError
from infrastructure.storage import (
    S3BlobStore,
    StorageConfig,
    load_storage_config,
    validate_storage_config,
)


# Test constants
TEST_BUCKET = "test-studio-media"
TEST_REGION = "us-east-1"
TEST_ACCESS_KEY = "test-access-key"
TEST_SECRET_KEY = "test-secret-key"
AVATARS = "studios/foto-lumen/contacts/avatars"
MB = 1024 * 1024


@pytest.fixture
def s3_client():
    """Mock S3 with an empty bucket"""
    with mock_aws():
        client = boto3.client(
            "s3",
            region_name=TEST_REGION,
            aws_access_key_id=TEST_ACCESS_KEY,
            aws_secret_access_key=TEST_SECRET_KEY,
        )
        client.create_bucket(Bucket=TEST_BUCKET)
        yield client


@pytest.fixture
def blob_store(s3_client):
    """S3BlobStore bound to the mocked bucket"""
    return S3BlobStore(
        endpoint_url=None,  # AWS S3 (moto mocks this)
        access_key=TEST_ACCESS_KEY,
        secret_key=TEST_SECRET_KEY,
        bucket_name=TEST_BUCKET,
        region=TEST_REGION,
        public_base_url="https://cdn.example.com/media",
    )


def put(client, key, size):
    client.put_object(Bucket=TEST_BUCKET, Key=key, Body=b"x" * size)


class TestListPage:

    @pytest.mark.asyncio
    async def test_lists_files_and_folders(self, s3_client, blob_store):
        put(s3_client, f"{AVATARS}/a.jpg", 10)
        put(s3_client, f"{AVATARS}/2024/b.jpg", 20)

        listing = await blob_store.list_page(AVATARS)

        by_name = {entry.name: entry for entry in listing.entries}
        assert set(by_name) == {"a.jpg", "2024"}
        assert by_name["a.jpg"].size_bytes == 10
        assert by_name["a.jpg"].path == f"{AVATARS}/a.jpg"
        assert by_name["2024"].is_directory is True
        assert by_name["2024"].path == f"{AVATARS}/2024/"
        assert listing.next_page_token is None

    @pytest.mark.asyncio
    async def test_paginates_with_continuation_token(self, s3_client, blob_store):
        for i in range(5):
            put(s3_client, f"{AVATARS}/{i}.jpg", 1)

        first = await blob_store.list_page(AVATARS, page_size=2)
        assert len(first.entries) == 2
        assert first.next_page_token

        seen = [entry.name for entry in first.entries]
        token = first.next_page_token
        while token:
            page = await blob_store.list_page(AVATARS, page_token=token, page_size=2)
            seen.extend(entry.name for entry in page.entries)
            token = page.next_page_token

        assert sorted(seen) == [f"{i}.jpg" for i in range(5)]

    @pytest.mark.asyncio
    async def test_folder_placeholder_is_not_a_file(self, s3_client, blob_store):
        s3_client.put_object(Bucket=TEST_BUCKET, Key=f"{AVATARS}/", Body=b"")
        put(s3_client, f"{AVATARS}/a.jpg", 10)

        listing = await blob_store.list_page(AVATARS)

        assert [entry.name for entry in listing.entries] == ["a.jpg"]

    @pytest.mark.asyncio
    async def test_missing_bucket_raises_storage_error(self, s3_client):
        store = S3BlobStore(
            endpoint_url=None,
            access_key=TEST_ACCESS_KEY,
            secret_key=TEST_SECRET_KEY,
            bucket_name="does-not-exist",
            region=TEST_REGION,
        )

        with pytest.raises(StorageError):
            await store.list_page(AVATARS)


class TestGetSize:

    @pytest.mark.asyncio
    async def test_returns_content_length(self, s3_client, blob_store):
        put(s3_client, "studios/foto-lumen/offers/cover.jpg", 1234)

        assert await blob_store.get_size("studios/foto-lumen/offers/cover.jpg") == 1234

    @pytest.mark.asyncio
    async def test_missing_object_raises_file_not_found(self, blob_store):
        with pytest.raises(FileNotFoundError):
            await blob_store.get_size("studios/foto-lumen/offers/missing.jpg")


class TestResolvePath:

    @pytest.mark.parametrize("reference,expected", [
        ("studios/foto-lumen/offers/cover.jpg", "studios/foto-lumen/offers/cover.jpg"),
        ("/studios/foto-lumen/offers/cover.jpg", "studios/foto-lumen/offers/cover.jpg"),
        (
            "https://cdn.example.com/media/studios/foto-lumen/offers/cover.jpg",
            "studios/foto-lumen/offers/cover.jpg",
        ),
        (
            f"https://abc.supabase.co/storage/v1/object/public/{TEST_BUCKET}/studios/foto-lumen/offers/a%20b.jpg",
            "studios/foto-lumen/offers/a b.jpg",
        ),
        (
            f"http://localhost:9000/{TEST_BUCKET}/studios/foto-lumen/offers/cover.jpg",
            "studios/foto-lumen/offers/cover.jpg",
        ),
        ("https://images.unsplash.com/photo-123", None),
        ("https://abc.supabase.co/storage/v1/object/public/other-bucket/x.jpg", None),
        ("", None),
    ])
    def test_resolve_path(self, blob_store, reference, expected):
        assert blob_store.resolve_path(reference) == expected


class TestCrawlAgainstS3:

    @pytest.mark.asyncio
    async def test_nested_avatars_total_six_megabytes(self, s3_client, blob_store):
        put(s3_client, f"{AVATARS}/2024/a.jpg", 1 * MB)
        put(s3_client, f"{AVATARS}/2024/b.jpg", 2 * MB)
        put(s3_client, f"{AVATARS}/2024/c.jpg", 3 * MB)
        put(s3_client, "studios/other-studio/contacts/avatars/d.jpg", 5 * MB)

        usage = await BlobTreeCrawler(blob_store).crawl(AVATARS)

        assert usage.total_bytes == 6 * MB
        assert usage.file_count == 3

    @pytest.mark.asyncio
    async def test_empty_path_segment_is_counted_once(self, s3_client, blob_store):
        put(s3_client, f"{AVATARS}/a.jpg", 100)
        put(s3_client, f"{AVATARS}//b.jpg", 200)

        usage = await BlobTreeCrawler(blob_store).crawl(AVATARS)

        assert usage.total_bytes == 300
        assert usage.file_count == 2
        assert usage.warnings == []

    @pytest.mark.asyncio
    async def test_double_slash_prefix_listed_verbatim(self, s3_client, blob_store):
        put(s3_client, f"{AVATARS}/a.jpg", 100)
        put(s3_client, f"{AVATARS}//b.jpg", 200)

        top = await blob_store.list_page(AVATARS)
        folder = next(entry for entry in top.entries if entry.is_directory)
        nested = await blob_store.list_page(folder.path)

        assert folder.path == f"{AVATARS}//"
        assert [entry.path for entry in nested.entries] == [f"{AVATARS}//b.jpg"]

    @pytest.mark.asyncio
    async def test_multi_page_folder(self, s3_client, blob_store):
        for i in range(7):
            put(s3_client, f"{AVATARS}/{i}.jpg", 100)

        total = await BlobTreeCrawler(blob_store, page_size=3).list_tree(AVATARS)

        assert total == 700


class TestStorageConfig:

    def test_load_from_settings(self):
        settings = Settings(
            S3_ENDPOINT_URL="http://minio:9000",
            S3_BUCKET_NAME="media",
            STORAGE_LIST_PAGE_SIZE=500,
        )

        config = load_storage_config(settings)

        assert config.endpoint_url == "http://minio:9000"
        assert config.bucket_name == "media"
        assert config.page_size == 500

    def test_page_size_above_s3_limit_rejected(self):
        config = StorageConfig(
            endpoint_url=None,
            access_key="key",
            secret_key="secret",
            bucket_name="media",
            region="us-east-1",
            page_size=5000,
        )

        with pytest.raises(ValueError):
            validate_storage_config(config)

    def test_invalid_endpoint_rejected(self):
        config = StorageConfig(
            endpoint_url="minio:9000",
            access_key="key",
            secret_key="secret",
            bucket_name="media",
        )

        with pytest.raises(ValueError):
            validate_storage_config(config)
