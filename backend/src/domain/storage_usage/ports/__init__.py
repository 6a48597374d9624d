from .blob_store_port import BlobEntry, BlobListing, BlobStorePort, StorageError

__all__ = ["BlobEntry", "BlobListing", "BlobStorePort", "StorageError"]
