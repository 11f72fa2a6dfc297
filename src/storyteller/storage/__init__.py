from .base import BlobStore
from .factory import create_blob_store
from .s3_blob import S3BlobStore
from .snapshot_store import SnapshotStore, serialize_windows, snapshot_key
from .vercel_blob import VercelBlobStore

__all__ = [
    "BlobStore",
    "S3BlobStore",
    "SnapshotStore",
    "VercelBlobStore",
    "create_blob_store",
    "serialize_windows",
    "snapshot_key",
]
