"""
AWS S3 adapter for storage.

Provides storage backend for chunks, playlists and manifests in S3.
Path-like keys are stored relative to a base directory under a prefix.
"""

import os
import boto3
import logging
from typing import Optional, Dict, Any
from botocore.exceptions import ClientError

from .base import StorageProvider
from ..exceptions import StorageError

logger = logging.getLogger("mes_engine")

CONTENT_TYPES = {
    '.mp4': 'video/mp4',
    '.jpg': 'image/jpeg',
    '.m3u8': 'application/vnd.apple.mpegurl',
    '.json': 'application/json'
}


class S3StorageAdapter(StorageProvider):
    """AWS S3 implementation of storage provider"""

    def __init__(self, bucket: str, region: str = "us-east-1", prefix: str = "mes-engine/",
                 base_dir: Optional[str] = None):
        self.bucket = bucket
        self.region = region
        self.prefix = prefix
        self.base_dir = base_dir
        self.s3 = None

    def connect(self):
        """Initialize S3 client"""
        try:
            self.s3 = boto3.client('s3', region_name=self.region)
            logger.info(f"S3 storage connected to bucket: {self.bucket}")
        except Exception as e:
            logger.error(f"Failed to connect to S3: {e}")
            raise

    def _key(self, chunk_path: str) -> str:
        """Map a path-like key to an object key"""
        path = chunk_path
        if self.base_dir and os.path.isabs(path):
            path = os.path.relpath(path, self.base_dir)
        path = path.replace(os.sep, "/").lstrip("/")
        return f"{self.prefix}{path}"

    def save_chunk(self, chunk_path: str, data: bytes) -> None:
        """Upload bytes to S3"""
        key = self._key(chunk_path)
        content_type = CONTENT_TYPES.get(os.path.splitext(key)[1], 'application/octet-stream')
        try:
            self.s3.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType=content_type
            )
            logger.debug(f"Stored {len(data)} bytes at s3://{self.bucket}/{key}")
        except ClientError as e:
            logger.error(f"Error storing {key} in S3: {e}")
            raise StorageError(f"Failed to store {key}: {e}")

    def get_chunk(self, chunk_path: str) -> bytes:
        """Download bytes from S3"""
        key = self._key(chunk_path)
        try:
            response = self.s3.get_object(Bucket=self.bucket, Key=key)
            return response['Body'].read()
        except ClientError as e:
            raise StorageError(f"Failed to fetch {key}: {e}")

    def delete_chunk(self, chunk_path: str) -> None:
        key = self._key(chunk_path)
        try:
            self.s3.delete_object(Bucket=self.bucket, Key=key)
            logger.debug(f"Deleted s3://{self.bucket}/{key}")
        except ClientError as e:
            logger.error(f"Error deleting {key} from S3: {e}")
            raise StorageError(f"Failed to delete {key}: {e}")

    def exists(self, chunk_path: str) -> bool:
        try:
            self.s3.head_object(Bucket=self.bucket, Key=self._key(chunk_path))
            return True
        except ClientError:
            return False

    def get_stats(self) -> Dict[str, Any]:
        """Get storage statistics from S3"""
        try:
            response = self.s3.list_objects_v2(
                Bucket=self.bucket,
                Prefix=self.prefix
            )

            objects = response.get('Contents', [])

            return {
                'total_objects': len(objects),
                'chunk_objects': len([obj for obj in objects if obj['Key'].endswith('.mp4')]),
                'playlist_objects': len([obj for obj in objects if obj['Key'].endswith('.m3u8')]),
                'total_size_bytes': sum(obj['Size'] for obj in objects)
            }

        except ClientError as e:
            logger.error(f"Error getting S3 stats: {e}")
            return {}

    def close(self):
        """Close S3 connection"""
        self.s3 = None
        logger.info("S3 storage connection closed")
