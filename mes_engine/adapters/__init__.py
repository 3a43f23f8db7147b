"""
Storage adapter implementations.

This module provides the abstract StorageProvider and concrete
implementations for the local filesystem and AWS S3.
"""

from .base import StorageProvider
from .filesystem_adapter import FileSystemStorage
from .s3_adapter import S3StorageAdapter

__all__ = [
    'StorageProvider',
    'FileSystemStorage',
    'S3StorageAdapter'
]
