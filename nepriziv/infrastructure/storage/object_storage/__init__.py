"""
Object Storage Infrastructure Module

Provides abstracted object storage interfaces (MinIO by default).
"""

from .base import ObjectStorageInterface, StorageConfig
from .minio_adapter import MinIOAdapter
from .factory import StorageFactory
from .paths import build_object_name, extract_file_path, file_extension

__all__ = [
    'ObjectStorageInterface',
    'StorageConfig',
    'MinIOAdapter',
    'StorageFactory',
    'build_object_name',
    'extract_file_path',
    'file_extension',
]
