"""
Object Storage Factory

Creates appropriate storage adapters based on configuration.
"""

from typing import Optional

from nepriziv.core.config import settings
from .base import ObjectStorageInterface, StorageConfig
from .minio_adapter import MinIOAdapter


class StorageFactory:
    """Factory for creating object storage instances"""

    _default: Optional[ObjectStorageInterface] = None

    @staticmethod
    def create_storage(
        storage_type: str = "minio",
        config: Optional[StorageConfig] = None
    ) -> ObjectStorageInterface:
        """
        Create object storage instance based on type

        Args:
            storage_type: Type of storage (only "minio" for now)
            config: Optional custom configuration
        """
        if config is None:
            config = StorageFactory._get_default_config(storage_type)

        if storage_type.lower() == "minio":
            return MinIOAdapter(config)
        raise ValueError(f"Unsupported storage type: {storage_type}")

    @staticmethod
    def _get_default_config(storage_type: str) -> StorageConfig:
        """Get default configuration from settings"""
        if storage_type.lower() == "minio":
            return StorageConfig(
                endpoint=settings.MINIO_ENDPOINT,
                access_key=settings.MINIO_ACCESS_KEY,
                secret_key=settings.MINIO_SECRET_KEY,
                secure=settings.MINIO_SECURE,
                medical_documents_bucket=settings.MEDICAL_DOCUMENTS_BUCKET,
                blog_images_bucket=settings.BLOG_IMAGES_BUCKET,
                public_buckets=[settings.BLOG_IMAGES_BUCKET],
            )
        raise ValueError(f"No default configuration for storage type: {storage_type}")

    @staticmethod
    def get_default_storage() -> ObjectStorageInterface:
        """Shared MinIO adapter, created lazily"""
        if StorageFactory._default is None:
            StorageFactory._default = StorageFactory.create_storage("minio")
        return StorageFactory._default
