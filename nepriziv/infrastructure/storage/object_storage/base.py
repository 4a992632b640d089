"""
Object Storage Abstract Base Classes

Defines the interface the services use for file storage, so the MinIO
adapter can be swapped for another S3-compatible backend (or a fake in tests).
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Union
from dataclasses import dataclass, field
from datetime import timedelta


@dataclass
class StorageConfig:
    endpoint: str
    access_key: str
    secret_key: str
    secure: bool = True
    region: Optional[str] = None

    medical_documents_bucket: str = "medical-documents"
    blog_images_bucket: str = "blog-images"
    # readable without a signature
    public_buckets: List[str] = field(default_factory=list)


class ObjectStorageInterface(ABC):
    """
    Storage operations used by the document and blog services.

    Failures are logged by the adapter and reported as False / None;
    callers turn them into error envelopes.
    """

    def __init__(self, config: StorageConfig):
        self.config = config

    @abstractmethod
    def ensure_bucket_exists(self, bucket_name: str) -> bool:
        pass

    @abstractmethod
    def upload_bytes(self, data: bytes, bucket_name: str, object_name: str,
                     content_type: Optional[str] = None) -> bool:
        pass

    @abstractmethod
    def get_file_bytes(self, bucket_name: str, object_name: str) -> Optional[bytes]:
        pass

    @abstractmethod
    def get_file_url(self, bucket_name: str, object_name: str,
                     expires: Union[int, timedelta] = 3600) -> Optional[str]:
        """Presigned GET URL; ``expires`` is seconds or a timedelta"""
        pass

    @abstractmethod
    def get_public_url(self, bucket_name: str, object_name: str) -> str:
        """Unsigned URL for objects in a public bucket"""
        pass

    @abstractmethod
    def delete_file(self, bucket_name: str, object_name: str) -> bool:
        pass

    @abstractmethod
    def initialize(self) -> bool:
        """Create the buckets the application needs"""
        pass
