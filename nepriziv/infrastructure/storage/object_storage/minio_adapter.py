"""
MinIO Object Storage Adapter

Implements ObjectStorageInterface for MinIO object storage.
"""

import io
import json
import logging
from typing import Optional, Union
from datetime import timedelta

from minio import Minio
from minio.error import S3Error

from .base import ObjectStorageInterface, StorageConfig

logger = logging.getLogger(__name__)


def _public_read_policy(bucket_name: str) -> str:
    return json.dumps({
        "Version": "2012-10-17",
        "Statement": [
            {
                "Effect": "Allow",
                "Principal": {"AWS": ["*"]},
                "Action": ["s3:GetObject"],
                "Resource": [f"arn:aws:s3:::{bucket_name}/*"],
            }
        ],
    })


class MinIOAdapter(ObjectStorageInterface):
    """
    MinIO implementation of ObjectStorageInterface
    """

    def __init__(self, config: StorageConfig):
        super().__init__(config)
        self.client = Minio(
            endpoint=config.endpoint,
            access_key=config.access_key,
            secret_key=config.secret_key,
            secure=config.secure,
            region=config.region,
        )

    def ensure_bucket_exists(self, bucket_name: str) -> bool:
        """Ensure bucket exists, create if it doesn't"""
        try:
            if not self.client.bucket_exists(bucket_name):
                self.client.make_bucket(bucket_name)
                logger.info(f"✅ Bucket '{bucket_name}' created")
            return True
        except S3Error as e:
            logger.error(f"❌ Bucket operation failed: {e}")
            return False

    def upload_bytes(
        self,
        data: bytes,
        bucket_name: str,
        object_name: str,
        content_type: Optional[str] = None
    ) -> bool:
        try:
            self.ensure_bucket_exists(bucket_name)
            logger.debug(f"Uploading object: {bucket_name}/{object_name} ({len(data)} bytes)")

            self.client.put_object(
                bucket_name=bucket_name,
                object_name=object_name,
                data=io.BytesIO(data),
                length=len(data),
                content_type=content_type or "application/octet-stream"
            )

            logger.info(f"✅ Object uploaded: {bucket_name}/{object_name}")
            return True

        except S3Error as e:
            logger.error(f"❌ Upload failed {bucket_name}/{object_name}: {e}")
            return False
        except Exception as e:
            logger.error(f"❌ Unexpected upload error: {str(e)}")
            return False

    def get_file_bytes(self, bucket_name: str, object_name: str) -> Optional[bytes]:
        response = None
        try:
            response = self.client.get_object(bucket_name=bucket_name, object_name=object_name)
            return response.read()
        except S3Error as e:
            logger.error(f"❌ Failed to read object: {e}")
            return None
        except Exception as e:
            logger.error(f"❌ Unexpected read error: {str(e)}")
            return None
        finally:
            if response is not None:
                response.close()
                response.release_conn()

    def get_file_url(
        self,
        bucket_name: str,
        object_name: str,
        expires: Union[int, timedelta] = 3600
    ) -> Optional[str]:
        """Generate presigned URL for file access"""
        try:
            if isinstance(expires, int):
                expires_delta = timedelta(seconds=expires)
            else:
                expires_delta = expires

            url = self.client.presigned_get_object(
                bucket_name=bucket_name,
                object_name=object_name,
                expires=expires_delta
            )

            logger.debug(f"Presigned URL for {bucket_name}/{object_name} (expires in {expires_delta})")
            return url

        except S3Error as e:
            logger.error(f"❌ Failed to sign URL: {e}")
            return None
        except Exception as e:
            logger.error(f"❌ Unexpected error while signing URL: {str(e)}")
            return None

    def get_public_url(self, bucket_name: str, object_name: str) -> str:
        scheme = "https" if self.config.secure else "http"
        return f"{scheme}://{self.config.endpoint}/{bucket_name}/{object_name}"

    def delete_file(self, bucket_name: str, object_name: str) -> bool:
        try:
            self.client.remove_object(bucket_name=bucket_name, object_name=object_name)
            logger.info(f"✅ Object deleted: {bucket_name}/{object_name}")
            return True
        except S3Error as e:
            logger.error(f"❌ Delete failed: {e}")
            return False
        except Exception as e:
            logger.error(f"❌ Unexpected delete error: {str(e)}")
            return False

    def initialize(self) -> bool:
        """Create the document and blog image buckets; blog images are public-read"""
        logger.info(f"Initializing MinIO buckets, endpoint: {self.config.endpoint}")

        try:
            buckets = self.client.list_buckets()
            logger.info(f"Connected to MinIO, {len(buckets)} buckets present")
        except Exception as e:
            logger.error(f"❌ Cannot connect to MinIO: {e}")
            return False

        success = True
        for bucket in (self.config.medical_documents_bucket, self.config.blog_images_bucket):
            if not self.ensure_bucket_exists(bucket):
                success = False

        for bucket in self.config.public_buckets:
            try:
                self.client.set_bucket_policy(bucket, _public_read_policy(bucket))
            except S3Error as e:
                logger.error(f"❌ Failed to set public policy on '{bucket}': {e}")
                success = False

        if success:
            logger.info("✅ MinIO buckets ready")
        else:
            logger.error("❌ MinIO bucket initialization incomplete")

        return success
