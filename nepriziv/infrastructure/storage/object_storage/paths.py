"""Object naming and legacy URL handling for stored files."""

import re
import time
from typing import Optional

from nepriziv.core.config import settings


def build_object_name(owner_id, file_name: str, timestamp_ms: Optional[int] = None) -> str:
    """
    {owner_id}/{timestamp_ms}.{ext}

    >>> build_object_name(42, "scan.PDF", 1700000000000)
    '42/1700000000000.pdf'
    """
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    ext = file_extension(file_name)
    return f"{owner_id}/{timestamp_ms}.{ext}" if ext else f"{owner_id}/{timestamp_ms}"


def file_extension(file_name: str) -> str:
    if not file_name or "." not in file_name:
        return ""
    return file_name.rsplit(".", 1)[-1].lower()


def extract_file_path(value: str, bucket_name: Optional[str] = None) -> str:
    """
    Stored path for a document.

    Older rows kept a full public or signed URL; the object path is whatever
    follows the bucket name. Anything that is not an http(s) URL is already a path.
    """
    if not value or not value.startswith("http"):
        return value
    bucket = re.escape(bucket_name or settings.MEDICAL_DOCUMENTS_BUCKET)
    match = re.search(rf"/(?:object/(?:public|sign)/)?{bucket}/(.+)", value)
    if not match:
        return value
    # signed URLs carry the token as a query string
    return match.group(1).split("?", 1)[0]
