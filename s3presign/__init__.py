"""
AWS Signature Version 4 presigned URLs for S3-compatible object stores.

This package builds time-limited GET URLs signed against one host and served
from another (a CDN or gateway in front of the store), without depending on
botocore for signing.
"""

from .config import Settings, presign_url_from_env
from .exceptions import InvalidInput, MissingCredentials, SigningError
from .sigv4 import (
    UNSIGNED_PAYLOAD,
    PresignedUrl,
    SigningRequest,
    derive_signing_key,
    presign,
    presign_url,
    sign,
)

__version__ = "0.1.0"
__all__ = [
    "InvalidInput",
    "MissingCredentials",
    "PresignedUrl",
    "Settings",
    "SigningError",
    "SigningRequest",
    "UNSIGNED_PAYLOAD",
    "derive_signing_key",
    "presign",
    "presign_url",
    "presign_url_from_env",
    "sign",
]
