"""Errors raised while building a presigned URL."""


class SigningError(Exception):
    """Base class for every error raised by s3presign."""


class InvalidInput(SigningError, ValueError):
    """The request is missing the object key."""


class MissingCredentials(SigningError, ValueError):
    """The access key id or the secret access key is missing."""
