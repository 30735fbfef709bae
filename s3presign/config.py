"""Environment-backed defaults for building signing requests."""

import logging
import os
from dataclasses import dataclass, replace
from typing import Any, Mapping, Optional

from .sigv4 import (
    DEFAULT_BUCKET,
    DEFAULT_CDN_HOST,
    DEFAULT_REGION,
    DEFAULT_SIGNING_HOST,
    SigningRequest,
    presign_url,
)

LOGGER = logging.getLogger(__name__)

ENV_ACCESS_KEY_ID = 'AWS_ACCESS_KEY_ID'
ENV_SECRET_ACCESS_KEY = 'AWS_SECRET_ACCESS_KEY'
ENV_REGION = 'AWS_REGION'
ENV_BUCKET = 'BUCKET_NAME'
ENV_SIGNING_HOST = 'OBJECT_STORAGE_EXTERNAL_ENDPOINT'
ENV_CDN_HOST = 'CDN_ENDPOINT'


@dataclass(frozen=True)
class Settings:
    access_key_id: str = ''
    secret_access_key: str = ''
    region: str = DEFAULT_REGION
    bucket: str = DEFAULT_BUCKET
    signing_host: str = DEFAULT_SIGNING_HOST
    cdn_host: str = DEFAULT_CDN_HOST

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'Settings':
        """
        Read settings from ``environ`` (``os.environ`` by default).

        Unset and empty variables both fall back to the defaults. Nothing is
        loaded from ``.env`` files; export the variables before calling.
        """
        env = os.environ if environ is None else environ

        def get(name: str, default: str) -> str:
            return env.get(name) or default

        settings = cls(
            access_key_id=get(ENV_ACCESS_KEY_ID, ''),
            secret_access_key=get(ENV_SECRET_ACCESS_KEY, ''),
            region=get(ENV_REGION, DEFAULT_REGION),
            bucket=get(ENV_BUCKET, DEFAULT_BUCKET),
            signing_host=get(ENV_SIGNING_HOST, DEFAULT_SIGNING_HOST),
            cdn_host=get(ENV_CDN_HOST, DEFAULT_CDN_HOST),
        )
        if not settings.access_key_id or not settings.secret_access_key:
            LOGGER.debug('%s or %s is not set', ENV_ACCESS_KEY_ID, ENV_SECRET_ACCESS_KEY)
        return settings

    def signing_request(self, key: str, **overrides: Any) -> SigningRequest:
        """Build a :class:`SigningRequest` for ``key``; ``None`` overrides are ignored."""
        request = SigningRequest(
            key=key,
            access_key_id=self.access_key_id,
            secret_access_key=self.secret_access_key,
            region=self.region,
            bucket=self.bucket,
            signing_host=self.signing_host,
            cdn_host=self.cdn_host,
        )
        given = {name: value for name, value in overrides.items() if value is not None}
        return replace(request, **given) if given else request


def presign_url_from_env(key: str, environ: Optional[Mapping[str, str]] = None, **overrides: Any) -> str:
    """
    Presign ``key`` with credentials and hosts taken from the environment.

    Keyword ``overrides`` (``region``, ``expires_in``, ``bucket``, ...) win over
    the environment.
    """
    return presign_url(Settings.from_env(environ).signing_request(key, **overrides))
