"""
AWS Signature Version 4 query-string signing for S3 GET requests.

The URL returned by :func:`presign_url` carries its own authorization: the
credential scope, the timestamp, the expiry and the signature all travel as
``X-Amz-*`` query parameters. The signature covers ``signing_host`` while the
URL itself points at ``cdn_host`` so a CDN or gateway can sit in front of the
store as long as it forwards path and query untouched.
"""

import hashlib
import hmac
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional, Sequence, Tuple
from urllib.parse import quote

from .exceptions import InvalidInput, MissingCredentials

LOGGER = logging.getLogger(__name__)

ALGORITHM = 'AWS4-HMAC-SHA256'
UNSIGNED_PAYLOAD = 'UNSIGNED-PAYLOAD'
SERVICE = 's3'
SCOPE_TERMINATOR = 'aws4_request'
SIGNED_HEADERS = 'host'

DEFAULT_REGION = 'us-east-1'
DEFAULT_EXPIRES_IN = 3600
DEFAULT_BUCKET = 'your-bucket-name'
DEFAULT_SIGNING_HOST = 'signinghost.com'
DEFAULT_CDN_HOST = 'cdn.example.com'

QueryParams = List[Tuple[str, str]]


@dataclass(frozen=True)
class SigningRequest:
    key: str
    access_key_id: str
    secret_access_key: str
    region: str = DEFAULT_REGION
    expires_in: int = DEFAULT_EXPIRES_IN
    bucket: str = DEFAULT_BUCKET
    signing_host: str = DEFAULT_SIGNING_HOST
    cdn_host: str = DEFAULT_CDN_HOST


@dataclass(frozen=True)
class PresignedUrl:
    """Result of :func:`presign` with every intermediate value kept for inspection."""
    url: str
    signature: str
    query_string: str
    canonical_request: str
    string_to_sign: str
    credential_scope: str
    amz_date: str


def _hmac_sha256(key: bytes, msg: str) -> bytes:
    return hmac.new(key, msg.encode('utf-8'), hashlib.sha256).digest()


def _sha256_hex(data: str) -> str:
    return hashlib.sha256(data.encode('utf-8')).hexdigest()


def _uri_encode(value: str) -> str:
    # RFC 3986: only A-Z a-z 0-9 - _ . ~ stay as-is
    return quote(value, safe='-_.~')


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def derive_signing_key(secret_access_key: str, date_stamp: str, region: str, service: str) -> bytes:
    """
    Derive the SigV4 signing key.

    Every HMAC stage is keyed with the raw digest of the previous one, never
    with its hex form.

    :param secret_access_key: the secret half of the credential pair
    :param date_stamp: ``YYYYMMDD`` date of the request
    :param region: signing region, e.g. ``us-east-1``
    :param service: service name, ``s3`` for object downloads
    :return: the 32-byte signing key
    """
    k_date = _hmac_sha256(f'AWS4{secret_access_key}'.encode('utf-8'), date_stamp)
    k_region = _hmac_sha256(k_date, region)
    k_service = _hmac_sha256(k_region, service)
    return _hmac_sha256(k_service, SCOPE_TERMINATOR)


def canonical_query_string(params: Sequence[Tuple[str, str]]) -> str:
    """Sort ``params`` by key and serialize them as an encoded ``k=v&k=v`` string."""
    return '&'.join(
        f'{_uri_encode(name)}={_uri_encode(value)}'
        for name, value in sorted(params, key=lambda pair: pair[0])
    )


def build_canonical_request(canonical_path: str, query_string: str, signing_host: str) -> str:
    canonical_headers = f'host:{signing_host}\n'
    return '\n'.join([
        'GET',
        canonical_path,
        query_string,
        canonical_headers,
        SIGNED_HEADERS,
        UNSIGNED_PAYLOAD,
    ])


def build_string_to_sign(amz_date: str, credential_scope: str, canonical_request: str) -> str:
    return '\n'.join([
        ALGORITHM,
        amz_date,
        credential_scope,
        _sha256_hex(canonical_request),
    ])


def _validate(request: SigningRequest) -> None:
    if not request.key:
        raise InvalidInput('key is required')
    if not request.access_key_id or not request.secret_access_key:
        raise MissingCredentials('AWS credentials are required')


def presign(request: SigningRequest, now: Optional[datetime] = None) -> PresignedUrl:
    """
    Build a presigned GET URL for ``request`` and return it together with
    the canonical request, string to sign and signature it was derived from.

    ``now`` pins the signing instant; the system clock is read when omitted.

    :raises InvalidInput: if ``request.key`` is empty
    :raises MissingCredentials: if either half of the credential pair is empty
    """
    _validate(request)

    # A single clock read so that date and timestamp never straddle midnight.
    if now is None:
        now = _utcnow()
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    else:
        now = now.astimezone(timezone.utc)
    date_stamp = now.strftime('%Y%m%d')
    amz_date = now.strftime('%Y%m%dT%H%M%SZ')

    credential_scope = f'{date_stamp}/{request.region}/{SERVICE}/{SCOPE_TERMINATOR}'
    params: QueryParams = [
        ('X-Amz-Algorithm', ALGORITHM),
        ('X-Amz-Credential', f'{request.access_key_id}/{credential_scope}'),
        ('X-Amz-Date', amz_date),
        ('X-Amz-Expires', str(request.expires_in)),
        ('X-Amz-SignedHeaders', SIGNED_HEADERS),
    ]
    query_string = canonical_query_string(params)

    canonical_request = build_canonical_request(
        f'/{request.bucket}/{request.key}', query_string, request.signing_host
    )
    string_to_sign = build_string_to_sign(amz_date, credential_scope, canonical_request)

    signing_key = derive_signing_key(request.secret_access_key, date_stamp, request.region, SERVICE)
    signature = hmac.new(signing_key, string_to_sign.encode('utf-8'), hashlib.sha256).hexdigest()

    LOGGER.debug(
        'Presigned %s/%s for %ss with scope %s (signed for %s, served from %s)',
        request.bucket, request.key, request.expires_in, credential_scope,
        request.signing_host, request.cdn_host,
    )

    url = f'https://{request.cdn_host}/{request.key}?{query_string}&X-Amz-Signature={signature}'
    return PresignedUrl(
        url=url,
        signature=signature,
        query_string=query_string,
        canonical_request=canonical_request,
        string_to_sign=string_to_sign,
        credential_scope=credential_scope,
        amz_date=amz_date,
    )


def presign_url(request: SigningRequest) -> str:
    """Return the presigned GET URL for ``request``."""
    return presign(request).url


sign = presign_url

