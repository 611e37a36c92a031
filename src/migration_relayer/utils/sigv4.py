"""
Request signing for the queue service JSON protocol.

Implements the AWS Signature Version 4 HMAC chain for a single POST to "/"
with four signed headers. Every function here is pure: the caller supplies
the timestamp, so identical inputs always produce an identical signature.
"""

import hashlib
import hmac
from dataclasses import dataclass, field
from datetime import datetime, timezone

ALGORITHM = "AWS4-HMAC-SHA256"
CONTENT_TYPE = "application/x-amz-json-1.0"
SIGNED_HEADERS = "content-type;host;x-amz-date;x-amz-target"
TERMINATOR = "aws4_request"


@dataclass(frozen=True, slots=True)
class SigningCredentials:
    """Key material and scope for signing requests."""
    access_key_id: str
    secret_access_key: str = field(repr=False)
    region: str
    service: str = "sqs"


@dataclass(frozen=True, slots=True)
class SignedRequest:
    """A request ready to be sent; built fresh for every attempt."""
    method: str
    url: str
    headers: dict[str, str]
    body: str


def _sha256_hex(value: str) -> str:
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


def _hmac_sha256(key: bytes, message: str) -> bytes:
    return hmac.new(key, message.encode("utf-8"), hashlib.sha256).digest()


def format_amz_date(now: datetime) -> str:
    """Format a timestamp as ``YYYYMMDDThhmmssZ`` in UTC."""
    if now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    return now.strftime("%Y%m%dT%H%M%SZ")


def credential_scope(date_stamp: str, region: str, service: str) -> str:
    return f"{date_stamp}/{region}/{service}/{TERMINATOR}"


def create_canonical_request(
    method: str,
    host: str,
    body: str,
    amz_date: str,
    target: str,
    content_type: str = CONTENT_TYPE
) -> str:
    """
    Build the canonical request string.

    Args:
        method: HTTP method
        host: Service host name
        body: Serialized request body, exactly as it will be transmitted
        amz_date: Timestamp from format_amz_date
        target: X-Amz-Target header value
        content_type: Content-Type header value

    Returns:
        Canonical request with an empty query string and URI "/"
    """
    canonical_headers = (
        f"content-type:{content_type}\n"
        f"host:{host}\n"
        f"x-amz-date:{amz_date}\n"
        f"x-amz-target:{target}\n"
    )
    return f"{method}\n/\n\n{canonical_headers}\n{SIGNED_HEADERS}\n{_sha256_hex(body)}"


def create_string_to_sign(amz_date: str, scope: str, canonical_request: str) -> str:
    return f"{ALGORITHM}\n{amz_date}\n{scope}\n{_sha256_hex(canonical_request)}"


def get_signature_key(secret_key: str, date_stamp: str, region: str, service: str) -> bytes:
    """Derive the signing key through the four chained HMAC steps."""
    k_date = _hmac_sha256(f"AWS4{secret_key}".encode("utf-8"), date_stamp)
    k_region = _hmac_sha256(k_date, region)
    k_service = _hmac_sha256(k_region, service)
    return _hmac_sha256(k_service, TERMINATOR)


def calculate_signature(signing_key: bytes, string_to_sign: str) -> str:
    return hmac.new(signing_key, string_to_sign.encode("utf-8"), hashlib.sha256).hexdigest()


def build_authorization_header(
    credentials: SigningCredentials,
    method: str,
    host: str,
    body: str,
    amz_date: str,
    target: str,
    content_type: str = CONTENT_TYPE
) -> str:
    """
    Compute the Authorization header value for a request.

    Credentials are not validated; an empty key still yields a signature
    that the service will reject.
    """
    date_stamp = amz_date[:8]
    scope = credential_scope(date_stamp, credentials.region, credentials.service)

    canonical_request = create_canonical_request(method, host, body, amz_date, target, content_type)
    string_to_sign = create_string_to_sign(amz_date, scope, canonical_request)
    signing_key = get_signature_key(
        credentials.secret_access_key, date_stamp, credentials.region, credentials.service
    )
    signature = calculate_signature(signing_key, string_to_sign)

    return (
        f"{ALGORITHM} Credential={credentials.access_key_id}/{scope}, "
        f"SignedHeaders={SIGNED_HEADERS}, Signature={signature}"
    )


def sign_request(
    credentials: SigningCredentials,
    host: str,
    body: str,
    target: str,
    now: datetime,
    method: str = "POST"
) -> SignedRequest:
    """Assemble a signed request for the given body and time."""
    amz_date = format_amz_date(now)
    authorization = build_authorization_header(credentials, method, host, body, amz_date, target)
    return SignedRequest(
        method=method,
        url=f"https://{host}/",
        headers={
            "X-Amz-Date": amz_date,
            "X-Amz-Target": target,
            "Content-Type": CONTENT_TYPE,
            "Authorization": authorization,
        },
        body=body,
    )
