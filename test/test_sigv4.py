#!/usr/bin/env python3
"""Unit tests for the SigV4 request signer."""

import hashlib
from datetime import datetime, timedelta, timezone

import pytest

from migration_relayer.utils.sigv4 import (
    SIGNED_HEADERS,
    SigningCredentials,
    build_authorization_header,
    create_canonical_request,
    format_amz_date,
    get_signature_key,
    sign_request,
)

HOST = "sqs.us-east-1.amazonaws.com"
TARGET = "AmazonSQS.SendMessage"
AMZ_DATE = "20240102T030405Z"
BODY = (
    '{"QueueUrl":"https://sqs.us-east-1.amazonaws.com/123456789012/migrations.fifo",'
    '"MessageBody":"hello","MessageGroupId":"0x1/0/0","MessageDeduplicationId":"0x1/0/0"}'
)
GOLDEN_AUTHORIZATION = (
    "AWS4-HMAC-SHA256 Credential=AKIDEXAMPLE/20240102/us-east-1/sqs/aws4_request, "
    "SignedHeaders=content-type;host;x-amz-date;x-amz-target, "
    "Signature=1a94effd9afdb4a6e50ca3bd720cd511d9eec8cf9911cbe1a75e93ca5d4b2397"
)


@pytest.fixture
def credentials():
    """Documentation credentials, never valid against a real account."""
    return SigningCredentials(
        access_key_id="AKIDEXAMPLE",
        secret_access_key="wJalrXUtnFEMI/K7MDENG+bPxRfiCYEXAMPLEKEY",
        region="us-east-1",
        service="sqs"
    )


class TestFormatting:
    """Tests for timestamp and canonical request formatting."""

    def test_format_amz_date(self):
        now = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
        assert format_amz_date(now) == AMZ_DATE

    def test_format_amz_date_converts_to_utc(self):
        now = datetime(2024, 1, 2, 5, 4, 5, tzinfo=timezone(timedelta(hours=2)))
        assert format_amz_date(now) == AMZ_DATE

    def test_canonical_request_layout(self):
        canonical = create_canonical_request("POST", HOST, BODY, AMZ_DATE, TARGET)

        assert canonical.split("\n") == [
            "POST",
            "/",
            "",
            "content-type:application/x-amz-json-1.0",
            f"host:{HOST}",
            f"x-amz-date:{AMZ_DATE}",
            f"x-amz-target:{TARGET}",
            "",
            SIGNED_HEADERS,
            "17842053b2f6c722d1d665c2e1ddca74bc5d03043b3a2b99752cc749788fa949",
        ]
        assert hashlib.sha256(canonical.encode()).hexdigest() == (
            "fa818b073eec513c9a8f80c58bfb4e14a57b5f9c28eae5ccf1da9c83a801f747"
        )


class TestSigning:
    """Tests for key derivation and the Authorization header."""

    def test_signing_key_matches_published_vector(self):
        """Key derivation example from the AWS SigV4 documentation."""
        key = get_signature_key(
            "wJalrXUtnFEMI/K7MDENG+bPxRfiCYEXAMPLEKEY", "20120215", "us-east-1", "iam"
        )
        assert key.hex() == "f4780e2d9f65fa895f9c67b32ce1baf0b0d8a43505a000a1a9e090d414db404d"

    def test_authorization_golden_value(self, credentials):
        header = build_authorization_header(credentials, "POST", HOST, BODY, AMZ_DATE, TARGET)
        assert header == GOLDEN_AUTHORIZATION

    def test_signature_is_deterministic(self, credentials):
        first = build_authorization_header(credentials, "POST", HOST, BODY, AMZ_DATE, TARGET)
        second = build_authorization_header(credentials, "POST", HOST, BODY, AMZ_DATE, TARGET)
        assert first == second

    @pytest.mark.parametrize("field, value", [
        ("body", BODY.replace("hello", "hellp")),
        ("amz_date", "20240102T030406Z"),
        ("host", "sqs.us-east-2.amazonaws.com"),
        ("target", "AmazonSQS.SendMessagf"),
        ("method", "PUT"),
    ])
    def test_any_input_change_changes_signature(self, credentials, field, value):
        inputs = {"method": "POST", "host": HOST, "body": BODY, "amz_date": AMZ_DATE, "target": TARGET}
        inputs[field] = value

        header = build_authorization_header(credentials, **inputs)
        assert header.split("Signature=")[1] != GOLDEN_AUTHORIZATION.split("Signature=")[1]

    def test_secret_key_change_changes_signature(self, credentials):
        other = SigningCredentials(
            access_key_id=credentials.access_key_id,
            secret_access_key=credentials.secret_access_key[:-1] + "X",
            region=credentials.region
        )
        header = build_authorization_header(other, "POST", HOST, BODY, AMZ_DATE, TARGET)
        assert header != GOLDEN_AUTHORIZATION

    def test_empty_credentials_still_sign(self):
        """Credential shape is not validated here; the service rejects it."""
        empty = SigningCredentials(access_key_id="", secret_access_key="", region="us-east-1")
        header = build_authorization_header(empty, "POST", HOST, BODY, AMZ_DATE, TARGET)
        assert header.startswith("AWS4-HMAC-SHA256 Credential=/20240102/us-east-1/sqs/aws4_request")

    def test_secret_not_in_repr(self, credentials):
        assert credentials.secret_access_key not in repr(credentials)


class TestSignRequest:
    """Tests for assembling the signed request."""

    def test_sign_request_headers(self, credentials):
        now = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
        request = sign_request(credentials, HOST, BODY, TARGET, now)

        assert request.method == "POST"
        assert request.url == f"https://{HOST}/"
        assert request.body == BODY
        assert request.headers == {
            "X-Amz-Date": AMZ_DATE,
            "X-Amz-Target": TARGET,
            "Content-Type": "application/x-amz-json-1.0",
            "Authorization": GOLDEN_AUTHORIZATION,
        }

    def test_later_clock_produces_new_signature(self, credentials):
        now = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
        first = sign_request(credentials, HOST, BODY, TARGET, now)
        second = sign_request(credentials, HOST, BODY, TARGET, now + timedelta(seconds=1))

        assert first.headers["X-Amz-Date"] != second.headers["X-Amz-Date"]
        assert first.headers["Authorization"] != second.headers["Authorization"]
