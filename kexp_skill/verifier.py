"""
Skill request verification.

Proves an inbound request was signed by Alexa and is fresh. Checks run in a
fixed order and the first failure wins; each rejection is logged once at
warning level with its reason. Any error while checking the signature
(network, timeout, bad certificate) counts as a signature mismatch.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Mapping, Optional

from logging_setup import get_logger, Component

from .certificates import SignatureChecker, is_alexa_cert_url, parse_cert_url
from .config import DEFAULT_CERT_TIMEOUT_SECONDS, DEFAULT_TIMESTAMP_TOLERANCE_SECONDS
from .errors import VerificationReason

logger = get_logger(Component.REQUEST_VERIFIER)

CERT_CHAIN_URL_HEADER = "SignatureCertChainUrl"
SIGNATURE_HEADER = "Signature"


@dataclass(frozen=True)
class VerificationResult:
    valid: bool
    reason: Optional[VerificationReason] = None

    @classmethod
    def ok(cls) -> "VerificationResult":
        return cls(valid=True)

    @classmethod
    def fail(cls, reason: VerificationReason) -> "VerificationResult":
        return cls(valid=False, reason=reason)


def _header(headers: Mapping[str, str], name: str) -> Optional[str]:
    value = headers.get(name)
    if value is None or not value.strip():
        return None
    return value


def timestamp_within_tolerance(
    timestamp: Optional[datetime],
    tolerance_seconds: int = DEFAULT_TIMESTAMP_TOLERANCE_SECONDS,
    now: Optional[datetime] = None,
) -> bool:
    """True if the request timestamp is within +/- tolerance of now."""
    if timestamp is None:
        return False
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)
    now = now or datetime.now(timezone.utc)
    return abs((now - timestamp).total_seconds()) <= tolerance_seconds


def _reject(reason: VerificationReason, request_id: Optional[str], **fields) -> VerificationResult:
    logger.with_request(request_id).warning(
        "Request validation failed",
        reason=reason.value,
        **fields,
    )
    return VerificationResult.fail(reason)


async def verify(
    headers: Mapping[str, str],
    raw_body: bytes,
    timestamp: Optional[datetime],
    checker: SignatureChecker,
    *,
    tolerance_seconds: int = DEFAULT_TIMESTAMP_TOLERANCE_SECONDS,
    signature_timeout_seconds: float = DEFAULT_CERT_TIMEOUT_SECONDS,
    now: Optional[datetime] = None,
    request_id: Optional[str] = None,
) -> VerificationResult:
    """
    Verify a skill request.

    Args:
        headers: Request headers (a case-insensitive mapping in production)
        raw_body: Exact body bytes as received; the signature covers these
        timestamp: The request's embedded timestamp
        checker: Signature checker (certificate chain in production)
        tolerance_seconds: Allowed clock skew for the timestamp
        signature_timeout_seconds: Upper bound on the signature check
        now: Current time override
        request_id: Only used for log correlation

    Returns:
        VerificationResult; valid only if every check passed.
    """
    cert_url = _header(headers, CERT_CHAIN_URL_HEADER)
    if cert_url is None:
        return _reject(VerificationReason.MISSING_CERT_HEADER, request_id)

    parsed_url = parse_cert_url(cert_url)
    if parsed_url is None or not is_alexa_cert_url(parsed_url):
        return _reject(VerificationReason.INVALID_CERT_URL, request_id, cert_url=cert_url)

    signature = _header(headers, SIGNATURE_HEADER)
    if signature is None:
        return _reject(VerificationReason.MISSING_SIGNATURE, request_id)

    body_text = raw_body.decode("utf-8", errors="replace") if raw_body else ""
    if not body_text.strip():
        return _reject(VerificationReason.EMPTY_BODY, request_id)

    if not timestamp_within_tolerance(timestamp, tolerance_seconds, now):
        return _reject(
            VerificationReason.STALE_TIMESTAMP,
            request_id,
            request_timestamp=timestamp.isoformat() if timestamp else None,
            tolerance_seconds=tolerance_seconds,
        )

    try:
        valid = await asyncio.wait_for(
            checker.check(signature, cert_url, raw_body),
            timeout=signature_timeout_seconds,
        )
    except asyncio.TimeoutError:
        return _reject(
            VerificationReason.SIGNATURE_MISMATCH,
            request_id,
            error="signature check timed out",
            timeout_seconds=signature_timeout_seconds,
        )
    except Exception as e:
        return _reject(
            VerificationReason.SIGNATURE_MISMATCH,
            request_id,
            error=str(e),
            error_type=type(e).__name__,
        )

    if not valid:
        return _reject(VerificationReason.SIGNATURE_MISMATCH, request_id)

    return VerificationResult.ok()
