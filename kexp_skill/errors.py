"""
Request verification error taxonomy.

Reason codes are stable strings for operator logs only. Clients always see
the same undifferentiated 400, whatever the reason.
"""
from enum import Enum


class VerificationReason(str, Enum):
    """Stable rejection reasons, one per verification step."""

    MISSING_CERT_HEADER = "missing_cert_header"
    INVALID_CERT_URL = "invalid_cert_url"
    MISSING_SIGNATURE = "missing_signature"
    EMPTY_BODY = "empty_body"
    STALE_TIMESTAMP = "stale_timestamp"
    SIGNATURE_MISMATCH = "signature_mismatch"


class VerificationError(Exception):
    """Raised by the transport when a skill request fails verification."""

    def __init__(self, reason: VerificationReason):
        super().__init__(reason.value)
        self.reason = reason
