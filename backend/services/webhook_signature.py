"""HMAC verification for Checkr webhook requests.

Checkr signs every webhook with HMAC-SHA-256 keyed by the OAuth client
secret and sends the hex digest in the ``X-Checkr-Signature`` header.  The
digest covers the raw request body, so verification must run on the exact
bytes received, before the body is parsed.
"""

import hashlib
import hmac

SIGNATURE_HEADER = "X-Checkr-Signature"


def compute_signature(raw_payload: bytes, shared_secret: bytes) -> str:
    """Return the lowercase hex HMAC-SHA-256 of ``raw_payload``."""
    return hmac.new(shared_secret, raw_payload, hashlib.sha256).hexdigest()


def verify_signature(
    signature_header: str | None, raw_payload: bytes, shared_secret: bytes
) -> bool:
    """Check a webhook signature header against the payload.

    The comparison goes through :func:`hmac.compare_digest`, whose running
    time does not depend on where the first differing byte is.  A missing
    header, an empty secret, a non-ASCII header or a digest of the wrong
    length all fail verification.
    """
    if not signature_header or not shared_secret:
        return False
    try:
        provided = signature_header.strip().encode("ascii")
    except UnicodeEncodeError:
        return False
    expected = compute_signature(raw_payload, shared_secret).encode("ascii")
    return hmac.compare_digest(provided, expected)
