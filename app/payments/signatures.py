"""
Keyed-hash signatures for gateway payment confirmations and webhooks.

Two independent secrets are in play:

- The API key secret signs client-submitted payment confirmations.
  The signed message is ``"{order_id}|{payment_id}"``.
- The webhook secret signs webhook request bodies. The signed message is
  the raw body exactly as received; parsing and re-serializing changes the
  byte layout and breaks the digest.

Both use HMAC-SHA256 with a lowercase hex digest, and both are compared
with ``hmac.compare_digest``.

Usage:
    from payments.signatures import SignatureVerifier

    verifier = SignatureVerifier(
        confirmation_secret=config.key_secret,
        webhook_secret=config.webhook_secret,
    )
    if not verifier.verify_webhook(request.body, request.headers["X-Razorpay-Signature"]):
        ...
"""

from __future__ import annotations

import hashlib
import hmac


def _to_bytes(value: str | bytes) -> bytes:
    if isinstance(value, bytes):
        return value
    return value.encode("utf-8")


def sign(secret: str | bytes, message: str | bytes) -> str:
    """
    Compute the HMAC-SHA256 hex digest of ``message`` under ``secret``.

    ``str`` values are UTF-8 encoded, ``bytes`` are used verbatim.
    """
    return hmac.new(_to_bytes(secret), _to_bytes(message), hashlib.sha256).hexdigest()


def verify(secret: str | bytes, message: str | bytes, supplied: str | bytes | None) -> bool:
    """
    Check ``supplied`` against the digest of ``message`` in constant time.

    Returns False for an empty secret or an empty/non-string digest
    rather than raising, so callers only branch on the boolean.
    """
    if not secret or not supplied or not isinstance(supplied, (str, bytes)):
        return False
    expected = sign(secret, message).encode("ascii")
    return hmac.compare_digest(expected, _to_bytes(supplied))


class SignatureVerifier:
    """
    Stateless verifier bound to the confirmation and webhook secrets.

    The secrets are kept out of ``repr`` so the verifier can be logged
    or shown in tracebacks safely.
    """

    def __init__(self, confirmation_secret: str, webhook_secret: str) -> None:
        self._confirmation_secret = confirmation_secret
        self._webhook_secret = webhook_secret

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(confirmation_secret=***, webhook_secret=***)"

    @staticmethod
    def confirmation_message(order_id: str, payment_id: str) -> str:
        return f"{order_id}|{payment_id}"

    def sign_confirmation(self, order_id: str, payment_id: str) -> str:
        return sign(self._confirmation_secret, self.confirmation_message(order_id, payment_id))

    def verify_confirmation(self, order_id: str, payment_id: str, signature: str | None) -> bool:
        """Verify a client-submitted ``order_id|payment_id`` signature."""
        return verify(
            self._confirmation_secret,
            self.confirmation_message(order_id, payment_id),
            signature,
        )

    def sign_webhook(self, raw_body: str | bytes) -> str:
        return sign(self._webhook_secret, raw_body)

    def verify_webhook(self, raw_body: str | bytes, signature: str | None) -> bool:
        """Verify a webhook signature over the raw request body."""
        return verify(self._webhook_secret, raw_body, signature)


__all__ = [
    "SignatureVerifier",
    "sign",
    "verify",
]
