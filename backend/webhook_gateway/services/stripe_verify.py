import hashlib
import hmac
import logging
import time

import stripe

from webhook_gateway.schemas.events import WebhookEnvelope

logger = logging.getLogger(__name__)

DEFAULT_TOLERANCE = 300


class VerificationError(Exception):
    pass


class ConfigurationError(VerificationError):
    """No signing secret is configured; the server, not the caller, is at fault."""


class MissingSignature(VerificationError):
    pass


class SignatureMismatch(VerificationError):
    pass


def verify(
    raw_body: bytes,
    header: str | None,
    secret: str | None,
    tolerance: int = DEFAULT_TOLERANCE,
) -> WebhookEnvelope:
    """
    Check the Stripe-Signature header against the raw request body and
    return the parsed event.

    The body is only parsed after the signature matches; re-serialised JSON
    would not hash to the same digest.
    """
    if not secret:
        raise ConfigurationError("STRIPE_WEBHOOK_SECRET not set")
    if not header:
        raise MissingSignature("Stripe signature missing")

    try:
        payload = raw_body.decode("utf-8")
    except UnicodeDecodeError:
        raise SignatureMismatch("Body is not valid UTF-8")

    try:
        stripe.WebhookSignature.verify_header(payload, header, secret, tolerance)
    except stripe.SignatureVerificationError as e:
        raise SignatureMismatch(str(e)) from e

    logger.info("Stripe signature verification successful")
    return WebhookEnvelope.model_validate_json(raw_body)


def compute_signature_header(
    raw_body: bytes, secret: str, timestamp: int | None = None
) -> str:
    """Build a Stripe-Signature header value for raw_body, as Stripe would."""
    if timestamp is None:
        timestamp = int(time.time())
    signed_payload = f"{timestamp}.".encode("utf-8") + raw_body
    signature = hmac.new(
        secret.encode("utf-8"), signed_payload, hashlib.sha256
    ).hexdigest()
    return f"t={timestamp},v1={signature}"
