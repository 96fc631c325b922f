import logging

from webhook_gateway.schemas.events import HandlerResult
from webhook_gateway.services import stripe_verify
from webhook_gateway.services.dispatcher import WebhookDispatcher

logger = logging.getLogger(__name__)

SIGNATURE_FAILED = "Webhook signature verification failed"
HANDLER_FAILED = "Webhook handler failed."


def process_webhook(
    raw_body: bytes,
    signature_header: str | None,
    secret: str | None,
    dispatcher: WebhookDispatcher,
    tolerance: int = stripe_verify.DEFAULT_TOLERANCE,
) -> HandlerResult:
    """
    Verify one Stripe delivery and hand it to the dispatcher.

    Verification failures never reach a handler. Anything unexpected is
    logged here and answered with a generic 500.
    """
    try:
        try:
            event = stripe_verify.verify(
                raw_body=raw_body,
                header=signature_header,
                secret=secret,
                tolerance=tolerance,
            )
        except stripe_verify.ConfigurationError as e:
            logger.error(f"Webhook signature verification failed: {e}")
            return HandlerResult(message=SIGNATURE_FAILED, status_code=400)
        except stripe_verify.VerificationError as e:
            logger.warning(f"Webhook signature verification failed: {e}")
            return HandlerResult(message=SIGNATURE_FAILED, status_code=400)

        return dispatcher.dispatch(event)
    except Exception:
        logger.exception("Error in Stripe webhook handler")
        return HandlerResult(message=HANDLER_FAILED, status_code=500)
