import logging

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from webhook_gateway.core.config import Settings, get_settings
from webhook_gateway.middleware.body_size import BodySizeLimitMiddleware
from webhook_gateway.services.dispatcher import WebhookDispatcher
from webhook_gateway.services.gateway import process_webhook

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Stripe Webhook Gateway",
    description="Verifies Stripe webhooks and routes them by event type",
    version="1.0.0",
)

# Add body size middleware
app.add_middleware(BodySizeLimitMiddleware, max_body_size=settings.max_body_size)

# Business handlers are attached with dispatcher.register(...)
dispatcher = WebhookDispatcher()


# ---------- dependencies ----------
def get_dispatcher() -> WebhookDispatcher:
    return dispatcher


@app.get("/health", include_in_schema=False)
async def health(config: Settings = Depends(get_settings)):
    return {
        "status": "ok",
        "stripe_webhook_secret_configured": bool(config.stripe_webhook_secret),
    }


# ---------- stripe ----------
@app.post(settings.webhook_path)
async def stripe_webhook(
    request: Request,
    config: Settings = Depends(get_settings),
    webhook_dispatcher: WebhookDispatcher = Depends(get_dispatcher),
):
    # The signature covers these exact bytes, so read them once and untouched
    raw_body = await request.body()
    signature = request.headers.get("Stripe-Signature")
    logger.info(f"Received Stripe webhook ({len(raw_body)} bytes)")

    result = await run_in_threadpool(
        process_webhook,
        raw_body=raw_body,
        signature_header=signature,
        secret=config.stripe_webhook_secret,
        dispatcher=webhook_dispatcher,
        tolerance=config.stripe_webhook_tolerance,
    )
    return JSONResponse(result.body, status_code=result.status_code)


# Anything but POST on the webhook path is a bad request
@app.api_route(
    settings.webhook_path,
    methods=["GET", "HEAD", "OPTIONS", "PUT", "PATCH", "DELETE"],
)
async def reject_stripe_webhook_method():
    return JSONResponse({"error": "Bad Request"}, status_code=400)
