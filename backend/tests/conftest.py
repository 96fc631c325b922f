import json
import os
from typing import Any, Iterator

import pytest
from fastapi.testclient import TestClient

# Set test environment variables
os.environ.update(
    {
        "STRIPE_WEBHOOK_SECRET": "whsec_test",
        "STRIPE_WEBHOOK_TOLERANCE": "300",
        "LOG_LEVEL": "DEBUG",
    }
)

# Import app modules after setting environment variables
from webhook_gateway.core.config import Settings, get_settings
from webhook_gateway.main import app, get_dispatcher
from webhook_gateway.services.dispatcher import WebhookDispatcher
from webhook_gateway.services.stripe_verify import compute_signature_header


@pytest.fixture
def settings() -> Settings:
    return get_settings()


@pytest.fixture
def dispatcher() -> WebhookDispatcher:
    return WebhookDispatcher()


@pytest.fixture
def client(dispatcher: WebhookDispatcher) -> Iterator[TestClient]:
    app.dependency_overrides[get_dispatcher] = lambda: dispatcher
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_event():
    def _make_event(
        event_type: str,
        obj: dict[str, Any] | None = None,
        event_id: str = "evt_test_001",
    ) -> bytes:
        payload = {
            "id": event_id,
            "object": "event",
            "type": event_type,
            "data": {"object": obj or {}},
        }
        return json.dumps(payload).encode()

    return _make_event


@pytest.fixture
def post_webhook(client: TestClient, settings: Settings):
    def _post(body: bytes, secret: str | None = None, signature: str | None = None):
        if signature is None:
            signature = compute_signature_header(
                body, secret or settings.stripe_webhook_secret
            )
        return client.post(
            settings.webhook_path,
            content=body,
            headers={"Stripe-Signature": signature, "Content-Type": "application/json"},
        )

    return _post
