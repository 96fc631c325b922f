import logging
from unittest.mock import MagicMock

import pytest

from webhook_gateway.schemas.events import HandlerResult
from webhook_gateway.services.dispatcher import WebhookDispatcher
from webhook_gateway.services.gateway import process_webhook
from webhook_gateway.services.stripe_verify import compute_signature_header

SECRET = "whsec_test"


@pytest.fixture
def mock_dispatcher():
    mock = MagicMock(spec=WebhookDispatcher)
    mock.dispatch.return_value = HandlerResult(message="ok")
    return mock


def test_verified_event_is_dispatched(mock_dispatcher, make_event):
    body = make_event("customer.created", {"id": "cus_001"})
    result = process_webhook(
        body, compute_signature_header(body, SECRET), SECRET, mock_dispatcher
    )

    assert result == HandlerResult(message="ok")
    mock_dispatcher.dispatch.assert_called_once()
    (event,), _ = mock_dispatcher.dispatch.call_args
    assert event.type == "customer.created"
    assert event.data.object == {"id": "cus_001"}


def test_missing_signature_skips_dispatch(mock_dispatcher, make_event):
    result = process_webhook(make_event("customer.created"), None, SECRET, mock_dispatcher)

    assert result.status_code == 400
    assert result.body == {"error": "Webhook signature verification failed"}
    mock_dispatcher.dispatch.assert_not_called()


def test_missing_secret_logged_as_error(mock_dispatcher, make_event, caplog):
    body = make_event("customer.created")
    with caplog.at_level(logging.WARNING):
        result = process_webhook(
            body, compute_signature_header(body, SECRET), None, mock_dispatcher
        )

    assert result.status_code == 400
    mock_dispatcher.dispatch.assert_not_called()
    assert any(
        r.levelno == logging.ERROR and "STRIPE_WEBHOOK_SECRET" in r.getMessage()
        for r in caplog.records
    )


def test_dispatcher_failure_becomes_500(mock_dispatcher, make_event):
    mock_dispatcher.dispatch.side_effect = KeyError("boom")
    body = make_event("customer.created")

    result = process_webhook(
        body, compute_signature_header(body, SECRET), SECRET, mock_dispatcher
    )

    assert result == HandlerResult(message="Webhook handler failed.", status_code=500)


def test_tolerance_is_applied(mock_dispatcher, make_event):
    body = make_event("customer.created")
    header = compute_signature_header(body, SECRET, timestamp=1_600_000_000)

    result = process_webhook(body, header, SECRET, mock_dispatcher, tolerance=300)

    assert result.status_code == 400
    mock_dispatcher.dispatch.assert_not_called()
