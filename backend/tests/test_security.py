import json
import logging

from webhook_gateway.services.stripe_verify import compute_signature_header


def test_payload_too_big(client, settings):
    # Create a payload larger than 1 MiB
    large_payload = json.dumps({"data": "x" * (1024 * 1024 + 1)}).encode()

    response = client.post(
        settings.webhook_path,
        content=large_payload,
        headers={"Stripe-Signature": "t=1,v1=test_sig"},
    )
    assert response.status_code == 413
    assert response.json() == {"error": "Payload too large"}


def test_secret_and_body_not_logged(post_webhook, make_event, caplog):
    body = make_event("charge.succeeded", {"id": "ch_secretive"})
    with caplog.at_level(logging.DEBUG):
        post_webhook(body)
        post_webhook(body, signature=compute_signature_header(body, "whsec_wrong"))

    assert "whsec_test" not in caplog.text
    assert body.decode() not in caplog.text


def test_unexpected_error_is_logged_with_detail(post_webhook, dispatcher, make_event, caplog):
    def broken(fields):
        raise RuntimeError("ledger offline")

    dispatcher.register("charge.failed", broken)
    with caplog.at_level(logging.ERROR):
        response = post_webhook(make_event("charge.failed"))

    assert response.status_code == 500
    assert "ledger offline" in caplog.text
