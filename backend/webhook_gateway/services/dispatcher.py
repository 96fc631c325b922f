"""Routes verified Stripe events to the handler registered for their type."""

import logging
from dataclasses import dataclass, replace
from typing import Any, Callable, Iterable

from webhook_gateway.schemas.events import (
    ChargeObject,
    CheckoutSessionObject,
    CustomerObject,
    DisputeObject,
    EventType,
    ExtractedFields,
    HandlerResult,
    SubscriptionObject,
    WebhookEnvelope,
)

logger = logging.getLogger(__name__)

INVALID_EVENT_TYPE = "Invalid event type"

Handler = Callable[[ExtractedFields], HandlerResult | None]
Projection = Callable[[EventType, dict[str, Any]], ExtractedFields]


def project_checkout_session(
    event_type: EventType, obj: dict[str, Any]
) -> ExtractedFields:
    session = CheckoutSessionObject.model_validate(obj)
    return ExtractedFields(
        event_type=event_type,
        id=session.id,
        object=session.object,
        mode=session.mode,
        status=session.status,
        payment_status=session.payment_status,
        payment_intent=session.payment_intent,
        subscription=session.subscription,
        invoice=session.invoice,
        user_id=session.user_id,
        metadata=session.metadata,
    )


def project_charge(event_type: EventType, obj: dict[str, Any]) -> ExtractedFields:
    charge = ChargeObject.model_validate(obj)
    return ExtractedFields(
        event_type=event_type,
        id=charge.id,
        object=charge.object,
        status=charge.status,
        payment_intent=charge.payment_intent,
        invoice=charge.invoice,
        user_id=charge.user_id,
        metadata=charge.metadata,
    )


def project_dispute(event_type: EventType, obj: dict[str, Any]) -> ExtractedFields:
    dispute = DisputeObject.model_validate(obj)
    return ExtractedFields(
        event_type=event_type,
        id=dispute.id,
        object=dispute.object,
        status=dispute.status,
        payment_intent=dispute.payment_intent,
        user_id=dispute.user_id,
        metadata=dispute.metadata,
    )


def project_customer(event_type: EventType, obj: dict[str, Any]) -> ExtractedFields:
    customer = CustomerObject.model_validate(obj)
    return ExtractedFields(
        event_type=event_type,
        id=customer.id,
        object=customer.object,
        user_id=customer.user_id,
        metadata=customer.metadata,
    )


def project_subscription(
    event_type: EventType, obj: dict[str, Any]
) -> ExtractedFields:
    subscription = SubscriptionObject.model_validate(obj)
    return ExtractedFields(
        event_type=event_type,
        id=subscription.id,
        object=subscription.object,
        status=subscription.status,
        subscription=subscription.id,
        invoice=subscription.latest_invoice,
        user_id=subscription.user_id,
        metadata=subscription.metadata,
    )


def acknowledge(fields: ExtractedFields) -> None:
    """Default handler: business logic for this event type is not wired up."""
    logger.info(f"No business handler for {fields.event_type.value}, id={fields.id}")
    return None


@dataclass(frozen=True)
class Route:
    event_type: EventType
    message: str
    project: Projection
    handler: Handler = acknowledge


# event type -> (acknowledgment, projection)
_ROUTE_TABLE: dict[EventType, tuple[str, Projection]] = {
    EventType.CHECKOUT_SESSION_COMPLETED: (
        "Checkout session completed!",
        project_checkout_session,
    ),
    EventType.CHECKOUT_SESSION_ASYNC_PAYMENT_SUCCEEDED: (
        "Checkout payment succeeded!",
        project_checkout_session,
    ),
    EventType.CHECKOUT_SESSION_ASYNC_PAYMENT_FAILED: (
        "Checkout payment failed!",
        project_checkout_session,
    ),
    EventType.CHECKOUT_SESSION_EXPIRED: (
        "Payments marked canceled!",
        project_checkout_session,
    ),
    EventType.CHARGE_SUCCEEDED: ("Payment completed!", project_charge),
    EventType.CHARGE_FAILED: ("Payment Updated!", project_charge),
    EventType.CHARGE_REFUNDED: ("Refund completed!", project_charge),
    EventType.CHARGE_EXPIRED: ("Payment Updated!", project_charge),
    EventType.CHARGE_DISPUTE_CREATED: ("Dispute details added!", project_dispute),
    EventType.CHARGE_DISPUTE_UPDATED: ("Dispute details updated!", project_dispute),
    EventType.CHARGE_DISPUTE_FUNDS_REINSTATED: (
        "Dispute details updated!",
        project_dispute,
    ),
    EventType.CHARGE_DISPUTE_FUNDS_WITHDRAWN: (
        "Dispute details updated!",
        project_dispute,
    ),
    EventType.CHARGE_DISPUTE_CLOSED: ("Dispute closed!", project_dispute),
    EventType.CUSTOMER_CREATED: ("Customer created!", project_customer),
    EventType.CUSTOMER_UPDATED: ("Customer updated!", project_customer),
    EventType.CUSTOMER_DELETED: ("Customer deleted!", project_customer),
    EventType.CUSTOMER_SUBSCRIPTION_CREATED: (
        "Customer subscription created!",
        project_subscription,
    ),
    EventType.CUSTOMER_SUBSCRIPTION_UPDATED: (
        "Customer subscription updated!",
        project_subscription,
    ),
    EventType.CUSTOMER_SUBSCRIPTION_DELETED: (
        "Customer subscription deleted!",
        project_subscription,
    ),
    EventType.CUSTOMER_SUBSCRIPTION_PAUSED: (
        "Customer subscription paused!",
        project_subscription,
    ),
    EventType.CUSTOMER_SUBSCRIPTION_RESUMED: (
        "Customer subscription resumed!",
        project_subscription,
    ),
}


def default_routes() -> list[Route]:
    return [
        Route(event_type=event_type, message=message, project=project)
        for event_type, (message, project) in _ROUTE_TABLE.items()
    ]


class WebhookDispatcher:
    def __init__(self, routes: Iterable[Route] | None = None):
        if routes is None:
            routes = default_routes()
        self._routes: dict[EventType, Route] = {}
        for route in routes:
            if route.event_type in self._routes:
                raise ValueError(f"Duplicate route for {route.event_type.value}")
            self._routes[route.event_type] = route

        missing = set(EventType) - set(self._routes)
        if missing:
            names = ", ".join(sorted(m.value for m in missing))
            raise ValueError(f"No route for event types: {names}")

    def route_for(self, event_type: EventType) -> Route:
        return self._routes[event_type]

    def register(self, event_type: EventType | str, handler: Handler) -> None:
        """Replace the handler callback for a known event type."""
        kind = EventType.lookup(event_type)
        if kind is None:
            raise ValueError(f"Unknown event type: {event_type}")
        self._routes[kind] = replace(self._routes[kind], handler=handler)

    def dispatch(self, envelope: WebhookEnvelope) -> HandlerResult:
        kind = envelope.kind
        if kind is None:
            logger.warning(f"Unrecognized Stripe event type: {envelope.type!r}")
            return HandlerResult(message=INVALID_EVENT_TYPE, status_code=400)

        route = self._routes[kind]
        fields = route.project(kind, envelope.data.object)
        logger.debug(f"Extracted fields for {kind.value}: {fields.model_dump()}")

        result = route.handler(fields)
        if result is None:
            result = HandlerResult(message=route.message)
        logger.info(
            f"Dispatched {kind.value} event {envelope.id}: {result.status_code}"
        )
        return result
