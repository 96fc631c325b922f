from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class EventType(str, Enum):
    # Checkout: https://stripe.com/docs/payments/checkout
    CHECKOUT_SESSION_COMPLETED = "checkout.session.completed"
    CHECKOUT_SESSION_ASYNC_PAYMENT_SUCCEEDED = "checkout.session.async_payment_succeeded"
    CHECKOUT_SESSION_ASYNC_PAYMENT_FAILED = "checkout.session.async_payment_failed"
    CHECKOUT_SESSION_EXPIRED = "checkout.session.expired"
    # Charge: https://stripe.com/docs/api/charges
    CHARGE_SUCCEEDED = "charge.succeeded"
    CHARGE_FAILED = "charge.failed"
    CHARGE_REFUNDED = "charge.refunded"
    CHARGE_EXPIRED = "charge.expired"
    # Disputes: https://stripe.com/docs/disputes
    CHARGE_DISPUTE_CREATED = "charge.dispute.created"
    CHARGE_DISPUTE_UPDATED = "charge.dispute.updated"
    CHARGE_DISPUTE_FUNDS_REINSTATED = "charge.dispute.funds_reinstated"
    CHARGE_DISPUTE_FUNDS_WITHDRAWN = "charge.dispute.funds_withdrawn"
    CHARGE_DISPUTE_CLOSED = "charge.dispute.closed"
    # Customer: https://stripe.com/docs/api/customers
    CUSTOMER_CREATED = "customer.created"
    CUSTOMER_UPDATED = "customer.updated"
    CUSTOMER_DELETED = "customer.deleted"
    CUSTOMER_SUBSCRIPTION_CREATED = "customer.subscription.created"
    CUSTOMER_SUBSCRIPTION_UPDATED = "customer.subscription.updated"
    CUSTOMER_SUBSCRIPTION_DELETED = "customer.subscription.deleted"
    CUSTOMER_SUBSCRIPTION_PAUSED = "customer.subscription.paused"
    CUSTOMER_SUBSCRIPTION_RESUMED = "customer.subscription.resumed"

    @classmethod
    def lookup(cls, value: str | None) -> "EventType | None":
        try:
            return cls(value)
        except ValueError:
            return None


def _as_str(value: Any) -> str | None:
    """Read a scalar Stripe field; numbers become strings, anything else is absent."""
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (bool, int, float)):
        return str(value)
    return None


class EventData(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    object: dict[str, Any] = Field(default_factory=dict)

    @field_validator("object", mode="before")
    @classmethod
    def _opaque_object(cls, value: Any) -> Any:
        return value if isinstance(value, dict) else {}


class WebhookEnvelope(BaseModel):
    """A Stripe event parsed from a body whose signature has been checked."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str | None = None
    type: str | None = None
    data: EventData = Field(default_factory=EventData)

    @field_validator("id", "type", mode="before")
    @classmethod
    def _tag(cls, value: Any) -> Any:
        return _as_str(value)

    @field_validator("data", mode="before")
    @classmethod
    def _opaque_data(cls, value: Any) -> Any:
        return value if isinstance(value, dict) else {}

    @property
    def kind(self) -> EventType | None:
        return EventType.lookup(self.type)


# Per-kind views of data.object. Unknown keys are ignored, every field is optional.


class StripeObject(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str | None = None
    object: str | None = None
    metadata: dict[str, Any] | None = None

    @field_validator(
        "id",
        "object",
        "mode",
        "status",
        "payment_status",
        mode="before",
        check_fields=False,
    )
    @classmethod
    def _scalar(cls, value: Any) -> Any:
        return _as_str(value)

    @field_validator(
        "payment_intent",
        "subscription",
        "invoice",
        "latest_invoice",
        mode="before",
        check_fields=False,
    )
    @classmethod
    def _collapse_expanded(cls, value: Any) -> Any:
        # expanded references arrive as objects; keep only their id
        if isinstance(value, dict):
            value = value.get("id")
        return _as_str(value)

    @field_validator("metadata", mode="before")
    @classmethod
    def _metadata(cls, value: Any) -> Any:
        return value if isinstance(value, dict) else None

    @property
    def user_id(self) -> str | None:
        if not self.metadata:
            return None
        return _as_str(self.metadata.get("userId"))


class CheckoutSessionObject(StripeObject):
    mode: str | None = None
    status: str | None = None
    payment_status: str | None = None
    payment_intent: str | None = None
    subscription: str | None = None
    invoice: str | None = None


class ChargeObject(StripeObject):
    status: str | None = None
    payment_intent: str | None = None
    invoice: str | None = None


class DisputeObject(StripeObject):
    status: str | None = None
    payment_intent: str | None = None


class CustomerObject(StripeObject):
    pass


class SubscriptionObject(StripeObject):
    status: str | None = None
    latest_invoice: str | None = None


class ExtractedFields(BaseModel):
    """The fields handed to a business handler; absent ones stay None."""

    model_config = ConfigDict(frozen=True)

    event_type: EventType | None = None
    id: str | None = None
    object: str | None = None
    mode: str | None = None
    status: str | None = None
    payment_status: str | None = None
    payment_intent: str | None = None
    subscription: str | None = None
    invoice: str | None = None
    user_id: str | None = None
    metadata: dict[str, Any] | None = None


class HandlerResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str
    status_code: int = 200

    @property
    def body(self) -> dict[str, str]:
        if self.status_code >= 400:
            return {"error": self.message}
        return {"message": self.message}
