"""Billing webhooks: signature verification and subscription state changes.

Stripe signs each delivery with ``Stripe-Signature: t=<unix>,v1=<hex>``
where ``v1`` is HMAC-SHA256 of ``"{t}.{raw body}"`` under the endpoint's
signing secret. Events are de-duplicated through the store's durable event
ledger: an event is claimed before it is handled and the claim is released
if handling fails, so Stripe's retry gets a second chance.
"""

import hashlib
import hmac
import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

from models.project import PlanType, User

logger = logging.getLogger(__name__)

DEFAULT_TOLERANCE_SECONDS = 300
ACTIVE_SUBSCRIPTION_STATUSES = {"active", "trialing"}


class WebhookSignatureError(Exception):
    """Raised when a webhook delivery cannot be authenticated."""

    pass


@dataclass
class WebhookOutcome:
    event_id: str
    event_type: str
    duplicate: bool = False
    handled: bool = False

    def to_dict(self) -> dict:
        data: dict[str, Any] = {"received": True, "eventId": self.event_id}
        if self.duplicate:
            data["duplicate"] = True
        return data


def parse_signature_header(header: str) -> tuple[int, list[str]]:
    """Split a ``Stripe-Signature`` header into (timestamp, v1 signatures).

    Raises:
        WebhookSignatureError: If the header has no timestamp or no v1 entry
    """
    timestamp: Optional[int] = None
    signatures: list[str] = []

    for item in header.split(","):
        key, _, value = item.strip().partition("=")
        if key == "t":
            try:
                timestamp = int(value)
            except ValueError:
                raise WebhookSignatureError("Invalid signature timestamp")
        elif key == "v1" and value:
            signatures.append(value)

    if timestamp is None or not signatures:
        raise WebhookSignatureError("Malformed Stripe-Signature header")
    return timestamp, signatures


def _event_object(event: dict) -> dict:
    """``event.data.object``, or an empty dict when the payload has another shape."""
    data = event.get("data")
    obj = data.get("object") if isinstance(data, dict) else None
    return obj if isinstance(obj, dict) else {}


def compute_signature(secret: str, timestamp: int, payload: bytes) -> str:
    message = f"{timestamp}.".encode() + payload
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).hexdigest()


def verify_signature(
    payload: bytes,
    header: Optional[str],
    secret: str,
    tolerance: int = DEFAULT_TOLERANCE_SECONDS,
    now: Optional[Callable[[], float]] = None,
) -> None:
    """Authenticate a webhook delivery.

    Raises:
        WebhookSignatureError: Missing header or secret, stale timestamp, or
            no matching signature
    """
    if not secret:
        raise WebhookSignatureError("STRIPE_WEBHOOK_SECRET not configured")
    if not header:
        raise WebhookSignatureError("No signature")

    timestamp, signatures = parse_signature_header(header)

    current = int((now or time.time)())
    if tolerance and abs(current - timestamp) > tolerance:
        raise WebhookSignatureError("Signature timestamp outside the tolerance zone")

    expected = compute_signature(secret, timestamp, payload)
    if not any(hmac.compare_digest(expected, candidate) for candidate in signatures):
        raise WebhookSignatureError("Invalid signature")


class BillingService:
    """Applies billing events to user plans."""

    def __init__(
        self,
        store,
        webhook_secret: str,
        tolerance: int = DEFAULT_TOLERANCE_SECONDS,
        now: Optional[Callable[[], float]] = None,
    ):
        """
        Args:
            store: Project store (user updates and the event ledger)
            webhook_secret: Endpoint signing secret (``whsec_...``)
            tolerance: Max age of a signed delivery in seconds
            now: Clock override for tests
        """
        self.store = store
        self.webhook_secret = webhook_secret
        self.tolerance = tolerance
        self.now = now
        self._handlers = {
            "checkout.session.completed": self._on_checkout_completed,
            "customer.subscription.created": self._on_subscription_changed,
            "customer.subscription.updated": self._on_subscription_changed,
            "customer.subscription.deleted": self._on_subscription_deleted,
            "invoice.payment_failed": self._on_payment_failed,
        }

    def construct_event(self, payload: bytes, signature_header: Optional[str]) -> dict:
        """Verify and decode a delivery.

        Raises:
            WebhookSignatureError: If the delivery is not authentic or not an event
        """
        verify_signature(payload, signature_header, self.webhook_secret, self.tolerance, self.now)

        try:
            event = json.loads(payload)
        except json.JSONDecodeError as e:
            raise WebhookSignatureError(f"Invalid event payload: {e}") from e

        if not isinstance(event, dict) or not event.get("id") or not event.get("type"):
            raise WebhookSignatureError("Event is missing id or type")
        return event

    async def handle_event(self, event: dict) -> WebhookOutcome:
        """Apply ``event`` once. Handler errors release the claim and propagate."""
        event_id = event["id"]
        event_type = event["type"]
        outcome = WebhookOutcome(event_id=event_id, event_type=event_type)

        if not await self.store.claim_event(event_id, event_type):
            logger.info(f"Webhook event already processed: {event_id}")
            outcome.duplicate = True
            return outcome

        handler = self._handlers.get(event_type)
        if handler is None:
            logger.info(f"Unhandled webhook event type: {event_type}")
            return outcome

        logger.info(f"Processing webhook event {event_type} ({event_id})")
        try:
            await handler(_event_object(event))
        except Exception:
            logger.exception(f"Webhook handler failed for {event_type} ({event_id})")
            await self.store.release_event(event_id)
            raise

        outcome.handled = True
        return outcome

    async def _resolve_user(self, obj: dict) -> Optional[User]:
        metadata = obj.get("metadata") or {}
        user_id = metadata.get("userId") or obj.get("client_reference_id")
        if user_id:
            return await self.store.get_user(user_id)

        customer_id = obj.get("customer")
        if isinstance(customer_id, str) and customer_id:
            return await self.store.get_user_by_customer(customer_id)
        return None

    async def _on_checkout_completed(self, session: dict) -> None:
        metadata = session.get("metadata") or {}
        user_id = metadata.get("userId") or session.get("client_reference_id")
        if not user_id:
            logger.error("Checkout session has no userId")
            return
        if not session.get("customer"):
            logger.error(f"Checkout session for {user_id} has no customer")
            return

        await self.store.get_or_create_user(user_id, session.get("customer_email"))
        await self.store.set_plan(
            user_id,
            PlanType.PRO,
            stripe_customer_id=session["customer"],
            stripe_subscription_id=session.get("subscription"),
            subscription_status="active",
        )
        logger.info(f"Subscription activated for user {user_id}")

    async def _on_subscription_changed(self, subscription: dict) -> None:
        user = await self._resolve_user(subscription)
        if user is None:
            logger.error(f"No user for subscription {subscription.get('id')}")
            return

        status = subscription.get("status") or "unknown"
        plan = PlanType.PRO if status in ACTIVE_SUBSCRIPTION_STATUSES else PlanType.FREE
        await self.store.set_plan(
            user.id,
            plan,
            stripe_subscription_id=subscription.get("id") or user.stripe_subscription_id,
            subscription_status=status,
        )
        logger.info(f"Subscription for user {user.id} is now {status} ({plan.value})")

    async def _on_subscription_deleted(self, subscription: dict) -> None:
        user = await self._resolve_user(subscription)
        if user is None:
            logger.error(f"No user for subscription {subscription.get('id')}")
            return

        await self.store.set_plan(user.id, PlanType.FREE, subscription_status="canceled")
        logger.info(f"Subscription canceled for user {user.id}")

    async def _on_payment_failed(self, invoice: dict) -> None:
        customer_id = invoice.get("customer")
        logger.warning(f"Payment failed for customer {customer_id}")

        user = await self._resolve_user(invoice)
        if user is not None:
            await self.store.update_user(user.id, subscription_status="past_due")
