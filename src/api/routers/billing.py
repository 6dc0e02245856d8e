"""Billing webhook route."""

import logging

from api.dependencies import get_billing_service
from api.schemas import WebhookResponse
from fastapi import APIRouter, Depends, Header, HTTPException, Request
from services.billing_service import BillingService, WebhookSignatureError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Billing"])


@router.post(
    "/api/webhooks/stripe",
    response_model=WebhookResponse,
    response_model_exclude_none=True,
    summary="Stripe webhook",
)
async def stripe_webhook(
    request: Request,
    stripe_signature: str | None = Header(default=None),
    billing: BillingService = Depends(get_billing_service),
) -> dict:
    """Verify, de-duplicate and apply one billing event.

    A 500 makes Stripe retry the delivery; the event claim is released first.
    """
    body = await request.body()

    try:
        event = billing.construct_event(body, stripe_signature)
    except WebhookSignatureError as e:
        logger.error(f"Stripe signature verification failed: {e}")
        raise HTTPException(status_code=400, detail=str(e))

    try:
        outcome = await billing.handle_event(event)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Webhook handler failed: {e}")

    return outcome.to_dict()
