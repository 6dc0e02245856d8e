"""Unit tests for webhook signature checks and billing event handling."""

import json

import pytest

from models.project import PlanType
from services.billing_service import (
    BillingService,
    WebhookSignatureError,
    compute_signature,
    parse_signature_header,
    verify_signature,
)

SECRET = "whsec_test"
NOW = 1_700_000_000


def signed(payload: bytes, timestamp: int = NOW, secret: str = SECRET) -> str:
    return f"t={timestamp},v1={compute_signature(secret, timestamp, payload)}"


def event(event_id: str, event_type: str, obj: dict) -> dict:
    return {"id": event_id, "type": event_type, "data": {"object": obj}}


class TestSignature:
    @pytest.mark.unit
    def test_parse_header(self):
        assert parse_signature_header("t=12,v1=abc,v0=old,v1=def") == (12, ["abc", "def"])

    @pytest.mark.unit
    @pytest.mark.parametrize("header", ["", "v1=abc", "t=12", "t=soon,v1=abc"])
    def test_malformed_header(self, header):
        with pytest.raises(WebhookSignatureError):
            parse_signature_header(header)

    @pytest.mark.unit
    def test_valid_signature(self):
        payload = b'{"id": "evt_1"}'
        verify_signature(payload, signed(payload), SECRET, now=lambda: NOW + 10)

    @pytest.mark.unit
    def test_tampered_payload(self):
        header = signed(b'{"id": "evt_1"}')
        with pytest.raises(WebhookSignatureError, match="Invalid signature"):
            verify_signature(b'{"id": "evt_2"}', header, SECRET, now=lambda: NOW)

    @pytest.mark.unit
    def test_wrong_secret(self):
        payload = b"{}"
        with pytest.raises(WebhookSignatureError):
            verify_signature(payload, signed(payload, secret="whsec_other"), SECRET, now=lambda: NOW)

    @pytest.mark.unit
    def test_stale_timestamp(self):
        payload = b"{}"
        with pytest.raises(WebhookSignatureError, match="tolerance"):
            verify_signature(payload, signed(payload), SECRET, tolerance=300, now=lambda: NOW + 301)

    @pytest.mark.unit
    def test_missing_header_or_secret(self):
        with pytest.raises(WebhookSignatureError, match="No signature"):
            verify_signature(b"{}", None, SECRET)
        with pytest.raises(WebhookSignatureError, match="not configured"):
            verify_signature(b"{}", "t=1,v1=a", "")


class TestConstructEvent:
    @pytest.mark.unit
    def test_decodes_verified_event(self):
        service = BillingService(None, SECRET, now=lambda: NOW)
        payload = json.dumps(event("evt_1", "invoice.paid", {})).encode()

        assert service.construct_event(payload, signed(payload))["id"] == "evt_1"

    @pytest.mark.unit
    def test_rejects_non_event(self):
        service = BillingService(None, SECRET, now=lambda: NOW)
        payload = b'["not", "an", "event"]'

        with pytest.raises(WebhookSignatureError, match="missing id or type"):
            service.construct_event(payload, signed(payload))


class TestHandleEvent:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_checkout_upgrades_to_pro(self, store):
        await store.get_or_create_user("user_1")
        service = BillingService(store, SECRET)

        outcome = await service.handle_event(
            event(
                "evt_1",
                "checkout.session.completed",
                {"metadata": {"userId": "user_1"}, "customer": "cus_1", "subscription": "sub_1"},
            )
        )

        assert outcome.handled
        assert outcome.to_dict() == {"received": True, "eventId": "evt_1"}
        user = await store.get_user("user_1")
        assert user.plan_type == PlanType.PRO
        assert user.videos_limit is None
        assert user.stripe_customer_id == "cus_1"
        assert user.subscription_status == "active"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_replay_mutates_once(self, store):
        await store.get_or_create_user("user_1")
        service = BillingService(store, SECRET)
        checkout = event(
            "evt_1", "checkout.session.completed", {"client_reference_id": "user_1", "customer": "cus_1"}
        )

        await service.handle_event(checkout)
        await store.set_plan("user_1", PlanType.FREE)

        replay = await service.handle_event(checkout)

        assert replay.duplicate
        assert replay.to_dict()["duplicate"] is True
        assert (await store.get_user("user_1")).plan_type == PlanType.FREE

    @pytest.mark.unit
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status,plan",
        [("active", PlanType.PRO), ("trialing", PlanType.PRO), ("past_due", PlanType.FREE)],
    )
    async def test_subscription_update_by_customer(self, store, status, plan):
        await store.get_or_create_user("user_1")
        await store.update_user("user_1", stripe_customer_id="cus_1")
        service = BillingService(store, SECRET)

        await service.handle_event(
            event("evt_2", "customer.subscription.updated", {"id": "sub_9", "customer": "cus_1", "status": status})
        )

        user = await store.get_user("user_1")
        assert user.plan_type == plan
        assert user.subscription_status == status
        assert user.stripe_subscription_id == "sub_9"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_subscription_deleted_downgrades(self, store):
        await store.get_or_create_user("user_1")
        await store.set_plan("user_1", PlanType.PRO, stripe_customer_id="cus_1")
        service = BillingService(store, SECRET)

        await service.handle_event(event("evt_3", "customer.subscription.deleted", {"customer": "cus_1"}))

        user = await store.get_user("user_1")
        assert user.plan_type == PlanType.FREE
        assert user.videos_limit == 1
        assert user.subscription_status == "canceled"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_payment_failed_marks_past_due(self, store):
        await store.get_or_create_user("user_1")
        await store.set_plan("user_1", PlanType.PRO, stripe_customer_id="cus_1")
        service = BillingService(store, SECRET)

        await service.handle_event(event("evt_4", "invoice.payment_failed", {"customer": "cus_1"}))

        user = await store.get_user("user_1")
        assert user.plan_type == PlanType.PRO
        assert user.subscription_status == "past_due"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_unknown_event_is_acknowledged(self, store):
        outcome = await BillingService(store, SECRET).handle_event(event("evt_5", "invoice.paid", {}))

        assert not outcome.handled
        assert not outcome.duplicate

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_handler_error_releases_claim(self, store, monkeypatch):
        await store.get_or_create_user("user_1")
        service = BillingService(store, SECRET)
        checkout = event(
            "evt_6", "checkout.session.completed", {"metadata": {"userId": "user_1"}, "customer": "cus_1"}
        )

        async def broken_set_plan(*args, **kwargs):
            raise RuntimeError("database is locked")

        monkeypatch.setattr(store, "set_plan", broken_set_plan)
        with pytest.raises(RuntimeError):
            await service.handle_event(checkout)

        monkeypatch.undo()
        outcome = await service.handle_event(checkout)

        assert outcome.handled
        assert (await store.get_user("user_1")).plan_type == PlanType.PRO

    @pytest.mark.unit
    @pytest.mark.asyncio
    @pytest.mark.parametrize("data", [None, [], {"object": None}, {"object": "sub_1"}])
    async def test_malformed_data_does_not_strand_claim(self, store, data):
        service = BillingService(store, SECRET)
        malformed = {"id": "evt_7", "type": "customer.subscription.updated", "data": data}

        first = await service.handle_event(malformed)
        second = await service.handle_event(malformed)

        assert first.handled
        assert not first.duplicate
        assert second.duplicate
