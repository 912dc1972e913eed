"""
API tests for publish, checkout, webhook and footprint routes.

The app runs against a temporary database via dependency overrides;
the lifespan (migrations, ops validation) is not entered.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from footprint.adapters.payment_stub import PaymentStubAdapter
from footprint.api.deps import get_context, get_rules
from footprint.api.main import app
from footprint.app_shell.context import ServiceContext
from footprint.rules.models import Rules


@pytest.fixture
def client(test_ctx: ServiceContext, rules: Rules) -> Iterator[TestClient]:
    app.dependency_overrides[get_context] = lambda: test_ctx
    app.dependency_overrides[get_rules] = lambda: rules
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def _publish(client: TestClient, tx: str = "cs_1", slug: str = "alex", **draft):
    body = {"transaction_id": tx, "slug": slug}
    if draft:
        body["draft"] = draft
    return client.post("/api/publish", json=body)


DRAFT = {
    "profile": {"display_name": "Alex", "theme": "paper"},
    "content": [
        {"input": "https://youtu.be/dQw4w9WgXcQ"},
        {"type": "note", "title": "hello"},
    ],
}


class TestPublish:
    def test_publish_success(self, client: TestClient, payments: PaymentStubAdapter) -> None:
        payments.add_session("cs_1", slug="alex")

        response = _publish(client, **DRAFT)

        assert response.status_code == 200
        assert response.json() == {"serial_number": 7777, "slug": "alex", "created": True}

    def test_replay_returns_same_serial(
        self, client: TestClient, payments: PaymentStubAdapter
    ) -> None:
        payments.add_session("cs_1", slug="alex")
        _publish(client, **DRAFT)

        again = _publish(client, **DRAFT)

        assert again.status_code == 200
        assert again.json()["serial_number"] == 7777
        assert again.json()["created"] is False

    def test_unknown_transaction_is_404(self, client: TestClient) -> None:
        response = _publish(client, tx="cs_missing")

        assert response.status_code == 404
        assert response.json()["detail"][0]["code"] == "payment_not_found"

    def test_unpaid_is_402(self, client: TestClient, payments: PaymentStubAdapter) -> None:
        payments.add_session("cs_1", slug="alex", payment_status="unpaid")
        assert _publish(client).status_code == 402

    def test_slug_taken_is_409(self, client: TestClient, payments: PaymentStubAdapter) -> None:
        payments.add_session("cs_1", slug="alex")
        payments.add_session("cs_2", slug="alex")
        _publish(client, **DRAFT)

        response = _publish(client, tx="cs_2")
        assert response.status_code == 409
        assert response.json()["detail"][0] == {
            "code": "slug_taken",
            "message": "Slug 'alex' is already taken",
            "field": "slug",
        }

    def test_invalid_slug_is_422(self, client: TestClient, payments: PaymentStubAdapter) -> None:
        payments.add_session("cs_1")
        response = _publish(client, slug="admin")
        assert response.status_code == 422

    def test_outage_is_503(self, client: TestClient, payments: PaymentStubAdapter) -> None:
        payments.add_session("cs_1", slug="alex")
        payments.set_unavailable()

        response = _publish(client)
        assert response.status_code == 503
        assert response.json()["detail"][0]["code"] == "payment_unavailable"

    def test_missing_fields_rejected(self, client: TestClient) -> None:
        assert client.post("/api/publish", json={"slug": "alex"}).status_code == 422

    def test_replay_under_other_slug_is_409(
        self, client: TestClient, payments: PaymentStubAdapter
    ) -> None:
        payments.add_session("cs_1", slug="alex")
        _publish(client, **DRAFT)

        response = _publish(client, slug="sam", **DRAFT)

        assert response.status_code == 409
        assert response.json()["detail"][0]["code"] == "slug_mismatch"
        assert client.get("/api/footprints/alex").status_code == 200
        assert client.get("/api/footprints/sam").status_code == 404

    def test_session_without_slug_is_409(
        self, client: TestClient, payments: PaymentStubAdapter
    ) -> None:
        payments.add_session("cs_1")

        response = _publish(client, slug="alex", **DRAFT)

        assert response.status_code == 409
        assert client.get("/api/serials/next").json() == {"next_serial": 7777}

    def test_duplicate_tile_ids_are_422(
        self, client: TestClient, payments: PaymentStubAdapter
    ) -> None:
        payments.add_session("cs_1", slug="alex")
        tile_id = "6f1c2c1e-9d7a-4c55-8a43-2f0f5b1d9a10"
        content = [
            {"id": tile_id, "type": "note", "title": "one"},
            {"id": tile_id, "type": "note", "title": "two"},
        ]

        response = _publish(client, content=content)

        assert response.status_code == 422
        assert response.json()["detail"][0]["code"] == "invalid_input"
        assert client.get("/api/footprints/alex").status_code == 404


class TestCheckout:
    def test_checkout_returns_url(self, client: TestClient, payments: PaymentStubAdapter) -> None:
        response = client.post("/api/checkout", json={"slug": "Alex", "email": "a@example.com"})

        assert response.status_code == 200
        data = response.json()
        assert data["url"].endswith(data["transaction_id"])
        assert payments.sessions[data["transaction_id"]].slug == "alex"

    def test_checkout_for_taken_slug(
        self, client: TestClient, payments: PaymentStubAdapter
    ) -> None:
        payments.add_session("cs_1", slug="alex")
        _publish(client, **DRAFT)

        response = client.post("/api/checkout", json={"slug": "alex"})
        assert response.status_code == 409

    def test_checkout_then_publish(self, client: TestClient, payments: PaymentStubAdapter) -> None:
        tx = client.post("/api/checkout", json={"slug": "sam"}).json()["transaction_id"]

        assert _publish(client, tx=tx, slug="sam").status_code == 402
        payments.mark_paid(tx)
        assert _publish(client, tx=tx, slug="sam").status_code == 200


class TestWebhook:
    def _post(self, client: TestClient, payload: bytes, signature: str | None):
        headers = {"Content-Type": "application/json"}
        if signature is not None:
            headers["Stripe-Signature"] = signature
        return client.post("/api/webhook", content=payload, headers=headers)

    def test_completed_event_publishes(
        self, client: TestClient, payments: PaymentStubAdapter
    ) -> None:
        payments.add_session("cs_1", slug="alex")
        payload = payments.completed_event("cs_1")

        response = self._post(client, payload, payments.sign(payload))

        assert response.status_code == 200
        assert response.json()["handled"] is True
        assert response.json()["serial_number"] == 7777

        page = client.get("/api/footprints/alex")
        assert page.status_code == 200

    def test_bad_signature_is_400(self, client: TestClient, payments: PaymentStubAdapter) -> None:
        payments.add_session("cs_1", slug="alex")
        payload = payments.completed_event("cs_1")

        assert self._post(client, payload, "t=1,v1=nope").status_code == 400
        assert self._post(client, payload, None).status_code == 400

    def test_other_events_acknowledged(
        self, client: TestClient, payments: PaymentStubAdapter
    ) -> None:
        payload = b'{"id": "evt_1", "type": "charge.refunded", "data": {}}'

        response = self._post(client, payload, payments.sign(payload))
        assert response.status_code == 200
        assert response.json()["handled"] is False

    def test_permanent_failure_acknowledged(
        self, client: TestClient, payments: PaymentStubAdapter
    ) -> None:
        payments.add_session("cs_1", slug="alex")
        payments.add_session("cs_2", slug="alex")
        p1 = payments.completed_event("cs_1")
        self._post(client, p1, payments.sign(p1))

        p2 = payments.completed_event("cs_2")
        response = self._post(client, p2, payments.sign(p2))

        assert response.status_code == 200
        assert response.json()["serial_number"] is None

    def test_handler_runs_outside_event_loop(
        self,
        client: TestClient,
        payments: PaymentStubAdapter,
        test_ctx: ServiceContext,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        loops: list[bool] = []
        run_webhook = test_ctx.publish.run_webhook

        def recording(input_data):
            try:
                asyncio.get_running_loop()
                loops.append(True)
            except RuntimeError:
                loops.append(False)
            return run_webhook(input_data)

        monkeypatch.setattr(test_ctx.publish, "run_webhook", recording)
        payments.add_session("cs_1", slug="alex")
        payload = payments.completed_event("cs_1")

        response = self._post(client, payload, payments.sign(payload))

        assert response.status_code == 200
        assert loops == [False]


class TestFootprints:
    @pytest.fixture
    def published(self, client: TestClient, payments: PaymentStubAdapter) -> TestClient:
        payments.add_session("cs_1", slug="alex")
        assert _publish(client, **DRAFT).status_code == 200
        return client

    def test_get_footprint(self, published: TestClient) -> None:
        data = published.get("/api/footprints/alex").json()

        assert data["page"]["serial_number"] == 7777
        assert data["page"]["theme"] == "paper"
        assert [t["type"] for t in data["tiles"]] == ["youtube", "note"]
        assert [t["position"] for t in data["tiles"]] == [0, 1]

    def test_unknown_footprint(self, client: TestClient) -> None:
        response = client.get("/api/footprints/nobody")
        assert response.status_code == 404
        assert response.json()["detail"][0]["code"] == "page_not_found"

    def test_add_delete_reorder(self, published: TestClient) -> None:
        added = published.post(
            "/api/footprints/alex/tiles", json={"input": "https://cdn.example.com/p.png"}
        )
        assert added.status_code == 201
        assert added.json()["type"] == "image"
        assert added.json()["position"] == 2

        tiles = published.get("/api/footprints/alex/tiles").json()
        assert tiles["total"] == 3
        first_id = tiles["items"][0]["id"]

        assert published.delete(f"/api/footprints/alex/tiles/{first_id}").status_code == 204
        assert published.delete(f"/api/footprints/alex/tiles/{first_id}").status_code == 404

        moved = published.post(
            "/api/footprints/alex/tiles/reorder",
            json={"tile_id": added.json()["id"], "new_index": 0},
        )
        assert moved.status_code == 200
        items = moved.json()["items"]
        assert [t["type"] for t in items] == ["image", "note"]
        assert [t["position"] for t in items] == [0, 1]

    def test_parse_does_not_save(self, published: TestClient) -> None:
        response = published.post(
            "/api/parse", json={"input": "https://open.spotify.com/track/abc123"}
        )

        assert response.status_code == 200
        assert response.json()["type"] == "spotify"
        assert response.json()["background"] is not None
        assert published.get("/api/footprints/alex/tiles").json()["total"] == 2

    def test_next_serial(self, client: TestClient, payments: PaymentStubAdapter) -> None:
        assert client.get("/api/serials/next").json() == {"next_serial": 7777}

        payments.add_session("cs_1", slug="alex")
        _publish(client)
        assert client.get("/api/serials/next").json() == {"next_serial": 7778}


def test_health(client: TestClient) -> None:
    assert client.get("/health").json() == {"status": "ok", "service": "api"}
