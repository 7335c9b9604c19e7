import asyncio
import json
from decimal import Decimal

from src.core.constants import GUEST_ID_HEADER

CART_URL = "/api/v1/cart/"


class TestCartAPI:
    """Test cases for the cart endpoints"""

    async def test_new_guest_gets_id_and_empty_cart(self, client):
        response = await client.get(CART_URL)

        assert response.status_code == 200
        assert response.headers[GUEST_ID_HEADER]
        body = response.json()["data"]
        assert body["items"] == []
        assert body["item_count"] == 0
        assert body["currency"] == "UGX"

    async def test_guest_cart_follows_guest_header(self, client, make_product):
        product = await make_product(price=Decimal("1200"), stock=5)
        headers = {GUEST_ID_HEADER: "guest-abc"}

        response = await client.post(
            f"{CART_URL}items", json={"product_id": str(product.id), "quantity": 2}, headers=headers
        )
        assert response.status_code == 200
        assert response.headers[GUEST_ID_HEADER] == "guest-abc"

        body = (await client.get(CART_URL, headers=headers)).json()["data"]
        assert body["item_count"] == 2
        assert Decimal(body["total"]) == Decimal("2400")
        assert body["items"][0]["product"]["stock"] == 5

        other = (await client.get(CART_URL, headers={GUEST_ID_HEADER: "guest-xyz"})).json()["data"]
        assert other["items"] == []

    async def test_add_merges_and_enforces_stock(self, client, make_product):
        product = await make_product(stock=3)
        headers = {GUEST_ID_HEADER: "guest-stock"}
        payload = {"product_id": str(product.id), "quantity": 2}

        await client.post(f"{CART_URL}items", json=payload, headers=headers)
        response = await client.post(f"{CART_URL}items", json=payload, headers=headers)

        assert response.status_code == 400
        assert response.json()["detail"] == "Insufficient stock. Only 3 available"

        body = (await client.get(CART_URL, headers=headers)).json()["data"]
        assert len(body["items"]) == 1
        assert body["items"][0]["quantity"] == 2

    async def test_add_unknown_product(self, client):
        response = await client.post(
            f"{CART_URL}items", json={"product_id": "missing", "quantity": 1}, headers={GUEST_ID_HEADER: "g"}
        )

        assert response.status_code == 404

    async def test_update_remove_and_clear(self, client, make_product):
        first = await make_product(stock=10)
        second = await make_product(stock=10)
        headers = {GUEST_ID_HEADER: "guest-edit"}

        await client.post(f"{CART_URL}items", json={"product_id": str(first.id)}, headers=headers)
        body = (
            await client.post(f"{CART_URL}items", json={"product_id": str(second.id)}, headers=headers)
        ).json()["data"]
        first_line, second_line = body["items"][0]["id"], body["items"][1]["id"]

        body = (
            await client.put(f"{CART_URL}items/{first_line}", json={"quantity": 4}, headers=headers)
        ).json()["data"]
        assert body["items"][0]["quantity"] == 4

        body = (
            await client.put(f"{CART_URL}items/{first_line}", json={"quantity": 0}, headers=headers)
        ).json()["data"]
        assert body["items"][0]["quantity"] == 4

        body = (await client.delete(f"{CART_URL}items/{second_line}", headers=headers)).json()["data"]
        assert [item["id"] for item in body["items"]] == [first_line]

        body = (await client.delete(CART_URL, headers=headers)).json()["data"]
        assert body["items"] == []

    async def test_signed_in_cart_is_separate_from_guest_cart(self, client, make_product, customer, auth_headers):
        product = await make_product(stock=10)
        guest_headers = {GUEST_ID_HEADER: "guest-before-login"}
        await client.post(f"{CART_URL}items", json={"product_id": str(product.id)}, headers=guest_headers)

        user_headers = {**auth_headers(customer), **guest_headers}
        response = await client.get(CART_URL, headers=user_headers)

        assert response.json()["data"]["items"] == []
        assert GUEST_ID_HEADER not in response.headers

    async def test_invalid_token_is_rejected(self, client):
        response = await client.get(CART_URL, headers={"Authorization": "Bearer not-a-token"})

        assert response.status_code == 401

    async def test_cart_events_stream_changes_from_other_requests(self, client, make_product):
        product = await make_product(stock=5)
        headers = {GUEST_ID_HEADER: "guest-watching"}

        stream = asyncio.create_task(client.get(f"{CART_URL}events", params={"timeout": 1}, headers=headers))
        await asyncio.sleep(0.2)
        added = await client.post(
            f"{CART_URL}items", json={"product_id": str(product.id), "quantity": 2}, headers=headers
        )
        response = await stream

        assert added.status_code == 200
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/event-stream")
        snapshots = [json.loads(line[len("data: ") :]) for line in response.text.splitlines() if line.startswith("data: ")]
        assert [snapshot["item_count"] for snapshot in snapshots] == [0, 2]
        assert response.text.rstrip().endswith("retry: 3000")

    async def test_cart_events_timeout_is_bounded(self, client):
        response = await client.get(f"{CART_URL}events", params={"timeout": 120}, headers={GUEST_ID_HEADER: "g"})

        assert response.status_code == 422
