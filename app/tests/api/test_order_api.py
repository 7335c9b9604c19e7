from decimal import Decimal
from uuid import uuid4

from src.core.constants import IDEMPOTENCY_KEY_HEADER
from src.domain.enums import UserRole
from src.domain.models import UserProfile
from src.domain.schemas import AuthSessionState

ORDERS_URL = "/api/v1/orders/"


def checkout_payload(product_id, quantity: int, phone: str = "0700000000", location: str = "Kampala") -> dict:
    return {
        "lines": [{"product_id": str(product_id), "quantity": quantity}],
        "contact": {"phone": phone},
        "delivery_location": location,
    }


class TestCheckoutAPI:
    """Test cases for POST /orders/checkout"""

    async def test_checkout_requires_authentication(self, client, make_product):
        product = await make_product()

        response = await client.post(f"{ORDERS_URL}checkout", json=checkout_payload(product.id, 1))

        assert response.status_code == 401
        assert response.json()["detail"] == "Authentication required"

    async def test_checkout_places_cash_on_delivery_order(self, client, db_session, make_product, customer, auth_headers):
        product = await make_product(price=Decimal("1200"), stock=5)

        response = await client.post(
            f"{ORDERS_URL}checkout", json=checkout_payload(product.id, 2), headers=auth_headers(customer)
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert Decimal(data["total_amount"]) == Decimal("2400")
        assert Decimal(data["products_total"]) == Decimal("2400")
        assert data["status"] == "CASH_ON_DELIVERY"
        assert data["payment_method"] == "COD"
        assert data["order_number"].startswith("ORD-")

        await db_session.refresh(product)
        assert product.stock == 3

    async def test_checkout_failure_reason_is_shown_verbatim(self, client, make_product, customer, auth_headers):
        product = await make_product(stock=4)

        response = await client.post(
            f"{ORDERS_URL}checkout", json=checkout_payload(product.id, 10), headers=auth_headers(customer)
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Insufficient stock for one or more items"

    async def test_checkout_missing_details(self, client, make_product, customer, auth_headers):
        product = await make_product()

        response = await client.post(
            f"{ORDERS_URL}checkout", json=checkout_payload(product.id, 1, phone=""), headers=auth_headers(customer)
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Phone number and delivery location are required"

    async def test_checkout_with_idempotency_key(self, client, make_product, customer, auth_headers):
        product = await make_product(stock=5)
        headers = {**auth_headers(customer), IDEMPOTENCY_KEY_HEADER: "checkout-1"}

        first = await client.post(f"{ORDERS_URL}checkout", json=checkout_payload(product.id, 1), headers=headers)
        second = await client.post(f"{ORDERS_URL}checkout", json=checkout_payload(product.id, 1), headers=headers)

        assert first.json()["data"]["order_id"] == second.json()["data"]["order_id"]


class TestOrderLifecycleAPI:
    """Test cases for reading, cancelling and updating orders"""

    async def _place(self, client, make_product, state, auth_headers, stock=5, quantity=2):
        product = await make_product(stock=stock)
        response = await client.post(
            f"{ORDERS_URL}checkout", json=checkout_payload(product.id, quantity), headers=auth_headers(state)
        )
        return product, response.json()["data"]["order_id"]

    async def test_list_own_orders(self, client, make_product, customer, other_customer, auth_headers):
        await self._place(client, make_product, customer, auth_headers)
        await self._place(client, make_product, other_customer, auth_headers)

        response = await client.get(ORDERS_URL, params={"scope": "me"}, headers=auth_headers(customer))

        assert response.status_code == 200
        orders = response.json()["data"]
        assert len(orders) == 1
        assert orders[0]["user_id"] == customer.user_id
        assert len(orders[0]["items"]) == 1

    async def test_list_all_orders_requires_admin(self, client, make_product, customer, admin, auth_headers):
        await self._place(client, make_product, customer, auth_headers)

        assert (await client.get(ORDERS_URL, headers=auth_headers(customer))).status_code == 403

        response = await client.get(ORDERS_URL, headers=auth_headers(admin))
        assert response.status_code == 200
        assert response.json()["meta"]["count"] == 1

    async def test_profile_role_grants_admin_access(self, client, db_session, make_product, customer, auth_headers):
        await self._place(client, make_product, customer, auth_headers)
        staff = UserProfile(id="staff-1", email="staff@example.com", role=UserRole.ADMIN)
        db_session.add(staff)
        await db_session.commit()

        response = await client.get(ORDERS_URL, headers=auth_headers(AuthSessionState(user_id="staff-1")))

        assert response.status_code == 200
        assert response.json()["meta"]["count"] == 1

    async def test_get_order_owner_only(self, client, make_product, customer, other_customer, admin, auth_headers):
        _, order_id = await self._place(client, make_product, customer, auth_headers)

        assert (await client.get(f"{ORDERS_URL}{order_id}", headers=auth_headers(customer))).status_code == 200
        assert (await client.get(f"{ORDERS_URL}{order_id}", headers=auth_headers(admin))).status_code == 200
        assert (await client.get(f"{ORDERS_URL}{order_id}", headers=auth_headers(other_customer))).status_code == 403
        assert (await client.get(f"{ORDERS_URL}{uuid4()}", headers=auth_headers(customer))).status_code == 404

    async def test_cancel_order(self, client, db_session, make_product, customer, other_customer, auth_headers):
        product, order_id = await self._place(client, make_product, customer, auth_headers)

        forbidden = await client.post(f"{ORDERS_URL}{order_id}/cancel", headers=auth_headers(other_customer))
        assert forbidden.status_code == 403

        response = await client.post(f"{ORDERS_URL}{order_id}/cancel", headers=auth_headers(customer))

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["id"] == order_id
        assert data["status"] == "CANCELLED"
        assert data["cancelled_at"] is not None

        await db_session.refresh(product)
        assert product.stock == 5

        again = await client.post(f"{ORDERS_URL}{order_id}/cancel", headers=auth_headers(customer))
        assert again.status_code == 400
        assert again.json()["detail"] == "Order cannot be cancelled at this stage"

    async def test_admin_update(self, client, make_product, customer, admin, auth_headers):
        _, order_id = await self._place(client, make_product, customer, auth_headers)

        denied = await client.put(
            f"{ORDERS_URL}{order_id}", json={"status": "OUT_FOR_DELIVERY"}, headers=auth_headers(customer)
        )
        assert denied.status_code == 403

        response = await client.put(
            f"{ORDERS_URL}{order_id}",
            json={"status": "OUT_FOR_DELIVERY", "location_name": "Ntinda"},
            headers=auth_headers(admin),
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["status"] == "OUT_FOR_DELIVERY"
        assert data["location_name"] == "Ntinda"
        assert data["address"] == "Ntinda"

        invalid = await client.put(f"{ORDERS_URL}{order_id}", json={"status": "PENDING"}, headers=auth_headers(admin))
        assert invalid.status_code == 400

        late_cancel = await client.post(f"{ORDERS_URL}{order_id}/cancel", headers=auth_headers(customer))
        assert late_cancel.status_code == 400
