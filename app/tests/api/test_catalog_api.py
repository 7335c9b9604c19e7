from uuid import UUID, uuid4

API_URL = "/api/v1"


class TestCatalogAPI:
    """Test cases for the catalog endpoints"""

    async def test_create_product_requires_admin(self, client, customer, admin, auth_headers):
        payload = {"name": "NGK Spark Plug", "price": "18000", "stock": 40, "brand": "NGK"}

        anonymous = await client.post(f"{API_URL}/catalog/products", json=payload)
        assert anonymous.status_code == 401

        denied = await client.post(f"{API_URL}/catalog/products", json=payload, headers=auth_headers(customer))
        assert denied.status_code == 403
        assert denied.json()["detail"] == "Administrator access required"

        response = await client.post(f"{API_URL}/catalog/products", json=payload, headers=auth_headers(admin))
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["slug"] == "ngk-spark-plug"
        assert data["stock"] == 40

    async def test_list_and_get_products(self, client, make_product, make_category):
        category = await make_category()
        product = await make_product(category_id=category.id)
        await make_product(is_active=False)

        response = await client.get(f"{API_URL}/catalog/products")
        assert response.status_code == 200
        assert response.json()["meta"]["count"] == 1

        data = (await client.get(f"{API_URL}/catalog/products/{product.id}")).json()["data"]
        assert data["id"] == str(product.id)
        assert data["category"]["slug"] == "brakes"

        missing = await client.get(f"{API_URL}/catalog/products/{uuid4()}")
        assert missing.status_code == 404

    async def test_categories(self, client, make_product, admin, auth_headers):
        response = await client.post(
            f"{API_URL}/catalog/categories", json={"name": "Engine Oil"}, headers=auth_headers(admin)
        )
        assert response.status_code == 201
        category_id = response.json()["data"]["id"]
        await make_product(category_id=UUID(category_id))

        categories = (await client.get(f"{API_URL}/catalog/categories")).json()["data"]
        assert [(c["slug"], c["product_count"]) for c in categories] == [("engine-oil", 1)]

        deleted = await client.delete(f"{API_URL}/catalog/categories/{category_id}", headers=auth_headers(admin))
        assert deleted.status_code == 200
        assert (await client.get(f"{API_URL}/catalog/categories")).json()["data"] == []


class TestPromotionAPI:
    """Test cases for the promotion endpoints"""

    async def test_only_admins_manage_promotions(self, client, customer, admin, auth_headers):
        payload = {"title": "Brake week", "discount": 10}

        denied = await client.post(f"{API_URL}/promotions/", json=payload, headers=auth_headers(customer))
        assert denied.status_code == 403

        created = await client.post(f"{API_URL}/promotions/", json=payload, headers=auth_headers(admin))
        assert created.status_code == 201

        promotions = (await client.get(f"{API_URL}/promotions/")).json()["data"]
        assert [p["title"] for p in promotions] == ["Brake week"]


class TestAdminAPI:
    """Test cases for the admin endpoints"""

    async def test_customer_count(self, client, customer, other_customer, admin, auth_headers):
        await client.get(f"{API_URL}/profiles/{customer.user_id}", headers=auth_headers(customer))
        await client.get(f"{API_URL}/profiles/{other_customer.user_id}", headers=auth_headers(other_customer))

        denied = await client.get(f"{API_URL}/admin/customers/count", headers=auth_headers(customer))
        assert denied.status_code == 403

        response = await client.get(f"{API_URL}/admin/customers/count", headers=auth_headers(admin))
        assert response.status_code == 200
        assert response.json()["data"]["count"] == 2


class TestFavoriteAPI:
    """Test cases for the favorite endpoints"""

    async def test_favorite_lifecycle(self, client, make_product, customer, auth_headers):
        product = await make_product()
        headers = auth_headers(customer)

        added = await client.post(f"{API_URL}/favorites/{product.id}", headers=headers)
        assert added.status_code == 201
        assert added.json()["data"]["product"]["id"] == str(product.id)

        favorites = (await client.get(f"{API_URL}/favorites/", headers=headers)).json()["data"]
        assert [f["product_id"] for f in favorites] == [str(product.id)]

        check = (await client.get(f"{API_URL}/favorites/check/{product.id}", headers=headers)).json()["data"]
        assert check["is_favorited"] is True

        ids = (await client.get(f"{API_URL}/favorites/ids", headers=headers)).json()["data"]
        assert ids == [str(product.id)]
        assert (await client.get(f"{API_URL}/favorites/ids")).json()["data"] == []

        anonymous = (await client.get(f"{API_URL}/favorites/check/{product.id}")).json()["data"]
        assert anonymous["is_favorited"] is False

        removed = await client.delete(f"{API_URL}/favorites/{product.id}", headers=headers)
        assert removed.status_code == 200
        assert removed.json()["data"]["is_favorited"] is False
        assert (await client.get(f"{API_URL}/favorites/", headers=headers)).json()["data"] == []

    async def test_favorites_require_authentication(self, client):
        assert (await client.get(f"{API_URL}/favorites/")).status_code == 401


class TestProfileAPI:
    """Test cases for the profile endpoints"""

    async def test_own_profile_is_created_on_first_read(self, client, customer, other_customer, auth_headers):
        response = await client.get(f"{API_URL}/profiles/{customer.user_id}", headers=auth_headers(customer))

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["id"] == customer.user_id
        assert data["role"] == "USER"
        assert data["is_admin"] is False

        other = await client.get(f"{API_URL}/profiles/{customer.user_id}", headers=auth_headers(other_customer))
        assert other.status_code == 403

    async def test_update_own_profile(self, client, customer, auth_headers):
        response = await client.put(
            f"{API_URL}/profiles/{customer.user_id}",
            json={"first_name": "Kato", "phone": "0700000000"},
            headers=auth_headers(customer),
        )

        assert response.status_code == 200
        assert response.json()["data"]["first_name"] == "Kato"


class TestHealthAPI:
    async def test_health(self, client):
        response = await client.get("/health/")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}
