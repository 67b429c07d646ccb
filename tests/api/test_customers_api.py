"""API tests for customer endpoints."""

from httpx import AsyncClient

from salepoint.core.entities import Customer, IdType
from salepoint.core.exceptions import DuplicateCustomerError


class TestCustomerSearch:
    """Tests for POST /api/customers/search."""

    async def test_found(self, client: AsyncClient, customer_store_mock, customer):
        customer_store_mock.find_by_identification.return_value = customer

        response = await client.post(
            "/api/customers/search", json={"id_type": "NATIONAL", "id_number": " 12345678 "}
        )

        assert response.status_code == 200
        assert response.json()["id"] == 7
        customer_store_mock.find_by_identification.assert_awaited_once_with(
            IdType.NATIONAL, "12345678"
        )

    async def test_not_registered(self, client: AsyncClient, customer_store_mock):
        customer_store_mock.find_by_identification.return_value = None

        response = await client.post("/api/customers/search", json={"id_number": "999"})

        assert response.status_code == 404
        data = response.json()
        assert data["error_code"] == "CUSTOMER_NOT_FOUND"
        assert "POST /api/customers" in data["hint"]

    async def test_unknown_id_type(self, client: AsyncClient):
        response = await client.post(
            "/api/customers/search", json={"id_type": "LIBRARY_CARD", "id_number": "1"}
        )
        assert response.status_code == 422


class TestCreateCustomer:
    """Tests for POST /api/customers."""

    async def test_created(self, client: AsyncClient, customer_store_mock):
        async def _create(new: Customer) -> Customer:
            return new.model_copy(update={"id": 12})

        customer_store_mock.create.side_effect = _create

        response = await client.post(
            "/api/customers",
            json={
                "name": "  Luis Rojas ",
                "id_type": "PASSPORT",
                "id_number": "P-998",
                "email": "  ",
            },
        )

        assert response.status_code == 201
        data = response.json()
        assert data["id"] == 12
        assert data["name"] == "Luis Rojas"
        assert data["id_type"] == "PASSPORT"
        assert data["email"] is None

    async def test_duplicate(self, client: AsyncClient, customer_store_mock):
        customer_store_mock.create.side_effect = DuplicateCustomerError(
            "NATIONAL", "12345678", existing_id=7
        )

        response = await client.post(
            "/api/customers", json={"name": "Ana", "id_number": "12345678"}
        )

        assert response.status_code == 409
        data = response.json()
        assert data["error_code"] == "DUPLICATE_CUSTOMER"
        assert data["details"]["existing_id"] == 7

    async def test_blank_name(self, client: AsyncClient, customer_store_mock):
        response = await client.post(
            "/api/customers", json={"name": "   ", "id_number": "12345678"}
        )

        assert response.status_code == 400
        customer_store_mock.create.assert_not_awaited()


class TestGetCustomer:
    async def test_get(self, client: AsyncClient, customer_store_mock, customer):
        customer_store_mock.get.return_value = customer

        response = await client.get("/api/customers/7")

        assert response.status_code == 200
        assert response.json()["id_number"] == "12345678"

    async def test_missing(self, client: AsyncClient, customer_store_mock):
        customer_store_mock.get.return_value = None

        response = await client.get("/api/customers/70")

        assert response.status_code == 404
