# tests/routers/test_holdings_api.py
"""
API layer tests for holding endpoints.

These tests verify the HTTP layer using FastAPI's TestClient:
- Correct status codes (200, 201, 204, 404, 422)
- Response JSON structure matches Pydantic schemas
- Error responses use the ErrorDetail format

Decimals are serialized as strings.
"""

AAPL = {
    "symbol": "aapl",
    "name": "Apple Inc.",
    "purchase_price": "100.00",
    "quantity": "2",
    "purchase_date": "2024-01-05",
}


# =============================================================================
# CREATE / LIST
# =============================================================================

class TestCreateHolding:
    def test_create(self, api):
        response = api.client.post("/holdings", json=AAPL)

        assert response.status_code == 201
        data = response.json()
        assert data["symbol"] == "AAPL"
        assert data["total_value"] == "200.00"
        assert data["id"]

    def test_list_in_insertion_order(self, api):
        api.client.post("/holdings", json=AAPL)
        api.client.post("/holdings", json={**AAPL, "symbol": "JEPQ"})

        response = api.client.get("/holdings")

        assert response.status_code == 200
        assert [h["symbol"] for h in response.json()] == ["AAPL", "JEPQ"]

    def test_non_positive_quantity_rejected(self, api):
        response = api.client.post("/holdings", json={**AAPL, "quantity": "0"})

        assert response.status_code == 422
        data = response.json()
        assert data["error"] == "ValidationError"
        assert any("quantity" in d["field"] for d in data["details"])

    def test_invalid_ticker_rejected(self, api):
        response = api.client.post("/holdings", json={**AAPL, "symbol": "AA PL!"})
        assert response.status_code == 422

    def test_future_purchase_date_rejected(self, api):
        response = api.client.post("/holdings", json={**AAPL, "purchase_date": "2999-01-01"})
        assert response.status_code == 422


# =============================================================================
# GET / PATCH / DELETE
# =============================================================================

class TestHoldingById:
    def test_get(self, api):
        created = api.client.post("/holdings", json=AAPL).json()

        response = api.client.get(f"/holdings/{created['id']}")

        assert response.status_code == 200
        assert response.json() == created

    def test_get_unknown_is_404(self, api):
        response = api.client.get("/holdings/nope")

        assert response.status_code == 404
        data = response.json()
        assert data["error"] == "HoldingNotFoundError"
        assert data["details"] == {"resource_type": "Holding", "resource_id": "nope"}

    def test_patch_only_sent_fields(self, api):
        created = api.client.post("/holdings", json=AAPL).json()

        response = api.client.patch(f"/holdings/{created['id']}", json={"quantity": "3"})

        assert response.status_code == 200
        data = response.json()
        assert data["quantity"] == "3"
        assert data["name"] == "Apple Inc."
        assert data["total_value"] == "300.00"

    def test_edit_is_patch_only(self, api):
        created = api.client.post("/holdings", json=AAPL).json()

        response = api.client.put(f"/holdings/{created['id']}", json=AAPL)

        assert response.status_code == 405

    def test_delete(self, api):
        created = api.client.post("/holdings", json=AAPL).json()

        response = api.client.delete(f"/holdings/{created['id']}")

        assert response.status_code == 204
        assert api.client.get("/holdings").json() == []

    def test_delete_unknown_is_404(self, api):
        assert api.client.delete("/holdings/nope").status_code == 404
