"""Tests for the simulate, create-transaction, payment and active-contract endpoints."""
import pytest


def _simulation_body(seeded, **overrides):
    body = {
        "price": "4500000",
        "dp": "500000",
        "schemeId": seeded["scheme"].id,
        "tenorMonths": 6,
    }
    body.update(overrides)
    return body


def _transaction_body(seeded, **overrides):
    body = _simulation_body(seeded)
    body.update({
        "productId": seeded["product"].id,
        "customerId": seeded["customer"].id,
        "dueDateDay": 15,
    })
    body.update(overrides)
    return body


class TestSimulateRoute:
    def test_valid_simulation(self, client, seeded):
        response = client.post("/api/transactions/simulate", json=_simulation_body(seeded))
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"]["simulation"] == {
            "price": "4500000.00",
            "dp": "500000.00",
            "principal": "4000000.00",
            "interestRate": "2.00",
            "interestAmount": "480000.00",
            "totalLoan": "4480000.00",
            "monthlyInstallment": "746667.00",
            "tenorMonths": 6,
        }
        scheme = body["data"]["scheme"]
        assert scheme["id"] == seeded["scheme"].id
        assert scheme["name"] == "Flat 2%"
        assert scheme["tenorOptions"] == [3, 6, 9, 12]

    def test_numeric_json_accepted(self, client, seeded):
        response = client.post(
            "/api/transactions/simulate",
            json=_simulation_body(seeded, price=4500000, dp=500000),
        )
        assert response.status_code == 200
        assert response.json()["data"]["simulation"]["monthlyInstallment"] == "746667.00"

    def test_down_payment_below_minimum(self, client, seeded):
        response = client.post("/api/transactions/simulate", json=_simulation_body(seeded, dp="100000"))
        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert "450000" in body["error"]

    def test_invalid_tenor(self, client, seeded):
        response = client.post("/api/transactions/simulate", json=_simulation_body(seeded, tenorMonths=7))
        assert response.status_code == 400
        assert "3, 6, 9, 12" in response.json()["error"]

    def test_unknown_scheme_is_400(self, client, seeded):
        response = client.post("/api/transactions/simulate", json=_simulation_body(seeded, schemeId=999))
        assert response.status_code == 400
        assert "not found" in response.json()["error"]

    def test_inactive_scheme_is_400(self, client, seeded):
        response = client.post(
            "/api/transactions/simulate",
            json=_simulation_body(seeded, schemeId=seeded["inactive_scheme"].id, dp="1000000"),
        )
        assert response.status_code == 400

    @pytest.mark.parametrize("overrides", [
        {"price": "0"},
        {"dp": "-1"},
        {"dp": "4500000"},
        {"tenorMonths": 0},
        {"schemeId": None},
        {"price": "1e27", "dp": "5e26"},
        {"price": "12345678901234567", "dp": "1234567890123456"},
        {"dp": "500000.00001"},
    ])
    def test_malformed_request(self, client, seeded, overrides):
        response = client.post("/api/transactions/simulate", json=_simulation_body(seeded, **overrides))
        assert response.status_code == 400
        assert response.json()["error"].startswith("Validation Failed:")


class TestCreateTransactionRoute:
    def test_created(self, client, seeded):
        response = client.post("/api/transactions", json=_transaction_body(seeded))
        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Credit transaction created"

        data = body["data"]
        assert data["customer"] == {"name": "Siti Rahayu", "phone": "081234567890"}
        assert data["product"]["sku"] == "ELK-TV-043"
        assert data["product"]["remainingStock"] == 4
        assert data["financials"]["monthlyInstallment"] == "746667.00"
        assert data["installmentCount"] == 6
        assert data["firstDueDate"].endswith("-15")
        assert data["lastDueDate"].endswith("-15")

    def test_unknown_product_is_404(self, client, seeded):
        response = client.post("/api/transactions", json=_transaction_body(seeded, productId=999))
        assert response.status_code == 404
        assert response.json()["success"] is False

    def test_unknown_customer_is_404(self, client, seeded):
        response = client.post("/api/transactions", json=_transaction_body(seeded, customerId=999))
        assert response.status_code == 404

    def test_out_of_stock_is_409(self, client, seeded):
        for _ in range(5):
            assert client.post("/api/transactions", json=_transaction_body(seeded)).status_code == 201
        response = client.post("/api/transactions", json=_transaction_body(seeded))
        assert response.status_code == 409
        assert "out of stock" in response.json()["error"]

    def test_invalid_due_date_day_is_400(self, client, seeded):
        response = client.post("/api/transactions", json=_transaction_body(seeded, dueDateDay=30))
        assert response.status_code == 400

    def test_insufficient_down_payment_is_400(self, client, seeded):
        response = client.post("/api/transactions", json=_transaction_body(seeded, dp="1000"))
        assert response.status_code == 400

    def test_oversized_price_is_400(self, client, seeded):
        response = client.post(
            "/api/transactions", json=_transaction_body(seeded, price="1e27", dp="5e26"),
        )
        assert response.status_code == 400
        assert "price" in response.json()["error"]
        assert client.get("/api/contracts/active").json()["data"] == []


class TestPaymentRoutes:
    def _create(self, client, seeded, tenor=3):
        response = client.post("/api/transactions", json=_transaction_body(seeded, tenorMonths=tenor))
        assert response.status_code == 201
        contracts = client.get("/api/contracts/active").json()["data"]
        return contracts[0]

    def test_active_contracts_listed(self, client, seeded):
        contract = self._create(client, seeded)
        assert contract["tenor_months"] == 3
        assert contract["product_sku"] == "ELK-TV-043"
        assert contract["transaction"]["status"] == "ACTIVE"
        assert [i["installment_nth"] for i in contract["installments"]] == [1, 2, 3]

    def test_pay_installment(self, client, seeded):
        contract = self._create(client, seeded)
        installment_id = contract["installments"][0]["id"]

        response = client.post(f"/api/installments/{installment_id}/pay")
        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Payment received successfully"
        assert body["data"]["installment"]["status"] == "PAID"
        assert body["data"]["contract_completed"] is False

    def test_pay_twice_is_400(self, client, seeded):
        contract = self._create(client, seeded)
        installment_id = contract["installments"][0]["id"]

        assert client.post(f"/api/installments/{installment_id}/pay").status_code == 200
        response = client.post(f"/api/installments/{installment_id}/pay")
        assert response.status_code == 400
        assert response.json()["error"] == "Installment is already paid"

    def test_pay_unknown_is_400(self, client, seeded):
        response = client.post("/api/installments/9999/pay")
        assert response.status_code == 400
        assert response.json()["error"] == "Installment not found"

    def test_paying_everything_closes_contract(self, client, seeded):
        contract = self._create(client, seeded)
        results = [
            client.post(f"/api/installments/{i['id']}/pay").json()["data"]["contract_completed"]
            for i in contract["installments"]
        ]
        assert results == [False, False, True]
        assert client.get("/api/contracts/active").json()["data"] == []
